"""
Auction data model: items, bidders, bids and bid intents.
"""

from datetime import datetime
from typing import Optional, Union
from dataclasses import dataclass
from enum import Enum

ItemId = Union[int, str]


class ItemStatus(Enum):
    """Moderation / sale status of a listed item"""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SOLD = "SOLD"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class AuctionItem:
    """
    Item shown by a bidding session.

    Immutable for the lifetime of the session.

    Attributes:
        item_id: Ledger identifier of the item
        title: Display title
        description: Display description
        starting_price: Opening price in whole money units
        auction_end: Timezone-aware end of the auction
        image: Image reference (URL or base64 payload)
        current_bid: Highest bid known when the item was loaded
    """

    item_id: ItemId
    title: str
    description: str
    starting_price: int
    auction_end: datetime
    image: Optional[str] = None
    current_bid: Optional[int] = None

    def __post_init__(self):
        if self.starting_price <= 0:
            raise ValueError(f"starting_price must be positive, got {self.starting_price}")
        if self.auction_end.tzinfo is None:
            raise ValueError("auction_end must be timezone-aware")

    @property
    def opening_bid(self) -> int:
        """Bid a new session is seeded with."""
        if self.current_bid is None:
            return self.starting_price
        return max(self.current_bid, self.starting_price)


@dataclass(frozen=True)
class Bidder:
    """Authenticated bidder identity"""

    bidder_id: ItemId
    username: str


@dataclass(frozen=True)
class BidIntent:
    """Validated bid awaiting explicit confirmation"""

    item_id: ItemId
    amount: int
    min_bid: int
