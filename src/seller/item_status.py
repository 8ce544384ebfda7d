"""
Seller item status: the current seller's listed items, grouped by status.
"""

import logging
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from auction.models import Bidder, ItemStatus
from ledger.client import LedgerError
from ledger.schemas import ItemListing

logger = logging.getLogger(__name__)

# Tab order and titles
STATUS_TITLES = {
    ItemStatus.PENDING: "Pending Items",
    ItemStatus.APPROVED: "Approved Items",
    ItemStatus.REJECTED: "Rejected Items",
    ItemStatus.SOLD: "Sold Items",
    ItemStatus.EXPIRED: "Expired Items",
}


@dataclass
class StatusGroup:
    status: ItemStatus
    title: str
    items: List[ItemListing] = field(default_factory=list)


def _same_id(left, right) -> bool:
    return left is not None and right is not None and str(left) == str(right)


def filter_seller_items(items: List[ItemListing], seller_id) -> List[ItemListing]:
    """
    Keep only the items owned by a seller.

    Ownership is read from ``sellerId`` or, when absent, ``seller.id``.
    """
    return [item for item in items if _same_id(item.owner_id, seller_id)]


def group_by_status(items: List[ItemListing]) -> Dict[ItemStatus, StatusGroup]:
    """
    Group items into the fixed status tabs.

    Items with an unknown status are dropped with a warning.
    """
    groups = {status: StatusGroup(status, title) for status, title in STATUS_TITLES.items()}
    for item in items:
        try:
            status = ItemStatus(item.status)
        except ValueError:
            logger.warning(f"[ITEM_STATUS] Item {item.id} has unknown status {item.status!r}")
            continue
        groups[status].items.append(item)
    return groups


class SellerItemStatus:
    """
    Read-only status board for a seller's items.
    """

    def __init__(self, ledger, seller: Optional[Bidder] = None):
        """
        Initialize status board.

        Args:
            ledger: Ledger client (anything with an async ``fetch_items``)
            seller: Signed-in seller, None when signed out
        """
        self.ledger = ledger
        self.seller = seller
        self.groups = group_by_status([])
        self.loading = False

    async def refresh(self) -> Dict[ItemStatus, StatusGroup]:
        """
        Reload the listing and regroup it.

        Signed-out sellers get empty groups without a network call. Fetch
        errors are logged and leave empty groups.
        """
        if self.seller is None:
            self.groups = group_by_status([])
            return self.groups

        self.loading = True
        try:
            items = await self.ledger.fetch_items()
        except LedgerError as e:
            logger.error(f"[ITEM_STATUS] Failed to fetch items: {e.reason}")
            items = []
        finally:
            self.loading = False

        self.groups = group_by_status(filter_seller_items(items, self.seller.bidder_id))
        return self.groups

    def items_for(self, status: ItemStatus) -> List[ItemListing]:
        return self.groups[status].items
