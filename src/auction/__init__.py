"""
Auction module: bid state, pricing, clock and the submission protocol.
"""

from .models import AuctionItem, Bidder, BidIntent, ItemStatus
from .pricing import min_bid, suggested_bids, bid_increment
from .state import BidState
from .clock import AuctionClock, ClockState, ClockReading, read_clock
from .config import BiddingConfig
from .notifications import Notifier, LoggingNotifier
from .submission import (
    BidSubmission,
    SubmissionResult,
    SubmissionStatus,
    RejectionReason,
)

__all__ = [
    "AuctionItem",
    "Bidder",
    "BidIntent",
    "ItemStatus",
    "min_bid",
    "suggested_bids",
    "bid_increment",
    "BidState",
    "AuctionClock",
    "ClockState",
    "ClockReading",
    "read_clock",
    "BiddingConfig",
    "Notifier",
    "LoggingNotifier",
    "BidSubmission",
    "SubmissionResult",
    "SubmissionStatus",
    "RejectionReason",
]
