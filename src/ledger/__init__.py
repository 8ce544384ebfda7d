"""
Ledger module: HTTP client and wire models for the bid ledger.
"""

from .client import (
    LedgerClient,
    LedgerError,
    LedgerUnavailableError,
    BidRejectedError,
)
from .schemas import BidRecord, BidRequest, BidReceipt, ItemListing

__all__ = [
    "LedgerClient",
    "LedgerError",
    "LedgerUnavailableError",
    "BidRejectedError",
    "BidRecord",
    "BidRequest",
    "BidReceipt",
    "ItemListing",
]
