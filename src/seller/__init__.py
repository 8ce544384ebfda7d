"""
Seller module: read-only views over a seller's listed items.
"""

from .item_status import SellerItemStatus, filter_seller_items, group_by_status

__all__ = ["SellerItemStatus", "filter_seller_items", "group_by_status"]
