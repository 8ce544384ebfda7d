"""
Daemons module: Periodic schedules owned by a bidding session.
"""

from .bid_reconciler import BidReconciler
from .countdown_ticker import CountdownTicker

__all__ = ['BidReconciler', 'CountdownTicker']
