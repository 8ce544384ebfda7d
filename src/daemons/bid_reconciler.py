"""Bid reconciler daemon: keeps the local current bid in step with the ledger.

Each poll reads every bid for the item and merges only the maximum into
the shared BidState. Taking a maximum makes the merge idempotent and
order-insensitive, so duplicated or late responses are harmless.
"""

import asyncio
import logging
from typing import Optional

from auction.state import BidState
from observability.metrics import metrics_collector

logger = logging.getLogger(__name__)


class BidReconciler:
    """
    Background daemon that polls the ledger and raises the current bid.

    Poll failures are logged and retried on the next tick; they never
    propagate and never clear existing state.
    """

    def __init__(self, ledger, item_id, state: BidState, poll_interval_seconds: float = 2.0):
        """
        Initialize bid reconciler.

        Args:
            ledger: Ledger client (anything with an async ``fetch_bids``)
            item_id: Item whose bids are polled
            state: Shared bid state to raise
            poll_interval_seconds: Delay between polls
        """
        self.ledger = ledger
        self.item_id = item_id
        self.state = state
        self.poll_interval_seconds = poll_interval_seconds
        self.running = False
        self.polls = 0
        self.failures = 0
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        """Start the reconciler daemon."""
        if self.running:
            logger.warning(f"[RECONCILER] Already running for item {self.item_id}")
            return

        self.running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            f"[RECONCILER] Started for item {self.item_id} "
            f"({self.poll_interval_seconds}s interval)"
        )

    async def stop(self):
        """Stop the reconciler daemon and wait for the loop to exit."""
        if not self.running and self._task is None:
            return

        self.running = False

        task, self._task = self._task, None
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        logger.info(f"[RECONCILER] Stopped for item {self.item_id}")

    async def _poll_loop(self):
        """Main polling loop."""
        try:
            while self.running:
                await self.poll_once()
                await asyncio.sleep(self.poll_interval_seconds)
        except asyncio.CancelledError:
            logger.debug(f"[RECONCILER] Poll loop for item {self.item_id} cancelled")
            raise
        except Exception as e:
            logger.error(f"[RECONCILER] Error in poll loop: {e}", exc_info=True)
            self.running = False

    async def poll_once(self) -> Optional[int]:
        """
        Run one reconciliation against the ledger.

        Returns:
            Highest bid observed, or None if the fetch failed or was empty
        """
        self.polls += 1
        try:
            bids = await self.ledger.fetch_bids(self.item_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            metrics_collector.record_poll("failed")
            logger.warning(f"[RECONCILER] Failed to fetch bids for item {self.item_id}: {e}")
            return None

        if not bids:
            metrics_collector.record_poll("empty")
            return None

        observed_max = max(bid.bid_amount for bid in bids)
        raised = self.state.raise_to(observed_max, "poll")
        metrics_collector.record_poll("raised" if raised else "unchanged")
        return observed_max

    def get_status(self) -> dict:
        """
        Get reconciler status.

        Returns:
            Status dictionary
        """
        return {
            "item_id": self.item_id,
            "running": self.running,
            "poll_interval_seconds": self.poll_interval_seconds,
            "polls": self.polls,
            "failures": self.failures,
            "current_bid": self.state.current_bid,
        }
