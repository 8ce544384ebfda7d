"""
Bidding Session: one item's bidding widget, minus the rendering.

Responsibilities:
- Own the BidState, AuctionClock and submission protocol for an item
- Acquire the poll and countdown schedules together and release them on
  every exit path
- Rebuild everything when the displayed item changes
- Expose a render snapshot (BiddingView)
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Union
from dataclasses import dataclass

from auction.clock import AuctionClock, ClockReading, utcnow
from auction.config import BiddingConfig
from auction.models import AuctionItem, Bidder, BidIntent
from auction.notifications import Notifier
from auction.state import BidState
from auction.submission import BidSubmission, RejectionReason, SubmissionResult
from daemons.bid_reconciler import BidReconciler
from daemons.countdown_ticker import CountdownTicker
from observability.metrics import metrics_collector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BiddingView:
    """Everything the bidding widget renders, at one instant."""

    item_id: Union[int, str]
    title: str
    starting_price: int
    current_bid: int
    increment: int
    min_bid: int
    suggestions: List[int]
    draft_bid: int
    countdown: str
    ended: bool
    can_submit: bool
    rejection: Optional[RejectionReason]
    confirming: bool
    committing: bool


class BiddingSession:
    """
    Scoped bidding state for the item currently on screen.

    Usage:
        async with BiddingSession(item, ledger, bidder=me) as session:
            session.set_draft("150")
            if session.submit():
                result = await session.confirm()
    """

    def __init__(
        self,
        item: AuctionItem,
        ledger,
        bidder: Optional[Bidder] = None,
        config: Optional[BiddingConfig] = None,
        notifier: Optional[Notifier] = None,
        now_fn: Callable[[], datetime] = utcnow,
        on_bid_placed: Optional[Callable[[int], None]] = None,
        on_change: Optional[Callable[[BiddingView], None]] = None,
    ):
        """
        Initialize bidding session.

        Args:
            item: Item to show
            ledger: Ledger client (async ``fetch_bids`` and ``place_bid``)
            bidder: Signed-in bidder, None when signed out
            config: Bidding configuration (uses defaults if None)
            notifier: Toast sink for submission outcomes
            now_fn: Time source for the auction clock
            on_bid_placed: Called with the amount of each committed bid
            on_change: Called with a fresh view after every raise or tick
        """
        self.ledger = ledger
        self.bidder = bidder
        self.config = config or BiddingConfig()
        self.notifier = notifier
        self.now_fn = now_fn
        self.on_bid_placed = on_bid_placed
        self.on_change = on_change

        self._open = False
        self._build(item)

    def _build(self, item: AuctionItem):
        self.item = item
        self.state = BidState(item.opening_bid)
        self.clock = AuctionClock(item.auction_end, self.now_fn)
        self.reconciler = BidReconciler(
            self.ledger, item.item_id, self.state, self.config.poll_interval
        )
        self.ticker = CountdownTicker(
            self.clock, self.config.tick_interval, on_tick=self._on_tick
        )
        self._attach()

    def _attach(self):
        # A fresh submission per scope; the previous one stays detached
        self._unsubscribe = self.state.subscribe(self._on_raise)
        self.submission = BidSubmission(
            self.item,
            self.state,
            self.clock,
            self.ledger,
            bidder=self.bidder,
            notifier=self.notifier,
            on_bid_placed=self.on_bid_placed,
        )
        self._detached = False

    @property
    def is_open(self) -> bool:
        return self._open

    # ------------------------------------------------------------------
    # Scope
    # ------------------------------------------------------------------

    async def start(self):
        """Acquire the poll and countdown schedules."""
        if self._open:
            return

        if self._detached:
            logger.debug(f"[SESSION] Reopening item {self.item.item_id}")
            self._attach()

        await self.reconciler.start()
        try:
            await self.ticker.start()
        except BaseException:
            await self.reconciler.stop()
            raise

        self._open = True
        metrics_collector.session_opened()
        logger.info(f"[SESSION] Opened for item {self.item.item_id}")

    async def stop(self):
        """
        Release both schedules.

        An in-flight commit is left to finish but its outcome is discarded.
        """
        if not self._open:
            return

        self._open = False
        self.submission.detach()
        self._detached = True
        try:
            await self.ticker.stop()
        finally:
            await self.reconciler.stop()
            self._unsubscribe()
            metrics_collector.session_closed()
            logger.info(f"[SESSION] Closed for item {self.item.item_id}")

    async def __aenter__(self) -> "BiddingSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
        return False

    async def change_item(self, item: AuctionItem):
        """
        Switch the session to another item.

        Discards the old state and reseeds from the new item; schedules are
        restarted if the session was open.
        """
        if item == self.item:
            return

        was_open = self._open
        if was_open:
            await self.stop()
        else:
            self.submission.detach()
            self._unsubscribe()

        logger.info(f"[SESSION] Item changed {self.item.item_id} -> {item.item_id}")
        self._build(item)

        if was_open:
            await self.start()

    # ------------------------------------------------------------------
    # Bidder actions
    # ------------------------------------------------------------------

    def set_draft(self, value: Union[int, str, None]) -> int:
        """Update the draft from the bid input field."""
        return self.state.set_draft(value)

    def select_suggestion(self, index: int) -> int:
        """Copy one of the quick-select amounts into the draft."""
        return self.state.set_draft(self.state.suggestions[index])

    def submit(self) -> Optional[BidIntent]:
        return self.submission.submit()

    def cancel(self):
        self.submission.cancel()

    async def confirm(self) -> SubmissionResult:
        return await self.submission.confirm()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def view(self) -> BiddingView:
        """Snapshot of the widget, with the clock evaluated now."""
        reading = self.clock.tick()
        rejection = self.submission.rejection_reason()
        return BiddingView(
            item_id=self.item.item_id,
            title=self.item.title,
            starting_price=self.item.starting_price,
            current_bid=self.state.current_bid,
            increment=self.state.increment,
            min_bid=self.state.min_bid,
            suggestions=self.state.suggestions,
            draft_bid=self.state.draft_bid,
            countdown=reading.display,
            ended=reading.ended,
            can_submit=rejection is None and not self.submission.committing,
            rejection=rejection,
            confirming=self.submission.confirming,
            committing=self.submission.committing,
        )

    def _on_raise(self, previous: int, amount: int, source: str):
        metrics_collector.record_raise(self.item.item_id, source, amount)
        self._emit()

    def _on_tick(self, reading: ClockReading):
        self._emit()

    def _emit(self):
        if self.on_change is None:
            return
        try:
            self.on_change(self.view())
        except Exception as e:
            logger.error(f"[SESSION] on_change callback failed: {e}", exc_info=True)
