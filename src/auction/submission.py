"""
Bid submission protocol: validate -> confirm -> commit.

Validation is local and never raises. Confirmation is the payment step;
nothing is sent until ``confirm()`` is awaited. A commit success raises
the shared BidState through its raise-only merge, so a later stale poll
cannot undo it.
"""

import logging
from typing import Callable, Optional
from dataclasses import dataclass
from enum import Enum

from opentelemetry.trace import SpanKind

from ledger.client import BidRejectedError, LedgerError
from ledger.schemas import BidReceipt, BidRequest, CustomerSnapshot, ItemSnapshot
from observability.metrics import MetricsContext, commit_latency, metrics_collector
from observability.tracing import create_span

from .clock import AuctionClock
from .models import AuctionItem, Bidder, BidIntent
from .notifications import LoggingNotifier, Notifier
from .state import BidState

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Bid placed successfully!"
GENERIC_FAILURE = "Failed to place bid. Please try again."
SIGN_IN_REQUIRED = "Please log in to place a bid"


class SubmissionStatus(Enum):
    """Outcome of a confirm() call"""

    COMMITTED = "committed"
    REJECTED = "rejected"  # Ledger refused the bid
    FAILED = "failed"  # Ledger unreachable or unexpected error
    NOT_SIGNED_IN = "not_signed_in"
    IN_FLIGHT = "in_flight"  # Another commit is outstanding
    NO_INTENT = "no_intent"  # Nothing awaiting confirmation
    DISCARDED = "discarded"  # Scope closed before the commit completed


class RejectionReason(Enum):
    """Why a draft bid cannot be submitted"""

    BELOW_MINIMUM = "below_minimum"
    AUCTION_ENDED = "auction_ended"


@dataclass(frozen=True)
class SubmissionResult:
    status: SubmissionStatus
    amount: Optional[int] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is SubmissionStatus.COMMITTED


class BidSubmission:
    """
    Drives one item's bid through validation, confirmation and commit.

    At most one commit is in flight at a time; confirm() calls made while
    one is outstanding return IN_FLIGHT without touching the network.
    """

    def __init__(
        self,
        item: AuctionItem,
        state: BidState,
        clock: AuctionClock,
        ledger,
        bidder: Optional[Bidder] = None,
        notifier: Optional[Notifier] = None,
        on_bid_placed: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize submission protocol.

        Args:
            item: Item being bid on
            state: Shared bid state for the item
            clock: Auction clock for the item
            ledger: Ledger client (anything with an async ``place_bid``)
            bidder: Signed-in bidder, None when signed out
            notifier: Toast sink (logs if None)
            on_bid_placed: Called with the committed amount after success
        """
        self.item = item
        self.state = state
        self.clock = clock
        self.ledger = ledger
        self.bidder = bidder
        self.notifier = notifier or LoggingNotifier()
        self.on_bid_placed = on_bid_placed

        self._intent: Optional[BidIntent] = None
        self._in_flight = False
        self._attached = True

    # ------------------------------------------------------------------
    # Phase 1: validate
    # ------------------------------------------------------------------

    def rejection_reason(self) -> Optional[RejectionReason]:
        """Reason the current draft cannot be submitted, or None."""
        if self.clock.tick().ended:
            return RejectionReason.AUCTION_ENDED
        if self.state.draft_bid < self.state.min_bid:
            return RejectionReason.BELOW_MINIMUM
        return None

    @property
    def can_submit(self) -> bool:
        return self.rejection_reason() is None

    def submit(self) -> Optional[BidIntent]:
        """
        Validate the draft and open the confirmation step.

        Returns:
            The pending intent, or None if the draft was rejected
        """
        reason = self.rejection_reason()
        if reason is not None:
            metrics_collector.record_rejection(reason.value)
            logger.debug(
                f"[SUBMIT] Draft {self.state.draft_bid} rejected for item "
                f"{self.item.item_id}: {reason.value}"
            )
            return None

        self._intent = BidIntent(
            item_id=self.item.item_id,
            amount=self.state.draft_bid,
            min_bid=self.state.min_bid,
        )
        return self._intent

    # ------------------------------------------------------------------
    # Phase 2: confirm
    # ------------------------------------------------------------------

    @property
    def pending_intent(self) -> Optional[BidIntent]:
        return self._intent

    @property
    def confirming(self) -> bool:
        return self._intent is not None

    @property
    def committing(self) -> bool:
        return self._in_flight

    @property
    def can_confirm(self) -> bool:
        return self._intent is not None and not self._in_flight

    def cancel(self):
        """Close the confirmation step without committing."""
        self._intent = None

    def detach(self):
        """
        Mark the owning scope as gone.

        A commit still in flight is not undone, but its outcome is no
        longer applied to state or surfaced to the bidder.
        """
        self._attached = False
        self._intent = None

    # ------------------------------------------------------------------
    # Phase 3: commit
    # ------------------------------------------------------------------

    async def confirm(self) -> SubmissionResult:
        """
        Commit the pending intent to the ledger.

        Phase 1 is not re-run here: the ledger is authoritative for a bid
        that was valid when it was submitted.

        Returns:
            SubmissionResult describing the outcome
        """
        intent = self._intent
        if intent is None:
            return SubmissionResult(SubmissionStatus.NO_INTENT)
        if self._in_flight:
            logger.debug(f"[SUBMIT] Commit already in flight for item {self.item.item_id}")
            return SubmissionResult(SubmissionStatus.IN_FLIGHT, amount=intent.amount)
        if self.bidder is None:
            self.notifier.error(SIGN_IN_REQUIRED)
            metrics_collector.record_commit(SubmissionStatus.NOT_SIGNED_IN.value)
            return SubmissionResult(
                SubmissionStatus.NOT_SIGNED_IN, amount=intent.amount, message=SIGN_IN_REQUIRED
            )

        request = self._build_request(intent)
        self._in_flight = True
        try:
            with create_span(
                "bid.commit",
                {"item_id": self.item.item_id, "amount": intent.amount},
                kind=SpanKind.CLIENT,
            ), MetricsContext(commit_latency):
                receipt = await self.ledger.place_bid(request)
        except BidRejectedError as e:
            result = self._fail(SubmissionStatus.REJECTED, intent, e.reason)
        except LedgerError as e:
            result = self._fail(SubmissionStatus.FAILED, intent, e.reason)
        except Exception as e:
            logger.error(f"[SUBMIT] Unexpected commit error: {e}", exc_info=True)
            result = self._fail(SubmissionStatus.FAILED, intent, None)
        else:
            result = self._apply(intent, receipt)
        finally:
            self._in_flight = False

        metrics_collector.record_commit(result.status.value)
        return result

    def _build_request(self, intent: BidIntent) -> BidRequest:
        return BidRequest(
            item_id=self.item.item_id,
            bid_amount=intent.amount,
            customer_id=self.bidder.bidder_id,
            image_base64=self.item.image,
            item=ItemSnapshot(
                id=self.item.item_id,
                name=self.item.title,
                description=self.item.description,
                starting_price=self.item.starting_price,
                current_bid=self.state.current_bid,
            ),
            customer=CustomerSnapshot(
                id=self.bidder.bidder_id, username=self.bidder.username
            ),
        )

    def _apply(self, intent: BidIntent, receipt: BidReceipt) -> SubmissionResult:
        amount = receipt.bid_amount
        if not self._attached:
            logger.debug(
                f"[SUBMIT] Discarding commit of {amount} for item {self.item.item_id}: "
                "scope closed"
            )
            return SubmissionResult(SubmissionStatus.DISCARDED, amount=amount)

        self.state.raise_to(amount, "commit")
        if self._intent is intent:
            self._intent = None

        # The bid is committed; caller hooks must not turn that into an error
        try:
            self.notifier.success(SUCCESS_MESSAGE)
        except Exception as e:
            logger.error(f"[SUBMIT] Success notification failed: {e}", exc_info=True)
        if self.on_bid_placed is not None:
            try:
                self.on_bid_placed(amount)
            except Exception as e:
                logger.error(f"[SUBMIT] on_bid_placed callback failed: {e}", exc_info=True)

        logger.info(f"[SUBMIT] Bid of {amount} placed on item {self.item.item_id}")
        return SubmissionResult(SubmissionStatus.COMMITTED, amount=amount, message=SUCCESS_MESSAGE)

    def _fail(
        self, status: SubmissionStatus, intent: BidIntent, reason: Optional[str]
    ) -> SubmissionResult:
        message = reason or GENERIC_FAILURE
        if not self._attached:
            logger.debug(f"[SUBMIT] Discarding failed commit for item {self.item.item_id}")
            return SubmissionResult(SubmissionStatus.DISCARDED, amount=intent.amount, message=message)

        logger.warning(
            f"[SUBMIT] Commit of {intent.amount} for item {self.item.item_id} "
            f"{status.value}: {message}"
        )
        self.notifier.error(message)
        return SubmissionResult(status, amount=intent.amount, message=message)
