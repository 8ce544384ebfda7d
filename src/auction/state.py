"""
Bid state: the single owned cell holding the current and draft bid.

Both writers (the reconciler and the submission protocol) go through
``raise_to``, which never lowers ``current_bid``.
"""

import logging
import re
from typing import Callable, List, Union

from .pricing import min_bid, suggested_bids, bid_increment

logger = logging.getLogger(__name__)

RaiseListener = Callable[[int, int, str], None]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class BidState:
    """
    Current bid plus the bidder's draft for one item.

    The draft is free-form until validated by the submission protocol.
    """

    def __init__(self, opening_bid: int):
        """
        Initialize bid state.

        Args:
            opening_bid: Highest bid known when the session opened
        """
        if opening_bid <= 0:
            raise ValueError(f"opening_bid must be positive, got {opening_bid}")
        self._current_bid = opening_bid
        self.draft_bid = min_bid(opening_bid)
        self._listeners: List[RaiseListener] = []

    @property
    def current_bid(self) -> int:
        return self._current_bid

    @property
    def min_bid(self) -> int:
        return min_bid(self._current_bid)

    @property
    def increment(self) -> int:
        return bid_increment(self._current_bid)

    @property
    def suggestions(self) -> List[int]:
        return suggested_bids(self._current_bid)

    def raise_to(self, amount: int, source: str) -> bool:
        """
        Raise-only merge of an observed or committed bid.

        Resets the draft to the new minimum when the value moves.

        Args:
            amount: Candidate bid value
            source: Writer name ("poll" or "commit"), for logs and listeners

        Returns:
            True if current_bid changed, False if amount was not higher
        """
        if amount <= self._current_bid:
            return False

        previous = self._current_bid
        self._current_bid = amount
        self.draft_bid = min_bid(amount)
        logger.info(f"[BID_STATE] Current bid raised {previous} -> {amount} ({source})")

        for listener in list(self._listeners):
            listener(previous, amount, source)
        return True

    def set_draft(self, value: Union[int, str, None]) -> int:
        """
        Update the draft from the bid input field.

        Text is read up to its first non-digit, so "150.5" and "150abc" both
        give 150. Text with no leading integer resets the draft to the
        current minimum bid.

        Args:
            value: Integer or raw input text

        Returns:
            The new draft bid
        """
        if isinstance(value, bool):
            value = None
        if isinstance(value, int):
            self.draft_bid = value
            return self.draft_bid

        match = _LEADING_INT.match(value) if isinstance(value, str) else None
        if match is None:
            self.draft_bid = self.min_bid
        else:
            self.draft_bid = int(match.group(1))
        return self.draft_bid

    def subscribe(self, listener: RaiseListener) -> Callable[[], None]:
        """
        Register a callback fired after every raise.

        Args:
            listener: Called with (previous, new, source)

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
