"""
Unit tests for BidState (raise-only merge).

Tests:
- Seeding from the opening bid
- Raise-only merge from any source
- Draft parsing from the input field
- Raise listeners
"""

import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest
from auction.state import BidState


class TestSeeding:
    def test_initial_values(self):
        """Verify state is seeded with draft at the minimum bid"""
        state = BidState(100)

        assert state.current_bid == 100
        assert state.draft_bid == 105
        assert state.min_bid == 105
        assert state.increment == 5
        assert state.suggestions == [105, 115, 125]

    def test_non_positive_rejected(self):
        """Verify opening bid must be positive"""
        with pytest.raises(ValueError):
            BidState(0)


class TestRaiseOnlyMerge:
    """Test the monotonic merge shared by poll and commit"""

    def test_higher_value_raises(self):
        """Verify higher value replaces current bid and resets draft"""
        state = BidState(100)

        assert state.raise_to(120, "poll") is True
        assert state.current_bid == 120
        assert state.draft_bid == 126
        assert state.suggestions == [126, 138, 150]

    def test_equal_value_is_noop(self):
        """Verify equal value leaves state untouched"""
        state = BidState(100)
        state.set_draft(300)

        assert state.raise_to(100, "poll") is False
        assert state.current_bid == 100
        assert state.draft_bid == 300

    def test_lower_value_is_noop(self):
        """Verify stale lower value never lowers the bid"""
        state = BidState(150)

        assert state.raise_to(130, "poll") is False
        assert state.current_bid == 150

    def test_sources_share_the_rule(self):
        """Verify commit and poll follow the same rule"""
        state = BidState(100)

        state.raise_to(150, "commit")
        state.raise_to(130, "poll")
        state.raise_to(140, "commit")

        assert state.current_bid == 150


class TestDraft:
    """Test draft bid input handling"""

    def test_integer(self):
        state = BidState(100)
        assert state.set_draft(200) == 200
        assert state.draft_bid == 200

    def test_text(self):
        """Verify numeric text is parsed"""
        state = BidState(100)
        assert state.set_draft(" 180 ") == 180

    def test_leading_integer(self):
        """Verify trailing non-digits are ignored like an input field parse"""
        state = BidState(100)
        assert state.set_draft("150.5") == 150
        assert state.set_draft("150abc") == 150
        assert state.set_draft("abc150") == 105

    def test_invalid_text_resets_to_minimum(self):
        """Verify unparsable input falls back to the minimum bid"""
        state = BidState(100)
        state.set_draft(300)

        assert state.set_draft("abc") == 105
        assert state.set_draft("") == 105
        assert state.set_draft(None) == 105

    def test_below_minimum_is_kept(self):
        """Verify the draft is unconstrained until validated"""
        state = BidState(100)
        assert state.set_draft(10) == 10


class TestListeners:
    def test_listener_called_on_raise(self):
        """Verify listeners receive previous, new and source"""
        state = BidState(100)
        seen = []
        state.subscribe(lambda prev, new, source: seen.append((prev, new, source)))

        state.raise_to(90, "poll")
        state.raise_to(120, "poll")
        state.raise_to(150, "commit")

        assert seen == [(100, 120, "poll"), (120, 150, "commit")]

    def test_unsubscribe(self):
        """Verify unsubscribed listeners stop receiving raises"""
        state = BidState(100)
        seen = []
        unsubscribe = state.subscribe(lambda *args: seen.append(args))

        unsubscribe()
        state.raise_to(200, "poll")

        assert seen == []
