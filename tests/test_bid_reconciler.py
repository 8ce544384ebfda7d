"""
Unit tests for the Bid Reconciler daemon.

Tests:
- Max-wins merge regardless of arrival order
- Empty and failed polls are no-ops
- Stale polls never lower a committed bid
- Start/stop lifecycle
"""

import sys
import os
import asyncio

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest
from auction.state import BidState
from daemons.bid_reconciler import BidReconciler


class TestPollOnce:
    """Test a single reconciliation"""

    @pytest.mark.asyncio
    async def test_max_wins(self, reliable_ledger):
        """Verify the maximum is taken even when it is not the last bid"""
        for amount in (80, 120, 95):
            reliable_ledger.add_bid(42, amount)
        state = BidState(100)
        reconciler = BidReconciler(reliable_ledger, 42, state)

        observed = await reconciler.poll_once()

        assert observed == 120
        assert state.current_bid == 120
        assert state.draft_bid == 126

    @pytest.mark.asyncio
    async def test_lower_max_is_noop(self, reliable_ledger):
        """Verify a ledger behind local state changes nothing"""
        reliable_ledger.add_bid(42, 90)
        state = BidState(100)
        state.set_draft(500)
        reconciler = BidReconciler(reliable_ledger, 42, state)

        assert await reconciler.poll_once() == 90
        assert state.current_bid == 100
        assert state.draft_bid == 500

    @pytest.mark.asyncio
    async def test_empty_ledger(self, reliable_ledger):
        """Verify no bids defers to the seeded value"""
        state = BidState(100)
        reconciler = BidReconciler(reliable_ledger, 42, state)

        assert await reconciler.poll_once() is None
        assert state.current_bid == 100

    @pytest.mark.asyncio
    async def test_failed_fetch_keeps_state(self, reliable_ledger):
        """Verify fetch errors are swallowed and state is kept"""
        reliable_ledger.add_bid(42, 300)
        reliable_ledger.fail_reads = True
        state = BidState(100)
        reconciler = BidReconciler(reliable_ledger, 42, state)

        assert await reconciler.poll_once() is None
        assert state.current_bid == 100
        assert reconciler.failures == 1

        # Next tick recovers
        reliable_ledger.fail_reads = False
        assert await reconciler.poll_once() == 300
        assert state.current_bid == 300

    @pytest.mark.asyncio
    async def test_duplicate_responses_idempotent(self, reliable_ledger):
        """Verify replaying the same poll result is harmless"""
        reliable_ledger.add_bid(42, 130)
        reliable_ledger.add_bid(42, 130)
        state = BidState(100)
        reconciler = BidReconciler(reliable_ledger, 42, state)

        await reconciler.poll_once()
        await reconciler.poll_once()

        assert state.current_bid == 130

    @pytest.mark.asyncio
    async def test_stale_poll_after_commit(self):
        """Verify a poll started before a commit cannot undo it"""
        release = asyncio.Event()

        class SlowLedger:
            async def fetch_bids(self, item_id):
                await release.wait()

                class Record:
                    bid_amount = 130

                return [Record()]

        state = BidState(100)
        reconciler = BidReconciler(SlowLedger(), 42, state)

        poll = asyncio.create_task(reconciler.poll_once())
        await asyncio.sleep(0)

        # Commit lands while the poll is outstanding
        state.raise_to(150, "commit")
        release.set()

        assert await poll == 130
        assert state.current_bid == 150


class TestReconcilerLifecycle:
    """Test daemon start/stop"""

    @pytest.mark.asyncio
    async def test_start_stop(self, reliable_ledger):
        """Verify reconciler polls while running and stops cleanly"""
        reliable_ledger.add_bid(42, 140)
        state = BidState(100)
        reconciler = BidReconciler(reliable_ledger, 42, state, poll_interval_seconds=0.01)

        assert reconciler.running is False

        await reconciler.start()
        assert reconciler.running is True

        await asyncio.sleep(0.05)
        assert state.current_bid == 140
        assert reliable_ledger.fetch_calls >= 2

        await reconciler.stop()
        assert reconciler.running is False

        calls = reliable_ledger.fetch_calls
        await asyncio.sleep(0.05)
        assert reliable_ledger.fetch_calls == calls

    @pytest.mark.asyncio
    async def test_double_start_ignored(self, reliable_ledger):
        """Verify a second start does not spawn a second loop"""
        reconciler = BidReconciler(reliable_ledger, 42, BidState(100), poll_interval_seconds=0.01)

        await reconciler.start()
        task = reconciler._task
        await reconciler.start()

        assert reconciler._task is task
        await reconciler.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, reliable_ledger):
        """Verify stop is safe when never started"""
        reconciler = BidReconciler(reliable_ledger, 42, BidState(100))
        await reconciler.stop()
        assert reconciler.running is False

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_loop(self, reliable_ledger):
        """Verify the loop keeps polling through read failures"""
        reliable_ledger.fail_reads = True
        state = BidState(100)
        reconciler = BidReconciler(reliable_ledger, 42, state, poll_interval_seconds=0.01)

        await reconciler.start()
        await asyncio.sleep(0.05)

        assert reconciler.running is True
        assert reconciler.failures >= 2
        assert state.current_bid == 100

        await reconciler.stop()

    def test_status(self, reliable_ledger):
        """Verify status reporting"""
        reconciler = BidReconciler(reliable_ledger, 42, BidState(100), poll_interval_seconds=2.0)

        status = reconciler.get_status()

        assert status["running"] is False
        assert status["poll_interval_seconds"] == 2.0
        assert status["current_bid"] == 100
        assert status["polls"] == 0
