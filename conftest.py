"""
Pytest configuration and shared fakes for the bidding tests.

Adds --chaos flag: the fake ledger then fails a share of its reads, which
the reconciler must absorb without ever lowering the current bid.
"""

import asyncio
import os
import random
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import pytest

from auction.models import AuctionItem, Bidder
from auction.notifications import Notifier
from ledger.client import BidRejectedError, LedgerUnavailableError
from ledger.schemas import BidReceipt, BidRecord

T0 = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def pytest_addoption(parser):
    """Add custom command line options"""
    parser.addoption(
        "--chaos",
        action="store_true",
        default=False,
        help="Run tests with a ledger that drops reads intermittently",
    )


def pytest_configure(config):
    """Configure pytest based on command line options"""
    if config.getoption("--chaos"):
        print("\n🌪️  CHAOS MODE ENABLED - ledger reads fail intermittently\n")


class FakeNow:
    """Controllable time source for AuctionClock"""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


class FakeLedger:
    """In-memory ledger with the LedgerClient async contract"""

    def __init__(self, chaos: bool = False):
        self.bids = {}
        self.items = []
        self.placed = []
        self.fetch_calls = 0
        self.fail_reads = False
        self.unavailable = False
        self.reject = False
        self.reject_message = None
        self.commit_gate = None
        self._rng = random.Random(7) if chaos else None

    def add_bid(self, item_id, amount: int, customer_id=None):
        self.bids.setdefault(item_id, []).append(
            BidRecord(bid_amount=amount, item_id=item_id, customer_id=customer_id)
        )

    async def fetch_bids(self, item_id):
        self.fetch_calls += 1
        await asyncio.sleep(0)
        if self.fail_reads or (self._rng is not None and self._rng.random() < 0.3):
            raise LedgerUnavailableError("connection refused")
        return list(self.bids.get(item_id, []))

    async def place_bid(self, request):
        self.placed.append(request)
        if self.commit_gate is not None:
            await self.commit_gate.wait()
        await asyncio.sleep(0)
        if self.unavailable:
            raise LedgerUnavailableError("connection reset by peer")
        if self.reject:
            raise BidRejectedError(self.reject_message or "Failed to place bid", status_code=400)
        self.add_bid(request.item_id, request.bid_amount, request.customer_id)
        return BidReceipt(item_id=request.item_id, bid_amount=request.bid_amount)

    async def fetch_items(self):
        await asyncio.sleep(0)
        if self.unavailable:
            raise LedgerUnavailableError("connection refused")
        return list(self.items)


class RecordingNotifier(Notifier):
    def __init__(self):
        self.successes = []
        self.errors = []

    def success(self, message: str):
        self.successes.append(message)

    def error(self, message: str):
        self.errors.append(message)


def make_item(item_id=42, current_bid=100, ends_in=3600, starting_price=50, now=T0) -> AuctionItem:
    return AuctionItem(
        item_id=item_id,
        title="Harbour at Dusk",
        description="Oil on canvas",
        starting_price=starting_price,
        auction_end=now + timedelta(seconds=ends_in),
        image="data:image/png;base64,AAAA",
        current_bid=current_bid,
    )


@pytest.fixture(scope="session")
def chaos_mode(request):
    """Fixture that provides chaos mode status"""
    return request.config.getoption("--chaos")


@pytest.fixture
def ledger(chaos_mode):
    return FakeLedger(chaos=chaos_mode)


@pytest.fixture
def reliable_ledger():
    return FakeLedger()


@pytest.fixture
def fake_now():
    return FakeNow()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def bidder():
    return Bidder(bidder_id=7, username="alice")


@pytest.fixture
def item_factory(fake_now):
    """Build AuctionItems relative to the fake clock's current time"""

    def factory(**kwargs):
        kwargs.setdefault("now", fake_now.now)
        return make_item(**kwargs)

    return factory
