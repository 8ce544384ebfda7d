"""
Watch a live auction item and optionally place one bid.

Prints the bidding widget state on every countdown tick until the
auction ends or Ctrl-C.

    python demo/watch_item.py 42 --title "Sunset" --start 100 --ends-in 300
    python demo/watch_item.py 42 --start 100 --ends-in 300 --bid 120 --bidder 7:alice
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone

sys.path.append("src")
from auction.config import BiddingConfig
from auction.models import AuctionItem, Bidder
from bidding_session import BiddingSession, BiddingView
from ledger.client import LedgerClient


def print_view(view: BiddingView):
    status = "ENDED" if view.ended else view.countdown
    print(
        f"[{status}] current={view.current_bid} min={view.min_bid} "
        f"draft={view.draft_bid} quick={view.suggestions}"
    )


def parse_bidder(value: str) -> Bidder:
    bidder_id, _, username = value.partition(":")
    return Bidder(bidder_id=bidder_id, username=username or bidder_id)


async def main(args):
    config = BiddingConfig.from_env()
    if args.ledger_url:
        config.ledger_url = args.ledger_url.rstrip("/")

    item = AuctionItem(
        item_id=args.item_id,
        title=args.title,
        description=args.description,
        starting_price=args.start,
        auction_end=datetime.now(timezone.utc) + timedelta(seconds=args.ends_in),
    )
    ledger = LedgerClient.from_config(config)
    bidder = parse_bidder(args.bidder) if args.bidder else None

    try:
        async with BiddingSession(item, ledger, bidder=bidder, config=config, on_change=print_view) as session:
            if args.bid is not None:
                session.set_draft(args.bid)
                intent = session.submit()
                if intent is None:
                    print(f"✗ Bid {args.bid} refused: {session.view().rejection}")
                else:
                    result = await session.confirm()
                    print(f"{'✓' if result.ok else '✗'} {result.status.value}: {result.message}")

            while not session.clock.ended:
                await asyncio.sleep(config.tick_interval)
            print_view(session.view())
    finally:
        ledger.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Watch a live auction item")
    parser.add_argument("item_id", help="Ledger item identifier")
    parser.add_argument("--title", default="Untitled")
    parser.add_argument("--description", default="")
    parser.add_argument("--start", type=int, required=True, help="Starting price")
    parser.add_argument("--ends-in", type=int, default=60, help="Seconds until the auction ends")
    parser.add_argument("--ledger-url", help="Override BID_LEDGER_URL")
    parser.add_argument("--bid", type=int, help="Place one bid of this amount")
    parser.add_argument("--bidder", help="Bidder as id:username")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        asyncio.run(main(args))
    except KeyboardInterrupt:
        print("\nStopped")
