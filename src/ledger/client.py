"""
Bid ledger client.

Blocking ``requests`` calls are pushed onto a worker thread with
``asyncio.to_thread`` so the event loop keeps running while a request is
outstanding.
"""

import asyncio
import logging
from typing import List, Optional

import requests

from observability.tracing import inject_trace_headers
from .schemas import (
    BidReceipt,
    BidRecord,
    BidRequest,
    ItemListing,
    WireId,
    parse_bid_records,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_REJECTION = "Failed to place bid"


class LedgerError(Exception):
    """Raised when a ledger call does not succeed"""

    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class LedgerUnavailableError(LedgerError):
    """Raised when the ledger cannot be reached"""


class BidRejectedError(LedgerError):
    """Raised when the ledger refuses a bid"""


def _error_message(response: requests.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return default


class LedgerClient:
    """
    Read/write access to the bid ledger.

    The session credential travels with the underlying ``requests.Session``
    (cookies set at sign-in, or a bearer token).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 5.0,
        auth_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize ledger client.

        Args:
            base_url: Ledger API root, e.g. "http://localhost:8080/api"
            timeout: Per-request timeout in seconds
            auth_token: Optional bearer token added to every request
            session: Pre-authenticated HTTP session to reuse
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if auth_token:
            self.session.headers["Authorization"] = f"Bearer {auth_token}"

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> "LedgerClient":
        """Build a client from a BiddingConfig."""
        return cls(
            base_url=config.ledger_url,
            timeout=config.request_timeout,
            auth_token=config.auth_token,
            session=session,
        )

    async def fetch_bids(self, item_id: WireId) -> List[BidRecord]:
        """
        Fetch every bid recorded for an item.

        Args:
            item_id: Item identifier

        Returns:
            Bid records in ledger order (unspecified)

        Raises:
            LedgerError: On transport failure, non-2xx status or bad payload
        """
        return await asyncio.to_thread(self._get_bids, item_id)

    async def place_bid(self, request: BidRequest) -> BidReceipt:
        """
        Commit a bid.

        Args:
            request: Bid request body

        Returns:
            Receipt with the committed amount

        Raises:
            BidRejectedError: Ledger refused the bid
            LedgerUnavailableError: Ledger could not be reached
        """
        headers = inject_trace_headers({"Content-Type": "application/json"})
        return await asyncio.to_thread(self._post_bid, request, headers)

    async def fetch_items(self) -> List[ItemListing]:
        """
        Fetch the item listing.

        Accepts either a bare list or a ``{"data": [...]}`` envelope.

        Raises:
            LedgerError: On transport failure, non-2xx status or bad payload
        """
        return await asyncio.to_thread(self._get_items)

    def _get(self, path: str):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise LedgerUnavailableError(f"GET {url} failed: {e}") from e

        if not response.ok:
            raise LedgerError(
                _error_message(response, f"GET {url} returned {response.status_code}"),
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise LedgerError(f"GET {url} returned invalid JSON") from e

    def _get_bids(self, item_id: WireId) -> List[BidRecord]:
        payload = self._get(f"/bid/item/{item_id}")
        try:
            return parse_bid_records(payload)
        except ValueError as e:
            raise LedgerError(f"Malformed bid list for item {item_id}: {e}") from e

    def _get_items(self) -> List[ItemListing]:
        payload = self._get("/item")
        if isinstance(payload, dict) and isinstance(payload.get("data"), list):
            payload = payload["data"]
        if not isinstance(payload, list):
            raise LedgerError("Invalid item listing response")
        try:
            return [ItemListing.model_validate(entry) for entry in payload]
        except ValueError as e:
            raise LedgerError(f"Malformed item listing: {e}") from e

    def _post_bid(self, request: BidRequest, headers: dict) -> BidReceipt:
        url = f"{self.base_url}/bid"
        try:
            response = self.session.post(
                url,
                json=request.to_wire(),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise LedgerUnavailableError(str(e) or DEFAULT_REJECTION) from e

        if not response.ok:
            raise BidRejectedError(
                _error_message(response, DEFAULT_REJECTION),
                status_code=response.status_code,
            )

        # The amount echoed back wins; an empty or partial body confirms ours
        try:
            body = response.json()
        except ValueError:
            body = None
        amount = request.bid_amount
        if isinstance(body, dict) and isinstance(body.get("bidAmount"), int):
            amount = body["bidAmount"]

        logger.info(f"[LEDGER] Bid of {amount} committed for item {request.item_id}")
        return BidReceipt(item_id=request.item_id, bid_amount=amount)

    def close(self):
        """Close the underlying HTTP session"""
        self.session.close()
