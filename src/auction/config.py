"""
Bidding configuration: ledger endpoint, schedule cadences and timeouts.
"""

import os
import logging
from typing import Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Polling faster than this floods the ledger with reads
MIN_POLL_INTERVAL = 0.5


@dataclass
class BiddingConfig:
    """
    Settings for a bidding session.

    Attributes:
        ledger_url: Base URL of the bid ledger API
        poll_interval: Seconds between ledger reads by the reconciler
        tick_interval: Seconds between countdown recomputations
        request_timeout: Per-request HTTP timeout in seconds
        auth_token: Optional bearer token sent with ledger calls
    """

    ledger_url: str = "http://localhost:8080/api"
    poll_interval: float = 2.0
    tick_interval: float = 1.0
    request_timeout: float = 5.0
    auth_token: Optional[str] = None

    def __post_init__(self):
        if self.poll_interval < MIN_POLL_INTERVAL:
            logger.warning(
                f"Poll interval {self.poll_interval}s too aggressive, "
                f"using {MIN_POLL_INTERVAL}s"
            )
            self.poll_interval = MIN_POLL_INTERVAL
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")
        self.ledger_url = self.ledger_url.rstrip("/")

    @classmethod
    def from_env(cls) -> "BiddingConfig":
        """Create config from environment variables"""
        return cls(
            ledger_url=os.getenv("BID_LEDGER_URL", "http://localhost:8080/api"),
            poll_interval=float(os.getenv("BID_POLL_INTERVAL", "2.0")),
            tick_interval=float(os.getenv("BID_TICK_INTERVAL", "1.0")),
            request_timeout=float(os.getenv("BID_REQUEST_TIMEOUT", "5.0")),
            auth_token=os.getenv("BID_AUTH_TOKEN") or None,
        )
