"""Staged uploads of adoption statistics.

Delivery is left to a transport callable. The default transport only logs
what would be sent; no network code lives here.
"""

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from .logs import VERBOSE
from .models import utc_now
from .statistics import StatisticsAggregator


logger = logging.getLogger(__name__)


Transport = Callable[[str, dict], None]


def log_transport(endpoint: str, payload: dict) -> None:
    """Transport that records the would-be upload in the log."""
    logger.log(VERBOSE, "=== UPLOAD SIMULATION ===")
    logger.log(VERBOSE, f"Would upload to: {endpoint}")
    logger.log(VERBOSE, f"Payload: {len(json.dumps(payload))} bytes")
    logger.log(VERBOSE, "=" * 24)


def write_payload_json(payload: dict, output_path: Path) -> None:
    """Write an upload payload to a JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2))


class UploadScheduler:
    """
    Produces upload payloads on a fixed interval.

    ``run_pending`` is meant to be polled by the host; it runs a tick once
    ``interval`` seconds have passed since the previous one. Every tick reads
    the current snapshot, whether or not anything new was recorded, and a
    failing transport never stops the next tick.
    """

    def __init__(
        self,
        aggregator: StatisticsAggregator,
        endpoint: str = '',
        interval: int = 300,
        transport: Transport = log_transport,
    ):
        self.aggregator = aggregator
        self.endpoint = endpoint
        self.interval = interval
        self.transport = transport
        self.last_tick: Optional[datetime] = None

    @property
    def enabled(self) -> bool:
        return self.interval > 0 and bool(self.endpoint)

    def run_pending(self, now: Optional[datetime] = None) -> Optional[dict]:
        """Tick if the interval has elapsed; return the payload if one was produced."""
        if not self.enabled:
            return None

        now = now or utc_now()
        if self.last_tick is not None and now - self.last_tick < timedelta(seconds=self.interval):
            return None
        return self.tick(now)

    def tick(self, now: Optional[datetime] = None) -> Optional[dict]:
        """
        Build the payload and hand it to the transport.

        Returns the payload, or None when uploads are disabled (no endpoint
        or a non-positive interval).
        """
        if not self.enabled:
            logger.log(VERBOSE, "No upload endpoint configured")
            return None

        self.last_tick = now or utc_now()
        payload = self.aggregator.get_upload_payload()
        logger.info("Uploading statistics...")
        logger.debug(f"Upload payload ready ({len(json.dumps(payload))} bytes)")

        try:
            self.transport(self.endpoint, payload)
        except Exception as e:
            logger.warning(f"Upload to {self.endpoint} failed: {e}")

        return payload

    def stage(self, kind: str, data: dict) -> None:
        """Log a single change that would be sent alongside the next upload."""
        logger.log(VERBOSE, f"Staged {kind} for upload at {utc_now().isoformat()}")
        if self.endpoint:
            logger.log(VERBOSE, f"Would upload to: {self.endpoint}")
        else:
            logger.log(VERBOSE, "No upload endpoint configured")
        logger.log(VERBOSE, f"Data: {json.dumps(data)[:200]}")
