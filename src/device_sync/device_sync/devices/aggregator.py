from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, List, Sequence

from ..core.exceptions import SourceUnavailable, ValidationError
from .client import DeviceLogClient
from .model import PunchEvent

logger = logging.getLogger(__name__)

ENTRY_FEED = "entry"
EXIT_FEED = "exit"


class LogAggregator:
    """Merges the entry and exit device feeds into one most-recent-first stream.

    Direction comes from each event, not from the feed it was read from; the
    two serials are just two sources merged by timestamp.
    """

    def __init__(self, client: DeviceLogClient, *, in_serial: str, out_serial: str):
        self._client = client
        self._feeds = ((ENTRY_FEED, in_serial), (EXIT_FEED, out_serial))

    def aggregate(self, window_start: date, window_end: date) -> List[PunchEvent]:
        if window_end < window_start:
            raise ValidationError(f"Invalid window {window_start}..{window_end}")

        with ThreadPoolExecutor(max_workers=len(self._feeds), thread_name_prefix="device-feed") as pool:
            futures = [
                (feed, pool.submit(self._fetch_feed, feed, serial, window_start, window_end))
                for feed, serial in self._feeds
            ]
            # Leaving the block joins both fetches before anything is merged.

        merged: List[PunchEvent] = []
        for _, future in futures:
            merged.extend(future.result())

        # Stable sort: on equal timestamps entry events stay ahead of exit events.
        merged.sort(key=lambda e: e.timestamp, reverse=True)
        logger.info("Aggregated %s punch events for %s..%s", len(merged), window_start, window_end)
        return merged

    def _fetch_feed(self, feed: str, serial: str, window_start: date, window_end: date) -> List[PunchEvent]:
        try:
            payload = self._client.fetch_logs(serial, window_start, window_end)
        except Exception as e:
            raise SourceUnavailable(feed, str(e)) from e
        return _parse_events(feed, payload)


def _parse_events(feed: str, payload: Sequence[Any]) -> List[PunchEvent]:
    if not isinstance(payload, (list, tuple)):
        raise SourceUnavailable(feed, f"expected a list of logs, got {type(payload).__name__}")
    events: List[PunchEvent] = []
    for item in payload:
        try:
            events.append(PunchEvent.from_payload(item))
        except (TypeError, ValueError) as e:
            raise SourceUnavailable(feed, f"unparseable log entry: {e}") from e
    return events
