"""Region resolution and per-feed dispatch for précis and bulletin requests."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Iterable, Mapping, Protocol

from rapidfuzz import fuzz, process
from rapidfuzz.utils import default_process

from bomfeeds.common.constants import ALL_REGIONS, BULLETIN_FEEDS, DEFAULT_BASE_URL, PRECIS_FEEDS, REGION_CODES, REGION_NAMES
from bomfeeds.common.errors import UnknownRegionError
from bomfeeds.common.http import HttpClient
from bomfeeds.common.logging import get_logger, log_event
from bomfeeds.common.models import LocationRecord
from bomfeeds.common.time_utils import elapsed_ms
from bomfeeds.pipeline.bulletin import parse_bulletin
from bomfeeds.pipeline.forecast import parse_forecast

REGION_NAME_CUTOFF = 85.0

FeedParser = Callable[[bytes, str, Iterable[LocationRecord]], list[dict]]


class FeedSource(Protocol):
    def fetch(self, feed: str) -> bytes: ...


class HttpFeedSource:
    def __init__(self, client: HttpClient, base_url: str = DEFAULT_BASE_URL) -> None:
        self.client = client
        self.base_url = base_url

    def url_for(self, feed: str) -> str:
        return f"{self.base_url}{feed}"

    def fetch(self, feed: str) -> bytes:
        return self.client.get_bytes(self.url_for(feed))


def resolve_region(value: str) -> str:
    """Map a postal code or (approximate) full name to a region code or ``AUS``."""
    cleaned = (value or "").strip().upper()
    if cleaned in REGION_CODES or cleaned == ALL_REGIONS:
        return cleaned
    if cleaned in REGION_NAMES:
        return REGION_NAMES[cleaned]

    match = process.extractOne(
        cleaned,
        list(REGION_NAMES),
        scorer=fuzz.ratio,
        processor=default_process,
        score_cutoff=REGION_NAME_CUTOFF,
    )
    if match is not None:
        return REGION_NAMES[match[0]]

    valid = ", ".join([*REGION_CODES, ALL_REGIONS])
    raise UnknownRegionError(f"Unknown region {value!r}. Valid region codes: {valid}")


def feeds_for_region(region: str, feeds: Mapping[str, str]) -> list[str]:
    code = resolve_region(region)
    if code == ALL_REGIONS:
        # ACT shares the NSW feed, so the union has one entry per distinct feed.
        return list(dict.fromkeys(feeds[region_code] for region_code in REGION_CODES))
    return [feeds[code]]


def _run_feeds(
    feeds: list[str],
    source: FeedSource,
    parse: FeedParser,
    reference: tuple[LocationRecord, ...],
    *,
    region: str,
    max_workers: int,
    logger: logging.Logger,
) -> list[dict]:
    failed = threading.Event()

    def _one(feed: str) -> list[dict] | None:
        # Queued feeds are skipped once any feed has failed.
        if failed.is_set():
            return None
        started = time.monotonic()
        try:
            raw = source.fetch(feed)
            rows = parse(raw, feed, reference)
        except Exception:
            failed.set()
            raise
        log_event(
            logger,
            f"parsed feed {feed}",
            region=region,
            feed=feed,
            event="FEED_PARSED",
            status="ok",
            rows_out=len(rows),
            duration_ms=elapsed_ms(started),
        )
        return rows

    if max_workers > 1 and len(feeds) > 1:
        executor = ThreadPoolExecutor(max_workers=min(max_workers, len(feeds)))
        futures = [executor.submit(_one, feed) for feed in feeds]
        done, _pending = wait(futures, return_when=FIRST_EXCEPTION)
        errors = [future.exception() for future in futures if future in done and future.exception() is not None]
        if errors:
            executor.shutdown(wait=False, cancel_futures=True)
            raise errors[0]
        executor.shutdown(wait=True)
        results = [future.result() for future in futures]
    else:
        results = [_one(feed) for feed in feeds]

    return [row for rows in results for row in rows]


def get_precis_forecast(
    region: str,
    source: FeedSource,
    locations: Iterable[LocationRecord],
    *,
    max_workers: int = 1,
    logger: logging.Logger | None = None,
) -> list[dict]:
    feeds = feeds_for_region(region, PRECIS_FEEDS)
    return _run_feeds(
        feeds,
        source,
        parse_forecast,
        tuple(locations),
        region=resolve_region(region),
        max_workers=max_workers,
        logger=logger or get_logger(),
    )


def get_ag_bulletin(
    region: str,
    source: FeedSource,
    stations: Iterable[LocationRecord],
    *,
    max_workers: int = 1,
    logger: logging.Logger | None = None,
) -> list[dict]:
    feeds = feeds_for_region(region, BULLETIN_FEEDS)
    return _run_feeds(
        feeds,
        source,
        parse_bulletin,
        tuple(stations),
        region=resolve_region(region),
        max_workers=max_workers,
        logger=logger or get_logger(),
    )
