"""Scrape loop: fetch, parse and publish blocked IPs on a fixed schedule."""

import asyncio
import logging
import time
from datetime import datetime
from enum import Enum
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import ExporterConfig
from .errors import ScrapeError
from .fetcher import BlockedIPFetcher
from .metrics import BlockedIPStore, ScrapeMetrics
from .parser import parse_blocked_entries

logger = logging.getLogger(__name__)

SCRAPE_JOB_ID = "scrape_blocked_ips"


class ScrapeState(str, Enum):
    """Scrape loop state."""
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    PUBLISHING = "publishing"


class ScrapeLoop:
    """
    Periodically refreshes the blocked IP store from the FastNetMon API.

    The first cycle runs as soon as the loop starts; later cycles follow a
    fixed-period schedule that does not drift with cycle duration. Cycles
    never overlap: if one overruns the interval, a single pending run starts
    right after it and further missed runs are dropped.
    """

    def __init__(self, config: ExporterConfig, fetcher: BlockedIPFetcher,
                 store: BlockedIPStore, metrics: Optional[ScrapeMetrics] = None):
        self.interval_seconds = config.scrape_interval_seconds
        self.fetcher = fetcher
        self.store = store
        self.metrics = metrics
        self.state = ScrapeState.IDLE
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._cycle_lock = asyncio.Lock()

    async def run_cycle(self) -> bool:
        """
        Run one fetch, parse and publish cycle.

        Scrape errors are logged and swallowed; the store keeps its previous
        snapshot when a cycle fails.

        Returns:
            True if a new snapshot was published
        """
        async with self._cycle_lock:
            start_time = time.time()
            logger.info("Scraping FastNetMon API...")

            try:
                self.state = ScrapeState.FETCHING
                body = await self.fetcher.fetch()

                self.state = ScrapeState.PARSING
                entries = parse_blocked_entries(body)

                self.state = ScrapeState.PUBLISHING
                entry_count = self.store.replace(entries)

            except ScrapeError as e:
                duration = time.time() - start_time
                logger.error(f"Scrape failed during {e.stage} after {duration:.2f}s: {e}")
                if self.metrics is not None:
                    self.metrics.record_error(e.stage)
                    self.metrics.record_scrape(duration)
                return False

            finally:
                self.state = ScrapeState.IDLE

            duration = time.time() - start_time
            if self.metrics is not None:
                self.metrics.record_success(entry_count)
                self.metrics.record_scrape(duration)

            logger.info(f"Successfully updated metrics. Found {entry_count} blocked IPs "
                        f"({len(entries)} entries) in {duration:.2f}s")
            return True

    def start(self) -> None:
        """Start the background scheduler. Must be called from a running event loop."""
        if self.scheduler is not None:
            logger.warning("Scrape loop already started")
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.run_cycle,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=SCRAPE_JOB_ID,
            name="Scrape FastNetMon blocked IPs",
            next_run_time=datetime.now(),
            max_instances=2,
            coalesce=True,
            misfire_grace_time=None,
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Scraping API every {self.interval_seconds}s")

    def stop(self) -> None:
        """Stop scheduling new cycles. A cycle already running is not interrupted."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
            logger.info("Scrape loop stopped")

    @property
    def running(self) -> bool:
        """Whether the scheduler is active."""
        return self.scheduler is not None and self.scheduler.running
