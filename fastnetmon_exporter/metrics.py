"""FastNetMon Exporter - Prometheus metrics."""

from typing import Iterable, Iterator, Tuple

from prometheus_client import (
    CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, PlatformCollector, ProcessCollector, generate_latest
)
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from .models import BlockedEntry

BLOCKED_IP_METRIC = 'fastnetmon_blocked_ip'
BLOCKED_IP_HELP = 'Represents a currently blocked IP address by FastNetMon.'
BLOCKED_IP_LABELS = ['ip', 'uuid']

SCRAPE_STAGES = ('fetch', 'parse')


class BlockedIPStore(Collector):
    """
    Current snapshot of blocked IPs, exposed as a Prometheus collector.

    The snapshot is an immutable sorted tuple of (ip, uuid) keys. ``replace``
    builds a new tuple and publishes it with one assignment, so ``collect``
    always sees either the complete old or the complete new snapshot.
    """

    def __init__(self):
        self._snapshot: Tuple[Tuple[str, str], ...] = ()

    def replace(self, entries: Iterable[BlockedEntry]) -> int:
        """Swap in a new snapshot. Returns the number of distinct entries."""
        snapshot = tuple(sorted({entry.key for entry in entries}))
        self._snapshot = snapshot
        return len(snapshot)

    def snapshot(self) -> Tuple[Tuple[str, str], ...]:
        """Current (ip, uuid) keys, sorted."""
        return self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)

    def describe(self) -> Iterable[GaugeMetricFamily]:
        """Describe the metric family without reading the snapshot."""
        return [GaugeMetricFamily(BLOCKED_IP_METRIC, BLOCKED_IP_HELP, labels=BLOCKED_IP_LABELS)]

    def collect(self) -> Iterator[GaugeMetricFamily]:
        """Yield one gauge sample per blocked entry in the current snapshot."""
        snapshot = self._snapshot
        family = GaugeMetricFamily(BLOCKED_IP_METRIC, BLOCKED_IP_HELP, labels=BLOCKED_IP_LABELS)
        for address, identifier in snapshot:
            family.add_metric([address, identifier], 1)
        yield family

    def render(self) -> str:
        """Prometheus text exposition of the blocked IP gauge alone."""
        return generate_latest(self).decode('utf-8')


class ScrapeMetrics:
    """Exporter self-metrics about the scrape loop."""

    def __init__(self, registry: CollectorRegistry):
        self.scrapes_total = Counter(
            'fastnetmon_exporter_scrapes_total',
            'Scrape cycles run, successful or not',
            registry=registry
        )
        self.scrape_errors_total = Counter(
            'fastnetmon_exporter_scrape_errors_total',
            'Failed scrape cycles',
            ['stage'],  # stage: fetch/parse
            registry=registry
        )
        self.last_scrape_duration_seconds = Gauge(
            'fastnetmon_exporter_last_scrape_duration_seconds',
            'Duration of the last scrape cycle',
            registry=registry
        )
        self.last_success_timestamp_seconds = Gauge(
            'fastnetmon_exporter_last_success_timestamp_seconds',
            'Unix timestamp of the last successful scrape',
            registry=registry
        )
        self.blocked_ips = Gauge(
            'fastnetmon_exporter_blocked_ips',
            'Number of blocked IPs in the current snapshot',
            registry=registry
        )

        for stage in SCRAPE_STAGES:
            self.scrape_errors_total.labels(stage=stage)

    def record_scrape(self, duration: float):
        """Record a finished scrape cycle and its duration."""
        self.scrapes_total.inc()
        self.last_scrape_duration_seconds.set(duration)

    def record_error(self, stage: str):
        """Increment the error counter for the failed stage."""
        self.scrape_errors_total.labels(stage=stage).inc()

    def record_success(self, entry_count: int):
        """Record a published snapshot and its size."""
        self.last_success_timestamp_seconds.set_to_current_time()
        self.blocked_ips.set(entry_count)


def create_registry(store: BlockedIPStore) -> CollectorRegistry:
    """Create a registry holding the store plus process and platform collectors."""
    registry = CollectorRegistry()
    registry.register(store)
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    return registry


def get_metrics_content(registry: CollectorRegistry) -> bytes:
    """Get Prometheus metrics in text format."""
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
