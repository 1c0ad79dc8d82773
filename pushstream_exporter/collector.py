"""
Date: 2026-10-18
Description:
Prometheus collector that scrapes the push stream status page on every pull.

One scrape is fetch ➜ decode ➜ extract. Scrapes are serialised with a lock so
concurrent pulls never hit the upstream server twice at once.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Tuple

from prometheus_client import Counter, Summary
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from pushstream_exporter.catalog import DEFAULT_CATALOG, NAMESPACE, MetricCatalog, MetricDescriptor, build_fq_name
from pushstream_exporter.decoder import decode_status
from pushstream_exporter.exceptions import DecodeError, FetchError
from pushstream_exporter.extraction import AGGREGATE_KEY, Sample, extract_samples
from pushstream_exporter.fetcher import BaseFetcher

logger = logging.getLogger(__name__)

UP_NAME = build_fq_name(NAMESPACE, "up")
UP_HELP = "Was the last scrape of nginx successful."


@dataclass
class ScrapeResult:
    up: float
    samples: List[Sample] = field(default_factory=list)


class PushStreamCollector(Collector):
    """
    Collects push stream channel stats and delivers them as Prometheus metrics.
    """

    def __init__(
            self,
            fetcher: BaseFetcher,
            selected: Iterable[MetricDescriptor],
            catalog: MetricCatalog = DEFAULT_CATALOG,
    ):
        self.fetcher = fetcher
        self.catalog = catalog
        self.selected: Tuple[MetricDescriptor, ...] = tuple(selected)
        self._lock = threading.Lock()

        self.total_scrapes = Counter(
            "exporter_scrapes", "Current total nginx scrapes.",
            namespace=NAMESPACE, registry=None,
        )
        self.scrape_duration = Summary(
            "exporter_scrape_duration_seconds", "Time spent scraping the push stream status page.",
            namespace=NAMESPACE, registry=None,
        )

    def scrape(self) -> ScrapeResult:
        """
        Run one fetch-decode-extract cycle.

        Fetch and decode errors are logged and reported as up=0 with no samples.
        """
        self.total_scrapes.inc()
        with self.scrape_duration.time():
            try:
                body = self.fetcher.fetch()
            except FetchError as e:
                logger.error("Can't scrape Nginx PushStream: %s", e)
                return ScrapeResult(up=0)

            try:
                status = decode_status(body)
            except DecodeError as e:
                logger.error("Unexpected error while reading JSON: %s", e)
                return ScrapeResult(up=0)

            samples = extract_samples(status, self.selected)
        logger.debug("Scrape produced %d samples from %d channels", len(samples), len(status.channels))
        return ScrapeResult(up=1, samples=samples)

    def _descriptors(self) -> List[MetricDescriptor]:
        descriptors = list(self.selected)
        if AGGREGATE_KEY not in {d.key for d in descriptors}:
            descriptors.append(self.catalog.get(AGGREGATE_KEY))
        return descriptors

    def _families(self, samples: Iterable[Sample]) -> Iterator[GaugeMetricFamily]:
        families: Dict[str, GaugeMetricFamily] = {}
        for d in self._descriptors():
            families[d.key] = GaugeMetricFamily(d.name, d.description, labels=list(d.label_names))
        for s in samples:
            family = families[s.metric_key]
            descriptor = self.catalog.get(s.metric_key)
            family.add_metric([s.labels[n] for n in descriptor.label_names], s.value)
        for family in families.values():
            if family.samples:
                yield family

    def describe(self) -> Iterator[Metric]:
        """Describe every metric this collector can emit, without scraping."""
        for d in self._descriptors():
            yield GaugeMetricFamily(d.name, d.description, labels=list(d.label_names))
        yield GaugeMetricFamily(UP_NAME, UP_HELP)
        yield from self.total_scrapes.describe()
        yield from self.scrape_duration.describe()

    def collect(self) -> Iterator[Metric]:
        """Scrape the status page and yield the resulting metric families."""
        with self._lock:
            result = self.scrape()
            metrics: List[Metric] = list(self._families(result.samples))
            metrics.append(GaugeMetricFamily(UP_NAME, UP_HELP, value=result.up))
            metrics.extend(self.total_scrapes.collect())
            metrics.extend(self.scrape_duration.collect())
        yield from metrics
