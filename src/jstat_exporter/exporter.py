"""Prometheus collector publishing jstat reports as gauges."""

import logging
import platform
from typing import Dict, Iterator, Optional, Tuple

from prometheus_client import CollectorRegistry, Counter, Info
from prometheus_client.core import GaugeMetricFamily

from . import __version__
from .collectors import REPORTS, JstatReport, collect_report
from .config import ExporterConfig

NAMESPACE = "jstat"

logger = logging.getLogger(__name__)


class JstatCollector:
    """
    Custom collector that runs jstat on every scrape.

    Gauges are built fresh for each collect() call, so concurrent scrapes
    never write to shared metric objects. All reports are read before any
    sample is yielded: a failing report raises JstatError and the scrape
    produces nothing.
    """

    def __init__(
        self,
        jstat_path: str,
        target_pid: str,
        timeout: Optional[float] = None,
        reports: Tuple[JstatReport, ...] = REPORTS,
    ):
        self.jstat_path = jstat_path
        self.target_pid = target_pid
        self.timeout = timeout
        self.reports = reports

    def describe(self) -> Iterator[GaugeMetricFamily]:
        for report in self.reports:
            for field in report.fields:
                yield GaugeMetricFamily(f"{NAMESPACE}_{field.name}", field.help)

    def scrape(self) -> Dict[str, float]:
        """Run every report and return gauge values keyed by gauge name."""
        values: Dict[str, float] = {}
        for report in self.reports:
            values.update(collect_report(report, self.jstat_path, self.target_pid, self.timeout))
        return values

    def collect(self) -> Iterator[GaugeMetricFamily]:
        values = self.scrape()
        logger.debug(f"Scraped {len(values)} values from jstat for pid {self.target_pid}")

        for report in self.reports:
            for field in report.fields:
                yield GaugeMetricFamily(
                    f"{NAMESPACE}_{field.name}",
                    field.help,
                    value=values[field.name],
                )


def build_registry(config: ExporterConfig) -> Tuple[CollectorRegistry, Optional[Counter]]:
    """
    Create the registry served by the exporter.

    Returns:
        Tuple of (registry, scrape error counter). The counter is only
        created when scrape errors are not fatal.
    """
    registry = CollectorRegistry()

    build_info = Info(
        "jstat_exporter_build",
        "A metric with a constant '1' value labeled by the exporter build.",
        registry=registry,
    )
    build_info.info({
        "version": __version__,
        "pythonversion": platform.python_version(),
    })

    registry.register(JstatCollector(
        config.jstat_path,
        config.target_pid,
        timeout=config.jstat_timeout or None,
    ))

    errors = None
    if not config.exit_on_error:
        errors = Counter(
            f"{NAMESPACE}_scrape_errors",
            "Number of scrapes that failed to read jstat output.",
            registry=registry,
        )

    return registry, errors
