"""Recognized SonarQube quality-gate metrics.

The order of ``METRICS`` is the order in which metric lines are rendered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

RELIABILITY = "new_reliability_rating"
SECURITY = "new_security_rating"
MAINTAINABILITY = "new_maintainability_rating"
COVERAGE = "new_coverage"
DUPLICATION = "new_duplicated_lines_density"
HOTSPOTS = "new_security_hotspots_reviewed"


@dataclass(frozen=True, slots=True)
class MetricDefinition:
    """Describes how a quality-gate metric is labeled in the report."""

    key: str
    label: str


METRICS: Tuple[MetricDefinition, ...] = (
    MetricDefinition(RELIABILITY, "Reliability (Bugs)"),
    MetricDefinition(SECURITY, "Security (Vulnerabilities)"),
    MetricDefinition(MAINTAINABILITY, "Maintainability (Code Smells)"),
    MetricDefinition(COVERAGE, "Coverage"),
    MetricDefinition(DUPLICATION, "Duplicated Lines"),
    MetricDefinition(HOTSPOTS, "Security Hotspots Reviewed"),
)

METRICS_BY_KEY: Dict[str, MetricDefinition] = {metric.key: metric for metric in METRICS}

ALL_METRIC_KEYS: Tuple[str, ...] = tuple(metric.key for metric in METRICS)
STANDARD_METRIC_KEYS: Tuple[str, ...] = (RELIABILITY, SECURITY, MAINTAINABILITY, DUPLICATION)


def ordered(keys) -> Tuple[MetricDefinition, ...]:
    """Return definitions for ``keys`` in canonical render order."""
    wanted = set(keys)
    return tuple(metric for metric in METRICS if metric.key in wanted)
