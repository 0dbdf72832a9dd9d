"""Typed extraction of SonarQube webhook payloads.

SonarQube posts a loosely shaped JSON document when an analysis finishes. This
module is the only place that touches that raw structure:

- Commit fields come from the ``properties`` map, populated by the GitLab CI job
  through ``sonar.analysis.*`` scanner parameters. Missing keys become empty
  strings.
- ``project`` and ``qualityGate`` are structurally required; their absence raises
  ``MalformedPayloadError``.
- Only recognized quality-gate conditions are kept, everything else is ignored.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Tuple

from .config import PipelineOptions
from .errors import MalformedPayloadError
from .metrics import DUPLICATION
from .models import STATUS_NO_VALUE, CommitInfo, MetricResult, QualityReport

logger = logging.getLogger(__name__)

PROJECT_PATH_PROPERTY = "sonar.analysis.CI_PROJECT_PATH"
BRANCH_NAME_PROPERTY = "sonar.analysis.CI_COMMIT_REF_NAME"
USER_NAME_PROPERTY = "sonar.analysis.GITLAB_USER_NAME"
USER_EMAIL_PROPERTY = "sonar.analysis.GITLAB_USER_EMAIL"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _required_mapping(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    if not isinstance(value, Mapping):
        raise MalformedPayloadError(f"Webhook payload is missing required object '{key}'.")
    return value


def format_duplication(value: str) -> str:
    """Truncate a duplication density to two decimals and append ``%``.

    Only values containing a decimal point and longer than four characters are
    rewritten, e.g. ``"2.345"`` becomes ``"2.34%"`` while ``"1.5"`` is kept.
    """
    if "." in value and len(value) > 4:
        return value[: value.index(".") + 3] + "%"
    return value


def extract_commit_info(payload: Mapping[str, Any]) -> CommitInfo:
    """Read commit and author details from the payload ``properties`` map."""
    properties = payload.get("properties")
    if not isinstance(properties, Mapping):
        properties = {}

    return CommitInfo(
        project_path=_text(properties.get(PROJECT_PATH_PROPERTY)),
        branch_name=_text(properties.get(BRANCH_NAME_PROPERTY)),
        user_name=_text(properties.get(USER_NAME_PROPERTY)),
        user_email=_text(properties.get(USER_EMAIL_PROPERTY)),
    )


def _extract_metrics(
    conditions: Iterable[Any],
    recognized: Iterable[str],
    truncate_duplication: bool,
) -> Dict[str, MetricResult]:
    wanted = set(recognized)
    metrics: Dict[str, MetricResult] = {}

    for condition in conditions:
        if not isinstance(condition, Mapping):
            continue

        metric = _text(condition.get("metric"))
        if metric not in wanted:
            continue

        value = _text(condition.get("value"))
        status = _text(condition.get("status")) or STATUS_NO_VALUE
        if metric == DUPLICATION and truncate_duplication and value:
            value = format_duplication(value)

        metrics[metric] = MetricResult(raw_value=value, status=status)

    return metrics


def extract_quality_report(payload: Mapping[str, Any], options: PipelineOptions) -> QualityReport:
    """Build a ``QualityReport`` from the payload's project and quality gate.

    Raises:
        MalformedPayloadError: If ``project`` or ``qualityGate`` is missing.
    """
    project = _required_mapping(payload, "project")
    quality_gate = _required_mapping(payload, "qualityGate")

    conditions = quality_gate.get("conditions")
    if not isinstance(conditions, list):
        conditions = []

    return QualityReport(
        analysis_timestamp=_text(payload.get("analysedAt")),
        dashboard_url=_text(project.get("url")),
        overall_status=_text(quality_gate.get("status")),
        project_key=_text(project.get("key")),
        metrics=_extract_metrics(conditions, options.metrics, options.truncate_duplication),
    )


def extract_payload(payload: Any, options: PipelineOptions) -> Tuple[CommitInfo, QualityReport]:
    """Extract commit details and the quality report from a raw webhook payload.

    Raises:
        MalformedPayloadError: If the payload is not an object or lacks required
            top-level fields.
    """
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError("Webhook payload must be a JSON object.")

    commit = extract_commit_info(payload)
    report = extract_quality_report(payload, options)

    logger.debug(
        "Extracted webhook payload",
        extra={
            "project_key": report.project_key,
            "overall_status": report.overall_status,
            "metrics": sorted(report.metrics),
        },
    )
    return commit, report
