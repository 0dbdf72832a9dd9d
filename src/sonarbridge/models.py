"""Domain models for SonarQube webhook processing.

These dataclasses intentionally model only the subset of webhook payload fields
that are required to render and deliver a notification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import DeliveryError

STATUS_OK = "OK"
STATUS_ERROR = "ERROR"
STATUS_NO_VALUE = "NO_VALUE"

MSGTYPE_MARKDOWN = "markdown"
MSGTYPE_TEXT = "text"


@dataclass(frozen=True, slots=True)
class CommitInfo:
    """Identifies the GitLab commit and author that triggered the analysis."""

    project_path: str = ""
    branch_name: str = ""
    user_name: str = ""
    user_email: str = ""

    @property
    def email_handle(self) -> str:
        """Return the part of ``user_email`` before the first ``@``."""
        return self.user_email.split("@", 1)[0]


@dataclass(frozen=True, slots=True)
class MetricResult:
    """Represents one graded quality-gate condition."""

    raw_value: str
    status: str


@dataclass(slots=True)
class QualityReport:
    """Represents the quality-gate outcome of one analysis run."""

    analysis_timestamp: str
    dashboard_url: str
    overall_status: str
    project_key: str = ""
    metrics: Dict[str, MetricResult] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.overall_status == STATUS_OK


@dataclass(frozen=True, slots=True)
class HistoricalCounts:
    """Snapshot of currently open issues for a project, bucketed by type."""

    bugs: int = 0
    vulnerabilities: int = 0
    code_smells: int = 0


@dataclass(frozen=True, slots=True)
class RenderedMessage:
    """A chat message body plus the handles to mention."""

    body: str
    mentions: List[str]
    msgtype: str = MSGTYPE_MARKDOWN


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Outcome of a single chat bot POST."""

    status_code: int
    response_body: str
    msgtype: str


@dataclass(slots=True)
class PipelineResult:
    """Summarizes what one webhook invocation did."""

    report_delivery: DeliveryResult
    reminder_delivery: Optional[DeliveryResult] = None
    reminder_error: Optional[DeliveryError] = None

    @property
    def reminder_failed(self) -> bool:
        return self.reminder_error is not None
