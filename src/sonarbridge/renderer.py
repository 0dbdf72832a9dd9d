"""Rendering of quality reports into WeCom chat messages.

The report is a fixed markdown template:

- a title line
- the current analysis: project, branch, committer, time, gate result and one
  line per configured metric in canonical order
- the open issues of the project (only when a historical snapshot is given)
- a separator and a link to the SonarQube dashboard
"""

from __future__ import annotations

from typing import List, Optional

from .config import PipelineOptions
from .errors import RenderError
from .grading import (
    STYLE_EMPTY,
    STYLE_FAIL,
    STYLE_PASS,
    STYLE_WARNING,
    classify_grade,
    classify_status_color,
    colorize,
)
from .metrics import ordered
from .models import (
    MSGTYPE_MARKDOWN,
    MSGTYPE_TEXT,
    STATUS_NO_VALUE,
    STATUS_OK,
    CommitInfo,
    HistoricalCounts,
    MetricResult,
    QualityReport,
    RenderedMessage,
)

DEFAULT_TITLE = "SonarQube Code Analysis"
REMINDER_TEXT = "Please fix the reported issues promptly."
EMPTY_MARKER = "empty"


def render_metric(metric: Optional[MetricResult]) -> str:
    """Render one metric value, colored by its condition status."""
    if metric is None or metric.status == STATUS_NO_VALUE:
        return colorize(EMPTY_MARKER, STYLE_EMPTY)
    return colorize(classify_grade(metric.raw_value), classify_status_color(metric.status))


def render_count(count: int) -> str:
    """Render an open-issue count, highlighting anything but zero."""
    text = str(count)
    if text == "0":
        return text
    return colorize(text, STYLE_WARNING)


def render_gate(status: str) -> str:
    if status == STATUS_OK:
        return colorize("Passed", STYLE_PASS)
    return colorize("Failed", STYLE_FAIL)


class ReportRenderer:
    """Turns extracted webhook data into chat messages."""

    def __init__(self, options: PipelineOptions, link_host: str, title: str = DEFAULT_TITLE) -> None:
        self._metrics = ordered(options.metrics)
        self._link_host = link_host
        self._title = title

    def rewrite_link(self, url: str) -> str:
        """Replace every ``localhost`` in ``url`` with the configured link host."""
        return url.replace("localhost", self._link_host)

    def render(
        self,
        commit: Optional[CommitInfo],
        report: Optional[QualityReport],
        history: Optional[HistoricalCounts] = None,
    ) -> RenderedMessage:
        """Render the main markdown report, mentioning the author by name.

        Raises:
            RenderError: If ``commit`` or ``report`` is missing.
        """
        if commit is None or report is None:
            raise RenderError("Cannot render a report without commit and quality report data.")

        lines: List[str] = [
            f"### {self._title}",
            "- Current analysis",
            f"> **Project**: {commit.project_path}",
            f"> **Branch**: {commit.branch_name}",
            f"> **Committer**: {commit.user_name} / {commit.user_email}",
            f"> **Analyzed at**: {report.analysis_timestamp}",
            f"> **Quality gate**: {render_gate(report.overall_status)}",
        ]
        for metric in self._metrics:
            lines.append(f"> **{metric.label}**: {render_metric(report.metrics.get(metric.key))}")

        if history is not None:
            lines.extend(
                [
                    "- Open issues",
                    f"> **Bugs**: {render_count(history.bugs)}",
                    f"> **Vulnerabilities**: {render_count(history.vulnerabilities)}",
                    f"> **Code Smells**: {render_count(history.code_smells)}",
                ]
            )

        lines.extend(
            [
                "---",
                f"See the [full analysis]({self.rewrite_link(report.dashboard_url)})",
            ]
        )

        mentions = [commit.user_name] if commit.user_name else []
        return RenderedMessage(body="\n".join(lines), mentions=mentions, msgtype=MSGTYPE_MARKDOWN)

    def render_reminder(self, commit: Optional[CommitInfo]) -> RenderedMessage:
        """Render the plain-text fix reminder, mentioning the author by email handle.

        Raises:
            RenderError: If ``commit`` is missing.
        """
        if commit is None:
            raise RenderError("Cannot render a reminder without commit data.")

        handle = commit.email_handle
        mentions = [handle] if handle else []
        return RenderedMessage(body=REMINDER_TEXT, mentions=mentions, msgtype=MSGTYPE_TEXT)
