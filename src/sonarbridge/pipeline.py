"""Webhook processing pipeline.

One call to :meth:`NotificationPipeline.process` handles one SonarQube webhook:

1. Extract commit details and the quality report from the payload.
2. Fetch open issue counts (when the deployment includes history).
3. Render the report and, for a failed gate, the reminder.
4. Deliver the report, then the reminder.

Every stage raises on failure; nothing is delivered when extraction or the
history lookup fails.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import Config
from .errors import MalformedPayloadError
from .extractor import extract_payload
from .models import HistoricalCounts, PipelineResult
from .renderer import ReportRenderer
from .sonar_client import SonarClient
from .wechat_client import NotificationDispatcher

logger = logging.getLogger(__name__)


class NotificationPipeline:
    """Turns a SonarQube webhook payload into chat notifications."""

    def __init__(
        self,
        config: Config,
        sonar_client: Optional[SonarClient] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        renderer: Optional[ReportRenderer] = None,
    ) -> None:
        self._config = config
        self._options = config.options
        self._sonar_client = sonar_client or SonarClient(config=config)
        self._dispatcher = dispatcher or NotificationDispatcher(config=config)
        self._renderer = renderer or ReportRenderer(options=config.options, link_host=config.link_host)

    def process(self, payload: Any) -> PipelineResult:
        """Run the full pipeline for one webhook payload.

        Raises:
            MalformedPayloadError: If required payload fields are missing.
            HistoricalFetchError: If the open-issue lookup fails.
            DeliveryError: If the report could not be delivered. A failed
                reminder is recorded on the result instead.
        """
        commit, report = extract_payload(payload, self._options)
        logger.info(
            "Received SonarQube analysis",
            extra={
                "project_path": commit.project_path,
                "branch_name": commit.branch_name,
                "overall_status": report.overall_status,
            },
        )

        history: Optional[HistoricalCounts] = None
        if self._options.include_history:
            if not report.project_key:
                raise MalformedPayloadError("Webhook payload is missing 'project.key'.")
            history = self._sonar_client.fetch_historical_counts(report.project_key)

        message = self._renderer.render(commit, report, history)
        reminder = None if report.passed else self._renderer.render_reminder(commit)

        result = self._dispatcher.notify(report, message, reminder)

        logger.info(
            "Delivered SonarQube notification",
            extra={
                "project_key": report.project_key,
                "reminder_sent": result.reminder_delivery is not None,
                "reminder_failed": result.reminder_failed,
            },
        )
        return result

    def close(self) -> None:
        """Release the HTTP sessions held by this pipeline's clients."""
        self._sonar_client.close()
        self._dispatcher.close()
