"""WeCom group robot client used to deliver rendered reports."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .config import Config
from .errors import DeliveryError
from .models import DeliveryResult, PipelineResult, QualityReport, RenderedMessage

logger = logging.getLogger(__name__)


def build_envelope(message: RenderedMessage) -> Dict[str, Any]:
    """Wrap a message in the robot API envelope for its message type."""
    return {
        "msgtype": message.msgtype,
        message.msgtype: {
            "content": message.body,
            "mentioned_list": list(message.mentions),
        },
    }


class NotificationDispatcher:
    """Posts messages to a WeCom group robot webhook, one attempt per message."""

    def __init__(self, config: Config) -> None:
        self._webhook_url = config.webhook_url
        self._timeout_seconds = config.timeout_seconds
        self._session = requests.Session()

    def dispatch(self, message: RenderedMessage) -> DeliveryResult:
        """Deliver a single message.

        The robot answers HTTP 200 with ``{"errcode": 0, "errmsg": "ok"}`` on
        success; any other ``errcode`` is treated as a failed delivery.

        Raises:
            DeliveryError: If the request fails, returns HTTP >= 400, or the robot
                reports an error.
        """
        try:
            response = self._session.post(
                self._webhook_url,
                json=build_envelope(message),
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise DeliveryError(f"Chat robot request failed for {message.msgtype} message") from exc

        logger.info(
            "Called chat robot",
            extra={
                "msgtype": message.msgtype,
                "status_code": response.status_code,
                "response_body": response.text,
            },
        )

        if response.status_code >= 400:
            raise DeliveryError(
                f"Chat robot returned {response.status_code} for {message.msgtype} message - {response.text}"
            )

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("errcode", 0) != 0:
            raise DeliveryError(
                f"Chat robot rejected {message.msgtype} message: "
                f"errcode={body.get('errcode')} errmsg={body.get('errmsg')}"
            )

        return DeliveryResult(
            status_code=response.status_code,
            response_body=response.text,
            msgtype=message.msgtype,
        )

    def notify(
        self,
        report: QualityReport,
        message: RenderedMessage,
        reminder: Optional[RenderedMessage],
    ) -> PipelineResult:
        """Deliver the report, then the reminder when the quality gate failed.

        The two deliveries are independent: the reminder is attempted even if the
        report could not be delivered, and a failed reminder is recorded on the
        result instead of failing the delivered report.

        Raises:
            DeliveryError: If the report could not be delivered.
        """
        report_delivery: Optional[DeliveryResult] = None
        report_error: Optional[DeliveryError] = None
        try:
            report_delivery = self.dispatch(message)
        except DeliveryError as exc:
            logger.error("Report delivery failed: %s", exc, extra={"msgtype": message.msgtype})
            report_error = exc

        reminder_delivery: Optional[DeliveryResult] = None
        reminder_error: Optional[DeliveryError] = None
        if not report.passed and reminder is not None:
            try:
                reminder_delivery = self.dispatch(reminder)
            except DeliveryError as exc:
                logger.error("Reminder delivery failed: %s", exc, extra={"msgtype": reminder.msgtype})
                reminder_error = exc

        if report_error is not None:
            raise report_error

        return PipelineResult(
            report_delivery=report_delivery,
            reminder_delivery=reminder_delivery,
            reminder_error=reminder_error,
        )

    def close(self) -> None:
        self._session.close()
