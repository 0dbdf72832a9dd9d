"""FastAPI application receiving SonarQube webhooks."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.concurrency import run_in_threadpool

from .config import Config
from .errors import ApiError, MalformedPayloadError, SignatureError
from .models import PipelineResult
from .pipeline import NotificationPipeline

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/sonarQubeWebHooksRest/receive"
SIGNATURE_HEADER = "X-Sonar-Webhook-HMAC-SHA256"


def verify_signature(secret: Optional[str], body: bytes, signature: str) -> None:
    """Check the SonarQube HMAC-SHA256 signature of a webhook body.

    Does nothing when no secret is configured.

    Raises:
        SignatureError: If the signature is missing or does not match.
    """
    if not secret:
        return
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    provided = signature.strip().lower().encode("utf-8")
    if not provided or not hmac.compare_digest(expected.encode("ascii"), provided):
        raise SignatureError("Webhook signature does not match the request body.")


PipelineFactory = Callable[[], NotificationPipeline]


def run_pipeline(factory: PipelineFactory, payload: Any) -> PipelineResult:
    """Process one payload with a freshly built pipeline and close its sessions."""
    pipeline = factory()
    try:
        return pipeline.process(payload)
    finally:
        pipeline.close()


def create_app(config: Config, pipeline_factory: Optional[PipelineFactory] = None) -> FastAPI:
    """Build the webhook application for ``config``.

    Every request gets its own pipeline from ``pipeline_factory`` so concurrent
    requests never share HTTP sessions.
    """
    app = FastAPI(
        title="SonarBridge",
        description="Forwards SonarQube quality gate results to a WeCom group robot",
        version="0.1.0",
    )
    app.state.pipeline_factory = pipeline_factory or (lambda: NotificationPipeline(config=config))

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post(WEBHOOK_PATH, response_class=PlainTextResponse)
    async def receive(request: Request) -> PlainTextResponse:
        """Run the notification pipeline for one SonarQube webhook call."""
        body = await request.body()

        try:
            verify_signature(config.webhook_secret, body, request.headers.get(SIGNATURE_HEADER, ""))
        except SignatureError as exc:
            logger.warning("Rejected webhook: %s", exc)
            return PlainTextResponse("401 UNAUTHORIZED", status_code=401)

        try:
            payload = json.loads(body)
        except ValueError:
            logger.error("Rejected webhook with invalid JSON body: %r", body[:1000])
            return PlainTextResponse("400 BAD_REQUEST", status_code=400)

        logger.debug("Received SonarQube webhook: %s", payload)

        try:
            result = await run_in_threadpool(run_pipeline, request.app.state.pipeline_factory, payload)
        except MalformedPayloadError as exc:
            logger.error("Rejected malformed webhook payload: %s; payload=%s", exc, payload)
            return PlainTextResponse("400 BAD_REQUEST", status_code=400)
        except ApiError as exc:
            logger.error("Notification failed: %s", exc)
            return PlainTextResponse("502 BAD_GATEWAY", status_code=502)
        except Exception:
            logger.exception("Unexpected error while processing webhook")
            return PlainTextResponse("500 INTERNAL_SERVER_ERROR", status_code=500)

        if result.reminder_failed:
            logger.warning("Report delivered but reminder failed: %s", result.reminder_error)

        return PlainTextResponse("200 OK")

    return app
