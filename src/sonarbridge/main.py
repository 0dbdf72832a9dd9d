"""Entry point for the SonarQube notification bridge."""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional, Sequence

import uvicorn

from .cli import parse_args
from .config import Config, load_config
from .errors import ApiError, ConfigurationError, MalformedPayloadError
from .pipeline import NotificationPipeline
from .server import create_app

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_MALFORMED_PAYLOAD = 3
EXIT_API = 4


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def send_payload_file(config: Config, payload_file: str) -> int:
    """Run the pipeline once for a payload stored on disk.

    Returns:
        ``0`` when every message was delivered, ``4`` when the report was
        delivered but the reminder was not.
    """
    try:
        with open(payload_file, encoding="utf-8") as handle:
            payload = json.load(handle)
    except ValueError as exc:
        raise MalformedPayloadError(f"Payload file '{payload_file}' is not valid JSON.") from exc

    pipeline = NotificationPipeline(config=config)
    try:
        result = pipeline.process(payload)
    finally:
        pipeline.close()

    print(f"Report delivered (HTTP {result.report_delivery.status_code}).")
    if result.reminder_delivery is not None:
        print(f"Reminder delivered (HTTP {result.reminder_delivery.status_code}).")
    if result.reminder_error is not None:
        print(f"Reminder failed: {result.reminder_error}", file=sys.stderr)
        return EXIT_API
    return EXIT_OK


def orchestrate(argv: Optional[Sequence[str]] = None) -> int:
    """Run the requested command and map failures to exit codes.

    Returns:
        ``0`` on success, ``2`` for configuration errors, ``3`` for malformed
        payloads, ``4`` for SonarQube or chat robot API failures and ``1`` for
        anything unexpected.
    """
    try:
        args = parse_args(argv)
        configure_logging(args.log_level)

        config = load_config(
            webhook_url=args.webhook_url,
            sonar_host=args.sonar_host,
            profile=args.profile,
            public_host=args.public_host,
            timeout_seconds=args.timeout,
        )

        if args.command == "serve":
            logger.info("Starting webhook receiver on %s:%d", args.host, args.port)
            uvicorn.run(create_app(config), host=args.host, port=args.port)
        else:
            return send_payload_file(config, args.payload_file)

        return EXIT_OK
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION
    except MalformedPayloadError as exc:
        print(f"Malformed payload: {exc}", file=sys.stderr)
        return EXIT_MALFORMED_PAYLOAD
    except ApiError as exc:
        print(f"API error: {exc}", file=sys.stderr)
        return EXIT_API
    except OSError as exc:
        print(f"I/O error: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED
    except Exception as exc:
        logger.exception("Unexpected error")
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED


def main() -> None:
    raise SystemExit(orchestrate())


if __name__ == "__main__":
    main()
