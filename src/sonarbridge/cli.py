"""Command-line argument parsing for the SonarQube notification bridge."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .config import PROFILES


def _port(value: str) -> int:
    """Parse and validate a TCP port CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not an integer in 1..65535.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if not 0 < parsed < 65536:
        raise argparse.ArgumentTypeError("must be between 1 and 65535")

    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a number") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--webhook-url",
        help="WeCom group robot webhook URL (default: $WECHAT_WEBHOOK_URL).",
    )
    parser.add_argument(
        "--sonar-host",
        help="SonarQube server as host:port (default: $SONARQUBE_SERVER_URL).",
    )
    parser.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        help="Deployment profile (default: $SONARBRIDGE_PROFILE or 'standard').",
    )
    parser.add_argument(
        "--public-host",
        help="Host replacing 'localhost' in dashboard links (default: $SONARQUBE_PUBLIC_HOST).",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        help="Timeout in seconds for outbound HTTP calls (default: 5).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed CLI arguments. ``command`` is ``"serve"`` or ``"send"``.
    """
    parser = argparse.ArgumentParser(
        prog="sonarbridge",
        description="Forward SonarQube quality gate results to a WeCom group robot.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the webhook receiver.")
    _add_common_arguments(serve)
    serve.add_argument("--host", default="0.0.0.0", help="Address to bind (default: 0.0.0.0).")
    serve.add_argument("--port", type=_port, default=8080, help="Port to listen on (default: 8080).")

    send = subparsers.add_parser("send", help="Process a saved webhook payload once.")
    _add_common_arguments(send)
    send.add_argument("payload_file", help="Path to a SonarQube webhook JSON payload.")

    return parser.parse_args(argv)
