"""Tests for application orchestration in the main module."""

import json
import sys
from argparse import Namespace
from pathlib import Path
from unittest.mock import Mock, patch

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sonarbridge.config import Config
from sonarbridge.errors import ConfigurationError, DeliveryError, HistoricalFetchError, MalformedPayloadError
from sonarbridge.main import orchestrate
from sonarbridge.models import DeliveryResult, PipelineResult

CONFIG = Config(webhook_url="https://robot.example.com/send", sonar_host="10.0.0.5:9000")


def _args(command: str, **overrides) -> Namespace:
    values = dict(
        command=command,
        webhook_url=None,
        sonar_host=None,
        profile=None,
        public_host=None,
        timeout=None,
        log_level="INFO",
        host="127.0.0.1",
        port=8080,
        payload_file=None,
    )
    values.update(overrides)
    return Namespace(**values)


def test_orchestrate_serve_starts_uvicorn():
    """Verify serve builds the app and hands it to uvicorn."""
    with patch("sonarbridge.main.parse_args", return_value=_args("serve")), patch(
        "sonarbridge.main.load_config", return_value=CONFIG
    ) as load_config_mock, patch("sonarbridge.main.create_app", return_value="APP") as create_app_mock, patch(
        "sonarbridge.main.uvicorn.run"
    ) as run_mock:
        exit_code = orchestrate()

    assert exit_code == 0
    load_config_mock.assert_called_once_with(
        webhook_url=None,
        sonar_host=None,
        profile=None,
        public_host=None,
        timeout_seconds=None,
    )
    create_app_mock.assert_called_once_with(CONFIG)
    run_mock.assert_called_once_with("APP", host="127.0.0.1", port=8080)


def test_orchestrate_send_processes_payload_file(tmp_path, payload, capsys):
    """Verify send runs the pipeline once with the file contents."""
    payload_file = tmp_path / "payload.json"
    payload_file.write_text(json.dumps(payload), encoding="utf-8")
    pipeline = Mock()
    pipeline.process.return_value = PipelineResult(
        report_delivery=DeliveryResult(status_code=200, response_body="ok", msgtype="markdown")
    )

    with patch("sonarbridge.main.parse_args", return_value=_args("send", payload_file=str(payload_file))), patch(
        "sonarbridge.main.load_config", return_value=CONFIG
    ), patch("sonarbridge.main.NotificationPipeline", return_value=pipeline) as pipeline_ctor:
        exit_code = orchestrate()

    assert exit_code == 0
    pipeline_ctor.assert_called_once_with(config=CONFIG)
    pipeline.process.assert_called_once_with(payload)
    pipeline.close.assert_called_once_with()
    assert "Report delivered (HTTP 200)." in capsys.readouterr().out


def test_orchestrate_send_invalid_json_returns_malformed_exit_code(tmp_path):
    """Verify an unparsable payload file maps to the malformed payload exit code."""
    payload_file = tmp_path / "payload.json"
    payload_file.write_text("{not json", encoding="utf-8")

    with patch("sonarbridge.main.parse_args", return_value=_args("send", payload_file=str(payload_file))), patch(
        "sonarbridge.main.load_config", return_value=CONFIG
    ):
        exit_code = orchestrate()

    assert exit_code == 3


def test_orchestrate_configuration_error_returns_config_exit_code():
    """Verify configuration failures return the configuration exit code."""
    with patch("sonarbridge.main.parse_args", return_value=_args("serve")), patch(
        "sonarbridge.main.load_config", side_effect=ConfigurationError("Missing chat bot webhook URL.")
    ):
        exit_code = orchestrate()

    assert exit_code == 2


def test_orchestrate_pipeline_errors_map_to_exit_codes(tmp_path, payload):
    """Verify malformed payload and API failures map to their exit codes."""
    payload_file = tmp_path / "payload.json"
    payload_file.write_text(json.dumps(payload), encoding="utf-8")

    for error, expected in ((MalformedPayloadError("no project"), 3), (HistoricalFetchError("500"), 4)):
        pipeline = Mock()
        pipeline.process.side_effect = error
        with patch(
            "sonarbridge.main.parse_args", return_value=_args("send", payload_file=str(payload_file))
        ), patch("sonarbridge.main.load_config", return_value=CONFIG), patch(
            "sonarbridge.main.NotificationPipeline", return_value=pipeline
        ):
            assert orchestrate() == expected


def test_orchestrate_unexpected_error_returns_generic_exit_code():
    """Verify unexpected exceptions are mapped to the generic non-zero exit code."""
    with patch("sonarbridge.main.parse_args", side_effect=RuntimeError("boom")):
        exit_code = orchestrate()

    assert exit_code == 1


def test_orchestrate_send_reports_reminder_failure_separately(tmp_path, payload, capsys):
    """Verify a delivered report is reported even when the reminder failed."""
    payload_file = tmp_path / "payload.json"
    payload_file.write_text(json.dumps(payload), encoding="utf-8")
    pipeline = Mock()
    pipeline.process.return_value = PipelineResult(
        report_delivery=DeliveryResult(status_code=200, response_body="ok", msgtype="markdown"),
        reminder_error=DeliveryError("Chat robot request failed for text message"),
    )

    with patch("sonarbridge.main.parse_args", return_value=_args("send", payload_file=str(payload_file))), patch(
        "sonarbridge.main.load_config", return_value=CONFIG
    ), patch("sonarbridge.main.NotificationPipeline", return_value=pipeline):
        exit_code = orchestrate()

    captured = capsys.readouterr()
    assert exit_code == 4
    assert "Report delivered (HTTP 200)." in captured.out
    assert "Reminder failed: Chat robot request failed for text message" in captured.err
