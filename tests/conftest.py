"""Shared fixtures for sonarbridge tests."""

import copy
import json
import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sonarbridge.config import Config, PipelineOptions

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def payload() -> dict:
    """A passing SonarQube webhook payload."""
    return copy.deepcopy(json.loads((FIXTURES / "quality_gate_ok.json").read_text(encoding="utf-8")))


@pytest.fixture
def failed_payload(payload) -> dict:
    """The same payload with a failed quality gate."""
    payload["qualityGate"]["status"] = "ERROR"
    payload["qualityGate"]["conditions"][0].update({"value": "3", "status": "ERROR"})
    return payload


@pytest.fixture
def config() -> Config:
    return Config(
        webhook_url="https://qyapi.weixin.qq.com/cgi-bin/webhook/send?key=test",
        sonar_host="10.0.0.5:9000",
        options=PipelineOptions(),
    )
