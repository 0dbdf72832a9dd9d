"""Configuration parsing and validation for the SonarQube notification bridge."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from .errors import ConfigurationError
from .metrics import ALL_METRIC_KEYS, STANDARD_METRIC_KEYS, METRICS_BY_KEY

LINK_HOST_SONAR = "sonar"
LINK_HOST_PUBLIC = "public"

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_PROFILE = "standard"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_SCHEMES = {"http", "https"}


@dataclass(frozen=True)
class PipelineOptions:
    """Behavior switches that distinguish one deployment from another."""

    metrics: Tuple[str, ...] = STANDARD_METRIC_KEYS
    include_history: bool = True
    truncate_duplication: bool = True
    link_host_source: str = LINK_HOST_SONAR


PROFILES: Dict[str, PipelineOptions] = {
    "standard": PipelineOptions(),
    "extended": PipelineOptions(
        metrics=ALL_METRIC_KEYS,
        include_history=False,
        truncate_duplication=False,
        link_host_source=LINK_HOST_PUBLIC,
    ),
}


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the notification bridge."""

    webhook_url: str
    sonar_host: str
    options: PipelineOptions = PipelineOptions()
    public_host: Optional[str] = None
    sonar_token: Optional[str] = None
    webhook_secret: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    sonar_scheme: str = "http"

    @property
    def link_host(self) -> str:
        """Host that replaces ``localhost`` in dashboard links.

        Follows ``options.link_host_source``: the public host, or the host part
        of ``sonar_host``.
        """
        if self.options.link_host_source == LINK_HOST_PUBLIC and self.public_host:
            return self.public_host
        return self.sonar_host.split(":", 1)[0]


def _env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def _parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid value for '{name}': expected a boolean, got '{value}'.")


def _parse_timeout(value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid value for 'SONARBRIDGE_HTTP_TIMEOUT': expected a number, got '{value}'."
        ) from exc


def _split_scheme(address: str) -> Tuple[str, str]:
    """Split ``scheme://host:port`` into scheme and ``host:port``; http by default."""
    scheme = "http"
    if "://" in address:
        scheme, address = address.split("://", 1)
        scheme = scheme.lower()
    if scheme not in _SCHEMES:
        raise ConfigurationError(
            f"Unsupported scheme '{scheme}' in SonarQube server address: expected http or https."
        )
    return scheme, address.rstrip("/")


def build_options(
    profile: str,
    truncate_duplication: Optional[bool] = None,
    metrics: Optional[Tuple[str, ...]] = None,
) -> PipelineOptions:
    """Resolve a named profile and apply per-deployment overrides.

    Raises:
        ConfigurationError: If the profile or a metric key is unknown.
    """
    try:
        options = PROFILES[profile]
    except KeyError as exc:
        known = ", ".join(sorted(PROFILES))
        raise ConfigurationError(f"Unknown profile '{profile}'. Expected one of: {known}.") from exc

    if metrics is not None:
        unknown = [key for key in metrics if key not in METRICS_BY_KEY]
        if unknown:
            raise ConfigurationError(f"Unknown metric key(s): {', '.join(unknown)}.")
        options = replace(options, metrics=tuple(metrics))

    if truncate_duplication is not None:
        options = replace(options, truncate_duplication=truncate_duplication)

    return options


def load_config(
    webhook_url: Optional[str] = None,
    sonar_host: Optional[str] = None,
    profile: Optional[str] = None,
    public_host: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> Config:
    """Build and validate application configuration.

    Explicit arguments take precedence over environment variables.

    Args:
        webhook_url: Chat bot webhook URL (``WECHAT_WEBHOOK_URL``).
        sonar_host: SonarQube ``host:port``, optionally prefixed with ``http://``
            or ``https://`` (``SONARQUBE_SERVER_URL``).
        profile: Deployment profile name (``SONARBRIDGE_PROFILE``).
        public_host: Host used when rewriting dashboard links; setting it
            switches link rewriting to this host
            (``SONARQUBE_PUBLIC_HOST``).
        timeout_seconds: Timeout for outbound calls (``SONARBRIDGE_HTTP_TIMEOUT``).

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If a required value is missing or a value is invalid.
    """
    webhook_url = webhook_url or _env("WECHAT_WEBHOOK_URL")
    if not webhook_url:
        raise ConfigurationError(
            "Missing chat bot webhook URL. "
            "Set the 'WECHAT_WEBHOOK_URL' environment variable or pass --webhook-url."
        )

    sonar_host = sonar_host or _env("SONARQUBE_SERVER_URL")
    if not sonar_host:
        raise ConfigurationError(
            "Missing SonarQube server address. "
            "Set the 'SONARQUBE_SERVER_URL' environment variable or pass --sonar-host."
        )
    sonar_scheme, sonar_host = _split_scheme(sonar_host)

    truncate_raw = _env("SONARBRIDGE_TRUNCATE_DUPLICATION")
    options = build_options(
        profile or _env("SONARBRIDGE_PROFILE") or DEFAULT_PROFILE,
        truncate_duplication=(
            _parse_bool("SONARBRIDGE_TRUNCATE_DUPLICATION", truncate_raw) if truncate_raw else None
        ),
    )

    if timeout_seconds is None:
        timeout_raw = _env("SONARBRIDGE_HTTP_TIMEOUT")
        timeout_seconds = _parse_timeout(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_SECONDS
    if timeout_seconds <= 0:
        raise ConfigurationError("Invalid timeout: expected a number greater than 0.")

    public_host = public_host or _env("SONARQUBE_PUBLIC_HOST")
    if public_host:
        options = replace(options, link_host_source=LINK_HOST_PUBLIC)
    if options.link_host_source == LINK_HOST_PUBLIC and not public_host:
        raise ConfigurationError(
            "The selected profile rewrites links to a public host. "
            "Set the 'SONARQUBE_PUBLIC_HOST' environment variable or pass --public-host."
        )

    return Config(
        webhook_url=webhook_url,
        sonar_host=sonar_host,
        options=options,
        public_host=public_host,
        sonar_token=_env("SONARQUBE_TOKEN"),
        webhook_secret=_env("SONARQUBE_WEBHOOK_SECRET"),
        timeout_seconds=timeout_seconds,
        sonar_scheme=sonar_scheme,
    )
