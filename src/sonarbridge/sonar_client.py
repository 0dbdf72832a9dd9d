"""SonarQube Web API client for open-issue lookups."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.auth import HTTPBasicAuth

from .config import Config
from .errors import HistoricalFetchError
from .models import HistoricalCounts

logger = logging.getLogger(__name__)

_ISSUE_TYPE_FIELDS = {
    "BUG": "bugs",
    "VULNERABILITY": "vulnerabilities",
    "CODE_SMELL": "code_smells",
}


class SonarClient:
    """Small, typed client for the SonarQube issue search API."""

    def __init__(self, config: Config) -> None:
        """Initialize a SonarQube API client.

        Args:
            config: Validated runtime configuration including the server address
                and an optional user token.
        """
        self._config = config
        self._timeout_seconds = config.timeout_seconds
        self._base_url = f"{config.sonar_scheme}://{config.sonar_host}/api"

        self._session = requests.Session()
        if config.sonar_token:
            self._session.auth = HTTPBasicAuth(config.sonar_token, "")
        self._session.headers.update({"Accept": "application/json"})

    def close(self) -> None:
        self._session.close()

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below ``/api``."""
        return f"{self._base_url}/{path.lstrip('/')}"

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a single GET request and decode its JSON object body.

        Raises:
            HistoricalFetchError: If the request fails, returns HTTP >= 400,
                or does not return a JSON object.
        """
        url = self._build_url(path)

        try:
            response = self._session.get(url, params=params, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise HistoricalFetchError(f"SonarQube request failed: GET {url}") from exc

        if response.status_code >= 400:
            raise HistoricalFetchError(
                "SonarQube API request failed: "
                f"GET {url} returned {response.status_code} - {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise HistoricalFetchError(f"SonarQube API returned invalid JSON: GET {url}") from exc

        if not isinstance(payload, dict):
            raise HistoricalFetchError(f"SonarQube API returned unexpected payload shape: GET {url}")

        return payload

    def fetch_historical_counts(self, project_key: str) -> HistoricalCounts:
        """Count unresolved issues for a project, bucketed by issue type.

        Only the first facet of the response is read. Its ``values`` entries are
        matched case-sensitively against ``BUG``, ``VULNERABILITY`` and
        ``CODE_SMELL``; other types are ignored and absent types count as zero.

        Raises:
            HistoricalFetchError: If the request fails or the facet data cannot
                be parsed.
        """
        payload = self._get_json(
            "issues/search",
            params={
                "facets": "types",
                "resolved": "false",
                "componentKeys": project_key,
            },
        )

        facets = payload.get("facets")
        if not isinstance(facets, list) or not facets or not isinstance(facets[0], dict):
            raise HistoricalFetchError(
                f"SonarQube issue search returned no facets for project '{project_key}'."
            )

        counts: Dict[str, int] = {}
        for item in facets[0].get("values") or []:
            if not isinstance(item, dict):
                continue
            field_name = _ISSUE_TYPE_FIELDS.get(str(item.get("val")))
            if field_name is None:
                continue
            try:
                counts[field_name] = int(item.get("count"))
            except (TypeError, ValueError) as exc:
                raise HistoricalFetchError(
                    f"SonarQube issue facet has a non-numeric count: {item}"
                ) from exc

        historical = HistoricalCounts(**counts)
        logger.info(
            "Fetched open issue counts",
            extra={
                "project_key": project_key,
                "bugs": historical.bugs,
                "vulnerabilities": historical.vulnerabilities,
                "code_smells": historical.code_smells,
            },
        )
        return historical
