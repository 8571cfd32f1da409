"""
Jira REST client.

Issues authenticated GET requests against a Jira Cloud/Server instance and
returns the decoded JSON. Mapping to response models happens in the caller.
"""

import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.auth import HTTPBasicAuth

from config import AppConfig, get_config
from logger import get_logger

logger = get_logger(__name__)

SEARCH_FIELDS = "summary,status,key,project,assignee"
SEARCH_MAX_RESULTS = 50


class JiraError(Exception):
    """Base class for Jira client errors."""
    pass


class JiraNotConfiguredError(JiraError):
    """JIRA_DOMAIN, JIRA_EMAIL or JIRA_API_TOKEN is missing."""
    pass


class JiraRequestError(JiraError):
    """The request failed before a usable response arrived."""
    pass


class JiraUpstreamError(JiraError):
    """Jira answered with a non-success status. ``payload`` is its body."""

    def __init__(self, status_code: int, payload: Any):
        super().__init__(f"Jira returned HTTP {status_code}")
        self.status_code = status_code
        self.payload = payload


def _quote_jql(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class JiraClient:
    """Thin wrapper around the Jira REST API v2."""

    def __init__(
        self,
        domain: str,
        email: str,
        api_token: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        if not (domain and email and api_token):
            raise JiraNotConfiguredError("Jira not configured")

        self.base_url = domain.rstrip("/")
        self.timeout = timeout
        self._auth = HTTPBasicAuth(email, api_token)
        self._session = session or requests.Session()

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()

    def search_assigned_issues(self, assignee_email: str) -> List[Dict[str, Any]]:
        """
        List issues assigned to a user, newest first.

        Args:
            assignee_email: Jira account email of the assignee

        Returns:
            Raw issue objects from the search response
        """
        jql = f"assignee = {_quote_jql(assignee_email.strip())} ORDER BY created DESC"
        data = self._get(
            "/rest/api/2/search",
            params={
                "jql": jql,
                "fields": SEARCH_FIELDS,
                "maxResults": SEARCH_MAX_RESULTS,
            }
        )
        issues = data.get("issues") if isinstance(data, dict) else None
        return [issue for issue in issues or [] if isinstance(issue, dict)]

    def get_issue(self, key: str) -> Dict[str, Any]:
        """Fetch one issue by key. No assignee check is made."""
        data = self._get(f"/rest/api/2/issue/{key}")
        if not isinstance(data, dict):
            raise JiraRequestError(f"Unexpected Jira payload for {key}")
        return data

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        start_time = time.time()
        try:
            response = self._session.get(
                f"{self.base_url}{path}",
                params=params,
                headers={"Accept": "application/json"},
                auth=self._auth,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.jira_call(path, None, (time.time() - start_time) * 1000, error=type(e).__name__)
            raise JiraRequestError(f"Jira request failed: {e}") from e

        logger.jira_call(path, response.status_code, (time.time() - start_time) * 1000)

        try:
            data = response.json()
        except ValueError:
            if not response.ok:
                raise JiraUpstreamError(
                    response.status_code,
                    {"error": response.text or response.reason or f"HTTP {response.status_code}"}
                )
            raise JiraRequestError(f"Jira returned a non-JSON body for {path}")

        if not response.ok:
            raise JiraUpstreamError(response.status_code, data)
        return data


_client_instance: Optional[JiraClient] = None
_client_settings: Optional[Tuple[str, str, str, float]] = None
_client_lock = threading.Lock()


def get_jira_client(config: Optional[AppConfig] = None) -> JiraClient:
    """
    Get or create the global Jira client.

    The client (and its pooled HTTP session) is shared across requests and
    rebuilt only when the Jira settings change.

    Raises:
        JiraNotConfiguredError: If any Jira setting is missing
    """
    global _client_instance, _client_settings

    config = config or get_config()
    if not config.jira_configured:
        raise JiraNotConfiguredError("Jira not configured")

    settings = (config.jira_domain, config.jira_email, config.jira_api_token, config.jira_timeout)
    with _client_lock:
        if _client_instance is None or _client_settings != settings:
            if _client_instance is not None:
                _client_instance.close()
            _client_instance = JiraClient(
                domain=config.jira_domain,
                email=config.jira_email,
                api_token=config.jira_api_token,
                timeout=config.jira_timeout
            )
            _client_settings = settings
            logger.info("Jira client created", base_url=_client_instance.base_url)
        return _client_instance


def reset_jira_client() -> None:
    """Close and drop the global Jira client."""
    global _client_instance, _client_settings

    with _client_lock:
        if _client_instance is not None:
            _client_instance.close()
        _client_instance = None
        _client_settings = None
    logger.info("Jira client reset")
