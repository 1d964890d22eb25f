import logging
from typing import Any, Optional

import httpx

from config import Settings
from errors import TrackerCreateFailed

logger = logging.getLogger(__name__)


def _upstream_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class JiraService:
    """Creates issues through the Jira Cloud REST API (v3)."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.jira_base_url.rstrip('/')
        self.auth = (settings.jira_email, settings.jira_api_token)
        self.timeout = settings.jira_timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json"
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            auth=self.auth,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def create_issue(self, payload: dict) -> dict:
        """
        Create a single Jira issue.

        Args:
            payload: create-issue document with a top-level "fields" object

        Returns:
            Created issue data including the new issue key

        Raises:
            TrackerCreateFailed: on a non-2xx answer, a transport fault, or an
                answer without an issue key
        """
        url = f"{self.base_url}/rest/api/3/issue"
        fields = payload.get("fields", {})
        logger.info(
            f"Creating Jira {fields.get('issuetype', {}).get('name')}: {str(fields.get('summary', ''))[:50]}..."
        )
        logger.debug(f"Full payload: {payload}")

        try:
            async with self._client() as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            logger.error(f"Jira request to {url} failed: {type(exc).__name__}: {exc}")
            raise TrackerCreateFailed(str(exc)) from exc

        if resp.status_code >= 400:
            upstream = _upstream_body(resp)
            logger.error(f"JIRA API ERROR - Status: {resp.status_code}")
            logger.error(f"Response body:\n{resp.text}")
            if isinstance(upstream, dict):
                if "errorMessages" in upstream:
                    logger.error(f"Jira error messages: {upstream['errorMessages']}")
                if "errors" in upstream:
                    logger.error(f"Jira field errors: {upstream['errors']}")
            raise TrackerCreateFailed(upstream, status=resp.status_code)

        created_issue = _upstream_body(resp)
        if not isinstance(created_issue, dict) or not created_issue.get("key"):
            logger.error(f"Jira answered {resp.status_code} without an issue key: {resp.text}")
            raise TrackerCreateFailed(created_issue, status=resp.status_code)

        logger.info(f"Created Jira issue {created_issue['key']}")
        return created_issue

    async def check_connectivity(self) -> bool:
        url = f"{self.base_url}/rest/api/3/myself"
        try:
            async with self._client() as client:
                resp = await client.get(url, timeout=10)
            logger.info(f"Jira connectivity check: {resp.status_code}")
            return resp.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"Jira connectivity check failed: {type(e).__name__}: {e}")
            return False
