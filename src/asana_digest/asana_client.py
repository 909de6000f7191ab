"""Asana task search client.

Read-only queries against the workspace task search endpoint. Uses urllib
only. Reference: https://developers.asana.com/reference/searchtasksforworkspace

Every query excludes completed tasks and applies the configured project
and assignee filters. Results are accumulated across pages into a
gid-deduplicated ResultSet.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from asana_digest.config import AsanaConfig
from asana_digest.dates import jst_day_to_utc_range
from asana_digest.task_types import ResultSet, Task

logger = logging.getLogger(__name__)

ASANA_API_BASE = "https://app.asana.com/api/1.0"

OPT_FIELDS = (
    "name,assignee.name,projects.name,permalink_url,due_on,due_at,start_on,"
    "custom_fields.name,custom_fields.enum_value.name,custom_fields.display_value"
)


class AsanaAPIError(Exception):
    """Non-success response from the Asana API."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass
class AsanaClient:
    """Client for Asana workspace task search.

    Args:
        token: Personal access token.
        workspace_gid: Workspace to search.
        project_gids: Restrict results to these projects (any match).
        assignee_gid: Restrict results to this assignee.
        base_url: API root.
        page_size: Results per page (API max 100).
        timeout: Per-request timeout in seconds.
    """

    token: str
    workspace_gid: str
    project_gids: tuple[str, ...] = ()
    assignee_gid: str = ""
    base_url: str = ASANA_API_BASE
    page_size: int = 100
    timeout: int = 30

    @classmethod
    def from_config(cls, config: AsanaConfig) -> AsanaClient:
        return cls(
            token=config.token,
            workspace_gid=config.workspace_gid,
            project_gids=tuple(config.project_gids),
            assignee_gid=config.assignee_gid,
            page_size=config.page_size,
        )

    @property
    def search_path(self) -> str:
        return f"/workspaces/{self.workspace_gid}/tasks/search"

    def _request(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        """Make an authenticated GET request.

        Args:
            path: API path below base_url (e.g. '/workspaces/1/tasks/search').
            params: Query string parameters.

        Returns:
            Parsed JSON response dict.

        Raises:
            AsanaAPIError: On HTTP or connection errors.
        """
        url = f"{self.base_url}{path}?{urllib.parse.urlencode(params)}"
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }
        req = urllib.request.Request(url, headers=headers, method="GET")

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            raw = exc.read().decode("utf-8", errors="replace")
            raise AsanaAPIError(
                f"Asana API error {exc.code}: {raw}", status_code=exc.code, body=raw
            ) from exc
        except urllib.error.URLError as exc:
            raise AsanaAPIError(f"Asana API connection failed: {exc.reason}") from exc

    def iter_pages(
        self, path: str, params: dict[str, str]
    ) -> Iterator[list[dict[str, Any]]]:
        """Yield each page of results, following next_page.offset.

        Stops when the response carries no continuation offset. Each call
        starts again from the first page.
        """
        page_params = dict(params)
        page_params.pop("offset", None)
        while True:
            data = self._request(path, page_params)
            yield data.get("data") or []
            next_page = data.get("next_page") or {}
            offset = next_page.get("offset") if isinstance(next_page, dict) else None
            if not offset:
                return
            page_params["offset"] = offset

    def _base_params(self) -> dict[str, str]:
        params = {
            "completed": "false",
            "opt_fields": OPT_FIELDS,
            "limit": str(min(self.page_size, 100)),
        }
        if self.assignee_gid:
            params["assignee.any"] = self.assignee_gid
        if self.project_gids:
            params["projects.any"] = ",".join(self.project_gids)
        return params

    def search_tasks(self, filters: dict[str, str]) -> ResultSet:
        """Run one search query and collect every page.

        Args:
            filters: Query-specific filters merged over the base filters.

        Returns:
            ResultSet of all matching tasks.
        """
        params = {**self._base_params(), **filters}
        results = ResultSet()
        pages = 0
        for page in self.iter_pages(self.search_path, params):
            pages += 1
            results.extend(Task.from_api(t) for t in page)
        logger.debug(
            "Asana search %s: %d tasks over %d page(s)", filters, len(results), pages
        )
        return results

    def fetch_due_tasks(self, date_str: str) -> ResultSet:
        """Tasks due on a JST date, by due_on or by due_at within the day.

        The UTC range is derived before any request so that a malformed
        date fails without network traffic.

        Raises:
            InvalidDateError: If date_str is not YYYY-MM-DD.
            AsanaAPIError: On any API failure.
        """
        after, before = jst_day_to_utc_range(date_str).as_params()
        by_date = self.search_tasks({"due_on": date_str})
        by_time = self.search_tasks({"due_at.after": after, "due_at.before": before})
        merged = by_date.union(by_time)
        logger.info(
            "Due tasks for %s: %d (due_on=%d, due_at=%d)",
            date_str,
            len(merged),
            len(by_date),
            len(by_time),
        )
        return merged

    def fetch_starting_tasks(self, date_str: str) -> ResultSet:
        """Tasks whose start_on equals the given date."""
        results = self.search_tasks(
            {"start_on.after": date_str, "start_on.before": date_str}
        )
        logger.info("Starting tasks for %s: %d", date_str, len(results))
        return results
