"""HTTP client for the NocoDB tables API.

NocoDB deployments differ in which API generation they expose, so every
operation tries the v2 endpoint first and falls back to the v1 form:

- listing: ``/api/v2/tables/{table}/rows?limit&offset``, then
  ``/api/v1/tables/{table}/rows?limit&page``
- create/update: v2 with the bare payload, v2 with ``{"row": payload}``, then v1
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import requests

from ghostscore.config.environment import EnvironmentConfig
from ghostscore.config.models import AppConfig
from ghostscore.logging import get_logger

from .exceptions import (
    NocoDBError,
    NocoDBHTTPError,
    NocoDBResponseError,
    NocoDBTimeoutError,
)

logger = get_logger(__name__, component="nocodb")

Row = Dict[str, Any]
# (HTTP method, path, JSON body) tried in order until one succeeds
WriteAttempt = Tuple[str, str, Dict[str, Any]]


class NocoDBClient:
    """Reads and writes rows of NocoDB tables.

    Attributes:
        base_url: NocoDB instance URL without trailing slash
        timeout: HTTP request timeout in seconds
        page_size: Rows requested per listing page
        page_delay: Seconds to pause between listing pages
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: int = 120,
        user_agent: str = "GhostScoreSync/1.0",
        page_size: int = 200,
        page_delay: float = 0.05,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("base_url cannot be empty")
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got: {page_size}")

        self.base_url = base_url.strip().rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.page_delay = page_delay

        self._session = session or requests.Session()
        self._session.headers.update({
            "xc-token": api_token,
            "Content-Type": "application/json",
            "User-Agent": user_agent,
        })

    @classmethod
    def from_config(cls, app_config: AppConfig, env_config: EnvironmentConfig) -> "NocoDBClient":
        return cls(
            base_url=env_config.nocodb_url,
            api_token=env_config.nocodb_api_key,
            timeout=app_config.advanced.http_request_timeout,
            user_agent=app_config.advanced.user_agent,
            page_size=app_config.sync.page_size,
            page_delay=app_config.sync.page_delay_seconds,
        )

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_all(self, table: str) -> List[Row]:
        """Return every row of ``table``, following pagination to the end.

        Raises:
            NocoDBError: If neither the v2 nor the v1 listing succeeds
        """
        limit = self.page_size

        try:
            rows = self._paginate(
                f"/api/v2/tables/{quote(table, safe='')}/rows",
                lambda page: {"limit": limit, "offset": page * limit},
            )
            api_version = "v2"
        except NocoDBError as e:
            logger.warning(
                f"v2 listing of {table} failed, trying v1",
                extra={
                    "event": "nocodb.fetch.fallback",
                    "table": table,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            try:
                rows = self._paginate(
                    f"/api/v1/tables/{quote(table, safe='')}/rows",
                    lambda page: {"limit": limit, "page": page + 1},
                )
                api_version = "v1"
            except NocoDBError as e:
                logger.error(
                    f"Failed to fetch rows from table {table}",
                    extra={
                        "event": "nocodb.fetch.failed",
                        "table": table,
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                )
                raise

        logger.info(
            f"Fetched {len(rows)} rows from {table} ({api_version})",
            extra={
                "event": "nocodb.fetch.completed",
                "table": table,
                "count": len(rows),
                "api_version": api_version,
            },
        )
        return rows

    def _paginate(self, path: str, page_params: Callable[[int], Dict[str, Any]]) -> List[Row]:
        collected: List[Row] = []
        page = 0

        while True:
            body = self._make_request("GET", path, params=page_params(page))
            rows = self._extract_rows(body, path)
            collected.extend(rows)

            if self._is_last_page(body, rows, self.page_size):
                return collected

            page += 1
            if self.page_delay:
                time.sleep(self.page_delay)

    @staticmethod
    def _extract_rows(body: Any, path: str) -> List[Row]:
        """Pull the row list out of a listing response (``list``, ``data`` or bare array)."""
        rows = body
        if isinstance(body, dict):
            rows = body.get("list")
            if rows is None:
                rows = body.get("data")
        if not isinstance(rows, list):
            raise NocoDBResponseError(
                f"Unexpected listing response from {path}: {type(body).__name__}"
            )
        return rows

    @staticmethod
    def _is_last_page(body: Any, rows: List[Row], page_size: int) -> bool:
        """Trust ``pageInfo.isLastPage`` when the server sends it, else compare against the page size."""
        if not rows:
            return True
        page_info = body.get("pageInfo") if isinstance(body, dict) else None
        if isinstance(page_info, dict) and isinstance(page_info.get("isLastPage"), bool):
            return page_info["isLastPage"]
        return len(rows) < page_size

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_row(self, table: str, payload: Row) -> Any:
        """Insert one row into ``table`` and return the server's response body."""
        quoted = quote(table, safe="")
        return self._write_with_fallbacks(
            [
                ("POST", f"/api/v2/tables/{quoted}/rows", payload),
                ("POST", f"/api/v2/tables/{quoted}/rows", {"row": payload}),
                ("POST", f"/api/v1/tables/{quoted}/rows", payload),
            ],
            table,
        )

    def update_row(self, table: str, row_id: Any, payload: Row) -> Any:
        """Patch row ``row_id`` of ``table`` and return the server's response body."""
        quoted = quote(table, safe="")
        quoted_id = quote(str(row_id), safe="")
        return self._write_with_fallbacks(
            [
                ("PATCH", f"/api/v2/tables/{quoted}/rows/{quoted_id}", payload),
                ("PATCH", f"/api/v2/tables/{quoted}/rows/{quoted_id}", {"row": payload}),
                ("PATCH", f"/api/v1/tables/{quoted}/rows/{quoted_id}", payload),
            ],
            table,
        )

    def _write_with_fallbacks(self, attempts: Sequence[WriteAttempt], table: str) -> Any:
        """Try each request shape in order; the last failure propagates."""
        *fallbacks, (last_method, last_path, last_body) = attempts

        for method, path, body in fallbacks:
            try:
                return self._make_request(method, path, json_data=body)
            except NocoDBError as e:
                logger.debug(
                    f"{method} {path} failed, trying next request shape",
                    extra={
                        "event": "nocodb.write.fallback",
                        "table": table,
                        "error": str(e),
                    },
                )

        return self._make_request(last_method, last_path, json_data=last_body)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _make_request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make an HTTP request and return the decoded JSON body.

        Raises:
            NocoDBHTTPError: On 4xx/5xx status or transport failure
            NocoDBTimeoutError: On request timeout
            NocoDBResponseError: On a body that is not valid JSON
        """
        url = f"{self.base_url}{path}"

        logger.debug(
            f"HTTP {method} request to {url}",
            extra={
                "event": "nocodb.request",
                "method": method,
                "url": url,
                "params": params,
            },
        )

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise NocoDBTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds",
                url=url,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NocoDBHTTPError(
                f"Request to {url} failed: {e}",
                status_code=0,
                url=url,
            ) from e

        if response.status_code >= 400:
            log_level = logging.WARNING if response.status_code >= 500 else logging.DEBUG
            logger.log(
                log_level,
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "nocodb.request.error",
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            raise NocoDBHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise NocoDBResponseError(
                f"Failed to parse JSON response from {url}: {e}"
            ) from e
