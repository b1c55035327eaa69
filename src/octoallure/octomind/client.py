"""Async HTTP client for the Octomind public API."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, TypeVar

import httpx

from octoallure.core.exceptions import ApiError
from octoallure.core.types import Case, Report, ReportFilter, ReportsPage, Target

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://app.octomind.dev/api"

T = TypeVar("T")


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _parse(factory: Callable[[dict[str, Any]], T], data: Any, what: str) -> T:
    if not isinstance(data, dict):
        raise ApiError(f"Malformed {what}: expected a JSON object")
    try:
        return factory(data)
    except (KeyError, TypeError, AttributeError) as e:
        raise ApiError(f"Malformed {what}: {e!r}") from e


class OctomindClient:
    """Read-only client for test targets, reports and test cases.

    Every request carries the ``X-API-Key`` header. Non-success responses
    and transport failures raise :class:`ApiError`.

    Usage:
        async with OctomindClient(api_key) as client:
            target = await client.get_test_target(target_id)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        return {
            "X-API-Key": self.api_key,
            "Accept": "application/json",
        }

    def _url(self, path: str) -> str:
        return f"{self.base_url}/apiKey/v2/{path}"

    async def open(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, what: str, params: dict[str, str] | None = None) -> Any:
        client = await self.open()
        url = self._url(path)
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ApiError(f"Failed to fetch {what}: {e}") from e

        logger.debug("GET %s -> %d", response.request.url, response.status_code)
        if response.is_error:
            raise ApiError(
                f"Failed to fetch {what}: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Failed to fetch {what}: response is not JSON", response.status_code) from e

    async def get_test_target(self, test_target_id: str) -> Target:
        data = await self._get(f"test-targets/{test_target_id}", "test target")
        return _parse(Target.from_dict, data, "test target")

    async def get_test_report(self, test_target_id: str, test_report_id: str) -> Report:
        data = await self._get(
            f"test-targets/{test_target_id}/test-reports/{test_report_id}", "test report"
        )
        return _parse(Report.from_dict, data, "test report")

    async def get_test_reports(
        self,
        test_target_id: str,
        key_created_at: str | None = None,
        filters: list[ReportFilter] | None = None,
    ) -> ReportsPage:
        """Fetch one page of reports.

        The endpoint has a fixed page size. ``key_created_at`` is the keyset
        cursor returned by the previous page; both cursor and filters are sent
        as JSON-encoded query parameters.
        """
        params: dict[str, str] = {}
        if key_created_at:
            params["key"] = _compact_json({"createdAt": key_created_at})
        if filters:
            params["filters"] = _compact_json([f.to_dict() for f in filters])

        if params:
            logger.debug("Reports query: %s", params)
        data = await self._get(f"test-targets/{test_target_id}/test-reports", "test reports", params)
        page = _parse(ReportsPage.from_dict, data, "test reports page")

        if page.data:
            first, last = page.data[0], page.data[-1]
            logger.debug(
                "Reports page: count=%d hasNextPage=%s cursor=%s first=%s (%s) last=%s (%s)",
                len(page.data), page.has_next_page, page.next_created_at,
                first.id, first.created_at, last.id, last.created_at,
            )
        else:
            logger.debug("Reports page: empty, hasNextPage=%s", page.has_next_page)
        return page

    async def get_test_case(self, test_target_id: str, test_case_id: str) -> Case:
        data = await self._get(
            f"test-targets/{test_target_id}/test-cases/{test_case_id}", "test case"
        )
        return _parse(Case.from_dict, data, "test case")

    async def __aenter__(self) -> OctomindClient:
        await self.open()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
