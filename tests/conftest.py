"""Shared fixtures: API payload builders and an in-memory Octomind API."""

from __future__ import annotations

from typing import Any

import pytest

from octoallure.core.exceptions import ApiError
from octoallure.core.types import Case, Report, ReportFilter, ReportsPage, Target

TARGET_ID = "e6bfc622-acb2-4305-8b4a-c6a079b292d6"
FIXED_NOW = 1_700_000_000_000


def result_payload(case_id: str = "case-1", **overrides: Any) -> dict[str, Any]:
    data = {
        "id": f"result-{case_id}",
        "testTargetId": TARGET_ID,
        "testCaseId": case_id,
        "status": "PASSED",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:05Z",
    }
    data.update(overrides)
    return data


def report_payload(report_id: str = "report-1", results: list[dict[str, Any]] | None = None,
                   **overrides: Any) -> dict[str, Any]:
    data = {
        "id": report_id,
        "testTargetId": TARGET_ID,
        "status": "PASSED",
        "executionUrl": f"https://app.octomind.dev/executions/{report_id}",
        "createdAt": "2024-01-01T00:00:00Z",
        "startedAt": "2024-01-01T00:00:00Z",
        "finishedAt": "2024-01-01T00:01:00Z",
        "testResults": results if results is not None else [result_payload()],
    }
    data.update(overrides)
    return data


def make_report(report_id: str = "report-1", **overrides: Any) -> Report:
    return Report.from_dict(report_payload(report_id, **overrides))


def make_target(app: str = "MyApp") -> Target:
    return Target(id=TARGET_ID, app=app)


class FakeOctomind:
    """Stands in for OctomindClient; records every call."""

    def __init__(
        self,
        pages: list[ReportsPage] | None = None,
        reports: dict[str, Report] | None = None,
        cases: dict[str, Case] | None = None,
        target: Target | None = None,
    ):
        self.pages = pages or []
        self.reports = reports or {}
        self.cases = cases or {}
        self.target = target or make_target()
        self.page_calls: list[tuple[str | None, list[ReportFilter] | None]] = []
        self.case_calls: list[tuple[str, str]] = []

    async def get_test_target(self, test_target_id: str) -> Target:
        return self.target

    async def get_test_report(self, test_target_id: str, test_report_id: str) -> Report:
        try:
            return self.reports[test_report_id]
        except KeyError:
            raise ApiError("Failed to fetch test report: 404 Not Found", status_code=404)

    async def get_test_reports(self, test_target_id: str, key_created_at: str | None = None,
                               filters: list[ReportFilter] | None = None) -> ReportsPage:
        self.page_calls.append((key_created_at, filters))
        index = len(self.page_calls) - 1
        if index >= len(self.pages):
            return ReportsPage(data=[], has_next_page=False)
        return self.pages[index]

    async def get_test_case(self, test_target_id: str, test_case_id: str) -> Case:
        self.case_calls.append((test_target_id, test_case_id))
        try:
            return self.cases[test_case_id]
        except KeyError:
            raise ApiError("Failed to fetch test case: 404 Not Found", status_code=404)

    async def __aenter__(self) -> FakeOctomind:
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


def make_page(start: int, count: int, has_next_page: bool, cursor: str | None = None) -> ReportsPage:
    reports = [make_report(f"report-{i}", results=[]) for i in range(start, start + count)]
    return ReportsPage(data=reports, next_created_at=cursor, has_next_page=has_next_page)


class FakeRenderer:
    def __init__(self, fail_on: int | None = None):
        self.calls: list[tuple[str, str, list[str]]] = []
        self.fail_on = fail_on

    async def generate(self, results_dir, report_dir, clean: bool = True):
        from octoallure.core.exceptions import RendererError

        files = sorted(p.name for p in results_dir.iterdir())
        self.calls.append((str(results_dir), str(report_dir), files))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise RendererError("allure generate exited with status 1", returncode=1)
        # Simulate allure writing history into the report directory.
        history = report_dir / "history"
        history.mkdir(parents=True, exist_ok=True)
        (history / "history.json").write_text(f'{{"runs": {len(self.calls)}}}', encoding="utf-8")
        return report_dir


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
