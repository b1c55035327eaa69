"""Translate Octomind records into Allure results and containers."""

from __future__ import annotations

import hashlib
import uuid
from typing import Callable, Iterable

from octoallure.core.timestamps import Clock, now_ms, to_epoch_ms
from octoallure.core.types import Case, Report, Result, Step, Target
from octoallure.reporter.models import (
    AllureContainer,
    AllureLabel,
    AllureLink,
    AllureResult,
    AllureStage,
    AllureStatus,
    AllureStatusDetails,
    AllureStep,
    LinkType,
)

DEFAULT_WEB_URL = "https://app.octomind.dev"

_STATUS_MAP = {
    "PASSED": AllureStatus.PASSED,
    "FAILED": AllureStatus.FAILED,
    "BROKEN": AllureStatus.BROKEN,
    "SKIPPED": AllureStatus.SKIPPED,
}


def map_status(status: str | None) -> AllureStatus:
    """Map an Octomind status; anything unrecognised (e.g. RUNNING) is unknown."""
    return _STATUS_MAP.get(status or "", AllureStatus.UNKNOWN)


def history_id(test_target_id: str, test_case_id: str) -> str:
    """Stable key linking runs of the same test case across reports."""
    key = f"{test_target_id}:{test_case_id}".encode("utf-8")
    return hashlib.md5(key, usedforsecurity=False).hexdigest()


def convert_step(step: Step, start: int) -> AllureStep:
    allure_step = AllureStep(
        name=step.name,
        status=map_status(step.status),
        stage=AllureStage.FINISHED,
        start=start,
        stop=start + (step.duration or 0),
    )
    if step.error:
        allure_step.status_details = AllureStatusDetails(message=step.error)
    return allure_step


def convert_steps(steps: Iterable[Step], start: int) -> list[AllureStep]:
    """Convert steps back to back, each starting where the previous one stopped."""
    converted: list[AllureStep] = []
    current = start
    for step in steps:
        allure_step = convert_step(step, current)
        converted.append(allure_step)
        current = allure_step.stop
    return converted


def display_name(result: Result, case: Case) -> str:
    return case.description or case.name or result.test_case_id


class AllureTranslator:
    """Builds Allure records from Octomind reports.

    Performs no I/O: the test case and test target must already be resolved.
    ``clock`` supplies the fallback time for missing or malformed timestamps
    and ``uuid_factory`` the result and container ids.
    """

    def __init__(
        self,
        web_url: str = DEFAULT_WEB_URL,
        clock: Clock = now_ms,
        uuid_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.web_url = web_url.rstrip("/")
        self.clock = clock
        self.uuid_factory = uuid_factory

    def report_url(self, test_target_id: str, test_report_id: str) -> str:
        return f"{self.web_url}/testtargets/{test_target_id}/testreports/{test_report_id}"

    def convert_result(
        self, result: Result, report: Report, case: Case, target: Target
    ) -> AllureResult:
        name = display_name(result, case)
        start = to_epoch_ms(result.created_at, self.clock())
        stop = to_epoch_ms(result.updated_at, start)

        status_details = None
        if result.error or result.stack_trace:
            status_details = AllureStatusDetails(message=result.error, trace=result.stack_trace)

        return AllureResult(
            uuid=self.uuid_factory(),
            history_id=history_id(result.test_target_id, result.test_case_id),
            test_case_id=result.test_case_id,
            full_name=f"{target.app}.{name}",
            name=name,
            description=case.description,
            links=self._links(result, report, case),
            labels=self._labels(result, report, case, target, name),
            status=map_status(result.status),
            status_details=status_details,
            stage=AllureStage.FINISHED,
            start=start,
            stop=stop,
            steps=convert_steps(result.steps, start),
        )

    def convert_container(self, report: Report, children: list[str]) -> AllureContainer:
        return AllureContainer(
            uuid=self.uuid_factory(),
            name=f"Test Report {report.id}",
            start=to_epoch_ms(report.started_at, self.clock()),
            stop=to_epoch_ms(report.finished_at, self.clock()),
            children=list(children),
        )

    def _links(self, result: Result, report: Report, case: Case) -> list[AllureLink]:
        links = [
            AllureLink(
                type=LinkType.LINK,
                name="View in Octomind",
                url=self.report_url(result.test_target_id, report.id),
            )
        ]
        if result.trace_url:
            links.append(AllureLink(type=LinkType.LINK, name="Playwright Trace", url=result.trace_url))
        if case.external_id:
            # Placeholder anchor; the external tracker is not known here.
            links.append(AllureLink(type=LinkType.TMS, name=case.external_id, url=f"#{case.external_id}"))
        return links

    @staticmethod
    def _labels(
        result: Result, report: Report, case: Case, target: Target, name: str
    ) -> list[AllureLabel]:
        labels = [
            AllureLabel("host", "octomind"),
            AllureLabel("language", "typescript"),
            AllureLabel("framework", "playwright"),
            AllureLabel("testClass", target.app),
            AllureLabel("testMethod", result.test_case_id),
            AllureLabel("suite", name),
            AllureLabel("package", target.app),
        ]
        if report.breakpoint:
            labels.append(AllureLabel("breakpoint", report.breakpoint))
        if report.browser_type:
            labels.append(AllureLabel("browser", report.browser_type))
        labels.extend(AllureLabel("tag", tag.value) for tag in case.tags if tag.is_text)
        return labels
