"""Conversion pipeline: fetch Octomind reports, write Allure results, render."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from octoallure.core.events import (
    BATCH_COMPLETED,
    BATCH_STARTED,
    REPORT_CONVERTED,
    REPORT_RENDERED,
    REPORT_STARTED,
    Event,
    EventBus,
)
from octoallure.core.types import Case, Report, ReportFilter, Target
from octoallure.octomind.cache import CaseCache
from octoallure.octomind.client import OctomindClient
from octoallure.octomind.pagination import ReportPaginator
from octoallure.reporter.generator import AllureCommandLine
from octoallure.reporter.models import AllureContainer, AllureResult
from octoallure.reporter.translator import AllureTranslator
from octoallure.reporter.writer import AllureResultsWriter

logger = logging.getLogger(__name__)


@dataclass
class ConvertedReport:
    """Allure records built from one Octomind report."""

    report: Report
    results: list[AllureResult]
    container: AllureContainer

    @property
    def result_uuids(self) -> list[str]:
        return [r.uuid for r in self.results]


@dataclass
class BatchSummary:
    reports: int = 0
    results: int = 0
    containers: int = 0
    cached_cases: int = 0
    report_ids: list[str] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return self.results + self.containers


class ReportConverter:
    """Drives conversion of one report or every report of a test target.

    Each report goes through three phases: case resolution (remote, through
    the shared :class:`CaseCache`), translation (pure) and persistence.
    In batch mode a fourth phase renders the report with ``allure generate``
    so that Allure's history accumulates one report at a time.
    """

    def __init__(
        self,
        client: OctomindClient,
        translator: AllureTranslator | None = None,
        renderer: AllureCommandLine | None = None,
        event_bus: EventBus | None = None,
    ):
        self.client = client
        self.translator = translator or AllureTranslator()
        self.renderer = renderer or AllureCommandLine()
        self.event_bus = event_bus or EventBus()
        self.cache = CaseCache(client)
        self.paginator = ReportPaginator(client)

    async def resolve_cases(self, report: Report) -> dict[str, Case]:
        cases: dict[str, Case] = {}
        for result in report.test_results:
            logger.info("  Converting test case: %s, status: %s", result.test_case_id, result.status)
            cases[result.test_case_id] = await self.cache.get(report.test_target_id, result.test_case_id)
        return cases

    def translate_report(self, report: Report, target: Target, cases: dict[str, Case]) -> ConvertedReport:
        results = [
            self.translator.convert_result(
                result, report, cases.get(result.test_case_id) or Case.placeholder(result.test_case_id), target
            )
            for result in report.test_results
        ]
        container = self.translator.convert_container(report, [r.uuid for r in results])
        return ConvertedReport(report=report, results=results, container=container)

    @staticmethod
    def write_report(converted: ConvertedReport, writer: AllureResultsWriter) -> None:
        for result in converted.results:
            writer.write_result(result)
        writer.write_container(converted.container)

    async def convert_report(
        self, test_target_id: str, test_report_id: str, output_dir: str | Path
    ) -> ConvertedReport:
        """Convert a single report into ``output_dir`` (created, never wiped)."""
        logger.info("Fetching test target...")
        target = await self.client.get_test_target(test_target_id)
        logger.info("Test Target: %s", target.app)

        logger.info("Fetching test report...")
        report = await self.client.get_test_report(test_target_id, test_report_id)
        logger.info("Found %d test results", len(report.test_results))

        writer = AllureResultsWriter(output_dir)
        writer.prepare(wipe=False)

        cases = await self.resolve_cases(report)
        converted = self.translate_report(report, target, cases)
        self.write_report(converted, writer)

        logger.info(
            "Conversion complete. Generated %d test result files and 1 container file in %s",
            len(converted.results), writer.output_dir,
        )
        return converted

    async def convert_batch(
        self,
        test_target_id: str,
        output_dir: str | Path,
        report_dir: str | Path = "allure-report",
        max_reports: int | None = None,
        environment_id: str | None = None,
        generate: bool = True,
    ) -> BatchSummary:
        """Convert every report of a test target, in the order the API pages them.

        With ``generate`` the results directory is wiped before each report,
        the previous report's history is copied in, and ``allure generate``
        runs once per report into ``report_dir``. Without it all reports'
        files accumulate in ``output_dir``.
        """
        logger.info("Fetching test target...")
        target = await self.client.get_test_target(test_target_id)
        logger.info("Test Target: %s", target.app)

        filters = None
        if environment_id:
            filters = [ReportFilter.environment(environment_id)]
            logger.info("Filtering by environment: %s", environment_id)

        self.cache.clear()
        logger.debug("Test case cache cleared")

        reports = await self.paginator.fetch_all(test_target_id, max_reports=max_reports, filters=filters)
        logger.info("Found %d test reports to convert", len(reports))
        await self.event_bus.emit(Event(
            type=BATCH_STARTED,
            source="converter",
            data={"target": target.app, "total": len(reports)},
        ))

        writer = AllureResultsWriter(output_dir)
        writer.prepare(wipe=False)
        report_path = Path(report_dir)
        if generate:
            report_path.mkdir(parents=True, exist_ok=True)

        summary = BatchSummary()
        for index, report in enumerate(reports, start=1):
            if generate:
                writer.prepare(wipe=True)

            logger.info(
                "[%d/%d] Converting report: %s (status: %s, tests: %d)",
                index, len(reports), report.id, report.status, len(report.test_results),
            )
            await self.event_bus.emit(Event(
                type=REPORT_STARTED,
                source="converter",
                data={"index": index, "total": len(reports), "report_id": report.id},
            ))

            cases = await self.resolve_cases(report)
            converted = self.translate_report(report, target, cases)
            self.write_report(converted, writer)

            summary.reports += 1
            summary.results += len(converted.results)
            summary.containers += 1
            summary.report_ids.append(report.id)
            await self.event_bus.emit(Event(
                type=REPORT_CONVERTED,
                source="converter",
                data={"index": index, "report_id": report.id, "results": len(converted.results)},
            ))

            if generate:
                writer.copy_history(report_path)
                logger.info("Generating Allure report for report: %s", report.id)
                await self.renderer.generate(writer.output_dir, report_path, clean=True)
                await self.event_bus.emit(Event(
                    type=REPORT_RENDERED,
                    source="converter",
                    data={"index": index, "report_id": report.id, "report_dir": str(report_path)},
                ))

        summary.cached_cases = len(self.cache)
        logger.info(
            "Conversion complete: %d reports, %d result files, %d container files",
            summary.reports, summary.results, summary.containers,
        )
        await self.event_bus.emit(Event(
            type=BATCH_COMPLETED,
            source="converter",
            data={
                "reports": summary.reports,
                "results": summary.results,
                "containers": summary.containers,
                "cached_cases": summary.cached_cases,
            },
        ))
        return summary
