"""Keyset pagination over the test reports endpoint."""

from __future__ import annotations

import logging

from octoallure.core.types import Report, ReportFilter
from octoallure.octomind.client import OctomindClient

logger = logging.getLogger(__name__)


class ReportPaginator:
    """Collects every report of a test target, page by page.

    Pages are requested with the ``createdAt`` cursor the server returned for
    the previous page. Report ids already seen are dropped, and pagination
    stops early (with a warning) when a page brings nothing new, so a server
    that keeps repeating itself cannot make the loop spin forever.
    """

    def __init__(self, client: OctomindClient):
        self.client = client

    async def fetch_all(
        self,
        test_target_id: str,
        max_reports: int | None = None,
        filters: list[ReportFilter] | None = None,
    ) -> list[Report]:
        reports: list[Report] = []
        seen_ids: set[str] = set()
        cursor: str | None = None
        has_next_page = True
        page_number = 0

        logger.info("Fetching test reports...")

        while has_next_page and not self._reached(len(reports), max_reports):
            page = await self.client.get_test_reports(
                test_target_id, key_created_at=cursor, filters=filters
            )
            page_number += 1

            new_reports = [r for r in page.data if r.id not in seen_ids]
            if not new_reports and page.data:
                logger.warning(
                    "Page %d contained only already-seen reports, stopping pagination",
                    page_number,
                )
                break

            for report in new_reports:
                seen_ids.add(report.id)
                reports.append(report)

            logger.info(
                "  Fetched %d new reports (total: %d, page had: %d)",
                len(new_reports), len(reports), len(page.data),
            )

            has_next_page = page.has_next_page
            if has_next_page and page.next_created_at:
                cursor = page.next_created_at
                logger.debug("  Next cursor: %s", cursor)

            if self._reached(len(reports), max_reports):
                break

            if not new_reports and has_next_page:
                logger.warning(
                    "Page %d was empty but hasNextPage is set, stopping pagination",
                    page_number,
                )
                break

        logger.info("Pagination complete. Total unique reports: %d", len(reports))

        if max_reports is not None and len(reports) > max_reports:
            return reports[:max_reports]
        return reports

    @staticmethod
    def _reached(count: int, max_reports: int | None) -> bool:
        return max_reports is not None and count >= max_reports
