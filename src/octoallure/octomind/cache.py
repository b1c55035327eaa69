"""Memoised test-case lookups."""

from __future__ import annotations

import logging

from octoallure.core.exceptions import OctoAllureError
from octoallure.core.types import Case
from octoallure.octomind.client import OctomindClient

logger = logging.getLogger(__name__)


class CaseCache:
    """Caches test cases by ``(test_target_id, test_case_id)``.

    A failed fetch never propagates: a placeholder case whose id and name are
    the requested case id is cached and returned instead. Entries live until
    :meth:`clear`.
    """

    def __init__(self, client: OctomindClient):
        self.client = client
        self._cases: dict[tuple[str, str], Case] = {}

    async def get(self, test_target_id: str, test_case_id: str) -> Case:
        key = (test_target_id, test_case_id)
        cached = self._cases.get(key)
        if cached is not None:
            return cached

        try:
            case = await self.client.get_test_case(test_target_id, test_case_id)
        except OctoAllureError as e:
            logger.warning("Could not fetch test case %s, using placeholder: %s", test_case_id, e)
            case = Case.placeholder(test_case_id)

        self._cases[key] = case
        return case

    def clear(self) -> None:
        self._cases.clear()

    def __len__(self) -> int:
        return len(self._cases)

    def __contains__(self, key: object) -> bool:
        return key in self._cases
