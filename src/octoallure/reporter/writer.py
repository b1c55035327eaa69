"""Writes Allure result files to a results directory."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from octoallure.reporter.models import AllureContainer, AllureResult

logger = logging.getLogger(__name__)

HISTORY_DIR = "history"


class AllureResultsWriter:
    """Persists results and containers as ``{uuid}-result.json`` / ``{uuid}-container.json``."""

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)

    def prepare(self, wipe: bool = False) -> Path:
        """Create the results directory, removing previous contents if ``wipe``."""
        if wipe and self.output_dir.exists():
            shutil.rmtree(self.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir

    def write_result(self, result: AllureResult) -> Path:
        return self._write(f"{result.uuid}-result.json", result.to_dict())

    def write_container(self, container: AllureContainer) -> Path:
        return self._write(f"{container.uuid}-container.json", container.to_dict())

    def copy_history(self, report_dir: str | Path) -> bool:
        """Copy ``<report_dir>/history`` into the results directory, if present.

        Lets ``allure generate`` carry trend data from its previous run.
        """
        source = Path(report_dir) / HISTORY_DIR
        if not source.is_dir():
            return False
        shutil.copytree(source, self.output_dir / HISTORY_DIR, dirs_exist_ok=True)
        logger.debug("Copied history from %s", source)
        return True

    def _write(self, file_name: str, data: dict[str, Any]) -> Path:
        path = self.output_dir / file_name
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Written: %s", file_name)
        return path
