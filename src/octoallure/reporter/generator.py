"""Async wrapper around the Allure command-line tool."""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from octoallure.core.exceptions import RendererError, RendererNotFoundError

logger = logging.getLogger(__name__)


class AllureCommandLine:
    """Runs ``allure generate <results> -o <report> --clean``.

    Output goes straight to this process's stdout/stderr. A non-zero exit
    raises :class:`RendererError`.
    """

    def __init__(self, allure_path: str | None = None):
        self.allure_path = allure_path or shutil.which("allure") or "allure"

    async def generate(self, results_dir: str | Path, report_dir: str | Path, clean: bool = True) -> Path:
        cmd = [self.allure_path, "generate", str(results_dir), "-o", str(report_dir)]
        if clean:
            cmd.append("--clean")

        logger.debug("Running: %s", " ".join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(*cmd)
        except FileNotFoundError as e:
            raise RendererNotFoundError(
                f"Allure executable not found: {self.allure_path}", returncode=None
            ) from e

        returncode = await proc.wait()
        if returncode != 0:
            raise RendererError(
                f"allure generate exited with status {returncode}", returncode=returncode
            )
        return Path(report_dir)
