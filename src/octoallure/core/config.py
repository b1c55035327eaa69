"""Configuration management using YAML files with .env support."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv as _load

from octoallure.core.exceptions import ConfigError

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def load_dotenv() -> None:
    """Load environment variables from the first ``.env`` found.

    Looks in the current directory, then its parent. Variables that are
    already set are not overridden.
    """
    cwd = Path.cwd()
    for env_file in (cwd / ".env", cwd.parent / ".env"):
        if env_file.is_file():
            _load(env_file, override=False)
            break


def expand_env(value: str) -> str:
    """Replace ``${VAR}`` references with environment values (empty if unset)."""
    return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), value)


@dataclass
class ApiConfig:
    base_url: str = "${OCTOMIND_API_URL}"
    web_url: str = "https://app.octomind.dev"
    api_key: str = "${OCTOMIND_API_KEY}"
    timeout: float = 30.0

    def resolved_base_url(self) -> str:
        return expand_env(self.base_url) or "https://app.octomind.dev/api"

    def resolved_api_key(self) -> str:
        return expand_env(self.api_key)


@dataclass
class ReporterConfig:
    output_dir: str = "./allure-results"
    report_dir: str = "allure-report"
    allure_path: str = "allure"
    generate: bool = True


@dataclass
class ConverterConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    reporter: ReporterConfig = field(default_factory=ReporterConfig)
    log_level: str = "INFO"

    @classmethod
    def load(cls, path: str | Path | None = None) -> ConverterConfig:
        """Load configuration from a YAML file.

        Loads ``.env`` first so ``${VAR}`` references resolve. A missing file
        yields the defaults.
        """
        load_dotenv()
        if path is None:
            return cls()
        path = Path(path)
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data: dict[str, Any] = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")

        config = cls()
        try:
            if "api" in data:
                config.api = ApiConfig(**data["api"])
            if "reporter" in data:
                config.reporter = ReporterConfig(**data["reporter"])
        except TypeError as e:
            raise ConfigError(f"Unknown option in {path}: {e}") from e
        config.log_level = data.get("log_level", "INFO")
        return config
