"""Exception hierarchy for octoallure."""

from __future__ import annotations


class OctoAllureError(Exception):
    """Base exception for all octoallure errors."""

    def __init__(self, message: str, code: int = 0):
        super().__init__(message)
        self.code = code


# Remote API errors (1000-1999)
class ApiError(OctoAllureError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, code=1000)
        self.status_code = status_code


# Configuration errors (2000-2999)
class ConfigError(OctoAllureError):
    def __init__(self, message: str):
        super().__init__(message, code=2000)


# Renderer errors (3000-3999)
class RendererError(OctoAllureError):
    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message, code=3000)
        self.returncode = returncode


class RendererNotFoundError(RendererError):
    pass
