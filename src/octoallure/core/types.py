"""Octomind API data model.

Records are parsed from the camelCase JSON returned by the Octomind API.
Optional fields stay ``None`` when the API omits them; unknown keys are
ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TEXT_TAG_TYPE = "TEXT"


@dataclass
class Tag:
    id: str
    type: str
    value: str
    environment_id: str | None = None
    test_target_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        return cls(
            id=data.get("id", ""),
            type=data.get("type", ""),
            value=data.get("value", ""),
            environment_id=data.get("environmentId"),
            test_target_id=data.get("testTargetId"),
        )

    @property
    def is_text(self) -> bool:
        return self.type == TEXT_TAG_TYPE


@dataclass
class Case:
    id: str
    name: str
    description: str | None = None
    external_id: str | None = None
    tags: list[Tag] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Case:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            description=data.get("description"),
            external_id=data.get("externalId"),
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
        )

    @classmethod
    def placeholder(cls, case_id: str) -> Case:
        """Minimal case used when the real one cannot be fetched."""
        return cls(id=case_id, name=case_id, tags=[])


@dataclass
class Environment:
    id: str
    type: str = ""
    discovery_url: str = ""
    email: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Environment:
        return cls(
            id=data.get("id", ""),
            type=data.get("type", ""),
            discovery_url=data.get("discoveryUrl", ""),
            email=data.get("email"),
        )


@dataclass
class Target:
    id: str
    app: str
    tags: list[Tag] = field(default_factory=list)
    environments: list[Environment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Target:
        return cls(
            id=data["id"],
            app=data.get("app") or "",
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
            environments=[Environment.from_dict(e) for e in data.get("environments") or []],
        )


@dataclass
class Step:
    name: str
    status: str
    duration: int | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Step:
        return cls(
            name=data.get("name", ""),
            status=data.get("status", ""),
            duration=data.get("duration"),
            error=data.get("error"),
        )


@dataclass
class Result:
    id: str
    test_target_id: str
    test_case_id: str
    status: str
    trace_url: str | None = None
    error: str | None = None
    stack_trace: str | None = None
    duration: int | None = None
    created_at: str | None = None
    updated_at: str | None = None
    steps: list[Step] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result:
        return cls(
            id=data.get("id", ""),
            test_target_id=data.get("testTargetId", ""),
            test_case_id=data.get("testCaseId", ""),
            status=data.get("status", ""),
            trace_url=data.get("traceUrl"),
            error=data.get("error"),
            stack_trace=data.get("stackTrace"),
            duration=data.get("duration"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            steps=[Step.from_dict(s) for s in data.get("steps") or []],
        )


@dataclass
class Report:
    id: str
    test_target_id: str
    status: str
    execution_url: str | None = None
    created_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    breakpoint: str | None = None
    browser_type: str | None = None
    test_results: list[Result] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        return cls(
            id=data["id"],
            test_target_id=data.get("testTargetId", ""),
            status=data.get("status", ""),
            execution_url=data.get("executionUrl"),
            created_at=data.get("createdAt"),
            started_at=data.get("startedAt"),
            finished_at=data.get("finishedAt"),
            breakpoint=data.get("breakpoint"),
            browser_type=data.get("browserType"),
            test_results=[Result.from_dict(r) for r in data.get("testResults") or []],
        )


@dataclass
class ReportsPage:
    data: list[Report]
    next_created_at: str | None = None
    has_next_page: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReportsPage:
        key = data.get("key") or {}
        return cls(
            data=[Report.from_dict(r) for r in data.get("data") or []],
            next_created_at=key.get("createdAt"),
            has_next_page=bool(data.get("hasNextPage", False)),
        )


@dataclass
class ReportFilter:
    """Equality filter on a report field, serialised into the ``filters`` query."""

    key: str
    value: str
    operator: str = "equals"

    @classmethod
    def environment(cls, environment_id: str) -> ReportFilter:
        return cls(key="environmentId", value=environment_id)

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": {"operator": self.operator, "value": self.value}}
