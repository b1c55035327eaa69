"""Allure results model.

Mirrors the JSON accepted by ``allure generate``: ``*-result.json`` and
``*-container.json`` files with camelCase keys. Optional fields that are
``None`` are left out of the serialised output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AllureStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    BROKEN = "broken"
    SKIPPED = "skipped"
    UNKNOWN = "unknown"


class AllureStage(str, Enum):
    SCHEDULED = "scheduled"
    RUNNING = "running"
    FINISHED = "finished"
    PENDING = "pending"
    INTERRUPTED = "interrupted"


class LinkType(str, Enum):
    LINK = "link"
    ISSUE = "issue"
    TMS = "tms"


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass
class AllureLink:
    type: LinkType
    name: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "name": self.name, "url": self.url}


@dataclass
class AllureLabel:
    name: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass
class AllureStatusDetails:
    message: str | None = None
    trace: str | None = None
    known: bool | None = None
    muted: bool | None = None
    flaky: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "known": self.known,
            "muted": self.muted,
            "flaky": self.flaky,
            "message": self.message,
            "trace": self.trace,
        })


@dataclass
class AllureAttachment:
    name: str
    source: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "source": self.source, "type": self.type}


@dataclass
class AllureParameter:
    name: str
    value: str
    excluded: bool | None = None
    mode: str | None = None  # default / masked / hidden

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "name": self.name,
            "value": self.value,
            "excluded": self.excluded,
            "mode": self.mode,
        })


@dataclass
class AllureStep:
    name: str
    status: AllureStatus
    start: int
    stop: int
    stage: AllureStage = AllureStage.FINISHED
    status_details: AllureStatusDetails | None = None
    steps: list[AllureStep] = field(default_factory=list)
    attachments: list[AllureAttachment] = field(default_factory=list)
    parameters: list[AllureParameter] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "stage": self.stage.value,
            "start": self.start,
            "stop": self.stop,
        }
        if self.status_details is not None:
            data["statusDetails"] = self.status_details.to_dict()
        if self.steps:
            data["steps"] = [s.to_dict() for s in self.steps]
        if self.attachments:
            data["attachments"] = [a.to_dict() for a in self.attachments]
        if self.parameters:
            data["parameters"] = [p.to_dict() for p in self.parameters]
        return data


@dataclass
class AllureResult:
    uuid: str
    history_id: str
    full_name: str
    name: str
    status: AllureStatus
    start: int
    stop: int
    stage: AllureStage = AllureStage.FINISHED
    test_case_id: str | None = None
    description: str | None = None
    status_details: AllureStatusDetails | None = None
    links: list[AllureLink] = field(default_factory=list)
    labels: list[AllureLabel] = field(default_factory=list)
    steps: list[AllureStep] = field(default_factory=list)
    attachments: list[AllureAttachment] = field(default_factory=list)
    parameters: list[AllureParameter] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = _compact({
            "uuid": self.uuid,
            "historyId": self.history_id,
            "testCaseId": self.test_case_id,
            "fullName": self.full_name,
            "name": self.name,
            "description": self.description,
        })
        data["links"] = [link.to_dict() for link in self.links]
        data["labels"] = [label.to_dict() for label in self.labels]
        data["status"] = self.status.value
        if self.status_details is not None:
            data["statusDetails"] = self.status_details.to_dict()
        data["stage"] = self.stage.value
        data["start"] = self.start
        data["stop"] = self.stop
        data["steps"] = [s.to_dict() for s in self.steps]
        if self.attachments:
            data["attachments"] = [a.to_dict() for a in self.attachments]
        if self.parameters:
            data["parameters"] = [p.to_dict() for p in self.parameters]
        return data


@dataclass
class AllureContainer:
    uuid: str
    name: str
    start: int
    stop: int
    children: list[str] = field(default_factory=list)
    befores: list[AllureStep] = field(default_factory=list)
    afters: list[AllureStep] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "uuid": self.uuid,
            "name": self.name,
            "start": self.start,
            "stop": self.stop,
            "children": list(self.children),
        }
        if self.befores:
            data["befores"] = [s.to_dict() for s in self.befores]
        if self.afters:
            data["afters"] = [s.to_dict() for s in self.afters]
        return data
