"""Event bus used to publish conversion progress."""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

BATCH_STARTED = "batch.started"
REPORT_STARTED = "report.started"
REPORT_CONVERTED = "report.converted"
REPORT_RENDERED = "report.rendered"
BATCH_COMPLETED = "batch.completed"


@dataclass
class Event:
    type: str
    source: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


EventHandler = Callable[[Event], Coroutine[Any, Any, None]]


class EventBus:
    """Delivers conversion progress to subscribers, in the order emitted.

    A handler that raises is logged and skipped; it never aborts a batch.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._wildcard_handlers: list[EventHandler] = []

    def on(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def on_all(self, handler: EventHandler) -> None:
        self._wildcard_handlers.append(handler)

    async def emit(self, event: Event) -> None:
        handlers = [*self._handlers.get(event.type, []), *self._wildcard_handlers]
        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.warning("Event handler failed for %s", event.type, exc_info=True)
