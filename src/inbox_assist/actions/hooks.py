"""Lifecycle notifications for actions (before / after / error)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from inbox_assist.actions.models import ActionState

logger = logging.getLogger(__name__)


class ActionPhase(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    ERROR = "error"


@dataclass(frozen=True)
class ActionEvent:
    """A lifecycle notification.

    ``ERROR`` events carry ``state=FAILED``; ``failed_at`` is the last state
    reached before the failure.
    """

    phase: ActionPhase
    action_kind: str
    item: Any
    state: ActionState
    result: Any = None
    error: BaseException | None = None
    failed_at: ActionState | None = None


Listener = Callable[[ActionEvent], None]


class LifecycleHooks:
    """Ordered list of listeners notified of every action's lifecycle."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: ActionEvent) -> None:
        """Notify every listener. A failing listener does not stop the others."""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    f"Lifecycle listener failed on {event.phase.value} event for {event.action_kind}"
                )

    def __len__(self) -> int:
        return len(self._listeners)
