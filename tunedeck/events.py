"""Events passed from background workers to the main loop."""

from __future__ import annotations

import queue
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any


class EventKind(Enum):
    PLAYER = "player"
    QUEUE = "queue"
    SESSION_DIED = "session_died"
    IPC_INPUT = "ipc_input"


@dataclass(frozen=True)
class Event:
    """An event and the value it carries, if any."""

    kind: EventKind
    payload: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, EventKind):
            raise TypeError(f"kind must be an EventKind, not {self.kind!r}")
        if self.kind is EventKind.SESSION_DIED and self.payload is not None:
            raise ValueError("a session-died event carries no payload")
        if self.kind is EventKind.IPC_INPUT and not isinstance(self.payload, str):
            raise TypeError("an IPC input event carries a string")


class EventManager:
    """An unbounded, thread-safe event channel that wakes the main loop on send."""

    def __init__(self, on_trigger: Callable[[], None] | None = None) -> None:
        self._queue: queue.SimpleQueue[Event] = queue.SimpleQueue()
        self._on_trigger = on_trigger

    def send(self, event: Event) -> None:
        """Queue an event and wake the main loop."""
        self._queue.put(event)
        self.trigger()

    def trigger(self) -> None:
        """Wake the main loop without sending an event."""
        if self._on_trigger is not None:
            self._on_trigger()

    def msg_iter(self) -> Iterator[Event]:
        """Yield the events waiting now, stopping as soon as none is left."""
        while True:
            try:
                yield self._queue.get_nowait()
            except queue.Empty:
                return