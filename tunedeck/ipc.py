"""A Unix domain socket that takes command lines and reports playback status."""

from __future__ import annotations

import json
import logging
import os
import socket
import threading
from dataclasses import asdict, dataclass, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from tunedeck.config import APP_NAME
from tunedeck.events import Event, EventKind, EventManager

log = logging.getLogger(__name__)

INITIAL_MODE = "Stopped"
_ACCEPT_POLL_SECONDS = 0.1


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"cannot serialise {value!r}")


@dataclass(frozen=True)
class Status:
    """The player's mode and the item being played, as reported to clients."""

    mode: Any
    playable: Any = None

    def to_json(self) -> str:
        """Compact JSON, one object per status."""
        return json.dumps(
            {"mode": self.mode, "playable": self.playable},
            default=_jsonable,
            separators=(",", ":"),
        )


def is_open_socket(path: str | Path) -> bool:
    """Whether something is listening on the Unix socket at ``path``."""
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as probe:
        try:
            probe.connect(str(path))
        except OSError:
            return False
    return True


class IpcSocket:
    """Listens on a Unix socket; each line received becomes an IPC input event.

    Every client gets the current status when it connects and each new status
    after that, one JSON object per line.
    """

    def __init__(self, path: str | Path, events: EventManager) -> None:
        path = Path(path)
        if path.exists():
            if is_open_socket(path):
                path = path.with_name(f"{APP_NAME}.{os.getpid()}.sock")
            else:
                path.unlink()
        log.info("Creating IPC domain socket at %s", path)

        self.path = path
        self._events = events
        self._cond = threading.Condition()
        self._status = Status(INITIAL_MODE)
        self._version = 0
        self._closed = False
        self._connections: set[socket.socket] = set()

        self._listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            self._listener.bind(str(path))
            self._listener.listen()
        except OSError:
            self._listener.close()
            raise
        self._listener.settimeout(_ACCEPT_POLL_SECONDS)
        self._acceptor = threading.Thread(target=self._accept_loop, daemon=True)
        self._acceptor.start()

    def publish(self, mode: Any, playable: Any = None) -> None:
        """Make a new status current and send it to every client."""
        with self._cond:
            self._status = Status(mode, playable)
            self._version += 1
            self._cond.notify_all()

    def close(self) -> None:
        """Stop listening, drop all clients and remove the socket file."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            connections = list(self._connections)
            self._cond.notify_all()
        self._listener.close()
        for conn in connections:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        self._acceptor.join()
        log.info("Removing IPC socket: %s", self.path)
        self.path.unlink()

    def __enter__(self) -> IpcSocket:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _accept_loop(self) -> None:
        while True:
            try:
                conn, address = self._listener.accept()
            except TimeoutError:
                if self._closed:
                    return
                continue
            except OSError as err:
                if self._closed:
                    return
                log.error("Error accepting connection: %s", err)
                continue
            log.debug("Connection from %r", address)
            conn.settimeout(None)
            threading.Thread(target=self._serve, args=(conn,), daemon=True).start()

    def _serve(self, conn: socket.socket) -> None:
        done = threading.Event()
        with self._cond:
            if self._closed:
                conn.close()
                return
            self._connections.add(conn)
        writer = threading.Thread(target=self._push_updates, args=(conn, done), daemon=True)
        writer.start()
        try:
            with conn.makefile("rb") as reader:
                for raw in reader:
                    line = raw.removesuffix(b"\n").removesuffix(b"\r")
                    try:
                        text = line.decode("utf-8")
                    except UnicodeDecodeError as err:
                        log.error("Error reading line: %s", err)
                        continue
                    log.debug('Received line: "%s"', text)
                    self._events.send(Event(EventKind.IPC_INPUT, text))
        except OSError as err:
            log.debug("IPC connection failed: %s", err)
        finally:
            log.debug("Closing IPC connection")
            done.set()
            with self._cond:
                self._connections.discard(conn)
                self._cond.notify_all()
            writer.join()
            conn.close()

    def _push_updates(self, conn: socket.socket, done: threading.Event) -> None:
        seen = -1
        while True:
            with self._cond:
                self._cond.wait_for(
                    lambda: self._version != seen or done.is_set() or self._closed
                )
                if done.is_set() or self._closed:
                    return
                status, seen = self._status, self._version
            log.debug("IPC Status update: %r", status)
            try:
                conn.sendall((status.to_json() + "\n").encode("utf-8"))
            except OSError:
                return