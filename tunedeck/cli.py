"""Command-line entry point: set up logging and directories, then run the player loop."""

from __future__ import annotations

import argparse
import logging
import signal
import subprocess
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from tunedeck.command import Command, RepeatSetting
from tunedeck.config import APP_NAME, Config, cache_path, set_configuration_base_path
from tunedeck.events import Event, EventKind, EventManager
from tunedeck.ipc import IpcSocket
from tunedeck.parser import CommandParseError, parse

log = logging.getLogger(__name__)

VERSION = "0.1.0"
_LOG_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
_LOG_DATE_FORMAT = "[%Y-%m-%d][%H:%M:%S]"
_SOCKET_NAME = f"{APP_NAME}.sock"
_WAIT_SECONDS = 0.5
_NEXT_REPEAT = {
    RepeatSetting.NONE: RepeatSetting.REPEAT_PLAYLIST,
    RepeatSetting.REPEAT_PLAYLIST: RepeatSetting.REPEAT_TRACK,
    RepeatSetting.REPEAT_TRACK: RepeatSetting.NONE,
}


def program_arguments() -> argparse.ArgumentParser:
    """The parser for the program's command-line arguments."""
    parser = argparse.ArgumentParser(prog=APP_NAME, description="terminal music player")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "-d", "--debug", metavar="FILE", type=Path,
        help="Enable debug logging to the specified file",
    )
    parser.add_argument(
        "-b", "--basepath", metavar="PATH", type=Path,
        help="custom basepath to config/cache files",
    )
    parser.add_argument(
        "-c", "--config", metavar="FILE", default="config.toml",
        help="Filename of config file in basepath",
    )
    return parser


def setup_logging(filename: str | Path) -> logging.Handler:
    """Send all log records to ``filename``, appending; return the handler added."""
    handler = logging.FileHandler(filename, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    return handler


class _Application:
    def __init__(self, config_file: str) -> None:
        self.config = Config(config_file)
        self._wakeup = threading.Event()
        self.events = EventManager(self._wakeup.set)
        self.ipc = IpcSocket(cache_path(_SOCKET_NAME), self.events)
        self.running = True
        self._pending_signal: int | None = None

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        wanted = [getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)]
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def on_signal(signum: int, frame: Any) -> None:
            self._pending_signal = signum
            self._wakeup.set()

        previous = {signum: signal.signal(signum, on_signal) for signum in wanted}
        try:
            yield
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)

    def run(self) -> None:
        with self.ipc, self._signal_handlers():
            while self.running:
                self._wakeup.wait(_WAIT_SECONDS)
                self._wakeup.clear()
                if self._pending_signal is not None:
                    log.info("Caught %s, cleaning up and closing", self._pending_signal)
                    self._pending_signal = None
                    self.handle(Command("quit"))
                for event in self.events.msg_iter():
                    self._dispatch(event)

    def _dispatch(self, event: Event) -> None:
        if event.kind is EventKind.PLAYER:
            log.debug("event received: %r", event.payload)
            self.ipc.publish(event.payload, None)
        elif event.kind is EventKind.QUEUE:
            log.debug("queue event: %r", event.payload)
        elif event.kind is EventKind.SESSION_DIED:
            log.warning("session died")
        elif event.kind is EventKind.IPC_INPUT:
            try:
                commands = parse(event.payload)
            except CommandParseError as err:
                log.error("Parsing error: %s", err)
                return
            for command in commands:
                log.info("Executing command from IPC: %s", command)
                self.handle(command)

    def handle(self, command: Command) -> None:
        match command.kind:
            case "noop":
                pass
            case "quit":
                self.config.save_state()
                self.running = False
            case "shuffle":
                with self.config.update_state() as state:
                    wanted = command.args[0]
                    state.shuffle = (not state.shuffle) if wanted is None else wanted
            case "repeat":
                with self.config.update_state() as state:
                    wanted = command.args[0]
                    state.repeat = _NEXT_REPEAT[state.repeat] if wanted is None else wanted
            case "reload_config":
                self.config.reload()
            case "execute":
                log.info("Executing command: %s", command.args[0])
                result = subprocess.run(command.args[0], shell=True, check=False)
                log.info("Exit code: %s", result.returncode)
            case _:
                log.error('The command "%s" is unsupported in this view', command.basename())


def main(argv: list[str] | None = None) -> int:
    """Run the player until it is told to quit; return the exit status."""
    args = program_arguments().parse_args(argv)
    if args.debug is not None:
        setup_logging(args.debug)
    set_configuration_base_path(args.basepath)
    try:
        application = _Application(args.config)
    except (ValueError, OSError) as err:
        print(f"could not start: {err}", file=sys.stderr)
        return 1
    application.run()
    return 0