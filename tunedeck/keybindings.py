"""Key names, key events and the command bindings attached to them."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from tunedeck.command import (
    Command,
    GotoMode,
    InsertSource,
    JumpMode,
    MoveAmount,
    MoveMode,
    SeekDirection,
    ShiftMode,
    TargetMode,
)
from tunedeck.parser import CommandParseError, parse

log = logging.getLogger(__name__)

_MODIFIERS = ("shift", "alt", "ctrl")


class Key(Enum):
    """Non-character keys that bindings can name."""

    ENTER = "Enter"
    TAB = "Tab"
    BACKSPACE = "Backspace"
    ESC = "Esc"
    LEFT = "Left"
    RIGHT = "Right"
    UP = "Up"
    DOWN = "Down"
    INS = "Ins"
    DEL = "Del"
    HOME = "Home"
    END = "End"
    PAGE_UP = "PageUp"
    PAGE_DOWN = "PageDown"
    PAUSE_BREAK = "PauseBreak"
    NUMPAD_CENTER = "NumpadCenter"
    F0 = "F0"
    F1 = "F1"
    F2 = "F2"
    F3 = "F3"
    F4 = "F4"
    F5 = "F5"
    F6 = "F6"
    F7 = "F7"
    F8 = "F8"
    F9 = "F9"
    F10 = "F10"
    F11 = "F11"
    F12 = "F12"


@dataclass(frozen=True)
class KeyEvent:
    """A key press: a named key or a single character, with an optional modifier.

    A shifted character is represented by its upper-case form, so ``modifier``
    is never ``"shift"`` for a character.
    """

    key: Key | str
    modifier: str | None = None

    def __post_init__(self) -> None:
        if self.modifier is not None and self.modifier not in _MODIFIERS:
            raise ValueError(f"unknown modifier: {self.modifier!r}")
        if isinstance(self.key, str):
            if len(self.key) != 1:
                raise ValueError(f"a character key must be one character: {self.key!r}")
            if self.modifier == "shift":
                raise ValueError("shifted characters are written in upper case")
        elif not isinstance(self.key, Key):
            raise TypeError(f"key must be a Key or a character, not {self.key!r}")

    @property
    def is_char(self) -> bool:
        return isinstance(self.key, str)


_KEYS_BY_NAME = {key.value: key for key in Key}


def parse_key(key: str) -> KeyEvent:
    """Parse a single key name; anything unknown stands for its first character."""
    if key == "Space":
        return KeyEvent(" ")
    named = _KEYS_BY_NAME.get(key)
    if named is not None:
        return KeyEvent(named)
    if not key:
        raise ValueError("empty key name")
    return KeyEvent(key[0])


def parse_keybinding(binding: str) -> KeyEvent | None:
    """Parse a binding such as ``"Ctrl+l"``; return None for an unknown modifier."""
    parts = binding.split("+")
    if binding == "+" or len(parts) != 2:
        return parse_key(binding)
    modifier, key_name = parts
    event = parse_key(key_name)
    if modifier == "Shift":
        if event.is_char:
            return KeyEvent(event.key.upper()[0])
        return KeyEvent(event.key, "shift")
    if modifier == "Alt":
        return KeyEvent(event.key, "alt")
    if modifier == "Ctrl":
        return KeyEvent(event.key, "ctrl")
    return None


def default_keybindings() -> dict[str, list[Command]]:
    """The bindings that are active unless the configuration turns them off."""
    down = Command("move", MoveMode.DOWN, MoveAmount())
    return {
        "q": [Command("quit")],
        "Ctrl+l": [Command("redraw")],
        "Shift+p": [Command("toggle_play")],
        "Shift+u": [Command("update_library")],
        "Shift+s": [Command("stop")],
        "<": [Command("previous")],
        ">": [Command("next")],
        "c": [Command("clear")],
        "Space": [Command("queue"), down],
        ".": [Command("play_next"), down],
        "Enter": [Command("play")],
        "n": [Command("jump", JumpMode("next"))],
        "Shift+n": [Command("jump", JumpMode("previous"))],
        "s": [Command("save")],
        "Ctrl+s": [Command("save_queue")],
        "d": [Command("delete")],
        "f": [Command("seek", SeekDirection.relative(1000))],
        "b": [Command("seek", SeekDirection.relative(-1000))],
        "Shift+f": [Command("seek", SeekDirection.relative(10000))],
        "Shift+b": [Command("seek", SeekDirection.relative(-10000))],
        "+": [Command("volume_up", 1)],
        "]": [Command("volume_up", 5)],
        "-": [Command("volume_down", 1)],
        "[": [Command("volume_down", 5)],
        "r": [Command("repeat", None)],
        "z": [Command("shuffle", None)],
        "x": [Command("share", TargetMode.SELECTED)],
        "Shift+x": [Command("share", TargetMode.CURRENT)],
        "F1": [Command("focus", "queue")],
        "F2": [Command("focus", "search")],
        "F3": [Command("focus", "library")],
        "?": [Command("help")],
        "Backspace": [Command("back")],
        "o": [Command("open", TargetMode.SELECTED)],
        "Shift+o": [Command("open", TargetMode.CURRENT)],
        "a": [Command("goto", GotoMode.ALBUM)],
        "Shift+a": [Command("goto", GotoMode.ARTIST)],
        "m": [Command("show_recommendations", TargetMode.SELECTED)],
        "Shift+m": [Command("show_recommendations", TargetMode.CURRENT)],
        "Up": [Command("move", MoveMode.UP, MoveAmount())],
        "p": [Command("move", MoveMode.PLAYING, MoveAmount())],
        "Down": [down],
        "Left": [Command("move", MoveMode.LEFT, MoveAmount())],
        "Right": [Command("move", MoveMode.RIGHT, MoveAmount())],
        "PageUp": [Command("move", MoveMode.UP, MoveAmount.integer(5))],
        "PageDown": [Command("move", MoveMode.DOWN, MoveAmount.integer(5))],
        "Home": [Command("move", MoveMode.UP, MoveAmount.extreme())],
        "End": [Command("move", MoveMode.DOWN, MoveAmount.extreme())],
        "k": [Command("move", MoveMode.UP, MoveAmount())],
        "j": [down],
        "h": [Command("move", MoveMode.LEFT, MoveAmount())],
        "l": [Command("move", MoveMode.RIGHT, MoveAmount())],
        "Ctrl+p": [Command("move", MoveMode.UP, MoveAmount())],
        "Ctrl+n": [down],
        "Ctrl+a": [Command("move", MoveMode.LEFT, MoveAmount())],
        "Ctrl+e": [Command("move", MoveMode.RIGHT, MoveAmount())],
        "Shift+Up": [Command("shift", ShiftMode.UP, None)],
        "Shift+Down": [Command("shift", ShiftMode.DOWN, None)],
        "Ctrl+v": [Command("insert", InsertSource())],
    }


def get_bindings(
    default_keybindings_enabled: bool | None,
    custom_bindings: Mapping[str, str] | None,
) -> dict[str, list[Command]]:
    """Combine the default bindings (unless disabled) with the user's own.

    Custom bindings whose command text does not parse are logged and skipped.
    """
    enabled = True if default_keybindings_enabled is None else default_keybindings_enabled
    bindings = default_keybindings() if enabled else {}
    for key, text in (custom_bindings or {}).items():
        try:
            commands = parse(text)
        except CommandParseError as err:
            log.error('Invalid command(s) for key %s-"%s": %s', key, text, err)
            continue
        log.info("Custom keybinding: %s -> %r", key, commands)
        bindings[key] = commands
    return bindings