"""Player commands and the values they carry, with their textual form."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Any

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_U32_MAX = 2**32 - 1
_U16_MAX = 2**16 - 1


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _format_float(value: float) -> str:
    """Render a float the way a shortest-form decimal printer does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class RepeatSetting(StrEnum):
    """How playback continues once the end of a track or the queue is reached."""

    NONE = "none"
    REPEAT_PLAYLIST = "playlist"
    REPEAT_TRACK = "track"


class TargetMode(StrEnum):
    CURRENT = "current"
    SELECTED = "selected"


class MoveMode(StrEnum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    PLAYING = "playing"


class SortKey(StrEnum):
    """Keys that songs can be sorted on."""

    TITLE = "title"
    DURATION = "duration"
    ARTIST = "artist"
    ALBUM = "album"
    ADDED = "added"


class SortDirection(StrEnum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class ShiftMode(StrEnum):
    UP = "up"
    DOWN = "down"


class GotoMode(StrEnum):
    ALBUM = "album"
    ARTIST = "artist"


@dataclass(frozen=True)
class MoveAmount:
    """How far a move goes: a number of rows, a fraction of a page, or all the way."""

    kind: str = "integer"
    value: int | float | None = 1

    def __post_init__(self) -> None:
        if self.kind == "integer":
            if not _is_int(self.value) or not _I32_MIN <= self.value <= _I32_MAX:
                raise ValueError(f"invalid integer move amount: {self.value!r}")
        elif self.kind == "float":
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
                raise ValueError(f"invalid float move amount: {self.value!r}")
            object.__setattr__(self, "value", float(self.value))
        elif self.kind == "extreme":
            if self.value is not None:
                raise ValueError("an extreme move amount carries no value")
        else:
            raise ValueError(f"unknown move amount kind: {self.kind!r}")

    @classmethod
    def integer(cls, value: int) -> MoveAmount:
        return cls("integer", value)

    @classmethod
    def float(cls, value: float) -> MoveAmount:
        return cls("float", value)

    @classmethod
    def extreme(cls) -> MoveAmount:
        return cls("extreme", None)

    def __str__(self) -> str:
        if self.kind == "integer":
            return str(self.value)
        if self.kind == "float":
            return _format_float(self.value)
        return "extreme"


@dataclass(frozen=True)
class JumpMode:
    """Jump to the previous or next match, or search for a query."""

    kind: str
    query: str = ""

    def __post_init__(self) -> None:
        if self.kind not in ("previous", "next", "query"):
            raise ValueError(f"unknown jump mode: {self.kind!r}")
        if self.kind != "query" and self.query:
            raise ValueError(f"jump mode {self.kind!r} takes no query")

    def __str__(self) -> str:
        return self.kind


@dataclass(frozen=True)
class SeekDirection:
    """A seek target: an offset from the current position or an absolute position, in ms."""

    kind: str
    millis: int

    def __post_init__(self) -> None:
        if not _is_int(self.millis):
            raise ValueError(f"seek position must be an integer: {self.millis!r}")
        if self.kind == "relative":
            if not _I32_MIN <= self.millis <= _I32_MAX:
                raise ValueError("Duration value too large")
        elif self.kind == "absolute":
            if not 0 <= self.millis <= _U32_MAX:
                raise ValueError("Duration value too large")
        else:
            raise ValueError(f"unknown seek direction: {self.kind!r}")

    @classmethod
    def relative(cls, millis: int) -> SeekDirection:
        return cls("relative", millis)

    @classmethod
    def absolute(cls, millis: int) -> SeekDirection:
        return cls("absolute", millis)

    def __str__(self) -> str:
        if self.kind == "absolute":
            return str(self.millis)
        sign = "+" if self.millis > 0 else ""
        return f"{sign}{self.millis}"


@dataclass(frozen=True)
class InsertSource:
    """Where inserted items come from: the clipboard (no URL) or a given URL."""

    url: str | None = None

    @property
    def is_clipboard(self) -> bool:
        return self.url is None

    def __str__(self) -> str:
        return "" if self.url is None else self.url


_REQUIRED = object()


def _param(*types: type, default: Any = _REQUIRED) -> tuple[tuple[type, ...], Any]:
    return types, default


_NONE = type(None)

_SIGNATURES: dict[str, tuple[tuple[tuple[type, ...], Any], ...]] = {
    "quit": (),
    "toggle_play": (),
    "stop": (),
    "previous": (),
    "next": (),
    "clear": (),
    "queue": (),
    "play_next": (),
    "play": (),
    "update_library": (),
    "save": (),
    "save_queue": (),
    "delete": (),
    "focus": (_param(str),),
    "seek": (_param(SeekDirection),),
    "volume_up": (_param(int),),
    "volume_down": (_param(int),),
    "repeat": (_param(RepeatSetting, _NONE, default=None),),
    "shuffle": (_param(bool, _NONE, default=None),),
    "share": (_param(TargetMode),),
    "back": (),
    "open": (_param(TargetMode),),
    "goto": (_param(GotoMode),),
    "move": (_param(MoveMode), _param(MoveAmount, default=MoveAmount())),
    "shift": (_param(ShiftMode), _param(int, _NONE, default=None)),
    "search": (_param(str),),
    "jump": (_param(JumpMode),),
    "help": (),
    "reload_config": (),
    "noop": (),
    "insert": (_param(InsertSource),),
    "new_playlist": (_param(str),),
    "sort": (_param(SortKey), _param(SortDirection, default=SortDirection.ASCENDING)),
    "logout": (),
    "show_recommendations": (_param(TargetMode),),
    "redraw": (),
    "execute": (_param(str),),
    "reconnect": (),
}

_BASENAMES: dict[str, str] = {
    "quit": "quit",
    "toggle_play": "playpause",
    "stop": "stop",
    "previous": "previous",
    "next": "next",
    "clear": "clear",
    "queue": "queue",
    "play_next": "playnext",
    "play": "play",
    "update_library": "update",
    "save": "save",
    "save_queue": "save queue",
    "delete": "delete",
    "focus": "focus",
    "seek": "seek",
    "volume_up": "volup",
    "volume_down": "voldown",
    "repeat": "repeat",
    "shuffle": "shuffle",
    "share": "share",
    "back": "back",
    "open": "open",
    "goto": "goto",
    "move": "move",
    "shift": "shift",
    "search": "search",
    "help": "help",
    "reload_config": "reload",
    "noop": "noop",
    "insert": "insert",
    "new_playlist": "newplaylist",
    "sort": "sort",
    "logout": "logout",
    "show_recommendations": "similar",
    "redraw": "redraw",
    "execute": "exec",
    "reconnect": "reconnect",
}

_EXTREME_NAMES = {
    MoveMode.UP: "top",
    MoveMode.DOWN: "bottom",
    MoveMode.LEFT: "leftmost",
    MoveMode.RIGHT: "rightmost",
}


def _coerce(kind: str, position: int, value: Any, types: tuple[type, ...]) -> Any:
    for expected in types:
        if expected is int and isinstance(value, bool):
            continue
        if isinstance(value, expected):
            return value
    if isinstance(value, str):
        for expected in types:
            if isinstance(expected, type) and issubclass(expected, Enum):
                try:
                    return expected(value)
                except ValueError:
                    accepted = "|".join(member.value for member in expected)
                    raise ValueError(
                        f"invalid argument {value!r} for {kind!r}: expected {accepted}"
                    ) from None
    names = " or ".join(t.__name__ for t in types)
    raise TypeError(f"argument {position} of {kind!r} must be {names}, not {value!r}")


@dataclass(frozen=True, init=False, repr=False)
class Command:
    """A player command: a kind such as ``"seek"`` and the arguments it carries."""

    __slots__ = ("kind", "args")

    kind: str
    args: tuple[Any, ...]

    def __init__(self, kind: str, *args: Any) -> None:
        try:
            signature = _SIGNATURES[kind]
        except KeyError:
            raise ValueError(f"unknown command kind: {kind!r}") from None
        if len(args) > len(signature):
            raise TypeError(
                f"{kind!r} takes at most {len(signature)} arguments, got {len(args)}"
            )
        values = []
        for position, (types, default) in enumerate(signature):
            if position < len(args):
                values.append(_coerce(kind, position, args[position], types))
            elif default is _REQUIRED:
                raise TypeError(f"{kind!r} is missing argument {position}")
            else:
                values.append(default)

        if kind in ("volume_up", "volume_down") and not 0 <= values[0] <= _U16_MAX:
            raise ValueError(f"volume step out of range: {values[0]}")
        if kind == "shift" and values[1] is not None and not _I32_MIN <= values[1] <= _I32_MAX:
            raise ValueError(f"shift amount out of range: {values[1]}")

        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "args", tuple(values))

    def __repr__(self) -> str:
        inner = ", ".join(repr(part) for part in (self.kind, *self.args))
        return f"Command({inner})"

    def basename(self) -> str:
        """The command word that starts this command's textual form."""
        if self.kind == "jump":
            mode: JumpMode = self.args[0]
            return {"previous": "jumpprevious", "next": "jumpnext"}.get(mode.kind, "jump")
        return _BASENAMES[self.kind]

    def _extra_tokens(self) -> list[str]:
        kind, args = self.kind, self.args
        if kind in ("focus", "search", "new_playlist", "execute"):
            return [args[0]]
        if kind in ("seek", "volume_up", "volume_down", "insert"):
            return [str(args[0])]
        if kind in ("share", "open", "goto", "show_recommendations"):
            return [str(args[0])]
        if kind == "repeat":
            return [] if args[0] is None else [str(args[0])]
        if kind == "shuffle":
            return [] if args[0] is None else ["on" if args[0] else "off"]
        if kind == "move":
            mode, amount = args
            if mode is MoveMode.PLAYING:
                return ["playing"]
            if amount.kind == "extreme":
                return [_EXTREME_NAMES[mode]]
            return [str(mode), str(amount)]
        if kind == "shift":
            mode, amount = args
            return [str(mode), str(1 if amount is None else amount)]
        if kind == "jump":
            mode = args[0]
            return [mode.query] if mode.kind == "query" else []
        if kind == "sort":
            return [str(args[0]), str(args[1])]
        return []

    def __str__(self) -> str:
        return " ".join([self.basename(), *self._extra_tokens()])