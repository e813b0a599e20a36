"""Turn command-line text into player commands."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from urllib.parse import urlsplit

from tunedeck.command import (
    Command,
    GotoMode,
    InsertSource,
    JumpMode,
    MoveAmount,
    MoveMode,
    RepeatSetting,
    SeekDirection,
    ShiftMode,
    SortDirection,
    SortKey,
    TargetMode,
)

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_U16_MAX = 2**16 - 1
_U32_MAX = 2**32 - 1

_TOO_LARGE = "Duration value too large"
_OMIT = "**omit**"


class CommandParseError(ValueError):
    """Raised when command text cannot be turned into commands."""


class NoSuchCommand(CommandParseError):
    def __init__(self, cmd: str) -> None:
        self.cmd = cmd
        super().__init__(f'No such command "{cmd}"')


class InsufficientArgs(CommandParseError):
    def __init__(self, cmd: str, hint: str | None = None) -> None:
        self.cmd = cmd
        self.hint = hint
        if hint is None:
            message = f'"{cmd}" requires additional arguments'
        else:
            message = f'"{cmd}" requires additional arguments: {hint}'
        super().__init__(message)


class BadEnumArg(CommandParseError):
    def __init__(self, arg: str, accept: Sequence[str]) -> None:
        self.arg = arg
        self.accept = list(accept)
        super().__init__(
            f'Illegal argument "{arg}": supported values are {"|".join(self.accept)}'
        )


class ArgParseError(CommandParseError):
    def __init__(self, arg: str, err: str) -> None:
        self.arg = arg
        self.err = err
        super().__init__(f'Error with argument "{arg}": {err}')


_ALIASES: dict[str, str] = {
    "q": "quit",
    "x": "quit",
    "pause": "playpause",
    "toggleplay": "playpause",
    "toggleplayback": "playpause",
    "loop": "repeat",
    "1": "foo",
    "2": "bar",
    "3": "baz",
}


def resolve_alias(name: str) -> str:
    """Follow the alias table until a name that is not an alias is reached."""
    while name in _ALIASES:
        name = _ALIASES[name]
    return name


def split_commands(text: str) -> list[str]:
    """Split text on ``;`` into command strings; ``;;`` stands for a literal ``;``."""
    parts: list[list[str]] = [[]]
    pending_separator = False
    for char in text:
        if pending_separator:
            if char == ";":
                parts[-1].append(char)
            else:
                parts.append([char])
            pending_separator = False
        elif char == ";":
            pending_separator = True
        else:
            parts[-1].append(char)
    return ["".join(part) for part in parts]


# --- number parsing -------------------------------------------------------

_DIGITS = re.compile(r"[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)


def _parse_int(text: str, low: int, high: int) -> int:
    if not text:
        raise ValueError("cannot parse integer from empty string")
    body = text
    negative = False
    if body[0] in "+-":
        negative = body[0] == "-"
        body = body[1:]
        if negative and low >= 0:
            raise ValueError("invalid digit found in string")
    if not body or not _DIGITS.fullmatch(body):
        raise ValueError("invalid digit found in string")
    value = -int(body) if negative else int(body)
    if value > high:
        raise ValueError("number too large to fit in target type")
    if value < low:
        raise ValueError("number too small to fit in target type")
    return value


def _parse_float(text: str) -> float:
    if not _FLOAT.fullmatch(text):
        raise ValueError("invalid float literal")
    return float(text)


def _int_arg(raw: str, low: int, high: int) -> int:
    try:
        return _parse_int(raw, low, high)
    except ValueError as err:
        raise ArgParseError(raw, str(err)) from None


def _float_arg(raw: str) -> float:
    try:
        return _parse_float(raw)
    except ValueError as err:
        raise ArgParseError(raw, str(err)) from None


# --- durations ------------------------------------------------------------

def _unit_table() -> dict[str, Fraction]:
    groups: list[tuple[Fraction, tuple[str, ...]]] = [
        (Fraction(1, 1_000_000), ("ns", "nsec", "nanosecond")),
        (Fraction(1, 1000), ("us", "µs", "μs", "usec", "microsecond")),
        (Fraction(1), ("ms", "msec", "millisecond")),
        (Fraction(1000), ("s", "sec", "second")),
        (Fraction(60_000), ("m", "min", "minute")),
        (Fraction(3_600_000), ("h", "hr", "hour")),
        (Fraction(86_400_000), ("d", "day")),
        (Fraction(604_800_000), ("w", "wk", "week")),
        (Fraction(2_629_746_000), ("mon", "month")),
        (Fraction(31_556_952_000), ("y", "yr", "year")),
    ]
    table: dict[str, Fraction] = {}
    for factor, names in groups:
        for name in names:
            table[name] = factor
            if len(name) > 2:
                table[name + "s"] = factor
    return table


_UNITS = _unit_table()
_DURATION_PART = re.compile(
    r"\s*(?P<number>(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
    r"\s*(?P<unit>[^\s0-9,.+-]*)\s*,?"
)


def parse_duration(text: str) -> int:
    """Parse a duration such as ``"1m 30s"`` or ``"1.5h"`` into whole milliseconds.

    A number without a unit counts as seconds.
    """
    stripped = text.strip()
    if not stripped:
        raise ValueError("No value found in duration")
    total = Fraction(0)
    position = 0
    while position < len(stripped):
        match = _DURATION_PART.match(stripped, position)
        if match is None or match.end() == position:
            raise ValueError(f"Invalid duration: {text!r}")
        unit = match["unit"].lower() or "s"
        try:
            factor = _UNITS[unit]
        except KeyError:
            raise ValueError(f"Unknown unit: {match['unit']!r}") from None
        try:
            number = Fraction(Decimal(match["number"]))
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid number: {match['number']!r}") from None
        total += number * factor
        position = match.end()
    return int(total)


def _unsigned_millis(raw: str) -> int:
    try:
        return _parse_int(raw, 0, _U32_MAX)
    except ValueError:
        pass
    try:
        millis = parse_duration(raw)
    except ValueError as err:
        raise ArgParseError(raw, str(err)) from None
    if millis > _U32_MAX:
        raise ArgParseError(raw, _TOO_LARGE)
    return millis


# --- URLs -----------------------------------------------------------------

_URL_TYPES = frozenset({"track", "album", "playlist", "artist", "episode", "show"})


def _is_valid_url(url: str) -> bool:
    if url.startswith("spotify:"):
        parts = url.split(":")[1:]
    else:
        split = urlsplit(url)
        if split.scheme not in ("http", "https") or split.hostname != "open.spotify.com":
            return False
        parts = [part for part in split.path.split("/") if part]
    return len(parts) >= 2 and parts[-2] in _URL_TYPES and parts[-1].isalnum()


# --- argument helpers -----------------------------------------------------

def _required_enum(name: str, args: Sequence[str], hint: str, mapping: Mapping[str, object]):
    if not args:
        raise InsufficientArgs(name, hint)
    raw = args[0]
    try:
        return mapping[raw]
    except KeyError:
        raise BadEnumArg(raw, list(mapping)) from None


def _optional_enum(args: Sequence[str], mapping: Mapping[str, object]):
    if not args:
        return None
    raw = args[0]
    try:
        return mapping[raw]
    except KeyError:
        raise BadEnumArg(raw, [_OMIT, *mapping]) from None


_TARGET_MODES = {"selected": TargetMode.SELECTED, "current": TargetMode.CURRENT}
_GOTO_MODES = {"album": GotoMode.ALBUM, "artist": GotoMode.ARTIST}
_SHIFT_MODES = {"up": ShiftMode.UP, "down": ShiftMode.DOWN}
_REPEAT_MODES = {
    "list": RepeatSetting.REPEAT_PLAYLIST,
    "playlist": RepeatSetting.REPEAT_PLAYLIST,
    "queue": RepeatSetting.REPEAT_PLAYLIST,
    "track": RepeatSetting.REPEAT_TRACK,
    "once": RepeatSetting.REPEAT_TRACK,
    "single": RepeatSetting.REPEAT_TRACK,
    "none": RepeatSetting.NONE,
    "off": RepeatSetting.NONE,
}
_SHUFFLE_MODES = {"on": True, "off": False}
_SORT_KEYS = {
    "title": SortKey.TITLE,
    "duration": SortKey.DURATION,
    "album": SortKey.ALBUM,
    "added": SortKey.ADDED,
    "artist": SortKey.ARTIST,
}
_SORT_DIRECTIONS = {
    "a": SortDirection.ASCENDING,
    "asc": SortDirection.ASCENDING,
    "ascending": SortDirection.ASCENDING,
    "d": SortDirection.DESCENDING,
    "desc": SortDirection.DESCENDING,
    "descending": SortDirection.DESCENDING,
}
_MOVE_MODES = {
    "playing": MoveMode.PLAYING,
    "top": MoveMode.UP,
    "bottom": MoveMode.DOWN,
    "leftmost": MoveMode.LEFT,
    "rightmost": MoveMode.RIGHT,
    "pageup": MoveMode.UP,
    "pagedown": MoveMode.DOWN,
    "pageleft": MoveMode.LEFT,
    "pageright": MoveMode.RIGHT,
    "up": MoveMode.UP,
    "down": MoveMode.DOWN,
    "left": MoveMode.LEFT,
    "right": MoveMode.RIGHT,
}


# --- command handlers -----------------------------------------------------

def _save(name: str, args: Sequence[str]) -> Command:
    choice = _optional_enum(args, {"queue": "save_queue"})
    return Command(choice or "save")


def _focus(name: str, args: Sequence[str]) -> Command:
    if not args:
        raise InsufficientArgs(name, "queue|search|library")
    return Command("focus", args[0])


def _seek(name: str, args: Sequence[str]) -> Command:
    if not args:
        raise InsufficientArgs(name, "a duration")
    arg = " ".join(args)
    sign = arg[0] if arg[0] in "+-" else None
    raw = arg[1:].strip() if sign else arg
    millis = _unsigned_millis(raw)
    if sign is None:
        return Command("seek", SeekDirection.absolute(millis))
    if millis > _I32_MAX:
        raise ArgParseError(raw, _TOO_LARGE)
    return Command("seek", SeekDirection.relative(-millis if sign == "-" else millis))


def _volume(kind: str) -> Callable[[str, Sequence[str]], Command]:
    def handler(name: str, args: Sequence[str]) -> Command:
        amount = _int_arg(args[0], 0, _U16_MAX) if args else 1
        return Command(kind, amount)

    return handler


def _repeat(name: str, args: Sequence[str]) -> Command:
    return Command("repeat", _optional_enum(args, _REPEAT_MODES))


def _shuffle(name: str, args: Sequence[str]) -> Command:
    return Command("shuffle", _optional_enum(args, _SHUFFLE_MODES))


def _targeted(kind: str) -> Callable[[str, Sequence[str]], Command]:
    def handler(name: str, args: Sequence[str]) -> Command:
        return Command(kind, _required_enum(name, args, "selected|current", _TARGET_MODES))

    return handler


def _goto(name: str, args: Sequence[str]) -> Command:
    return Command("goto", _required_enum(name, args, "album|artist", _GOTO_MODES))


def _move(name: str, args: Sequence[str]) -> Command:
    mode = _required_enum(name, args, "a direction", _MOVE_MODES)
    raw = args[0]
    amount_raw = args[1] if len(args) > 1 else None
    if raw == "playing":
        amount = MoveAmount()
    elif raw in ("top", "bottom", "leftmost", "rightmost"):
        amount = MoveAmount.extreme()
    elif raw.startswith("page"):
        amount = MoveAmount() if amount_raw is None else MoveAmount.float(_float_arg(amount_raw))
    elif amount_raw is None:
        amount = MoveAmount()
    else:
        amount = MoveAmount.integer(_int_arg(amount_raw, _I32_MIN, _I32_MAX))
    return Command("move", mode, amount)


def _shift(name: str, args: Sequence[str]) -> Command:
    mode = _required_enum(name, args, "up|down", _SHIFT_MODES)
    amount = _int_arg(args[1], _I32_MIN, _I32_MAX) if len(args) > 1 else None
    return Command("shift", mode, amount)


def _insert(name: str, args: Sequence[str]) -> Command:
    if not args or args[0] == "":
        return Command("insert", InsertSource())
    url = args[0]
    if not _is_valid_url(url):
        raise ArgParseError(url, "Invalid Spotify URL")
    return Command("insert", InsertSource(url))


def _new_playlist(name: str, args: Sequence[str]) -> Command:
    if not args:
        raise InsufficientArgs(name, "a name")
    return Command("new_playlist", " ".join(args))


def _sort(name: str, args: Sequence[str]) -> Command:
    key = _required_enum(name, args, "a sort key", _SORT_KEYS)
    if len(args) > 1:
        raw = args[1]
        try:
            direction = _SORT_DIRECTIONS[raw]
        except KeyError:
            raise BadEnumArg(raw, list(_SORT_DIRECTIONS)) from None
    else:
        direction = SortDirection.ASCENDING
    return Command("sort", key, direction)


def _joined(kind: str) -> Callable[[str, Sequence[str]], Command]:
    def handler(name: str, args: Sequence[str]) -> Command:
        return Command(kind, " ".join(args))

    return handler


def _simple(kind: str) -> Callable[[str, Sequence[str]], Command]:
    def handler(name: str, args: Sequence[str]) -> Command:
        return Command(kind)

    return handler


_HANDLERS: dict[str, Callable[[str, Sequence[str]], Command]] = {
    "quit": _simple("quit"),
    "playpause": _simple("toggle_play"),
    "stop": _simple("stop"),
    "previous": _simple("previous"),
    "next": _simple("next"),
    "clear": _simple("clear"),
    "queue": _simple("queue"),
    "playnext": _simple("play_next"),
    "play": _simple("play"),
    "update": _simple("update_library"),
    "save": _save,
    "delete": _simple("delete"),
    "focus": _focus,
    "seek": _seek,
    "volup": _volume("volume_up"),
    "voldown": _volume("volume_down"),
    "repeat": _repeat,
    "shuffle": _shuffle,
    "share": _targeted("share"),
    "back": _simple("back"),
    "open": _targeted("open"),
    "goto": _goto,
    "move": _move,
    "shift": _shift,
    "search": _joined("search"),
    "jump": lambda name, args: Command("jump", JumpMode("query", " ".join(args))),
    "jumpnext": lambda name, args: Command("jump", JumpMode("next")),
    "jumpprevious": lambda name, args: Command("jump", JumpMode("previous")),
    "help": _simple("help"),
    "reload": _simple("reload_config"),
    "noop": _simple("noop"),
    "insert": _insert,
    "newplaylist": _new_playlist,
    "sort": _sort,
    "logout": _simple("logout"),
    "similar": _targeted("show_recommendations"),
    "redraw": _simple("redraw"),
    "exec": _joined("execute"),
    "reconnect": _simple("reconnect"),
}


def parse(text: str) -> list[Command]:
    """Parse ``;``-separated command text into commands; blank parts are skipped."""
    commands: list[Command] = []
    for command_text in split_commands(text):
        words = command_text.split()
        if not words:
            continue
        name = resolve_alias(words[0])
        handler = _HANDLERS.get(name)
        if handler is None:
            raise NoSuchCommand(name)
        commands.append(handler(name, words[1:]))
    return commands