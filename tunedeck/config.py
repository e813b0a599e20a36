"""User configuration, persisted runtime state and the directories they live in."""

from __future__ import annotations

import logging
import threading
import tomllib
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any

import cbor2
import platformdirs
import tomli_w

from tunedeck.command import RepeatSetting, SortDirection, SortKey

log = logging.getLogger(__name__)

APP_NAME = "tunedeck"
CACHE_VERSION = 1
DEFAULT_COMMAND_KEY = ":"

_CONFIG_FILE = "config.toml"
_STATE_FILE = "userstate.cbor"
_U16_MAX = 2**16 - 1
_U32_MAX = 2**32 - 1


class PlaybackState(Enum):
    """The playback state when the player is started."""

    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"
    DEFAULT = "Default"


class LibraryTab(Enum):
    """The library tabs that can be shown."""

    TRACKS = "tracks"
    ALBUMS = "albums"
    ARTISTS = "artists"
    PLAYLISTS = "playlists"
    PODCASTS = "podcasts"
    BROWSE = "browse"


# --- value checks ---------------------------------------------------------

def _bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name}: expected a boolean, got {value!r}")
    return value


def _int(value: Any, name: str, low: int = 0, high: int = _U32_MAX) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name}: expected an integer, got {value!r}")
    if not low <= value <= high:
        raise ValueError(f"{name}: {value} is out of range {low}..{high}")
    return value


def _float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    return float(value)


def _str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name}: expected a string, got {value!r}")
    return value


def _char(value: Any, name: str) -> str:
    if not isinstance(value, str) or len(value) != 1:
        raise ValueError(f"{name}: expected a single character, got {value!r}")
    return value


def _enum(cls: type[Enum]) -> Callable[[Any, str], Any]:
    def convert(value: Any, name: str) -> Any:
        try:
            return cls(value)
        except ValueError:
            accepted = ", ".join(str(member.value) for member in cls)
            raise ValueError(f"{name}: expected one of {accepted}, got {value!r}") from None

    return convert


def _mapping(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{name}: expected a table, got {value!r}")
    return value


def _optional(data: Mapping[str, Any], key: str, convert: Callable[[Any, str], Any]) -> Any:
    value = data.get(key)
    return None if value is None else convert(value, key)


def _required(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r}") from None


def _string_section(cls: type) -> Callable[[Any, str], Any]:
    def convert(value: Any, name: str) -> Any:
        table = _mapping(value, name)
        return cls(**{f.name: _optional(table, f.name, _str) for f in fields(cls)})

    return convert


def _string_table(value: Any, name: str) -> dict[str, str]:
    table = _mapping(value, name)
    return {_str(key, name): _str(item, f"{name}.{key}") for key, item in table.items()}


def _list_of(convert: Callable[[Any, str], Any]) -> Callable[[Any, str], list[Any]]:
    def convert_list(value: Any, name: str) -> list[Any]:
        if not isinstance(value, list):
            raise ValueError(f"{name}: expected a list, got {value!r}")
        return [convert(item, f"{name}[{index}]") for index, item in enumerate(value)]

    return convert_list


# --- configuration sections -----------------------------------------------

@dataclass
class TrackFormat:
    """The format used to show tracks in a list."""

    left: str | None = None
    center: str | None = None
    right: str | None = None

    @classmethod
    def default(cls) -> TrackFormat:
        return cls(left="%artists - %title", center="%album", right="%saved %duration")


@dataclass
class NotificationFormat:
    """The format of desktop notifications about playback."""

    title: str | None = None
    body: str | None = None

    @classmethod
    def default(cls) -> NotificationFormat:
        return cls(title="%title", body="%artists")


@dataclass
class Credentials:
    """Shell commands that print the username and password."""

    username_cmd: str | None = None
    password_cmd: str | None = None


@dataclass
class ConfigTheme:
    """Colour names for each part of the interface."""

    background: str | None = None
    primary: str | None = None
    secondary: str | None = None
    title: str | None = None
    playing: str | None = None
    playing_selected: str | None = None
    playing_bg: str | None = None
    highlight: str | None = None
    highlight_bg: str | None = None
    highlight_inactive_bg: str | None = None
    error: str | None = None
    error_bg: str | None = None
    statusbar_progress: str | None = None
    statusbar_progress_bg: str | None = None
    statusbar: str | None = None
    statusbar_bg: str | None = None
    cmdline: str | None = None
    cmdline_bg: str | None = None
    search_match: str | None = None


@dataclass
class ConfigValues:
    """Settings read from the user's configuration file; unset means default."""

    command_key: str | None = None
    initial_screen: str | None = None
    default_keybindings: bool | None = None
    keybindings: dict[str, str] | None = None
    theme: ConfigTheme | None = None
    use_nerdfont: bool | None = None
    flip_status_indicators: bool | None = None
    audio_cache: bool | None = None
    audio_cache_size: int | None = None
    backend: str | None = None
    backend_device: str | None = None
    volnorm: bool | None = None
    volnorm_pregain: float | None = None
    notify: bool | None = None
    bitrate: int | None = None
    gapless: bool | None = None
    shuffle: bool | None = None
    repeat: RepeatSetting | None = None
    cover_max_scale: float | None = None
    playback_state: PlaybackState | None = None
    track_format: TrackFormat | None = None
    notification_format: NotificationFormat | None = None
    statusbar_format: str | None = None
    library_tabs: list[LibraryTab] | None = None
    hide_display_names: bool | None = None
    credentials: Credentials | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConfigValues:
        """Build the settings from a parsed configuration table; unknown keys are ignored."""
        table = _mapping(data, "configuration")
        converters: dict[str, Callable[[Any, str], Any]] = {
            "command_key": _char,
            "initial_screen": _str,
            "default_keybindings": _bool,
            "keybindings": _string_table,
            "theme": _string_section(ConfigTheme),
            "use_nerdfont": _bool,
            "flip_status_indicators": _bool,
            "audio_cache": _bool,
            "audio_cache_size": _int,
            "backend": _str,
            "backend_device": _str,
            "volnorm": _bool,
            "volnorm_pregain": _float,
            "notify": _bool,
            "bitrate": _int,
            "gapless": _bool,
            "shuffle": _bool,
            "repeat": _enum(RepeatSetting),
            "cover_max_scale": _float,
            "playback_state": _enum(PlaybackState),
            "track_format": _string_section(TrackFormat),
            "notification_format": _string_section(NotificationFormat),
            "statusbar_format": _str,
            "library_tabs": _list_of(_enum(LibraryTab)),
            "hide_display_names": _bool,
            "credentials": _string_section(Credentials),
        }
        return cls(**{key: _optional(table, key, convert) for key, convert in converters.items()})


# --- persisted state ------------------------------------------------------

@dataclass
class SortingOrder:
    """The order in which a playlist is shown."""

    key: SortKey
    direction: SortDirection


@dataclass
class QueueState:
    """The queue as it was when the player last quit."""

    current_track: int | None = None
    random_order: list[int] | None = None
    track_progress: timedelta = field(default_factory=timedelta)
    queue: list[Any] = field(default_factory=list)


@dataclass
class UserState:
    """Runtime state kept across sessions."""

    volume: int = _U16_MAX
    shuffle: bool = False
    repeat: RepeatSetting = RepeatSetting.NONE
    queuestate: QueueState = field(default_factory=QueueState)
    playlist_orders: dict[str, SortingOrder] = field(default_factory=dict)
    cache_version: int = 0
    playback_state: PlaybackState = PlaybackState.DEFAULT

    def to_dict(self) -> dict[str, Any]:
        queue = self.queuestate
        return {
            "volume": self.volume,
            "shuffle": self.shuffle,
            "repeat": self.repeat.value,
            "queuestate": {
                "current_track": queue.current_track,
                "random_order": None if queue.random_order is None else list(queue.random_order),
                "track_progress": queue.track_progress.total_seconds(),
                "queue": list(queue.queue),
            },
            "playlist_orders": {
                playlist: {"key": order.key.value, "direction": order.direction.value}
                for playlist, order in self.playlist_orders.items()
            },
            "cache_version": self.cache_version,
            "playback_state": self.playback_state.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserState:
        table = _mapping(data, "user state")
        queue_table = _mapping(_required(table, "queuestate"), "queuestate")
        queue_items = _required(queue_table, "queue")
        if not isinstance(queue_items, list):
            raise ValueError("queue: expected a list")
        progress = _float(_required(queue_table, "track_progress"), "track_progress")
        if progress < 0:
            raise ValueError("track_progress: must not be negative")
        queuestate = QueueState(
            current_track=_optional(queue_table, "current_track", _int_index),
            random_order=_optional(queue_table, "random_order", _list_of(_int_index)),
            track_progress=timedelta(seconds=progress),
            queue=queue_items,
        )
        orders = _mapping(_required(table, "playlist_orders"), "playlist_orders")
        playlist_orders = {
            _str(playlist, "playlist_orders"): _sorting_order(order, f"playlist_orders.{playlist}")
            for playlist, order in orders.items()
        }
        return cls(
            volume=_int(_required(table, "volume"), "volume", 0, _U16_MAX),
            shuffle=_bool(_required(table, "shuffle"), "shuffle"),
            repeat=_enum(RepeatSetting)(_required(table, "repeat"), "repeat"),
            queuestate=queuestate,
            playlist_orders=playlist_orders,
            cache_version=_int(_required(table, "cache_version"), "cache_version", 0, _U16_MAX),
            playback_state=_enum(PlaybackState)(
                _required(table, "playback_state"), "playback_state"
            ),
        )


def _int_index(value: Any, name: str) -> int:
    return _int(value, name, 0, 2**64 - 1)


def _sorting_order(value: Any, name: str) -> SortingOrder:
    table = _mapping(value, name)
    return SortingOrder(
        key=_enum(SortKey)(_required(table, "key"), f"{name}.key"),
        direction=_enum(SortDirection)(_required(table, "direction"), f"{name}.direction"),
    )


# --- directories ----------------------------------------------------------

@dataclass(frozen=True)
class AppDirs:
    """The directories the player keeps its files in."""

    cache_dir: Path
    config_dir: Path
    data_dir: Path
    state_dir: Path


_base_path: Path | None = None
_base_path_lock = threading.Lock()


def try_proj_dirs() -> AppDirs:
    """Return the directories under the base path if one is set, else the platform's."""
    with _base_path_lock:
        base = _base_path
    if base is not None:
        return AppDirs(
            cache_dir=base / ".cache",
            config_dir=base / ".config",
            data_dir=base / ".local" / "share",
            state_dir=base / ".local" / "state",
        )
    dirs = platformdirs.PlatformDirs(APP_NAME)
    return AppDirs(
        cache_dir=dirs.user_cache_path,
        config_dir=dirs.user_config_path,
        data_dir=dirs.user_data_path,
        state_dir=dirs.user_state_path,
    )


def config_path(file: str) -> Path:
    """Create the configuration directory, replacing a file in its place, and name a file in it."""
    config_dir = try_proj_dirs().config_dir
    if config_dir.exists() and not config_dir.is_dir():
        config_dir.unlink()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / file


def cache_path(file: str) -> Path:
    """Create the cache directory if needed and name a file in it."""
    cache_dir = try_proj_dirs().cache_dir
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir / file


def set_configuration_base_path(base_path: str | Path | None) -> None:
    """Read and write all files relative to ``base_path``; None leaves the setting as it is."""
    global _base_path
    if base_path is None:
        return
    path = Path(base_path)
    path.mkdir(parents=True, exist_ok=True)
    with _base_path_lock:
        _base_path = path


# --- loading --------------------------------------------------------------

def _load_values(filename: str) -> ConfigValues:
    path = config_path(filename)
    if not path.exists():
        path.write_text(tomli_w.dumps({}), encoding="utf-8")
        return ConfigValues()
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return ConfigValues.from_dict(data)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError, ValueError) as err:
        raise ValueError(f"could not load config {path}: {err}") from err


def _load_user_state() -> UserState:
    path = config_path(_STATE_FILE)
    if not path.exists():
        state = UserState()
        _write_user_state(path, state)
        return state
    try:
        return UserState.from_dict(cbor2.loads(path.read_bytes()))
    except (cbor2.CBORDecodeError, ValueError, TypeError) as err:
        log.error("could not load user state from %s, using defaults: %s", path, err)
        return UserState()


def _write_user_state(path: Path, state: UserState) -> None:
    path.write_bytes(cbor2.dumps(state.to_dict()))


class Config:
    """The user's settings together with the persisted runtime state."""

    def __init__(self, filename: str | None = None) -> None:
        self._filename = _CONFIG_FILE if filename is None else filename
        values = _load_values(self._filename)
        state = _load_user_state()

        if values.shuffle is not None:
            state.shuffle = values.shuffle
        if values.repeat is not None:
            state.repeat = values.repeat
        if values.playback_state is not None:
            state.playback_state = values.playback_state

        self._lock = threading.RLock()
        self._values = values
        self._state = state

    def values(self) -> ConfigValues:
        with self._lock:
            return self._values

    def state(self) -> UserState:
        with self._lock:
            return self._state

    @contextmanager
    def update_state(self) -> Iterator[UserState]:
        """Hold the state lock while the caller changes the state."""
        with self._lock:
            yield self._state

    def save_state(self) -> None:
        """Stamp the state with the cache version and write it to disk; failures are logged."""
        with self.update_state() as state:
            state.cache_version = CACHE_VERSION
            path = config_path(_STATE_FILE)
            log.debug("saving user state to %s", path)
            try:
                _write_user_state(path, state)
            except OSError as err:
                log.error("Could not save user state: %s", err)

    def reload(self) -> None:
        """Read the configuration file again."""
        values = _load_values(self._filename)
        with self._lock:
            self._values = values