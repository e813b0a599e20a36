import pytest

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
from tunedeck.parser import (
    ArgParseError,
    BadEnumArg,
    CommandParseError,
    InsufficientArgs,
    NoSuchCommand,
    parse,
    parse_duration,
    resolve_alias,
    split_commands,
)


def one(text):
    commands = parse(text)
    assert len(commands) == 1
    return commands[0]


@pytest.mark.parametrize(
    "alias, target",
    [("q", "quit"), ("x", "quit"), ("pause", "playpause"), ("toggleplayback", "playpause"),
     ("loop", "repeat"), ("1", "foo"), ("play", "play")],
)
def test_resolve_alias(alias, target):
    assert resolve_alias(alias) == target


def test_split_commands_plain_and_escaped():
    assert split_commands("play;next") == ["play", "next"]
    assert split_commands("search a;;b") == ["search a;b"]
    assert split_commands("play;") == ["play"]
    assert split_commands("") == [""]


def test_parse_blank_input_gives_no_commands():
    assert parse("") == []
    assert parse("   ") == []
    assert parse("play; ;next") == [Command("play"), Command("next")]


def test_parse_aliases_and_sequence():
    assert parse("q") == [Command("quit")]
    assert parse("pause; next") == [Command("toggle_play"), Command("next")]


def test_escaped_separator_in_search():
    assert parse("search foo;;bar") == [Command("search", "foo;bar")]


def test_unknown_command():
    with pytest.raises(NoSuchCommand) as info:
        parse("bogus")
    assert info.value.cmd == "bogus"
    assert str(info.value) == 'No such command "bogus"'


def test_unknown_alias_target_reports_resolved_name():
    with pytest.raises(NoSuchCommand) as info:
        parse("1")
    assert info.value.cmd == "foo"


def test_error_stops_whole_parse():
    with pytest.raises(CommandParseError):
        parse("play; bogus")


def test_focus_requires_argument():
    with pytest.raises(InsufficientArgs) as info:
        parse("focus")
    assert info.value.hint == "queue|search|library"
    assert str(info.value) == '"focus" requires additional arguments: queue|search|library'
    assert one("focus library") == Command("focus", "library")


def test_newplaylist():
    with pytest.raises(InsufficientArgs) as info:
        parse("newplaylist")
    assert info.value.hint == "a name"
    assert one("newplaylist my  mix") == Command("new_playlist", "my mix")


def test_save_variants():
    assert one("save") == Command("save")
    assert one("save queue") == Command("save_queue")
    with pytest.raises(BadEnumArg) as info:
        parse("save other")
    assert info.value.accept == ["**omit**", "queue"]
    assert str(info.value) == 'Illegal argument "other": supported values are **omit**|queue'


def test_seek_absolute_and_relative():
    assert one("seek 5000") == Command("seek", SeekDirection.absolute(5000))
    assert one("seek +1000") == Command("seek", SeekDirection.relative(1000))
    assert one("seek - 1000") == Command("seek", SeekDirection.relative(-1000))


def test_seek_fancy_duration_matches_millis():
    assert one("seek 1m") == one("seek 60000")
    assert one("seek +1s") == one("seek +1000")
    assert one("seek -2s") == one("seek -2000")


def test_seek_errors():
    with pytest.raises(InsufficientArgs) as info:
        parse("seek")
    assert info.value.hint == "a duration"
    with pytest.raises(ArgParseError) as info:
        parse("seek +3000000000")
    assert info.value.err == "Duration value too large"
    with pytest.raises(ArgParseError) as info:
        parse("seek nonsense")
    assert info.value.arg == "nonsense"


def test_volume():
    assert one("volup") == Command("volume_up", 1)
    assert one("voldown 5") == Command("volume_down", 5)
    with pytest.raises(ArgParseError) as info:
        parse("volup -1")
    assert info.value.err == "invalid digit found in string"
    with pytest.raises(ArgParseError) as info:
        parse("voldown 70000")
    assert info.value.err == "number too large to fit in target type"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("repeat", None),
        ("loop list", RepeatSetting.REPEAT_PLAYLIST),
        ("repeat queue", RepeatSetting.REPEAT_PLAYLIST),
        ("repeat once", RepeatSetting.REPEAT_TRACK),
        ("repeat off", RepeatSetting.NONE),
    ],
)
def test_repeat(text, expected):
    assert one(text) == Command("repeat", expected)


def test_repeat_bad_value_lists_omit_first():
    with pytest.raises(BadEnumArg) as info:
        parse("repeat forever")
    assert info.value.accept[0] == "**omit**"
    assert "single" in info.value.accept


def test_shuffle():
    assert one("shuffle") == Command("shuffle", None)
    assert one("shuffle on") == Command("shuffle", True)
    assert one("shuffle off") == Command("shuffle", False)
    with pytest.raises(BadEnumArg) as info:
        parse("shuffle maybe")
    assert info.value.accept == ["**omit**", "on", "off"]


def test_target_mode_commands():
    assert one("open selected") == Command("open", TargetMode.SELECTED)
    assert one("similar current") == Command("show_recommendations", TargetMode.CURRENT)
    assert one("share current") == Command("share", TargetMode.CURRENT)
    with pytest.raises(BadEnumArg) as info:
        parse("open nothing")
    assert info.value.accept == ["selected", "current"]


def test_goto():
    assert one("goto artist") == Command("goto", GotoMode.ARTIST)
    with pytest.raises(InsufficientArgs) as info:
        parse("goto")
    assert info.value.hint == "album|artist"


@pytest.mark.parametrize(
    "text, mode, amount",
    [
        ("move playing", MoveMode.PLAYING, MoveAmount()),
        ("move top", MoveMode.UP, MoveAmount.extreme()),
        ("move rightmost", MoveMode.RIGHT, MoveAmount.extreme()),
        ("move down", MoveMode.DOWN, MoveAmount()),
        ("move left 3", MoveMode.LEFT, MoveAmount.integer(3)),
        ("move pageup", MoveMode.UP, MoveAmount()),
        ("move pagedown 0.5", MoveMode.DOWN, MoveAmount.float(0.5)),
    ],
)
def test_move(text, mode, amount):
    assert one(text) == Command("move", mode, amount)


def test_move_errors():
    with pytest.raises(ArgParseError) as info:
        parse("move pageup abc")
    assert info.value.err == "invalid float literal"
    with pytest.raises(ArgParseError):
        parse("move up 1.5")
    with pytest.raises(BadEnumArg) as info:
        parse("move sideways")
    assert "pageright" in info.value.accept


def test_shift():
    assert one("shift up 3") == Command("shift", ShiftMode.UP, 3)
    assert one("shift down") == Command("shift", ShiftMode.DOWN, None)
    with pytest.raises(BadEnumArg):
        parse("shift left")


def test_sort():
    assert one("sort title desc") == Command("sort", SortKey.TITLE, SortDirection.DESCENDING)
    assert one("sort artist") == Command("sort", SortKey.ARTIST, SortDirection.ASCENDING)
    with pytest.raises(BadEnumArg) as info:
        parse("sort title sideways")
    assert info.value.accept == ["a", "asc", "ascending", "d", "desc", "descending"]


def test_insert():
    assert one("insert") == Command("insert", InsertSource())
    url = "spotify:track:abc123"
    assert one(f"insert {url}") == Command("insert", InsertSource(url))
    with pytest.raises(ArgParseError) as info:
        parse("insert notaurl")
    assert info.value.err == "Invalid Spotify URL"


def test_jump_modes():
    assert one("jump some song") == Command("jump", JumpMode("query", "some song"))
    assert one("jumpnext") == Command("jump", JumpMode("next"))
    assert one("jumpprevious") == Command("jump", JumpMode("previous"))


def test_exec_joins_words():
    assert one("exec echo  hi") == Command("execute", "echo hi")


@pytest.mark.parametrize(
    "text",
    [
        "quit", "playpause", "save queue", "focus search", "seek 1234", "seek +500",
        "seek -500", "volup 7", "repeat track", "shuffle on", "open selected",
        "goto album", "move top", "move down 4", "move playing", "shift up 2",
        "search hello world", "jump abc", "jumpnext", "sort duration descending",
        "similar current", "exec ls -l", "insert spotify:album:xyz",
    ],
)
def test_round_trip_through_text(text):
    command = one(text)
    assert one(str(command)) == command


def test_parse_duration_invariants():
    assert parse_duration("1h") == parse_duration("60m") == parse_duration("3600s")
    assert parse_duration("90") == parse_duration("1m 30s")
    assert parse_duration("1.5s") == parse_duration("1500ms")
    assert parse_duration("2 minutes") == parse_duration("120 seconds")


def test_parse_duration_errors():
    with pytest.raises(ValueError):
        parse_duration("")
    with pytest.raises(ValueError):
        parse_duration("5 parsecs")
    with pytest.raises(ValueError):
        parse_duration("abc")