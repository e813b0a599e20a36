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


@pytest.mark.parametrize(
    "kind, expected",
    [
        ("quit", "quit"),
        ("toggle_play", "playpause"),
        ("play_next", "playnext"),
        ("update_library", "update"),
        ("save_queue", "save queue"),
        ("reload_config", "reload"),
        ("redraw", "redraw"),
        ("reconnect", "reconnect"),
    ],
)
def test_basename_of_plain_commands(kind, expected):
    cmd = Command(kind)
    assert cmd.basename() == expected
    assert str(cmd) == expected


def test_basename_of_commands_with_arguments():
    assert Command("show_recommendations", TargetMode.SELECTED).basename() == "similar"
    assert Command("execute", "ls").basename() == "exec"
    assert Command("new_playlist", "mix").basename() == "newplaylist"
    assert Command("volume_up", 3).basename() == "volup"


def test_jump_basenames_depend_on_mode():
    assert Command("jump", JumpMode("previous")).basename() == "jumpprevious"
    assert Command("jump", JumpMode("next")).basename() == "jumpnext"
    assert Command("jump", JumpMode("query", "abc")).basename() == "jump"
    assert str(Command("jump", JumpMode("next"))) == "jumpnext"
    assert str(Command("jump", JumpMode("query", "some term"))).split() == [
        "jump",
        "some",
        "term",
    ]


def test_seek_direction_text():
    assert str(SeekDirection.relative(1000)) == "+1000"
    assert str(SeekDirection.relative(-1000)) == "-1000"
    assert str(SeekDirection.relative(0)) == "0"
    assert str(SeekDirection.absolute(5000)) == "5000"


def test_seek_direction_limits():
    with pytest.raises(ValueError):
        SeekDirection.relative(2**31)
    with pytest.raises(ValueError):
        SeekDirection.absolute(-1)
    with pytest.raises(ValueError):
        SeekDirection.absolute(2**32)
    assert SeekDirection.absolute(2**32 - 1).millis == 2**32 - 1


def test_seek_command_text():
    cmd = Command("seek", SeekDirection.relative(-10000))
    assert str(cmd).split() == ["seek", str(SeekDirection.relative(-10000))]


def test_move_extremes():
    extreme = MoveAmount.extreme()
    assert str(Command("move", MoveMode.UP, extreme)).split() == ["move", "top"]
    assert str(Command("move", MoveMode.DOWN, extreme)).split() == ["move", "bottom"]
    assert str(Command("move", MoveMode.LEFT, extreme)).split() == ["move", "leftmost"]
    assert str(Command("move", MoveMode.RIGHT, extreme)).split() == ["move", "rightmost"]


def test_move_playing_ignores_amount():
    cmd = Command("move", MoveMode.PLAYING, MoveAmount.integer(7))
    assert str(cmd).split() == ["move", "playing"]


def test_move_with_amounts():
    assert str(Command("move", MoveMode.DOWN, MoveAmount.integer(5))).split() == [
        "move",
        "down",
        "5",
    ]
    assert str(Command("move", MoveMode.UP, MoveAmount.float(0.5))).split() == [
        "move",
        "up",
        "0.5",
    ]
    assert str(MoveAmount.float(2.0)) == "2"


def test_move_amount_default_is_one_row():
    assert MoveAmount() == MoveAmount.integer(1)
    assert Command("move", MoveMode.UP) == Command("move", MoveMode.UP, MoveAmount.integer(1))


def test_move_amount_rejects_bad_values():
    with pytest.raises(ValueError):
        MoveAmount.integer(2**31)
    with pytest.raises(ValueError):
        MoveAmount("sideways", 1)
    with pytest.raises(ValueError):
        MoveAmount("extreme", 3)


def test_shift_defaults_to_one():
    assert str(Command("shift", ShiftMode.UP)).split() == ["shift", "up", "1"]
    assert str(Command("shift", ShiftMode.DOWN, 4)).split() == ["shift", "down", "4"]


def test_shuffle_text():
    assert str(Command("shuffle", True)).split() == ["shuffle", "on"]
    assert str(Command("shuffle", False)).split() == ["shuffle", "off"]
    assert str(Command("shuffle")) == "shuffle"


def test_repeat_text():
    assert str(Command("repeat")) == "repeat"
    cmd = Command("repeat", RepeatSetting.REPEAT_TRACK)
    assert str(cmd).split() == ["repeat", str(RepeatSetting.REPEAT_TRACK)]


def test_sort_and_targets():
    cmd = Command("sort", SortKey.TITLE, SortDirection.DESCENDING)
    assert str(cmd).split() == ["sort", "title", "descending"]
    assert Command("sort", SortKey.ALBUM).args[1] is SortDirection.ASCENDING
    assert str(Command("open", TargetMode.CURRENT)).split() == ["open", "current"]
    assert str(Command("goto", GotoMode.ARTIST)).split() == ["goto", "artist"]


def test_enum_arguments_accept_their_values():
    assert Command("open", "selected") == Command("open", TargetMode.SELECTED)
    with pytest.raises(ValueError):
        Command("open", "elsewhere")


def test_insert_source():
    assert str(InsertSource()) == ""
    assert InsertSource().is_clipboard
    url = "https://open.example.com/track/abc"
    source = InsertSource(url)
    assert not source.is_clipboard
    assert str(Command("insert", source)).split() == ["insert", url]


def test_free_text_commands_keep_their_text():
    assert str(Command("search", "blue in green")).split() == ["search", "blue", "in", "green"]
    assert str(Command("focus", "queue")).split() == ["focus", "queue"]
    assert str(Command("volume_down", 5)).split() == ["voldown", "5"]


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        Command("dance")


def test_argument_count_and_types_are_checked():
    with pytest.raises(TypeError):
        Command("quit", 1)
    with pytest.raises(TypeError):
        Command("focus")
    with pytest.raises(TypeError):
        Command("volume_up", True)
    with pytest.raises(ValueError):
        Command("volume_up", 70000)


def test_commands_are_values():
    first = Command("seek", SeekDirection.absolute(10))
    second = Command("seek", SeekDirection.absolute(10))
    assert first == second
    assert len({first, second}) == 1
    with pytest.raises(AttributeError):
        first.kind = "stop"


def test_pattern_matching_on_commands():
    cmd = Command("volume_up", 2)
    assert cmd.kind == "volume_up"
    assert cmd.args == (2,)
    match cmd:
        case Command("volume_up", (amount,)):
            result = amount
        case _:
            result = None
    assert result == 2


def test_jump_mode_validation():
    with pytest.raises(ValueError):
        JumpMode("sideways")
    with pytest.raises(ValueError):
        JumpMode("next", "term")
    assert JumpMode("query", "x").query == "x"