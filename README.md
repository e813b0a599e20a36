# tunedeck

The core of a terminal music player: a text command language, a key map,
configuration and saved state, a helper that fetches login details from
shell commands, and a Unix domain socket for remote control.

## Installation

```
pip install .
```

To run the tests, install with `pip install .[test]` and then run `pytest`.

## Running

```
tunedeck [-d FILE] [-b PATH] [-c FILE]
```

- `-d`, `--debug FILE`: append a debug log to `FILE`.
- `-b`, `--basepath PATH`: keep configuration and cache files under `PATH`
  (in `PATH/.config` and `PATH/.cache`). Without it the platform's standard
  directories are used.
- `-c`, `--config FILE`: the name of the configuration file in the
  configuration directory. The default is `config.toml`.
- `-V`, `--version`: print the version and exit.

The program loads the configuration and saved state, opens the control
socket and waits for events until it is told to quit, either by a `quit`
command or by `SIGTERM` or `SIGHUP`. Quitting saves the state. If the
configuration cannot be loaded, it prints an error and exits with status 1.

Of the commands sent to it, the running program carries out `quit`,
`noop`, `shuffle`, `repeat` (which change the saved state), `reload` and
`exec` (which runs its argument through the shell). For every other command
it logs that the command is unsupported.

## The command language

Commands are plain text, for example `seek +30s`, `move pageup 0.5` or
`sort title desc`. Put `;` between commands to run several in a row. Write
`;;` for a literal semicolon. Blank commands are skipped.

```python
from tunedeck.parser import parse

for command in parse("volup 5; shuffle on; repeat track"):
    print(command)
```

`tunedeck.parser.parse` returns a list of `Command` objects from
`tunedeck.command`. Each `Command` has a `kind` (such as `"seek"`) and
`args`; `str(command)` gives its textual form and `command.basename()` its
command word. Input that cannot be parsed raises a subclass of
`CommandParseError` (itself a `ValueError`): `NoSuchCommand`,
`InsufficientArgs`, `BadEnumArg` or `ArgParseError`.

`seek` takes a plain number as milliseconds, or a duration such as `1m30s`
or `1.5h` (see `parse_duration`, where a number without a unit counts as
seconds). A leading `+` or `-` makes the seek relative.

The built-in aliases are `q` and `x` for `quit`, `pause`, `toggleplay` and
`toggleplayback` for `playpause`, and `loop` for `repeat`;
`resolve_alias()` follows them. `split_commands()` does the splitting on
`;` on its own.

## Keybindings

`tunedeck.keybindings.default_keybindings()` gives the default key map, a
dict from key names to lists of commands. `get_bindings(enabled, custom)`
starts from the defaults (unless `enabled` is `False`) and adds custom
bindings given as command text; text that does not parse is logged and
skipped. `parse_keybinding()` turns strings such as `"Ctrl+l"`,
`"Shift+Up"` or `"F1"` into `KeyEvent` values, and returns `None` for an
unknown modifier.

## Events

`tunedeck.events.EventManager` is a thread-safe queue of `Event` values.
`send()` queues an event and calls the wake-up callback given to the
constructor; `msg_iter()` yields the events waiting now.

## Configuration

`tunedeck.config.Config` reads `config.toml` from the configuration
directory, creating an empty one if it is missing; a file that cannot be
read raises `ValueError`. It keeps the saved state (volume, shuffle, repeat,
the queue and playlist sort orders) in `userstate.cbor` next to it; a state
file that cannot be read is logged and replaced by defaults. Change the
state inside `with config.update_state() as state:` and write it with
`save_state()`. `reload()` reads the configuration file again.
`set_configuration_base_path()` moves all files under a directory of your
choice; `config_path()` and `cache_path()` name files in the two
directories.

Login details can come from shell commands:

```toml
[credentials]
username_cmd = "pass show music/username"
password_cmd = "pass show music/password"
```

`tunedeck.authentication.credentials_eval(username_cmd, password_cmd)` runs
both with `sh -c` and returns `LoginCredentials` built from their output,
less one trailing newline.

## Remote control

`tunedeck.ipc.IpcSocket` listens on a Unix domain socket (the running
program uses `tunedeck.sock` in the cache directory, or
`tunedeck.<pid>.sock` if another instance is listening there). Each line a
client sends becomes an IPC input event, which the program parses as
commands. Each client receives the current status when it connects and
again after every `publish()`, as one JSON line such as
`{"mode":"Stopped","playable":null}`.

## What it does not do

The package plays no audio, draws no terminal interface, connects to no
streaming service and keeps no music library. Commands that need these,
such as `play`, `next`, `seek` or `search`, are parsed but not carried out,
and nothing in the package produces playback events; the status on the
control socket stays `Stopped` unless code that uses the package publishes
another.