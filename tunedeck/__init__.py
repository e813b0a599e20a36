"""Command language, keybindings, configuration and control socket for a terminal music player."""

__version__ = "0.1.0"