"""Logging of messages to the console and/or a size-limited file."""

from __future__ import annotations

import os
import sys
import threading
from datetime import datetime
from enum import IntEnum
from typing import Any

from asl.path import Path
from asl.process import env, set_env

MAX_FILE_SIZE = 1_000_000
_STATE_VARIABLE = "ASL_LOG"

_RESET = "\x1b[0m"


class Level(IntEnum):
    """Message severity; lower values are more important."""

    ERROR = 0
    WARNING = 1
    INFO = 2
    DEBUG = 3
    VERBOSE = 4


_PREFIXES = {Level.WARNING: "WARNING: ", Level.ERROR: "ERROR: "}
_COLORS = {
    Level.WARNING: "\x1b[93m",
    Level.ERROR: "\x1b[91m",
    Level.DEBUG: "\x1b[32m",
    Level.VERBOSE: "\x1b[36m",
}


def _category_name(category: str) -> str:
    """Strip directories and extension so a file name can be used as a category."""
    slash = max(category.rfind("\\"), category.rfind("/"))
    start = slash + 1
    dot = category.rfind(".")
    end = dot if dot >= 0 else len(category)
    return category[start:end]


class Log:
    """A logger whose settings are shared with child processes through the environment."""

    _instance: Log | None = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._logfile = "log.log"
        self._use_console = True
        self._use_file = True
        self._max_level = int(Level.DEBUG)
        self._lock = threading.Lock()

    @staticmethod
    def instance() -> Log:
        """Return the process-wide logger."""
        with Log._instance_lock:
            if Log._instance is None:
                Log._instance = Log()
            return Log._instance

    def _store_state(self) -> None:
        flags = (1 if self._use_file else 0) | (2 if self._use_console else 0)
        set_env(_STATE_VARIABLE, chr(self._max_level + ord("0")) + chr(flags + ord("0")) + self._logfile)

    def _update_state(self) -> None:
        state = env(_STATE_VARIABLE)
        if len(state) > 2:
            self._max_level = ord(state[0]) - ord("0")
            flags = ord(state[1]) - ord("0")
            self._use_file = (flags & 1) != 0
            self._use_console = (flags & 2) != 0
            self._logfile = state[2:]

    def set_file(self, path: str | os.PathLike[str]) -> None:
        """Set the file that messages are appended to."""
        self._logfile = os.fspath(path)
        self._store_state()

    def enable(self, on: bool = True) -> None:
        """Turn logging on or off, keeping the maximum level for when it is turned on again."""
        if (not on and self._max_level < 0) or (on and self._max_level >= 0):
            return
        self._max_level = -self._max_level - 1
        self._store_state()

    def use_console(self, on: bool = True) -> None:
        """Enable or disable printing messages to standard output."""
        self._use_console = on
        self._store_state()

    def use_file(self, on: bool = True) -> None:
        """Enable or disable appending messages to the log file."""
        self._use_file = on
        self._store_state()

    def set_max_level(self, level: int) -> None:
        """Set the least important level that is still logged."""
        self._max_level = int(level)
        self._store_state()

    def max_level(self) -> int:
        """Return the current maximum level (negative while logging is disabled)."""
        self._update_state()
        return self._max_level

    def _rotate(self, logfile: str) -> None:
        try:
            too_big = os.path.getsize(logfile) > MAX_FILE_SIZE
        except OSError:
            return
        if not too_big:
            return
        path = Path(logfile)
        old = f"{path.no_ext()}-1.{path.extension()}"
        if os.path.exists(old):
            os.remove(old)
        os.replace(logfile, old)

    def log(self, category: str, level: int, message: str) -> None:
        """Log a message under a category (a file path may be given; only its base name is kept)."""
        self._update_state()
        if level > self._max_level:
            return

        now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        name = _category_name(category)
        try:
            level = Level(level)
        except ValueError:
            pass
        prefix = _PREFIXES.get(level, "")
        color = _COLORS.get(level)

        line = f"[{now}][{name}] {prefix}{message}\n"
        if message.endswith("\n"):
            line = line[:-1]

        with self._lock:
            if self._use_file:
                self._rotate(self._logfile)
                with open(self._logfile, "a", encoding="utf-8") as f:
                    f.write(line)
            if self._use_console:
                out = sys.stdout
                colored = color is not None and out.isatty()
                out.write(f"{color}{line}{_RESET}" if colored else line)
                out.flush()


def log(category: str, level: int, message: str, *args: Any) -> None:
    """Log a message with the shared logger; extra arguments fill printf-style fields."""
    text = message % args if args else message
    Log.instance().log(category, level, text)