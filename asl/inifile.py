"""Reading and writing INI configuration files while keeping their layout."""

from __future__ import annotations

import copy
import os
from types import TracebackType

_NO_SECTION = "-"


def _first_char(line: str) -> str:
    """Return the first non-blank character of a line, or an empty string."""
    return line.lstrip()[:1]


def _is_entry_start(c: str) -> bool:
    return c != "" and c not in "#;" and c >= "0"


def _leading_space(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


class IniFile:
    """An INI file with ``[section]`` headers and ``key=value`` lines.

    Values are addressed as ``"key"`` (in the current section) or ``"section/key"``.
    Keys that come before any section header belong to the section ``"-"``.
    When opened with ``should_write``, comments and ordering are preserved and the
    file is rewritten on ``close`` if anything changed.
    """

    def __init__(self, filename: str | os.PathLike[str], should_write: bool = False) -> None:
        self._filename = os.fspath(filename)
        self._should_write = should_write
        self._modified = False
        self._current_title = _NO_SECTION
        self._ok = False
        self._closed = False
        self._indent = ""
        self._lines: list[str] = []
        self._sections: dict[str, dict[str, str]] = {}

        try:
            with open(self._filename, encoding="utf-8") as f:
                text = f.read()
        except OSError:
            return
        self._ok = True
        self._parse(text)

    def _parse(self, text: str) -> None:
        raw_lines = text.split("\n")
        if text.endswith("\n"):
            raw_lines.pop()
        current = self._sections.setdefault(_NO_SECTION, {})

        for raw in raw_lines:
            line = raw[:-1] if raw.endswith("\r") else raw
            if self._should_write:
                self._lines.append(line)
            if not line:
                continue
            c = _first_char(line)
            if line.startswith("["):
                end = line.find("]", 1)
                if end < 0:
                    continue
                name = line[1:end]
                current = self._sections.setdefault(name, {})
                if self._current_title == _NO_SECTION:
                    self._current_title = name
            elif _is_entry_start(c):
                eq = line.find("=")
                if eq < 1:
                    if self._lines and self._lines[-1]:
                        self._lines.pop()
                    continue
                if not self._indent:
                    self._indent = _leading_space(line)
                key = line[:eq].strip().replace("/", "\\")
                current[key] = line[eq + 1:].strip()

        while len(self._lines) > 1 and self._lines[-1] == "":
            self._lines.pop()

        if not self._sections[_NO_SECTION]:
            del self._sections[_NO_SECTION]
        else:
            self._current_title = _NO_SECTION

    def ok(self) -> bool:
        """Tell whether the file could be read."""
        return self._ok

    def __bool__(self) -> bool:
        return self._ok

    def section(self, name: str) -> dict[str, str]:
        """Make ``name`` the current section and return its (live) dictionary of values."""
        self._current_title = name
        return self._sections.setdefault(name, {})

    def _split(self, name: str) -> tuple[str, str]:
        slash = name.find("/")
        if slash < 0:
            return self._current_title, name
        return name[:slash], name[slash + 1:]

    def __getitem__(self, name: str) -> str:
        """Return a value, or an empty string if it is not present."""
        section, key = self._split(name)
        return self._sections.get(section, {}).get(key, "")

    def __setitem__(self, name: str, value: object) -> None:
        self.set(name, value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def set(self, name: str, value: object) -> None:
        """Set a value, creating its section if needed."""
        section, key = self._split(name)
        self._sections.setdefault(section, {})[key] = str(value)
        self._modified = True

    def has(self, name: str) -> bool:
        """Tell whether a value is present."""
        section, key = self._split(name)
        return key in self._sections.get(section, {})

    @staticmethod
    def _insert_point(lines: list[str], title: str) -> int:
        """Return where new keys of a section go, or -1 if the section has no header yet."""
        no_title = title == _NO_SECTION
        header = f"[{title}]"
        for i, line in enumerate(lines):
            if no_title or line == header:
                j = i + (0 if no_title else 1)
                while j < len(lines) and not lines[j].startswith("["):
                    j += 1
                j -= 1
                if j > 0:
                    while j >= 0 and lines[j] == "":
                        j -= 1
                return j + 1
        return -1

    def write(self, filename: str | os.PathLike[str] | None = None) -> bool:
        """Write the file (to ``filename`` or the original name) if anything changed.

        Returns True if the file was written.
        """
        new_sections = copy.deepcopy(self._sections)
        lines = list(self._lines)
        current = self._sections.get(_NO_SECTION, {})
        section_name = _NO_SECTION

        for index, line in enumerate(lines):
            if line.startswith("["):
                end = line.find("]")
                if end < 0:
                    continue
                section_name = line[1:end]
                current = self._sections.get(section_name, {})
            elif _is_entry_start(_first_char(line)):
                eq = line.find("=")
                if eq < 0:
                    continue
                key = line[:eq].strip()
                old_value = line[eq + 1:].strip()
                new_value = current.get(key, "")
                lines[index] = f"{self._indent}{key}={new_value}"
                if old_value != new_value:
                    self._modified = True
                new_sections.get(section_name, {}).pop(key, None)

        new_sections = {
            title: values
            for title, values in new_sections.items()
            if any(v != "" for v in values.values())
        }

        for title, values in sorted(new_sections.items()):
            j = self._insert_point(lines, title)
            if j == -1:
                j = len(lines) - 1
                if j > 0:
                    while j >= 0 and lines[j] == "":
                        j -= 1
                j += 1
                if lines:
                    lines.insert(j, "")
                    j += 1
                lines.insert(j, f"[{title}]")
                j += 1
            for key, value in sorted(values.items()):
                lines.insert(j, f"{self._indent}{key}={value}")
                j += 1
                self._modified = True

        if not self._modified:
            return False
        target = os.fspath(filename) if filename else self._filename
        try:
            with open(target, "w", encoding="utf-8", newline="\n") as f:
                f.writelines(f"{line}\n" for line in lines)
        except OSError:
            return False
        return True

    def values(self, section: str | None = None) -> dict[str, str]:
        """Return all values as ``"section/key"`` entries, or the values of one section."""
        if section is None:
            return {
                f"{title}/{key}": value
                for title, values in sorted(self._sections.items())
                for key, value in sorted(values.items())
            }
        return dict(sorted(self._sections.get(section, {}).items()))

    def close(self) -> None:
        """Write pending changes if the file was opened for writing."""
        if self._closed:
            return
        self._closed = True
        if self._should_write:
            self.write(self._filename)

    def __enter__(self) -> IniFile:
        return self

    def __exit__(
        self,
        *args: type[BaseException] | BaseException | TracebackType | None,
    ) -> None:
        self.close()