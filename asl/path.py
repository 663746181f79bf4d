"""File path manipulation on plain strings."""

from __future__ import annotations

import os


def _last_separator(path: str) -> int:
    index = path.rfind("/")
    if os.sep != "/":
        index = max(index, path.rfind(os.sep))
    return index


class Path:
    """An immutable file path with helpers for its name, extension and directory."""

    __slots__ = ("_path",)

    def __init__(self, path: str | Path = "") -> None:
        self._path = str(path)

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"Path({self._path!r})"

    def __fspath__(self) -> str:
        return self._path

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Path):
            return self._path == other._path
        if isinstance(other, str):
            return self._path == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)

    def name(self) -> str:
        """Return the last component (file name with extension)."""
        return self._path[_last_separator(self._path) + 1:]

    def extension(self) -> str:
        """Return the extension without the dot, or an empty string."""
        sep = _last_separator(self._path)
        dot = self._path.rfind(".")
        return self._path[dot + 1:] if dot >= 0 and dot > sep else ""

    def has_extension(self, extensions: str) -> bool:
        """Check the extension, case-insensitively, against one or several ``a|b|c`` alternatives."""
        ext = self.extension().lower()
        wanted = extensions.lower()
        if "|" not in wanted:
            return wanted == ext
        return ext in wanted.split("|")

    def directory(self) -> Path:
        """Return the containing directory (``.`` for a bare name)."""
        sep = _last_separator(self._path)
        if sep < 0 and ":" in self._path:
            return Path("")
        return Path(self._path[:sep]) if sep >= 0 else Path(".")

    def remove_ddots(self) -> Path:
        """Return this path with empty, ``.`` and ``..`` components resolved."""
        unc = self._path.startswith("//")
        pieces = self._path.split("/")
        parts = pieces[:1] + [p for p in pieces[1:] if p not in ("", ".")]

        i = 1
        while i < len(parts):
            if i >= 0 and parts[i] == "..":
                if i > 1:
                    del parts[i - 1:i + 1]
                else:
                    del parts[i]
                i -= 2
            i += 1

        result = "/".join(parts)
        if unc:
            result = "/" + result
        return Path(result)

    def absolute(self) -> Path:
        """Return the absolute, normalised form of this path."""
        if self.is_absolute():
            return self.remove_ddots()
        current = os.getcwd().replace("\\", "/")
        relative = self._path[2:] if self._path.startswith("./") else self._path
        return Path(f"{current}/{relative}").remove_ddots()

    def is_absolute(self) -> bool:
        """Tell whether the path starts at a root or a drive."""
        path = self._path
        return path[:1] in ("/", "\\") or (len(path) > 1 and path[1] == ":")

    def no_ext(self) -> Path:
        """Return the path without its extension."""
        sep = _last_separator(self._path)
        dot = self._path.rfind(".")
        return Path(self._path[:dot]) if dot >= 0 and dot > sep else Path(self._path)