"""Starting child processes, talking to them through pipes, and process environment helpers."""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Iterable
from typing import Any

from asl.path import Path

_READ_CHUNK = 8000
_NOT_FOUND_STATUS = 127


def _decode(data: bytes | None) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


class Process:
    """A child process whose standard input, output and error are reachable through pipes."""

    def __init__(self) -> None:
        self._proc: subprocess.Popen[bytes] | None = None
        self._pid = -1
        self._detached = False
        self._has_exited = False
        self._exit_status = 0
        self._output = ""
        self._errors = ""

    @staticmethod
    def execute(command: str, args: Iterable[Any] = ()) -> Process:
        """Run a command to completion, collecting its output, errors and exit status.

        Arguments are converted to text. A command that cannot be started gives a
        process that reports ``started() == False`` and exit status 127.
        """
        process = Process()
        process.run(command, args)
        if process._proc is not None:
            out, err = process._proc.communicate()
            process._output = _decode(out)
            process._errors = _decode(err)
            process._exit_status = process._proc.returncode
            process._has_exited = True
        return process

    def run(self, command: str, args: Iterable[Any] = ()) -> None:
        """Start the command with the given arguments without waiting for it."""
        argv = [str(command), *(str(a) for a in args)]
        stream = subprocess.DEVNULL if self._detached else subprocess.PIPE
        self._has_exited = False
        try:
            self._proc = subprocess.Popen(
                argv, stdin=stream, stdout=stream, stderr=stream, bufsize=0
            )
        except OSError:
            self._proc = None
            self._pid = -1
            self._has_exited = True
            self._exit_status = _NOT_FOUND_STATUS
            return
        self._pid = self._proc.pid

    def ignore_output(self) -> None:
        """Make the next ``run`` discard the child's standard streams instead of piping them."""
        self._detached = True

    def read_output(self, n: int = _READ_CHUNK) -> bytes:
        """Read up to ``n`` bytes of the child's standard output; empty at end of output."""
        if self._proc is None or self._proc.stdout is None:
            return b""
        return self._proc.stdout.read(n) or b""

    def read_errors(self, n: int = _READ_CHUNK) -> bytes:
        """Read up to ``n`` bytes of the child's standard error; empty at end of output."""
        if self._proc is None or self._proc.stderr is None:
            return b""
        return self._proc.stderr.read(n) or b""

    def read_output_line(self) -> str:
        """Read one line of output without its line ending.

        Returns ``"\\n"`` when the output has ended and nothing was read.
        """
        line = bytearray()
        got_any = False
        while True:
            c = self.read_output(1)
            if not c:
                break
            got_any = True
            if c == b"\n":
                if line.endswith(b"\r"):
                    del line[-1]
                break
            line += c
        if not got_any and not line:
            return "\n"
        return _decode(bytes(line))

    def write_input(self, data: bytes | str) -> int:
        """Write data to the child's standard input and return the number of bytes written."""
        if self._proc is None or self._proc.stdin is None:
            return 0
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        written = self._proc.stdin.write(payload) or 0
        self._proc.stdin.flush()
        return written

    def signal(self, sig: int) -> None:
        """Send a signal to the child process."""
        if self._proc is not None and not self.finished():
            self._proc.send_signal(sig)

    def wait(self) -> int:
        """Wait for the child to end and return its exit status."""
        if self._proc is None:
            return self._exit_status if self._has_exited else 0
        if not self._has_exited:
            self._exit_status = self._proc.wait()
            self._has_exited = True
        return self._exit_status

    def finished(self) -> bool:
        """Tell whether the child has ended (True if it never ran)."""
        if self._proc is None or self._has_exited:
            return True
        status = self._proc.poll()
        if status is None:
            return False
        self._exit_status = status
        self._has_exited = True
        return True

    def started(self) -> bool:
        """Tell whether the command could actually be started."""
        if not self.finished():
            return self._pid != -1
        return self._pid != -1 and self._exit_status not in (126, 127)

    def running(self) -> bool:
        """Tell whether the child is still running."""
        return not self.finished()

    def output(self) -> str:
        """Return the standard output collected by ``execute``."""
        return self._output

    def errors(self) -> str:
        """Return the standard error collected by ``execute``."""
        return self._errors

    def exit_status(self) -> int:
        """Return the last known exit status."""
        return self._exit_status

    def pid(self) -> int:
        """Return the child's process id, or -1 if it was not started."""
        return self._pid


def env(var: str) -> str:
    """Return the value of an environment variable, or an empty string if it is unset."""
    return os.environ.get(var, "")


def set_env(var: str, value: str) -> None:
    """Set an environment variable for this process and its future children."""
    os.environ[var] = value


def my_pid() -> int:
    """Return the id of the current process."""
    return os.getpid()


def my_path() -> str:
    """Return the full path of the running executable."""
    return os.path.realpath(sys.executable) if sys.executable else ""


def my_dir() -> str:
    """Return the directory containing the running executable."""
    return str(Path(my_path()).directory())