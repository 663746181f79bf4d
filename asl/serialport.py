"""Serial port communication with line-oriented reading."""

from __future__ import annotations

import time
from types import TracebackType

import serial

_BITRATES = (
    0, 300, 600, 1200, 2400, 4800, 9600, 19200, 38400, 57600,
    115200, 230400, 460800, 500000, 576000, 921600, 1000000,
)
_BYTESIZES = {"5": serial.FIVEBITS, "6": serial.SIXBITS, "7": serial.SEVENBITS, "8": serial.EIGHTBITS}
_PARITIES = {
    "N": serial.PARITY_NONE,
    "O": serial.PARITY_ODD,
    "E": serial.PARITY_EVEN,
    "M": serial.PARITY_MARK,
    "S": serial.PARITY_SPACE,
}
_STOPBITS = {"1": serial.STOPBITS_ONE, "2": serial.STOPBITS_TWO}
_DEFAULT_TIMEOUT = 0.4
_MAX_LINE = 1024


class SerialPort:
    """A serial port that can be configured, read and written.

    ``open`` accepts a device name (such as ``/dev/ttyUSB0`` or ``COM3``) or a
    pyserial URL (such as ``loop://``).
    """

    def __init__(self) -> None:
        self._port: serial.SerialBase | None = None
        self._nl = b""

    def open(self, port: str) -> bool:
        """Open the named port; return False if it cannot be opened."""
        try:
            self._port = serial.serial_for_url(port, timeout=_DEFAULT_TIMEOUT)
        except (serial.SerialException, ValueError, OSError):
            self._port = None
            return False
        return True

    def _require_open(self) -> serial.SerialBase:
        if self._port is None or not self._port.is_open:
            raise OSError("serial port is not open")
        return self._port

    def config(self, bps: int, mode: str = "8N1") -> bool:
        """Set the bit rate and a mode such as ``"8N1"`` (bits, parity N/O/E/M/S, stop bits, optional ``X`` for XON/XOFF).

        A mode shorter than three characters means ``"8N1"``. Return False if the
        bit rate is not supported or the port rejects the settings.
        """
        if len(mode) < 3:
            return self.config(bps, "8N1")
        if bps not in _BITRATES:
            print(f"SerialPort: Wrong bitrate {bps}")
            return False
        port = self._require_open()
        try:
            port.baudrate = bps
            port.bytesize = _BYTESIZES.get(mode[0], serial.EIGHTBITS)
            port.parity = _PARITIES.get(mode[1], serial.PARITY_NONE)
            port.stopbits = _STOPBITS.get(mode[2], serial.STOPBITS_ONE_POINT_FIVE)
            port.xonxoff = len(mode) > 3 and mode[3] == "X"
            port.rtscts = False
            port.dsrdtr = False
        except (serial.SerialException, ValueError):
            return False
        return True

    def set_timeout(self, seconds: float) -> None:
        """Set how long a read waits for the first byte."""
        self._require_open().timeout = seconds

    def set_line_end(self, nl: str | bytes) -> None:
        """Set the sequence that ends lines for ``read_line``; empty means CR or LF."""
        self._nl = nl.encode("utf-8") if isinstance(nl, str) else bytes(nl)

    def available(self) -> int:
        """Return the number of bytes that can be read without waiting."""
        return self._require_open().in_waiting

    def wait_input(self, timeout: float = 1.0) -> bool:
        """Wait up to ``timeout`` seconds for input; return True if some arrived."""
        start = time.monotonic()
        while True:
            if self.available() > 0:
                return True
            if time.monotonic() - start >= timeout:
                return False
            time.sleep(0.001)

    def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes, waiting at most the timeout for the first one."""
        port = self._require_open()
        if n <= 0:
            return b""
        data = port.read(1)
        if data and n > 1:
            waiting = port.in_waiting
            if waiting > 0:
                data += port.read(min(n - 1, waiting))
        return data

    def write(self, data: bytes | str) -> int:
        """Write bytes (text is encoded as UTF-8) and return the number written."""
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        return self._require_open().write(payload) or 0

    def read_line(self) -> str:
        """Read a line, without its terminator, until the line end, a timeout or 1024 bytes."""
        port = self._require_open()
        line = bytearray()
        nl = self._nl
        matched = 0
        while True:
            c = port.read(1)
            if not c:
                break
            byte = c[0]
            if not nl:
                if byte in (0x0D, 0x0A):
                    break
                line.append(byte)
                continue
            if matched == 0 and byte != nl[0]:
                line.append(byte)
            elif byte == nl[matched]:
                matched += 1
            if matched == len(nl) or len(line) > _MAX_LINE:
                break
        return line.decode("utf-8", errors="replace")

    def close(self) -> None:
        """Close the port."""
        if self._port is not None:
            self._port.close()
            self._port = None

    def __enter__(self) -> SerialPort:
        return self

    def __exit__(
        self,
        *args: type[BaseException] | BaseException | TracebackType | None,
    ) -> None:
        self.close()