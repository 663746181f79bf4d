"""SHA-1 message digest."""

from __future__ import annotations

import struct

_MASK = 0xFFFFFFFF
_INITIAL_STATE = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)
_BLOCK = 64


def _rol(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (32 - bits))) & _MASK


def _compress(state: tuple[int, ...], block: bytes) -> tuple[int, ...]:
    """Hash one 64-byte block into the running state."""
    w = list(struct.unpack(">16I", block))
    for i in range(16, 80):
        w.append(_rol(w[i - 3] ^ w[i - 8] ^ w[i - 14] ^ w[i - 16], 1))

    a, b, c, d, e = state
    for i, word in enumerate(w):
        if i < 20:
            f, k = (b & (c ^ d)) ^ d, 0x5A827999
        elif i < 40:
            f, k = b ^ c ^ d, 0x6ED9EBA1
        elif i < 60:
            f, k = ((b | c) & d) | (b & c), 0x8F1BBCDC
        else:
            f, k = b ^ c ^ d, 0xCA62C1D6
        a, b, c, d, e = (_rol(a, 5) + f + e + k + word) & _MASK, a, _rol(b, 30), c, d

    return tuple((s + v) & _MASK for s, v in zip(state, (a, b, c, d, e)))


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class Sha1:
    """Incremental SHA-1 hasher."""

    digest_size = 20
    block_size = _BLOCK

    def __init__(self) -> None:
        self._state: tuple[int, ...] = _INITIAL_STATE
        self._buffer = bytearray()
        self._length = 0

    def update(self, data: bytes | bytearray | memoryview | str) -> None:
        """Feed more data into the hash; text is encoded as UTF-8."""
        chunk = _as_bytes(data)
        self._length += len(chunk)
        self._buffer += chunk
        full = len(self._buffer) - len(self._buffer) % _BLOCK
        view = memoryview(self._buffer)
        try:
            for offset in range(0, full, _BLOCK):
                self._state = _compress(self._state, bytes(view[offset:offset + _BLOCK]))
        finally:
            view.release()
        del self._buffer[:full]

    def digest(self) -> bytes:
        """Return the 20-byte digest of the data fed so far."""
        bit_length = (self._length * 8) & 0xFFFFFFFFFFFFFFFF
        padding = b"\x80" + b"\x00" * ((55 - self._length) % _BLOCK)
        tail = bytes(self._buffer) + padding + struct.pack(">Q", bit_length)
        state = self._state
        for offset in range(0, len(tail), _BLOCK):
            state = _compress(state, tail[offset:offset + _BLOCK])
        return struct.pack(">5I", *state)

    def hexdigest(self) -> str:
        """Return the digest as lower-case hexadecimal text."""
        return self.digest().hex()


def sha1_hash(data: bytes | bytearray | memoryview | str) -> bytes:
    """Return the SHA-1 digest of ``data`` in one call."""
    hasher = Sha1()
    hasher.update(data)
    return hasher.digest()