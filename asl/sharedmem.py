"""Named shared memory blocks visible to several processes."""

from __future__ import annotations

from multiprocessing import shared_memory
from types import TracebackType


class SharedMem:
    """A named block of memory shared between processes.

    The block is opened if it already exists and created otherwise. Closing it
    also removes the name, so later openers get a fresh block. Memory views
    obtained from ``buffer`` must be released before closing.
    """

    def __init__(self, name: str, size: int) -> None:
        if size <= 0:
            raise ValueError("shared memory size must be positive")
        self._size = size
        try:
            self._shm: shared_memory.SharedMemory | None = shared_memory.SharedMemory(
                name=name, create=True, size=size
            )
        except FileExistsError:
            self._shm = shared_memory.SharedMemory(name=name, create=False)
            if self._shm.size < size:
                self._shm.close()
                self._shm = None
                raise ValueError(f"shared memory {name!r} is smaller than {size} bytes")

    @property
    def name(self) -> str:
        """The name of the block."""
        return self._require_open().name

    def _require_open(self) -> shared_memory.SharedMemory:
        if self._shm is None:
            raise ValueError("shared memory is closed")
        return self._shm

    def buffer(self) -> memoryview:
        """Return a writable view of the block's ``size`` bytes."""
        return self._require_open().buf[: self._size]

    def size(self) -> int:
        """Return the size requested for the block."""
        return self._size

    def close(self) -> None:
        """Unmap the block and remove its name."""
        if self._shm is None:
            return
        shm, self._shm = self._shm, None
        shm.close()
        try:
            shm.unlink()
        except FileNotFoundError:
            pass

    def __enter__(self) -> SharedMem:
        return self

    def __exit__(
        self,
        *args: type[BaseException] | BaseException | TracebackType | None,
    ) -> None:
        self.close()