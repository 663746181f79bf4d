import os
import uuid

import pytest

from asl.sharedmem import SharedMem


def _unique_name():
    return f"asltest{os.getpid()}{uuid.uuid4().hex[:8]}"


def test_size_and_buffer_length():
    with SharedMem(_unique_name(), 64) as mem:
        assert mem.size() == 64
        with mem.buffer() as view:
            assert len(view) == 64


def test_write_and_read_back():
    with SharedMem(_unique_name(), 16) as mem:
        with mem.buffer() as view:
            view[:5] = b"hello"
        with mem.buffer() as view:
            assert bytes(view[:5]) == b"hello"


def test_two_handles_share_data():
    name = _unique_name()
    first = SharedMem(name, 32)
    second = SharedMem(name, 32)
    try:
        with first.buffer() as view:
            view[:3] = b"abc"
        with second.buffer() as view:
            assert bytes(view[:3]) == b"abc"
    finally:
        second.close()
        first.close()


def test_non_positive_size_rejected():
    with pytest.raises(ValueError):
        SharedMem(_unique_name(), 0)


def test_buffer_after_close_raises():
    mem = SharedMem(_unique_name(), 8)
    mem.close()
    with pytest.raises(ValueError):
        mem.buffer()


def test_close_twice_is_harmless():
    mem = SharedMem(_unique_name(), 8)
    mem.close()
    mem.close()
    with pytest.raises(ValueError):
        mem.buffer()


def test_name_is_kept():
    name = _unique_name()
    with SharedMem(name, 8) as mem:
        assert mem.name == name