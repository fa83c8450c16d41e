import pytest

from libs.http_request.buffer import MemoryBuffer
from libs.http_request.exceptions import PayloadUnavailableError


class TestMemoryBuffer:
    def test_retains_within_threshold(self):
        buffer = MemoryBuffer(max_bytes=8)
        assert buffer.write(b"abcd") is True
        assert buffer.write(b"efgh") is True
        assert buffer.overflowed is False
        assert buffer.getvalue() == b"abcdefgh"
        assert buffer.total_bytes == 8

    def test_counts_past_threshold(self):
        buffer = MemoryBuffer(max_bytes=8)
        buffer.write(b"abcd")
        assert buffer.write(b"efghi") is False
        assert buffer.write(b"j") is False
        assert buffer.overflowed is True
        assert buffer.total_bytes == 10

    def test_getvalue_after_overflow_raises(self):
        buffer = MemoryBuffer(max_bytes=2)
        buffer.write(b"abc")
        with pytest.raises(PayloadUnavailableError) as exc_info:
            buffer.getvalue()
        assert "3 bytes" in str(exc_info.value)
        assert "(2 bytes)" in str(exc_info.value)

    def test_zero_threshold(self):
        buffer = MemoryBuffer(max_bytes=0)
        assert buffer.getvalue() == b""
        assert buffer.write(b"a") is False
        assert buffer.overflowed is True

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            MemoryBuffer(max_bytes=-1)
