import io

from .exceptions import PayloadUnavailableError


class MemoryBuffer:
    """Accumulates response bytes up to a fixed threshold.

    Every written chunk is counted. Chunks are retained only while the running
    total stays within ``max_bytes``; the first chunk that pushes the total past
    it drops everything retained so far, and nothing is stored afterwards.
    """

    def __init__(self, max_bytes: int):
        if max_bytes < 0:
            raise ValueError("max_bytes must be non-negative")
        self.max_bytes = max_bytes
        self.total_bytes = 0
        self._data = io.BytesIO()

    @property
    def overflowed(self) -> bool:
        return self.total_bytes > self.max_bytes

    def write(self, chunk: bytes) -> bool:
        """Count ``chunk`` and retain it if still within the threshold.

        Returns True if the chunk was retained.
        """
        was_overflowed = self.overflowed
        self.total_bytes += len(chunk)
        if not self.overflowed:
            self._data.write(chunk)
            return True
        if not was_overflowed:
            self._data = io.BytesIO()
        return False

    def getvalue(self) -> bytes:
        if self.overflowed:
            raise PayloadUnavailableError.exceeded(self.total_bytes, self.max_bytes)
        return self._data.getvalue()
