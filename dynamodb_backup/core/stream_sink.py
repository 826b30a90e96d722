"""
Stream Sink

Single-slot handoff between the scan loop (producer) and the S3 upload
(consumer). The producer blocks in append() until the consumer has taken
the previous chunk, so at most one chunk is ever pending and a slow upload
throttles the scan instead of letting it buffer a whole table in memory.

The consumer side is file-like (read(size)) so boto3's upload_fileobj can
pull from it directly.
"""

import logging
import threading
from typing import Iterator, Optional, Union

from ..exceptions import SinkClosedError

logger = logging.getLogger(__name__)


class StreamSink:
    """Bounded (capacity 1) push/pull byte channel."""

    def __init__(self, name: str = "", encoding: str = "utf-8"):
        self.name = name
        self.encoding = encoding
        self._condition = threading.Condition()
        self._slot: Optional[bytes] = None
        self._closed = False
        self._error: Optional[BaseException] = None
        self._buffer = bytearray()
        self.chunks_appended = 0
        self.bytes_appended = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def drained(self) -> bool:
        """True once the sink is closed and its last chunk has been taken."""
        with self._condition:
            return self._closed and self._slot is None

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def append(self, chunk: Union[str, bytes]) -> None:
        """Hand one chunk to the consumer, blocking while the previous one is pending.

        Raises:
            SinkClosedError: If the sink was closed, or the consumer aborted
        """
        if isinstance(chunk, str):
            chunk = chunk.encode(self.encoding)

        with self._condition:
            if self._closed:
                raise SinkClosedError(f"Cannot append to closed stream sink '{self.name}'")
            while self._slot is not None and self._error is None:
                self._condition.wait()
            if self._error is not None:
                raise SinkClosedError(
                    f"Consumer of stream sink '{self.name}' aborted: {self._error}",
                    original_error=self._error
                )
            self._slot = bytes(chunk)
            self.chunks_appended += 1
            self.bytes_appended += len(chunk)
            self._condition.notify_all()

    def close(self) -> None:
        """Signal end-of-stream. The consumer sees EOF once the pending chunk is drained."""
        with self._condition:
            self._closed = True
            self._condition.notify_all()
        logger.debug(f"Stream sink '{self.name}' closed after {self.chunks_appended} chunks")

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def abort(self, error: BaseException) -> None:
        """Called by a failed consumer so a blocked producer raises instead of waiting forever."""
        with self._condition:
            self._error = error
            self._condition.notify_all()

    def next_chunk(self) -> Optional[bytes]:
        """Take the pending chunk, waiting for one. Returns None at end-of-stream."""
        with self._condition:
            while self._slot is None and not self._closed and self._error is None:
                self._condition.wait()
            if self._slot is None:
                return None
            chunk, self._slot = self._slot, None
            self._condition.notify_all()
            return chunk

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.next_chunk()
            if chunk is None:
                return
            yield chunk

    def read(self, size: Optional[int] = -1) -> bytes:
        """Read up to size bytes, blocking until that many are available or the stream ends.

        Short reads only happen at end-of-stream; s3transfer sizes multipart
        parts by what read() returns.
        """
        if size is None or size < 0:
            for chunk in self:
                self._buffer += chunk
            data = bytes(self._buffer)
            self._buffer.clear()
            return data

        while len(self._buffer) < size:
            chunk = self.next_chunk()
            if chunk is None:
                break
            self._buffer += chunk

        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data
