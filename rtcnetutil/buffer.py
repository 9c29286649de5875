"""A packet buffer that keeps write boundaries: each read returns one whole write."""

from __future__ import annotations

import asyncio
from typing import Optional, Union

from .errors import ErrorKind, UtilError

MIN_SIZE = 2048
CUTOFF_SIZE = 128 * 1024
MAX_SIZE = 4 * 1024 * 1024
MAX_PACKET_SIZE = 0x10000
_HEADER_SIZE = 2

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """A ring buffer of length-prefixed packets shared by async writers and readers.

    ``limit_count`` caps the number of buffered packets and ``limit_size`` the
    number of buffered bytes (headers included); zero disables a limit, and a
    zero size limit means the buffer never grows beyond 4 MiB.
    """

    def __init__(self, limit_count: int = 0, limit_size: int = 0) -> None:
        self._data = bytearray()
        self._head = 0
        self._tail = 0
        self._closed = False
        self._count = 0
        self._limit_count = limit_count
        self._limit_size = limit_size
        self._cond = asyncio.Condition()

    def _available(self, size: int) -> bool:
        available = self._head - self._tail
        if available <= 0:
            available += len(self._data)
        # head == tail means empty, so one byte always stays free
        return size + _HEADER_SIZE < available

    def _grow(self) -> None:
        current = len(self._data)
        new_size = 2 * current if current < CUTOFF_SIZE else 5 * current // 4
        new_size = max(new_size, MIN_SIZE)
        if self._limit_size == 0 and new_size > MAX_SIZE:
            new_size = MAX_SIZE
        if self._limit_size > 0 and new_size > self._limit_size + 1:
            new_size = self._limit_size + 1
        if new_size <= current:
            raise UtilError(ErrorKind.BUFFER_FULL)

        if self._head <= self._tail:
            content = self._data[self._head : self._tail]
        else:
            content = self._data[self._head :] + self._data[: self._tail]
        new_data = bytearray(new_size)
        new_data[: len(content)] = content
        self._data = new_data
        self._head = 0
        self._tail = len(content)

    def _used(self) -> int:
        used = self._tail - self._head
        if used < 0:
            used += len(self._data)
        return used

    def _store(self, packet: BytesLike) -> None:
        length = len(packet)
        while not self._available(length):
            self._grow()

        data = self._data
        capacity = len(data)
        for byte in (length >> 8, length & 0xFF):
            data[self._tail] = byte
            self._tail = (self._tail + 1) % capacity

        end = min(capacity, self._tail + length)
        first = end - self._tail
        data[self._tail : end] = packet[:first]
        self._tail += first
        if self._tail >= capacity:
            rest = length - first
            data[:rest] = packet[first:]
            self._tail = rest
        self._count += 1

    def _take(self, size: int) -> bytes:
        data = self._data
        capacity = len(data)
        high = data[self._head]
        self._head = (self._head + 1) % capacity
        low = data[self._head]
        self._head = (self._head + 1) % capacity
        length = (high << 8) | low

        copied = min(length, size)
        if self._head + copied < capacity:
            packet = bytes(data[self._head : self._head + copied])
        else:
            first = capacity - self._head
            packet = bytes(data[self._head :]) + bytes(data[: copied - first])

        # skip the whole packet, including whatever did not fit
        self._head += length
        if self._head >= capacity:
            self._head -= capacity
        if self._head == self._tail:
            self._head = 0
            self._tail = 0
        self._count -= 1

        if copied < length:
            raise UtilError(ErrorKind.BUFFER_SHORT)
        return packet

    async def write(self, packet: BytesLike) -> int:
        """Append one packet and return its length.

        Raises ``PACKET_TOO_BIG`` for packets of 64 KiB or more,
        ``BUFFER_CLOSED`` after :meth:`close` and ``BUFFER_FULL`` when a limit
        would be exceeded.
        """
        length = len(packet)
        if length >= MAX_PACKET_SIZE:
            raise UtilError(ErrorKind.PACKET_TOO_BIG)
        async with self._cond:
            if self._closed:
                raise UtilError(ErrorKind.BUFFER_CLOSED)
            if (self._limit_count > 0 and self._count >= self._limit_count) or (
                self._limit_size > 0
                and self._used() + _HEADER_SIZE + length > self._limit_size
            ):
                raise UtilError(ErrorKind.BUFFER_FULL)
            self._store(packet)
            self._cond.notify_all()
        return length

    async def read(self, size: int, timeout: Optional[float] = None) -> bytes:
        """Return the next packet, waiting until one arrives.

        ``size`` is the most bytes the caller accepts; a longer packet is
        dropped and ``BUFFER_SHORT`` raised. ``timeout`` in seconds bounds
        each wait and raises ``TIMEOUT``. Once closed and drained, raises
        ``BUFFER_CLOSED``.
        """
        if size < 0:
            raise ValueError("size must not be negative")
        async with self._cond:
            while True:
                if self._head != self._tail:
                    return self._take(size)
                if self._closed:
                    raise UtilError(ErrorKind.BUFFER_CLOSED)
                try:
                    await asyncio.wait_for(self._cond.wait(), timeout)
                except asyncio.TimeoutError:
                    raise UtilError(ErrorKind.TIMEOUT) from None

    async def close(self) -> None:
        """Refuse further writes and wake every waiting reader; buffered data stays readable."""
        async with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()

    def is_closed(self) -> bool:
        """Return True once :meth:`close` has been called."""
        return self._closed

    def count(self) -> int:
        """Return the number of buffered packets."""
        return self._count

    def size(self) -> int:
        """Return the number of buffered bytes, length headers included."""
        return self._used()

    def set_limit_count(self, limit: int) -> None:
        """Cap the number of buffered packets; zero removes the cap."""
        self._limit_count = limit

    def set_limit_size(self, limit: int) -> None:
        """Cap the number of buffered bytes; zero means the 4 MiB default."""
        self._limit_size = limit