"""An in-memory network between two endpoints that can drop and reorder packets."""

from __future__ import annotations

import asyncio
import errno
import random
from collections import deque
from typing import Callable, Deque, Optional, Tuple

from ..errors import ErrorKind, UtilError
from .base import Address, Conn

TICK_WAIT = 10e-6
_READ_QUEUE_DEPTH = 1024

FilterFn = Callable[[bytes], bool]


def _not_applicable() -> UtilError:
    return UtilError(ErrorKind.IO, OSError("Not applicable"))


def inverse(queue: Deque[bytes]) -> bool:
    """Reverse ``queue`` in place; return False, leaving it alone, when it has fewer than two items."""
    if len(queue) < 2:
        return False
    queue.reverse()
    return True


class BridgeConn(Conn):
    """One endpoint of a :class:`Bridge`."""

    def __init__(self, bridge: "Bridge", conn_id: int, loss_chance: int) -> None:
        self._bridge = bridge
        self._id = conn_id
        self._loss_chance = loss_chance
        self._incoming: "asyncio.Queue[bytes]" = asyncio.Queue(_READ_QUEUE_DEPTH)

    async def _deliver(self, packet: bytes) -> None:
        await self._incoming.put(packet)

    async def connect(self, addr: Address) -> None:
        raise _not_applicable()

    async def recv(self, size: int) -> bytes:
        packet = await self._incoming.get()
        return packet[:size]

    async def recv_from(self, size: int) -> Tuple[bytes, Address]:
        return await self.recv(size), ("0.0.0.0", 0)

    async def send(self, data: bytes) -> int:
        if random.getrandbits(8) % 100 < self._loss_chance:
            return len(data)
        return await self._bridge.push(data, self._id)

    async def send_to(self, data: bytes, target: Address) -> int:
        raise _not_applicable()

    async def local_addr(self) -> Address:
        raise UtilError(
            ErrorKind.IO, OSError(errno.EADDRNOTAVAIL, "Addr Not Available")
        )

    async def remote_addr(self) -> Optional[Address]:
        return None

    async def close(self) -> None:
        return None


class Bridge:
    """A network between :attr:`conn0` and :attr:`conn1`.

    Packets sent on one endpoint wait in that endpoint's queue until
    :meth:`tick` or :meth:`process` hands them to the other endpoint.
    ``loss_chance`` is the percentage of sends silently lost; the filters,
    when given, decide per packet whether a send from endpoint 0 or 1 is kept.
    """

    def __init__(
        self,
        loss_chance: int = 0,
        filter_cb0: Optional[FilterFn] = None,
        filter_cb1: Optional[FilterFn] = None,
    ) -> None:
        if not 0 <= loss_chance <= 255:
            raise ValueError("loss_chance must be between 0 and 255")
        self._drop_nwrites = [0, 0]
        self._reorder_nwrites = [0, 0]
        self._stacks: Tuple[Deque[bytes], Deque[bytes]] = (deque(), deque())
        self._queues: Tuple[Deque[bytes], Deque[bytes]] = (deque(), deque())
        self._filters = (filter_cb0, filter_cb1)
        self.conn0 = BridgeConn(self, 0, loss_chance)
        self.conn1 = BridgeConn(self, 1, loss_chance)
        self._conns = (self.conn0, self.conn1)

    @staticmethod
    def _check_id(conn_id: int) -> int:
        if conn_id not in (0, 1):
            raise IndexError(f"conn_id must be 0 or 1, not {conn_id}")
        return conn_id

    def queue_len(self, conn_id: int) -> int:
        """Return the number of packets waiting in the queue of endpoint ``conn_id``."""
        return len(self._queues[self._check_id(conn_id)])

    async def push(self, data: bytes, conn_id: int) -> int:
        """Queue a packet sent by endpoint ``conn_id`` and return its length."""
        conn_id = self._check_id(conn_id)
        # Keep the push rate in step with the tick rate.
        await asyncio.sleep(TICK_WAIT)

        packet = bytes(data)
        queue = self._queues[conn_id]
        if self._drop_nwrites[conn_id] > 0:
            self._drop_nwrites[conn_id] -= 1
        elif self._reorder_nwrites[conn_id] > 0:
            stack = self._stacks[conn_id]
            stack.append(packet)
            self._reorder_nwrites[conn_id] -= 1
            if self._reorder_nwrites[conn_id] == 0 and inverse(stack):
                queue.extend(stack)
                stack.clear()
        else:
            keep = self._filters[conn_id]
            if keep is None or keep(packet):
                queue.append(packet)
        return len(data)

    def reorder(self, conn_id: int) -> bool:
        """Reverse the order of the packets queued by endpoint ``conn_id``."""
        return inverse(self._queues[self._check_id(conn_id)])

    def drop_offset(self, conn_id: int, offset: int, n: int) -> None:
        """Drop ``n`` queued packets of endpoint ``conn_id`` starting at ``offset``."""
        queue = self._queues[self._check_id(conn_id)]
        if offset < 0 or n < 0 or offset + n > len(queue):
            raise IndexError("range to drop lies outside the queue")
        items = list(queue)
        del items[offset : offset + n]
        queue.clear()
        queue.extend(items)

    def drop_next_nwrites(self, conn_id: int, n: int) -> None:
        """Drop the next ``n`` packets sent by endpoint ``conn_id``."""
        self._drop_nwrites[self._check_id(conn_id)] = n

    def reorder_next_nwrites(self, conn_id: int, n: int) -> None:
        """Hold the next ``n`` packets sent by endpoint ``conn_id`` and queue them reversed."""
        self._reorder_nwrites[self._check_id(conn_id)] = n

    def clear(self) -> None:
        """Discard every queued packet in both directions."""
        for queue in self._queues:
            queue.clear()

    async def tick(self) -> int:
        """Hand at most one queued packet in each direction to its reader; return how many moved."""
        moved = 0
        for conn_id, queue in enumerate(self._queues):
            if queue:
                packet = queue.popleft()
                moved += 1
                await self._conns[1 - conn_id]._deliver(packet)
        return moved

    async def process(self) -> None:
        """Tick until both queues are empty."""
        while True:
            await asyncio.sleep(TICK_WAIT)
            await self.tick()
            if self.queue_len(0) == 0 and self.queue_len(1) == 0:
                break