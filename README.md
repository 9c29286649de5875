# rtcnetutil

Asyncio networking building blocks for real-time communication stacks.
Addresses are `(host, port)` tuples throughout, and failures are raised as
`rtcnetutil.errors.UtilError`, whose `kind` is an `ErrorKind` member.

## Modules

- `rtcnetutil.buffer`: `Buffer(limit_count, limit_size)`, an async packet
  buffer that keeps each write as a separate packet. `write(packet)` stores
  a packet (under 64 KiB) and returns its length; `read(size, timeout)`
  returns the next packet, waiting for one if needed. A packet longer than
  `size` is discarded and `BUFFER_SHORT` raised; an expired `timeout` (in
  seconds) raises `TIMEOUT`. `close()` refuses further writes while buffered
  packets stay readable, after which reads raise `BUFFER_CLOSED`. Limits on
  packet count and byte size (headers included) raise `BUFFER_FULL`; they can
  be changed with `set_limit_count()` and `set_limit_size()`. `count()`,
  `size()` and `is_closed()` report the state.
- `rtcnetutil.conn.base`: the abstract `Conn` and `Listener` classes, and
  `lookup_host(use_ipv4, host)`, which resolves `"name:port"` or a tuple to
  the first address of the wanted family.
- `rtcnetutil.conn.pipe`: `pipe()` returns two `PipeConn` endpoints joined
  back to back in memory.
- `rtcnetutil.conn.bridge`: `Bridge(loss_chance, filter_cb0, filter_cb1)`, an
  in-memory network between `bridge.conn0` and `bridge.conn1`. Sent packets
  wait in a queue until `tick()` or `process()` delivers them. Queues can be
  inspected with `queue_len()`, reordered with `reorder()`, trimmed with
  `drop_offset()` and emptied with `clear()`; `drop_next_nwrites()` and
  `reorder_next_nwrites()` act on packets not yet sent. `inverse(queue)`
  reverses a deque of two or more packets.
- `rtcnetutil.conn.disconnected`: `DisconnectedPacketConn(conn)` wraps a
  connectionless `Conn` so that `send()` replies to the sender of the last
  packet received with `recv()`.
- `rtcnetutil.conn.udp`: `UdpSocketConn`, a `Conn` over a real UDP socket;
  `await UdpSocketConn.bind(("127.0.0.1", 0))` opens one. It waits on the
  socket with the event loop's reader and writer callbacks, so it needs a
  selector-based event loop.
- `rtcnetutil.conn.udp_listener`: `listen(laddr)` and
  `ListenConfig(backlog, accept_filter).listen(laddr)` return a `UdpListener`
  that hands out one `ListenerConn` per remote address sending to its socket.
  `backlog` bounds connections waiting in `accept()` (zero means 128);
  `accept_filter` is an async callable deciding from a new peer's first
  packet whether to create a connection. After `close()`, `accept()` raises
  `CLOSED_LISTENER`.
- `rtcnetutil.fixed_big_int`: `FixedBigInt(n)`, an `n`-bit integer with
  `lsh()`, `bit()` and `set_bit()`, printed as zero-padded upper-case hex in
  64-bit words.
- `rtcnetutil.marshal`: the `MarshalSize`, `Marshal` and `Unmarshal` base
  classes for binary encodings (`Marshal.marshal()` checks that
  `marshal_to()` fills exactly `marshal_size()` bytes), plus the `Chain` and
  `Take` buffer views and the `exact_len()` and `is_empty()` helpers.
- `rtcnetutil.ifaces`: `ifaces()` lists the local interface addresses as
  `Interface` records (`name`, `kind`, `addr`, `mask`, `hop`);
  `build_interfaces()` builds the same records from address data you supply.
- `rtcnetutil.errors`: `UtilError`, `ErrorKind`, and the
  `KeyingMaterialExporter` interface with its `KeyingMaterialExporterError`.

## Installation

```
pip install rtcnetutil
```

## Example

```python
import asyncio
from rtcnetutil.buffer import Buffer

async def demo():
    buf = Buffer(0, 0)
    await buf.write(b"\x00\x01")
    print(await buf.read(4, None))   # b'\x00\x01'
    await buf.close()

asyncio.run(demo())
```

## Command line

List the local interface addresses, one per line with its index:

```
rtcnetutil-ifaces
```

## What it does not do

`FixedBigInt` is only the bit window; the package has no replay detector
built on it. It has no virtual network or NAT simulation: the in-memory
connections are `pipe()` and `Bridge`. `KeyingMaterialExporter` is an
interface only; nothing in the package implements it.

## Running the tests

```
pip install rtcnetutil[test]
pytest
```