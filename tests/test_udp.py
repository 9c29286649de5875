import pytest

from rtcnetutil.conn.udp import UdpSocketConn
from rtcnetutil.errors import ErrorKind, UtilError


@pytest.mark.asyncio
async def test_bind_reports_loopback_address():
    conn = await UdpSocketConn.bind(("127.0.0.1", 0))
    try:
        host, port = await conn.local_addr()
        assert host == "127.0.0.1"
        assert 0 < port < 65536
    finally:
        await conn.close()


@pytest.mark.asyncio
async def test_loopback_send_to_self():
    conn = await UdpSocketConn.bind(("127.0.0.1", 0))
    try:
        laddr = await conn.local_addr()
        msg = b"PING!"
        assert await conn.send_to(msg, laddr) == len(msg)
        data, raddr = await conn.recv_from(1000)
        assert data == msg
        assert raddr == laddr
    finally:
        await conn.close()


@pytest.mark.asyncio
async def test_connected_send_and_recv():
    server = await UdpSocketConn.bind(("127.0.0.1", 0))
    client = await UdpSocketConn.bind(("127.0.0.1", 0))
    try:
        await client.connect(await server.local_addr())
        assert await client.send(b"hello") == 5
        data, addr = await server.recv_from(100)
        assert data == b"hello"
        assert addr == await client.local_addr()

        await server.send_to(b"back", addr)
        assert await client.recv(100) == b"back"
        assert await client.remote_addr() is None
    finally:
        await client.close()
        await server.close()


@pytest.mark.asyncio
async def test_recv_after_close_fails():
    conn = await UdpSocketConn.bind(("127.0.0.1", 0))
    await conn.close()
    with pytest.raises(UtilError) as info:
        await conn.recv(10)
    assert info.value.kind is ErrorKind.IO


@pytest.mark.asyncio
async def test_bind_address_in_use_fails():
    first = await UdpSocketConn.bind(("127.0.0.1", 0))
    try:
        with pytest.raises(UtilError) as info:
            await UdpSocketConn.bind(await first.local_addr())
        assert info.value.kind is ErrorKind.IO
    finally:
        await first.close()