import asyncio
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncGenerator, Tuple

from loguru import logger

from jrpc_client.socket_base.send_recv import (Address, ClientRecvType,
                                               ClientSendType)

BUFF_SIZE = 1500
UNIX_PREFIX = "unix:"


def parse_address(address: str) -> Address:
    """
        Splits a connection address.
        `unix:/path/to.sock` gives the socket path, `host:port` and `[ipv6]:port` give a (host, port) pair.
    :param address: address string
    :return socket path or (host, port)
    """
    if address.startswith(UNIX_PREFIX):
        path = address[len(UNIX_PREFIX):]
        if not path:
            raise ValueError(f"missing socket path in address {address!r}")
        return path
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"missing port in address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        number = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None
    if not 0 < number < 65536:
        raise ValueError(f"invalid port in address {address!r}")
    return (host, number)


def get_data_to_send(message: bytes) -> bytes:
    """
        Terminates a message with a newline.
    :param message: message in bytes
    :return bytes
    """
    return message + b"\n"


def is_data_empty(data: bytes) -> bool:
    """
        Checks the emptiness of the incoming data, an empty read means the peer closed the stream.
    :param data: data in bytes
    :return bool
    """
    return len(data) == 0


async def open_connection(address: str) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    target = parse_address(address)
    if isinstance(target, str):
        return await asyncio.open_unix_connection(target)
    host, port = target
    return await asyncio.open_connection(host, port)


async def client_send(message: bytes, writer: asyncio.StreamWriter) -> None:
    """
        Sending a message on the client side.
    :param message: message in bytes
    :param writer: stream writer of the connection
    :return
    """
    writer.write(get_data_to_send(message))
    await writer.drain()


async def client_recv(reader: asyncio.StreamReader) -> bytes:
    """
        Receiving data on the client side.
        Returns whatever is available, up to BUFF_SIZE bytes. Framing is left to the caller.
    :param reader: stream reader of the connection
    :return bytes, empty once the peer closed the connection
    """
    return await reader.read(BUFF_SIZE)


async def disconnect(writer: asyncio.StreamWriter, address: str):
    """
        Disconnection from the connected party.
    :param writer: stream writer required for this
    :param address: address the connection was opened to
    :return
    """
    logger.debug(f"Close the connection: {address}")
    writer.close()
    try:
        await writer.wait_closed()
    except OSError as e:
        logger.debug(f"Connection {address} closed with error: {e}")


@asynccontextmanager
async def client_sr(
    address: str
) -> AsyncGenerator[Tuple[ClientSendType, ClientRecvType], None]:
    """
        Creating a new client. Opens a socket connection.
        It is used as an asynchronous context manager that works with the client_send and client_recv functions.
        Upon completion, the connection is closed, also when the body raises.
    :param address: `host:port` or `unix:/path`
    :return asynchronous context manager with (send, recv)
    """
    reader, writer = await open_connection(address)
    logger.debug(f"Connected: {address}")
    try:
        yield (partial(client_send, writer=writer), partial(client_recv, reader))
    finally:
        await disconnect(writer, address)
