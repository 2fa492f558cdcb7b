"""Pytest fixtures: a scripted JSON-RPC server on an ephemeral port."""

import asyncio
import json
import socket
import sys

import pytest
import pytest_asyncio
from loguru import logger


class MockServer:
    """
    Line based JSON-RPC 1.0 server.

    `handlers` maps a method name to a callable taking the first parameter
    and returning either a dict merged into the response (`{"result": ...}`
    or `{"error": ...}`), raw bytes written as they are, or None to close the
    connection without answering.
    """

    def __init__(self):
        self.handlers = {}
        self.requests = []
        self.address = None
        self._server = None
        self._writers = []

    async def start(self):
        self._server = await asyncio.start_server(self.client_connected, "127.0.0.1", 0)
        port = self._server.sockets[0].getsockname()[1]
        self.address = f"127.0.0.1:{port}"

    async def stop(self):
        self._server.close()
        for writer in self._writers:
            writer.close()
        await self._server.wait_closed()

    def respond(self, request):
        handler = self.handlers.get(request["method"])
        if handler is None:
            return {"result": None, "error": f"rpc: can't find method {request['method']}"}
        return handler(request["params"][0])

    async def client_connected(self, reader, writer):
        self._writers.append(writer)
        try:
            async for line in reader:
                if not line.strip():
                    continue
                request = json.loads(line)
                self.requests.append(request)
                response = self.respond(request)
                if response is None:
                    break
                if isinstance(response, bytes):
                    writer.write(response)
                else:
                    payload = {"id": request["id"], "result": None, "error": None}
                    payload.update(response)
                    writer.write(json.dumps(payload).encode() + b"\n")
                await writer.drain()
        finally:
            writer.close()


@pytest_asyncio.fixture
async def rpc_server():
    server = MockServer()
    await server.start()
    yield server
    await server.stop()


@pytest.fixture
def closed_address():
    """Address of a port nothing listens on."""
    sock = socket.socket()
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"127.0.0.1:{port}"


@pytest.fixture(autouse=True)
def default_logger():
    """Undo sinks added by configure_logging, they may point at a captured stream."""
    yield
    logger.remove()
    logger.add(sys.__stderr__)
