"""Tests for perch.server.listener against a real uvicorn listener."""

import asyncio
import json
import socket

import httpx
import pytest
import websockets

from perch.app import Server
from perch.config import ServerConfig
from perch.errors import BindError, PerchError
from perch.realtime.socket import Socket
from perch.routing.router import Router
from perch.server.listener import bind_socket


@pytest.fixture
def server() -> Server:
    router = Router()
    router.get("/", lambda request: "Hello, World!")
    return Server().use(router)


@pytest.fixture
def occupied_port():
    """A port held by a listening socket for the duration of the test."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(1)
        yield sock.getsockname()[1]


class TestStart:
    async def test_start_serves_http(self, server: Server) -> None:
        config = await server.start({"host": "127.0.0.1", "port": 0, "log_level": "warning"})
        try:
            assert config.port != 0
            async with httpx.AsyncClient() as client:
                response = await client.get(f"http://127.0.0.1:{config.port}/")
            assert response.status_code == 200
            assert response.text == "Hello, World!"
        finally:
            await server.stop()

    async def test_extra_options_are_returned(self, server: Server) -> None:
        config = await server.start(
            {"host": "127.0.0.1", "port": 0, "log_level": "warning", "name": "chat"}
        )
        try:
            assert isinstance(config, ServerConfig)
            assert dict(config.extra) == {"name": "chat"}
        finally:
            await server.stop()

    async def test_cannot_start_twice(self, server: Server) -> None:
        await server.start({"host": "127.0.0.1", "port": 0, "log_level": "warning"})
        try:
            with pytest.raises(RuntimeError, match="already listening"):
                await server.start({"host": "127.0.0.1", "port": 0})
        finally:
            await server.stop()

    async def test_stop_closes_listener(self, server: Server) -> None:
        config = await server.start({"host": "127.0.0.1", "port": 0, "log_level": "warning"})
        await server.stop()

        async with httpx.AsyncClient() as client:
            with pytest.raises(httpx.ConnectError):
                await client.get(f"http://127.0.0.1:{config.port}/")

    async def test_port_in_use(self, server: Server, occupied_port: int) -> None:
        with pytest.raises(BindError) as excinfo:
            await server.start({"host": "127.0.0.1", "port": occupied_port})

        assert excinfo.value.port == occupied_port
        assert isinstance(excinfo.value, PerchError)

    async def test_failed_startup_hook(self) -> None:
        server = Server()

        @server.on_startup
        def broken() -> None:
            raise RuntimeError("no database")

        free_sock = bind_socket("127.0.0.1", 0)
        port = free_sock.getsockname()[1]
        free_sock.close()

        with pytest.raises(PerchError, match="startup"):
            await server.start({"host": "127.0.0.1", "port": port, "log_level": "critical"})

        # The pre-bound socket is released
        bind_socket("127.0.0.1", port).close()

    async def test_serve_raises_on_failed_startup(self) -> None:
        server = Server()
        server.on_startup(lambda: 1 / 0)

        with pytest.raises(PerchError):
            await server.serve({"host": "127.0.0.1", "port": 0, "log_level": "critical"})

    async def test_serve_returns_after_stop(self, server: Server) -> None:
        task = asyncio.create_task(
            server.serve({"host": "127.0.0.1", "port": 0, "log_level": "warning"})
        )
        while server._listener is None or not server._listener.running:
            assert not task.done()
            await asyncio.sleep(0.01)

        await server.stop()
        await asyncio.wait_for(task, timeout=5)


class TestBindSocket:
    def test_ephemeral_port(self) -> None:
        sock = bind_socket("127.0.0.1", 0)
        try:
            assert sock.getsockname()[1] > 0
        finally:
            sock.close()

    def test_occupied_port_raises(self, occupied_port: int) -> None:
        with pytest.raises(BindError, match=str(occupied_port)):
            bind_socket("127.0.0.1", occupied_port)


class TestLiveWebSocket:
    async def test_broadcast_over_real_connections(self) -> None:
        chat = Socket("/chat")

        @chat.on("say")
        async def say(envelope, connection_id: str) -> None:
            await chat.emit("said", envelope.body, sender=connection_id)

        server = Server().use(chat)
        config = await server.start({"host": "127.0.0.1", "port": 0, "log_level": "warning"})
        uri = f"ws://127.0.0.1:{config.port}/chat"
        try:
            async with websockets.connect(uri) as alice, websockets.connect(uri) as bob:
                await alice.send(json.dumps({"event": "say", "body": "hi"}))
                for peer in (alice, bob):
                    message = json.loads(await asyncio.wait_for(peer.recv(), timeout=5))
                    assert message["event"] == "said"
                    assert message["body"] == "hi"
        finally:
            await server.stop()

    async def test_unmounted_path_is_rejected(self, server: Server) -> None:
        config = await server.start({"host": "127.0.0.1", "port": 0, "log_level": "warning"})
        try:
            with pytest.raises(websockets.InvalidHandshake):
                async with websockets.connect(f"ws://127.0.0.1:{config.port}/nope"):
                    pass
        finally:
            await server.stop()
