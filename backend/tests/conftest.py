from __future__ import annotations

from typing import Any, AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio

from relay.config import Settings
from relay.runtime import RelayRuntime
from relay.runtime_connections import ConnectionIndex
from relay.runtime_registry import SessionStore


class FakeWebSocket:
    """Records every JSON frame the relay sends to it."""

    def __init__(self, fail_sends: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail_sends = fail_sends

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.fail_sends:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def events(self, name: str) -> list[dict[str, Any]]:
        return [frame for frame in self.sent if frame.get("event") == name]

    def names(self) -> list[str]:
        return [str(frame.get("event")) for frame in self.sent]

    def last_ack(self) -> dict[str, Any]:
        acks = self.events("ack")
        assert acks, f"no ack in {self.names()}"
        return acks[-1]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def settings() -> Settings:
    value = Settings()
    value.host_disconnect_grace_ms = 20
    value.room_idle_timeout_seconds = 0
    value.strict_game_payloads = False
    return value


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def connections() -> ConnectionIndex:
    return ConnectionIndex()


@pytest_asyncio.fixture
async def runtime(settings: Settings) -> AsyncIterator[RelayRuntime]:
    relay = RelayRuntime(settings=settings)
    yield relay
    await relay.shutdown()


@pytest.fixture
def connect(runtime: RelayRuntime) -> Callable[[], Awaitable[tuple[str, FakeWebSocket]]]:
    async def _connect() -> tuple[str, FakeWebSocket]:
        websocket = FakeWebSocket()
        connection_id = await runtime.open_connection(websocket)  # type: ignore[arg-type]
        websocket.clear()
        return connection_id, websocket

    return _connect
