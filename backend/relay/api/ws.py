from __future__ import annotations

from fastapi import APIRouter, WebSocket

from relay.runtime import RelayRuntime

router = APIRouter(tags=["websocket"])


def _runtime_for(ws: WebSocket) -> RelayRuntime:
    return ws.app.state.runtime


@router.websocket("/ws")
async def websocket_relay(ws: WebSocket) -> None:
    await _runtime_for(ws).handle_websocket(ws)


@router.websocket("/api/ws")
async def websocket_api(ws: WebSocket) -> None:
    await _runtime_for(ws).handle_websocket(ws)
