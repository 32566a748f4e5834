from __future__ import annotations

from fastapi import APIRouter, Request

from relay.runtime import RelayRuntime

router = APIRouter(tags=["system"])


def _runtime_for(request: Request) -> RelayRuntime:
    return request.app.state.runtime


@router.get("/api/health")
async def health(request: Request) -> dict[str, object]:
    runtime = _runtime_for(request)
    ws_stats = await runtime.get_ws_stats()
    ws_summary = {
        "activeConnections": ws_stats["stats"].get("activeConnections", 0),
        "peakConnections": ws_stats["stats"].get("peakConnections", 0),
        "connectAttempts": ws_stats["stats"].get("connectAttempts", 0),
    }
    return {
        "ok": True,
        "activeRooms": runtime.active_rooms_count,
        "websocket": ws_summary,
    }


@router.get("/api/ws-stats")
async def websocket_stats(request: Request) -> dict[str, object]:
    return await _runtime_for(request).get_ws_stats()
