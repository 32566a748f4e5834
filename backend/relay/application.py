from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from relay.api.router import api_router
from relay.config import settings
from relay.runtime import RelayRuntime, runtime as default_runtime

logging.basicConfig(level=settings.log_level)


def create_app(relay_runtime: RelayRuntime | None = None) -> FastAPI:
    app = FastAPI(title="Party Relay", version="1.0.0")
    app.state.runtime = relay_runtime or default_runtime

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.on_event("startup")
    async def on_startup() -> None:
        await app.state.runtime.start()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await app.state.runtime.shutdown()

    return app


app = create_app()
