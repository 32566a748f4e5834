from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    def __init__(self) -> None:
        self.host = os.getenv("RELAY_HOST", "0.0.0.0").strip() or "0.0.0.0"
        self.port = int(os.getenv("RELAY_PORT", "3000"))
        self.host_disconnect_grace_ms = max(
            0,
            int(os.getenv("HOST_DISCONNECT_GRACE_MS", "100")),
        )
        self.room_code_length = min(
            8,
            max(4, int(os.getenv("ROOM_CODE_LENGTH", "6"))),
        )
        self.room_idle_timeout_seconds = max(
            0,
            int(os.getenv("ROOM_IDLE_TIMEOUT_SECONDS", "0")),
        )
        self.room_sweep_interval_seconds = max(
            1,
            int(os.getenv("ROOM_SWEEP_INTERVAL_SECONDS", "60")),
        )
        self.strict_game_payloads = _env_flag("STRICT_GAME_PAYLOADS")
        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ] or ["*"]
        self.log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"


settings = Settings()
