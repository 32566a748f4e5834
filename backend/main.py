from __future__ import annotations

from relay.application import app

__all__ = ["app"]
