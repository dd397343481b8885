from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from blood_platform.config import Config
from blood_platform.db import Store
from blood_platform.identity import IdentityBridge


@dataclass(frozen=True)
class AppContext:
    """Everything a request handler may touch, built once by the app factory."""

    cfg: Config
    store: Store
    identity: IdentityBridge


def get_context(request: Request) -> AppContext:
    ctx = getattr(request.app.state, "ctx", None)
    if ctx is None:
        raise RuntimeError("server_context_missing")
    return ctx
