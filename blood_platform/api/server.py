from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blood_platform import __version__
from blood_platform.auth import bootstrap_admin_if_needed, get_current_user
from blood_platform.auth.crud import count_users
from blood_platform.config import Config, load_config
from blood_platform.context import AppContext, get_context
from blood_platform.db import Store, init_db
from blood_platform.donations.crud import count_requests
from blood_platform.errors import register_exception_handlers
from blood_platform.funds.crud import total_funds
from blood_platform.identity import IdentityBridge, build_identity_bridge

from . import auth_routes, donation_requests, donors, funds, users


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


def create_app(
    cfg: Config | None = None,
    *,
    store: Store | None = None,
    identity: IdentityBridge | None = None,
) -> FastAPI:
    """Build the API with explicitly supplied collaborators.

    Anything not passed in is built from `cfg` (or the environment). Nothing is kept
    in module globals, so tests can create as many isolated apps as they like.
    """
    cfg = cfg or load_config()
    store = store or Store(dsn=cfg.DB_DSN, timeout=cfg.STORE_TIMEOUT_SECONDS)
    identity = identity or build_identity_bridge(
        mode=cfg.IDP_MODE,
        tokeninfo_url=cfg.IDP_TOKENINFO_URL,
        audience=cfg.IDP_AUDIENCE,
        timeout=cfg.IDP_TIMEOUT_SECONDS,
    )
    ctx = AppContext(cfg=cfg, store=store, identity=identity)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        # Ensure schema exists.
        init_db(store.dsn, timeout=store.timeout)
        # Bootstrap first admin if needed (only when users table is empty)
        bootstrap_admin_if_needed(
            store,
            email=cfg.AUTH_BOOTSTRAP_ADMIN_EMAIL,
            password=cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD,
        )
        _debug(f"Ready: env={cfg.APP_ENV} db={store.dialect} idp={cfg.IDP_MODE}")
        yield

    app = FastAPI(title="Blood Donation Coordination API", version=__version__, lifespan=lifespan)
    app.state.ctx = ctx

    # CORS is mainly needed for local development (Vite on :5173 -> API on :5000).
    cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app, expose_stack=(not cfg.is_production) or cfg.DEBUG_ERRORS)

    app.include_router(auth_routes.router)
    app.include_router(users.router)
    app.include_router(donation_requests.router)
    app.include_router(funds.router)
    app.include_router(donors.router)

    # -----------------------------
    # Health
    # -----------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    # -----------------------------
    # Dashboard
    # -----------------------------

    @app.get("/api/dashboard/stats")
    def dashboard_stats(
        _user: Dict[str, Any] = Depends(get_current_user),
        ctx: AppContext = Depends(get_context),
    ) -> Dict[str, Any]:
        with ctx.store.connect() as conn:
            return {
                "totalUsers": count_users(conn),
                "totalRequests": count_requests(conn),
                "totalFunds": total_funds(conn),
            }

    return app
