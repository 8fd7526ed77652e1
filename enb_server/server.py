"""
server.py - ENB mini app API server entry point.

Single-process server combining:
 - SQLite persistent storage via StorageManager
 - Services (accounts, invitations, daily claims, leaderboards)
 - REST API (FastAPI on uvicorn)

Usage:
    enb-server [--host 0.0.0.0] [--port 8080] [--db-path data/enb.db] [--admin-key KEY]
    python -m enb_server.server [...]
"""

import argparse
import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from enb_server import __version__
from enb_server.account import AccountService
from enb_server.auth import AuthService
from enb_server.claims import ClaimService
from enb_server.config import Settings
from enb_server.invitation import InvitationService
from enb_server.leaderboard import LeaderboardService
from enb_server.routers import register_all_routers
from enb_server.storage import StorageManager

LOG_FORMAT = "%(asctime)s [%(name)-10s] %(levelname)-5s %(message)s"

logger = logging.getLogger("server")


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S")


# ---------------------------------------------------------------------------
# Error responses: every failure is {"error": "..."}
# ---------------------------------------------------------------------------

def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation_error(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------------------------------------------------------------------------
# API server
# ---------------------------------------------------------------------------

class ApiServer:
    """Owns settings, storage and services; the FastAPI app reaches them via app.state.server."""

    def __init__(self, settings: Optional[Settings] = None, clock: Callable[[], float] = time.time):
        self.settings = settings or Settings()
        self._clock = clock

        # Storage + services are initialized async in the app lifespan
        self.storage: Optional[StorageManager] = None
        self.accounts: Optional[AccountService] = None
        self.invitations: Optional[InvitationService] = None
        self.claims: Optional[ClaimService] = None
        self.leaderboard: Optional[LeaderboardService] = None
        self.auth = AuthService(self.settings.admin_key)

        self.app = FastAPI(
            title="ENB Mini App API",
            version=__version__,
            lifespan=self._lifespan,
        )
        self.app.state.server = self
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.cors_origins,
            allow_credentials="*" not in self.settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        register_error_handlers(self.app)
        register_all_routers(self.app)

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        await self.init_services()
        try:
            yield
        finally:
            await self.close()

    async def init_services(self):
        """Open storage and wire up services (must be called in async context)."""
        db_dir = os.path.dirname(self.settings.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self.storage = StorageManager(self.settings.db_path)
        await self.storage.initialize()

        self.accounts = AccountService(
            self.storage.accounts, self.storage.transactions,
            default_max_uses=self.settings.default_max_uses, clock=self._clock,
        )
        self.invitations = InvitationService(
            self.storage.accounts, self.storage.invitations,
            default_max_uses=self.settings.default_max_uses,
            seed_max_uses=self.settings.seed_max_uses,
            clock=self._clock,
        )
        self.claims = ClaimService(self.storage.accounts, clock=self._clock)
        self.leaderboard = LeaderboardService(self.storage.accounts)

        logger.info("Services initialized (db=%s)", self.settings.db_path)

    async def close(self):
        if self.storage:
            await self.storage.close()
            self.storage = None

    async def start(self):
        """Serve the API with uvicorn until interrupted."""
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level.lower(),
        )
        self._uvicorn_server = uvicorn.Server(config)
        logger.info("REST API starting on %s:%d", self.settings.host, self.settings.port)
        await self._uvicorn_server.serve()


def main():
    """CLI entry point for the API server."""
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="ENB Mini App API Server")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"REST API port (default: {settings.port})")
    parser.add_argument("--db-path", default=settings.db_path, help=f"SQLite database path (default: {settings.db_path})")
    parser.add_argument("--admin-key", default=settings.admin_key, help="API key required by admin endpoints")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: INFO)")
    args = parser.parse_args()

    settings.host = args.host
    settings.port = args.port
    settings.db_path = args.db_path
    settings.admin_key = args.admin_key
    settings.log_level = args.log_level.upper()
    configure_logging(settings.log_level)

    server = ApiServer(settings)

    logger.info("=" * 60)
    logger.info("  ENB Mini App API")
    logger.info("  REST API:    http://%s:%d", settings.host, settings.port)
    logger.info("  Database:    %s", settings.db_path)
    logger.info("  Admin key:   %s", "configured" if settings.admin_key else "none (admin routes open)")
    logger.info("=" * 60)

    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
