"""Router package — collects all API routers and registers them on the FastAPI app."""

from fastapi import FastAPI

from enb_server.routers import (
    overview,
    account,
    activation,
    claims,
    leaderboard,
)


def register_all_routers(app: FastAPI):
    app.include_router(overview.router)
    app.include_router(account.router)
    app.include_router(activation.router)
    app.include_router(claims.router)
    app.include_router(leaderboard.router)
