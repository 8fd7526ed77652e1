"""Dependency helpers for router modules."""

from fastapi import Header
from starlette.requests import Request


def get_server(request: Request):
    return request.app.state.server


async def require_admin(request: Request, x_api_key: str = Header(default="")):
    get_server(request).auth.require_admin(x_api_key)
