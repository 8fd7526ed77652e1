"""Overview router — service banner and store counters."""

from fastapi import APIRouter
from starlette.requests import Request

from enb_server import __version__
from enb_server.deps import get_server

router = APIRouter()


@router.get("/")
async def root():
    return {
        "service": "ENB Mini App API",
        "status": "running",
        "version": __version__,
    }


@router.get("/api/status")
async def server_status(request: Request):
    srv = get_server(request)
    return {
        "accounts": await srv.storage.accounts.count(),
        "activatedAccounts": await srv.storage.accounts.count(is_activated=True),
        "transactions": await srv.storage.transactions.count(),
        "invitationUsages": await srv.storage.invitations.count(),
    }
