"""Activation router — /api/activate-account, /api/invitation-usage/{code}."""

from fastapi import APIRouter, HTTPException, Query
from starlette.requests import Request

from enb_server.deps import get_server
from enb_server.models import ActivateAccountRequest

router = APIRouter()


@router.post("/api/activate-account")
async def activate_account(request: Request, req: ActivateAccountRequest):
    srv = get_server(request)
    try:
        return await srv.invitations.activate(req.walletAddress, req.invitationCode)
    except KeyError:
        raise HTTPException(status_code=404, detail="Account not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/api/invitation-usage/{invitation_code}")
async def invitation_usage(request: Request, invitation_code: str, limit: int = Query(100, ge=1, le=1000)):
    srv = get_server(request)
    try:
        return await srv.invitations.get_usage(invitation_code, limit=limit)
    except KeyError:
        raise HTTPException(status_code=404, detail="Invitation code not found")
