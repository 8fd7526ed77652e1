"""Account router — create-account, profile, users, balance, transactions, membership."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.requests import Request

from enb_server.deps import get_server, require_admin
from enb_server.models import (
    CreateAccountRequest,
    CreateDefaultUserRequest,
    UpdateBalanceRequest,
    UpdateMembershipRequest,
)

router = APIRouter()


@router.post("/api/create-account", status_code=201)
async def create_account(request: Request, req: CreateAccountRequest):
    srv = get_server(request)
    try:
        profile = await srv.accounts.create_account(req.walletAddress, req.transactionHash)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Account created successfully", "account": profile}


@router.post("/api/create-default-user", status_code=201, dependencies=[Depends(require_admin)])
async def create_default_user(request: Request, req: CreateDefaultUserRequest):
    srv = get_server(request)
    try:
        profile = await srv.invitations.create_default_user(
            req.walletAddress, req.invitationCode, req.maxUses,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Default user created successfully", "account": profile}


@router.get("/api/profile/{wallet_address}")
async def get_profile(request: Request, wallet_address: str):
    srv = get_server(request)
    try:
        return await srv.accounts.get_profile(wallet_address)
    except KeyError:
        raise HTTPException(status_code=404, detail="Account not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/api/users")
async def list_users(
    request: Request,
    membershipLevel: Optional[str] = None,
    isActivated: Optional[bool] = None,
    limit: int = Query(50),
    offset: int = Query(0),
):
    srv = get_server(request)
    try:
        return await srv.accounts.list_users(
            membership_level=membershipLevel,
            is_activated=isActivated,
            limit=limit,
            offset=offset,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/api/update-balance", dependencies=[Depends(require_admin)])
async def update_balance(request: Request, req: UpdateBalanceRequest):
    srv = get_server(request)
    try:
        return await srv.accounts.update_balance(
            req.walletAddress, req.amount, req.type, req.description,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Account not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/api/transactions/{wallet_address}")
async def list_transactions(request: Request, wallet_address: str, limit: int = Query(20)):
    srv = get_server(request)
    try:
        return await srv.accounts.list_transactions(wallet_address, limit=limit)
    except KeyError:
        raise HTTPException(status_code=404, detail="Account not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/api/update-membership")
async def update_membership(request: Request, req: UpdateMembershipRequest):
    srv = get_server(request)
    try:
        profile = await srv.accounts.update_membership(
            req.walletAddress, req.membershipLevel, req.transactionHash,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Account not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Membership updated successfully", "account": profile}
