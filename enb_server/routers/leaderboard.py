"""Leaderboard router — /api/leaderboard/{board}, /api/user-rankings/{wallet}."""

from fastapi import APIRouter, HTTPException, Query
from starlette.requests import Request

from enb_server.deps import get_server

router = APIRouter()


@router.get("/api/leaderboard/{board}")
async def leaderboard(request: Request, board: str, limit: int = Query(10)):
    srv = get_server(request)
    try:
        return await srv.leaderboard.leaderboard(board, limit=limit)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/api/user-rankings/{wallet_address}")
async def user_rankings(request: Request, wallet_address: str):
    srv = get_server(request)
    try:
        return await srv.leaderboard.rankings(wallet_address)
    except KeyError:
        raise HTTPException(status_code=404, detail="Account not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
