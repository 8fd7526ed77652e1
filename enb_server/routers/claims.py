"""Claims router — /api/daily-claim, /api/checkin, /api/daily-claim-status/{wallet}."""

from fastapi import APIRouter, HTTPException
from starlette.requests import Request

from enb_server.deps import get_server
from enb_server.errors import ConcurrentUpdate
from enb_server.models import DailyClaimRequest

router = APIRouter()


async def _claim(request: Request, req: DailyClaimRequest) -> dict:
    srv = get_server(request)
    try:
        return await srv.claims.daily_claim(req.walletAddress, req.transactionHash)
    except KeyError:
        raise HTTPException(status_code=404, detail="Account not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConcurrentUpdate as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/api/daily-claim")
async def daily_claim(request: Request, req: DailyClaimRequest):
    return await _claim(request, req)


@router.post("/api/checkin")
async def checkin(request: Request, req: DailyClaimRequest):
    return await _claim(request, req)


@router.get("/api/daily-claim-status/{wallet_address}")
async def daily_claim_status(request: Request, wallet_address: str):
    srv = get_server(request)
    try:
        return await srv.claims.status(wallet_address)
    except KeyError:
        raise HTTPException(status_code=404, detail="Account not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
