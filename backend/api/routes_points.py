"""Wallet points routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from models.points import WalletScoreResponse
from services.points.scoring import (
    PointsService,
    WalletScoreUnavailable,
    get_points_service,
)
from utils.logger import get_logger
from utils.validation import validate_eth_address

router = APIRouter()
logger = get_logger(__name__)


@router.get("/points/{wallet_address}", response_model=WalletScoreResponse)
async def get_wallet_points(
    wallet_address: str,
    service: PointsService = Depends(get_points_service),
) -> WalletScoreResponse:
    """Score a wallet across every tracked source."""
    try:
        address = validate_eth_address(wallet_address)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return await service.calculate_wallet_score(address)
    except WalletScoreUnavailable as e:
        logger.warning("Wallet points unavailable", wallet=e.wallet, reason=e.reason)
        raise HTTPException(status_code=502, detail="Wallet stats are unavailable")
