import sys
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from api import routes_points  # noqa: E402
from models.points import WalletPointsBreakdown, WalletScoreResponse  # noqa: E402
from services.points.scoring import WalletScoreUnavailable  # noqa: E402


def _score(wallet: str) -> WalletScoreResponse:
    return WalletScoreResponse(
        wallet_address=wallet,
        total_points=0,
        rank=None,
        breakdown=WalletPointsBreakdown(),
        last_updated=datetime(2026, 1, 1),
    )


@pytest.mark.asyncio
async def test_get_wallet_points_returns_service_score(wallet_address):
    service = SimpleNamespace(calculate_wallet_score=AsyncMock(return_value=_score(wallet_address)))

    out = await routes_points.get_wallet_points(f"  {wallet_address} ", service=service)

    assert out.wallet_address == wallet_address
    service.calculate_wallet_score.assert_awaited_once_with(wallet_address)


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", ["0x123", "not-a-wallet", "0x" + "g" * 40, ""])
async def test_get_wallet_points_rejects_malformed_address(bad):
    service = SimpleNamespace(calculate_wallet_score=AsyncMock())

    with pytest.raises(HTTPException) as exc_info:
        await routes_points.get_wallet_points(bad, service=service)

    assert exc_info.value.status_code == 400
    service.calculate_wallet_score.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_wallet_points_maps_unavailable_stats_to_bad_gateway(wallet_address):
    service = SimpleNamespace(
        calculate_wallet_score=AsyncMock(side_effect=WalletScoreUnavailable(wallet_address, "HTTP 500"))
    )

    with pytest.raises(HTTPException) as exc_info:
        await routes_points.get_wallet_points(wallet_address, service=service)

    assert exc_info.value.status_code == 502
    assert exc_info.value.detail == "Wallet stats are unavailable"


def test_points_endpoint_serves_json_through_app(wallet_address):
    from fastapi.testclient import TestClient

    import main
    from services.points.scoring import get_points_service

    service = SimpleNamespace(calculate_wallet_score=AsyncMock(return_value=_score(wallet_address)))
    main.app.dependency_overrides[get_points_service] = lambda: service
    try:
        client = TestClient(main.app)
        ok = client.get(f"/api/points/{wallet_address}")
        bad = client.get("/api/points/0xnope")
        health = client.get("/health")
    finally:
        main.app.dependency_overrides.clear()

    assert ok.status_code == 200
    body = ok.json()
    assert body["wallet_address"] == wallet_address
    assert body["total_points"] == 0
    assert body["rank"] is None
    assert body["breakdown"] == {"native": {}, "platforms": {}}
    assert bad.status_code == 400
    assert health.json() == {"status": "ok"}
