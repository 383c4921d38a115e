"""Shared fixtures for wallet points tests."""

import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import pytest
from datetime import datetime

import httpx

from models.points import Rank
from services.points.fetcher import SOURCES, MetricFetcher

WALLET = "0x1111111111111111111111111111111111111111"
MEME_TOKEN = "0x0606fc632ee812ba970af72f8489baaa443c4b98"  # ANITA
PLAIN_TOKEN = "0x4200000000000000000000000000000000000006"
API_BASE = "http://points.test"


class FakeClock:
    """Monotonic clock the tests can move by hand."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_rank(rank_id: int, name: str, min_points, max_points, **extra) -> Rank:
    row = {
        "id": rank_id,
        "name": name,
        "min_points": min_points,
        "max_points": max_points,
        "logo_url": f"https://cdn.test/ranks/{name.lower()}.png",
        "color": extra.pop("color", "#ffffff"),
        "description": None,
        "display_order": rank_id,
        "is_active": True,
    }
    row.update(extra)
    return Rank.from_row(row, parsed_at=datetime(2026, 1, 1))


def source_paths(wallet: str = WALLET) -> dict[str, str]:
    """URL path -> source key for every metric source."""
    return {source.path.format(wallet=wallet): source.key for source in SOURCES}


def mock_fetcher(payloads: dict, *, failures: dict = None, timeout_seconds: float = 5.0) -> MetricFetcher:
    """A MetricFetcher whose HTTP client answers from ``payloads`` by source key.

    ``failures`` maps a source key to an ``httpx.Response`` returned instead.
    Keys missing from both answer 404.
    """
    paths = source_paths()
    failures = failures or {}

    def handler(request: httpx.Request) -> httpx.Response:
        key = paths.get(request.url.path)
        if key in failures:
            return failures[key]
        if key in payloads:
            return httpx.Response(200, json=payloads[key])
        return httpx.Response(404, json={"error": "not found"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MetricFetcher(API_BASE, timeout_seconds=timeout_seconds, client=client)


# ---------------------------------------------------------------------------
# Raw API response fixtures (mimicking the analytics endpoints)
# ---------------------------------------------------------------------------


@pytest.fixture
def raw_wallet_stats_response():
    return {
        "nftCollections": [{"count": 4}, {"count": 3}, {"name": "no count"}],
        "tokenHoldings": [
            {"address": PLAIN_TOKEN, "symbol": "WETH", "usdValue": 900},
            {"address": MEME_TOKEN.upper().replace("0X", "0x"), "symbol": "ANITA", "usdValue": "250.5"},
        ],
        "balanceUsd": 150,
        "ageDays": 400,
        "totalTxns": 250,
    }


@pytest.fixture
def raw_source_payloads(raw_wallet_stats_response):
    """One realistic payload per metric source."""
    return {
        "wallet_stats": raw_wallet_stats_response,
        "bridge": {
            "bridgedInUsd": 1500,
            "bridgedInCount": 3,
            "bridgedOutUsd": 50,
            "bridgedOutCount": 1,
        },
        "swap": {"totalUsd": 12000, "txCount": 40},
        "tydro": {
            "currentSupplyUsd": 2000,
            "currentBorrowUsd": 600,
            "depositCount": 2,
            "borrowCount": 1,
        },
        "gm": {"total_count": 12},
        "inkypump_created": {"total_count": 1},
        "inkypump_buy": {"total_count": 5, "total_value": "600.25"},
        "inkypump_sell": {"total_count": 2, "total_value": "400"},
        "shellies_raffles": {"total_count": 5},
        "shellies_pay_to_play": {"total_count": 10},
        "shellies_staking": {"total_count": 3},
        "zns": {
            "total_count": 6,
            "deploy_count": 1,
            "say_gm_count": 10,
            "register_domain_count": 3,
        },
        "nft2me": {"collectionsCreated": 1, "nftsMinted": 12, "totalTransactions": 13},
        "nft_trading": {
            "total_count": 6,
            "by_contract": [
                {"contract_address": "0x9EBF93FDBA9F32ACCAB3D6716322DCCD617A78F3", "count": 4},
                {"contract_address": "0xbd6a027b85fd5285b1623563bbef6fadbe396afb", "count": 2},
            ],
        },
        "marvk": {
            "cardMintedCount": 1,
            "lockTokenCount": 5,
            "vestTokenCount": 0,
            "totalTransactions": 6,
        },
        "nado": {"totalDeposits": 1000, "nadoVolumeUSD": 600000, "totalTransactions": 20},
        "copink": {"totalVolume": 5000, "subaccountsFound": 1},
    }


@pytest.fixture
def sample_ranks():
    return [
        make_rank(1, "Bronze", 0, 999, color="#cd7f32"),
        make_rank(2, "Silver", 1000, 4999, color="#c0c0c0"),
        make_rank(3, "Gold", 5000, 9999, color="#ffd700"),
        make_rank(4, "Diamond", 10000, None, color="#b9f2ff"),
    ]


# ---------------------------------------------------------------------------
# Helper fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def wallet_address():
    return WALLET


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def rank_factory():
    return make_rank


@pytest.fixture
def fetcher_factory():
    return mock_fetcher


@pytest.fixture
def source_path_map():
    return source_paths()
