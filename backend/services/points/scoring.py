"""Wallet score aggregation.

``PointsService.calculate_wallet_score`` fetches every metric source for a
wallet, scores each category against its tier table, sums the categories
and resolves the total to a rank.

Only a missing primary wallet-stats payload fails the call. Every other
source that is unavailable scores as zero.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Callable, Optional

from config import settings
from models.points import (
    NativeMetric,
    PlatformMetric,
    RankSummary,
    WalletPointsBreakdown,
    WalletScoreResponse,
)
from services.points import tiers
from services.points.fetcher import (
    PRIMARY_SOURCE,
    MetricFetcher,
    SourceResult,
    SourceStatus,
)
from services.points.registry_cache import MemeTokenCache, RankTableCache, is_meme_address
from utils.logger import get_logger
from utils.utcnow import utcnow

logger = get_logger("points")

NATIVE_ETH_ADDRESS = "0x0000000000000000000000000000000000000000"


class PointsError(Exception):
    """Base error for wallet scoring."""


class WalletScoreUnavailable(PointsError):
    """The primary wallet-stats source could not be used; no score exists."""

    def __init__(self, wallet: str, reason: Optional[str] = None):
        self.wallet = wallet
        self.reason = reason or "unknown"
        super().__init__(f"Failed to fetch wallet stats for {wallet}: {self.reason}")


def _to_float(value: Any) -> float:
    """Best-effort numeric parse; anything unusable is 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def _to_count(value: Any) -> int:
    return int(_to_float(value))


def _to_dict_list(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


def _payload(results: dict[str, SourceResult], key: str) -> dict[str, Any]:
    result = results.get(key)
    if result is None or not result.ok:
        return {}
    return result.payload


class PointsService:
    """Computes a wallet's points breakdown, total and rank"""

    def __init__(
        self,
        fetcher: MetricFetcher,
        rank_cache: RankTableCache,
        meme_cache: MemeTokenCache,
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.fetcher = fetcher
        self.rank_cache = rank_cache
        self.meme_cache = meme_cache
        self._clock = clock

    async def calculate_wallet_score(self, wallet_address: str) -> WalletScoreResponse:
        wallet = str(wallet_address or "").strip().lower()
        log = logger.with_context(wallet=wallet)

        results = await self.fetcher.fetch_all(wallet)
        primary = results.get(PRIMARY_SOURCE)
        if primary is None or primary.status is not SourceStatus.OK:
            reason = primary.error if primary is not None else "source not requested"
            log.error("Wallet score unavailable", reason=reason)
            raise WalletScoreUnavailable(wallet, reason)

        # One meme-set generation per request keeps both token categories consistent.
        meme_addresses = await self.meme_cache.get()

        breakdown = WalletPointsBreakdown()
        self._score_native(breakdown, primary.payload, meme_addresses)
        self._score_platforms(breakdown, results)

        total_points = breakdown.total_points()
        rank = await self.rank_cache.resolve(total_points)

        log.info(
            "Wallet scored",
            total_points=total_points,
            rank=rank.name if rank else None,
            degraded=sorted(k for k, r in results.items() if not r.ok),
        )
        return WalletScoreResponse(
            wallet_address=wallet,
            total_points=total_points,
            rank=RankSummary.from_rank(rank) if rank else None,
            breakdown=breakdown,
            last_updated=self._clock(),
        )

    # ==================== NATIVE ====================

    def _score_native(
        self,
        breakdown: WalletPointsBreakdown,
        stats: dict[str, Any],
        meme_addresses: frozenset[str],
    ) -> None:
        native = breakdown.native

        nft_count = sum(_to_float(col.get("count")) for col in _to_dict_list(stats.get("nftCollections")))
        native["nft_collections"] = NativeMetric(
            value=nft_count, points=tiers.nft_collections_points(nft_count)
        )

        holdings = _to_dict_list(stats.get("tokenHoldings"))
        all_holdings = holdings + [
            {
                "address": NATIVE_ETH_ADDRESS,
                "symbol": "ETH",
                "usdValue": _to_float(stats.get("balanceUsd")),
            }
        ]

        def is_meme(token: dict) -> bool:
            return is_meme_address(token.get("address"), meme_addresses)

        plain_usd = sum(_to_float(t.get("usdValue")) for t in all_holdings if not is_meme(t))
        total_usd = sum(_to_float(t.get("usdValue")) for t in all_holdings)
        native["erc20_tokens"] = NativeMetric(
            value=total_usd, points=tiers.token_holdings_points(plain_usd)
        )

        meme_holdings = [t for t in holdings if is_meme(t)]
        meme_usd = sum(_to_float(t.get("usdValue")) for t in meme_holdings)
        native["meme_coins"] = NativeMetric(
            value=len(meme_holdings), points=tiers.meme_coins_points(meme_usd)
        )

        age_days = _to_float(stats.get("ageDays"))
        native["wallet_age"] = NativeMetric(value=age_days, points=tiers.wallet_age_points(age_days))

        total_txns = _to_float(stats.get("totalTxns"))
        native["total_tx"] = NativeMetric(value=total_txns, points=tiers.total_tx_points(total_txns))

    # ==================== PLATFORMS ====================

    def _score_platforms(
        self, breakdown: WalletPointsBreakdown, results: dict[str, SourceResult]
    ) -> None:
        platforms = breakdown.platforms

        bridge = _payload(results, "bridge")
        bridge_in_usd = _to_float(bridge.get("bridgedInUsd"))
        bridge_out_usd = _to_float(bridge.get("bridgedOutUsd"))
        platforms["bridge_in"] = PlatformMetric(
            tx_count=_to_count(bridge.get("bridgedInCount")),
            usd_volume=bridge_in_usd,
            points=tiers.bridge_volume_points(bridge_in_usd),
        )
        platforms["bridge_out"] = PlatformMetric(
            tx_count=_to_count(bridge.get("bridgedOutCount")),
            usd_volume=bridge_out_usd,
            points=tiers.bridge_volume_points(bridge_out_usd),
        )
        logger.debug(
            "Bridge tiers",
            bridge_in=tiers.tier_label(bridge_in_usd, tiers.BRIDGE_VOLUME),
            bridge_out=tiers.tier_label(bridge_out_usd, tiers.BRIDGE_VOLUME),
        )

        gm_count = _to_count(_payload(results, "gm").get("total_count"))
        platforms["gm"] = PlatformMetric(tx_count=gm_count, points=tiers.gm_points(gm_count))

        created = _payload(results, "inkypump_created")
        buys = _payload(results, "inkypump_buy")
        sells = _payload(results, "inkypump_sell")
        created_count = _to_count(created.get("total_count"))
        buy_usd = _to_float(buys.get("total_value"))
        sell_usd = _to_float(sells.get("total_value"))
        platforms["inkypump"] = PlatformMetric(
            tx_count=created_count + _to_count(buys.get("total_count")) + _to_count(sells.get("total_count")),
            usd_volume=buy_usd + sell_usd,
            points=tiers.inkypump_points(created_count, buy_usd, sell_usd),
        )

        tydro = _payload(results, "tydro")
        supply_usd = _to_float(tydro.get("currentSupplyUsd"))
        borrow_usd = _to_float(tydro.get("currentBorrowUsd"))
        platforms["tydro"] = PlatformMetric(
            tx_count=_to_count(tydro.get("depositCount")) + _to_count(tydro.get("borrowCount")),
            usd_volume=supply_usd + borrow_usd,
            points=tiers.tydro_points(supply_usd, borrow_usd),
        )

        swap = _payload(results, "swap")
        swap_usd = _to_float(swap.get("totalUsd"))
        platforms["swap"] = PlatformMetric(
            tx_count=_to_count(swap.get("txCount")),
            usd_volume=swap_usd,
            points=tiers.swap_volume_points(swap_usd),
        )

        played = _to_count(_payload(results, "shellies_pay_to_play").get("total_count"))
        staked = _to_count(_payload(results, "shellies_staking").get("total_count"))
        raffles = _to_count(_payload(results, "shellies_raffles").get("total_count"))
        platforms["shellies"] = PlatformMetric(
            tx_count=played + staked + raffles,
            points=tiers.shellies_points(played, staked, raffles),
        )

        zns = _payload(results, "zns")
        platforms["zns"] = PlatformMetric(
            tx_count=_to_count(zns.get("total_count")),
            points=tiers.zns_points(
                _to_count(zns.get("deploy_count")),
                _to_count(zns.get("say_gm_count")),
                _to_count(zns.get("register_domain_count")),
            ),
        )

        nft2me = _payload(results, "nft2me")
        platforms["nft2me"] = PlatformMetric(
            tx_count=_to_count(nft2me.get("totalTransactions")),
            points=tiers.nft2me_points(
                _to_count(nft2me.get("collectionsCreated")),
                _to_count(nft2me.get("nftsMinted")),
            ),
        )

        nft_trading = _payload(results, "nft_trading")
        by_contract: dict[str, float] = {}
        for row in _to_dict_list(nft_trading.get("by_contract")):
            contract = str(row.get("contract_address") or "").lower()
            # First row per contract wins, matching a find() over the list.
            by_contract.setdefault(contract, _to_float(row.get("count")))
        contracts = tiers.NFT_MARKETPLACE_CONTRACTS
        platforms["nft_trading"] = PlatformMetric(
            tx_count=_to_count(nft_trading.get("total_count")),
            points=tiers.nft_trading_points(
                by_contract.get(contracts["squid"], 0.0),
                by_contract.get(contracts["net_protocol"], 0.0),
                by_contract.get(contracts["mintique"], 0.0),
            ),
        )

        marvk = _payload(results, "marvk")
        platforms["marvk"] = PlatformMetric(
            tx_count=_to_count(marvk.get("totalTransactions")),
            points=tiers.marvk_points(
                _to_count(marvk.get("cardMintedCount")),
                _to_count(marvk.get("lockTokenCount")),
                _to_count(marvk.get("vestTokenCount")),
            ),
        )

        nado = _payload(results, "nado")
        nado_volume = _to_float(nado.get("nadoVolumeUSD"))
        platforms["nado"] = PlatformMetric(
            tx_count=_to_count(nado.get("totalTransactions")),
            usd_volume=nado_volume,
            points=tiers.nado_points(_to_float(nado.get("totalDeposits")), nado_volume),
        )

        copink = _payload(results, "copink")
        subaccounts = _to_count(copink.get("subaccountsFound"))
        copink_volume = _to_float(copink.get("totalVolume"))
        platforms["copink"] = PlatformMetric(
            tx_count=subaccounts,
            usd_volume=copink_volume,
            points=tiers.copink_points(subaccounts, copink_volume),
        )


_instance: Optional[PointsService] = None


def get_points_service() -> PointsService:
    global _instance
    if _instance is None:
        _instance = PointsService(
            fetcher=MetricFetcher(
                settings.POINTS_API_BASE_URL,
                timeout_seconds=settings.POINTS_SOURCE_TIMEOUT_SECONDS,
            ),
            rank_cache=RankTableCache(ttl_seconds=settings.RANKS_CACHE_TTL_SECONDS),
            meme_cache=MemeTokenCache(ttl_seconds=settings.MEME_TOKENS_CACHE_TTL_SECONDS),
        )
    return _instance


async def shutdown_points_service() -> None:
    global _instance
    if _instance is not None:
        await _instance.fetcher.close()
        _instance = None
