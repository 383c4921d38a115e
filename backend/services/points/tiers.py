"""Fixed point tables and the tier lookup used by wallet scoring.

Every metric is scored against an ordered table of ``(threshold, points)``
rows, highest threshold first. A value earns the points of the first row
whose threshold it meets. Inclusive tables use ``value >= threshold``;
exclusive tables use ``value > threshold`` and express the "up to N days"
style brackets.

Composite metrics (InkyPump, Tydro, Shellies, ...) add up independently
resolved sub-tables. Nothing here does I/O or holds state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Tier:
    threshold: float
    points: int
    label: str = ""


@dataclass(frozen=True)
class TierTable:
    name: str
    tiers: tuple[Tier, ...]
    inclusive: bool = True

    @property
    def max_points(self) -> int:
        return self.tiers[0].points if self.tiers else 0

    def _matches(self, value: float, tier: Tier) -> bool:
        return value >= tier.threshold if self.inclusive else value > tier.threshold


def _table(name: str, *rows: tuple, inclusive: bool = True) -> TierTable:
    return TierTable(name=name, tiers=tuple(Tier(*row) for row in rows), inclusive=inclusive)


def _number(value: Any) -> Optional[float]:
    """Return ``value`` as a float of any sign, or None if it is not numeric.

    Integers too large for a float saturate to +/- infinity.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except OverflowError:
        number = math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _scorable(value: Any) -> Optional[float]:
    """Return ``value`` as a positive float, or None."""
    number = _number(value)
    if number is None or number <= 0:
        return None
    return number


def _match(value: Any, table: TierTable) -> Optional[tuple[int, Tier]]:
    number = _scorable(value)
    if number is None:
        return None
    for index, tier in enumerate(table.tiers):
        if table._matches(number, tier):
            return index, tier
    return None


def resolve_tier(value: Any, table: TierTable) -> int:
    """Points for ``value`` in ``table``; 0 when no tier is reached."""
    match = _match(value, table)
    return match[1].points if match else 0


def tier_label(value: Any, table: TierTable) -> str:
    """Human readable tier, e.g. ``"3 (Settler)"``; ``"0 (None)"`` if unranked."""
    match = _match(value, table)
    if match is None:
        return "0 (None)"
    index, tier = match
    level = len(table.tiers) - index
    return f"{level} ({tier.label})" if tier.label else str(level)


# ==================== NATIVE ACTIVITY ====================

NFT_COLLECTIONS = _table(
    "nft_collections",
    (10, 400, "Diamond Hand"),
    (5, 250, "Museum"),
    (3, 150, "Collector"),
    (1, 50, "Art Fan"),
)

TOKEN_HOLDINGS = _table(
    "token_holdings",
    (10_000, 400, "Whale"),
    (1_000, 300, "Dolphin"),
    (100, 150, "Crab"),
    (1, 50, "Shrimp"),
)

MEME_COINS = _table(
    "meme_coins",
    (1_000, 300, "Meme Whale"),
    (500, 200, "Shark"),
    (100, 100, "Dolphin"),
    (1, 50, "Shrimp"),
)

# Upper-bound brackets: <=30d 100, <=90d 200, ... >730d 600
WALLET_AGE = _table(
    "wallet_age",
    (730, 600),
    (365, 500),
    (180, 400),
    (90, 300),
    (30, 200),
    (0, 100),
    inclusive=False,
)

TOTAL_TX = _table(
    "total_tx",
    (900, 600),
    (700, 500),
    (400, 400),
    (200, 300),
    (100, 200),
    (0, 100),
    inclusive=False,
)

# ==================== PLATFORMS ====================

BRIDGE_VOLUME = _table(
    "bridge_volume",
    (10_000, 500, "Bridge Whale"),
    (5_000, 400, "Connector"),
    (1_000, 250, "Settler"),
    (100, 100, "Explorer"),
    (1, 25, "Tourist"),
)

GM = _table(
    "gm",
    (150, 400, "GM Machine"),
    (50, 250, "Routine"),
    (10, 150, "Coffee Time"),
    (1, 50, "Waking Up"),
)

INKYPUMP_CREATE = _table("inkypump_create", (3, 50), (1, 25))
INKYPUMP_VOLUME = _table(
    "inkypump_volume",
    (10_000, 350),
    (1_000, 250),
    (100, 150),
    (1, 50),
)

TYDRO_SUPPLY = _table(
    "tydro_supply",
    (50_000, 1250, "Whale"),
    (10_000, 1000, "Shark"),
    (1_000, 600, "Liquidity Provider"),
    (100, 250, "Supplier"),
    (1, 50, "Saver"),
)

TYDRO_BORROW = _table(
    "tydro_borrow",
    (25_000, 1250, "Degen"),
    (5_000, 1000, "Pro Borrower"),
    (500, 600, "Active User"),
    (50, 250, "Borrower"),
    (1, 50, "Tester"),
)

SWAP_VOLUME = _table(
    "swap_volume",
    (25_000, 500, "DEX Master"),
    (10_000, 400, "Swap Whale"),
    (5_000, 250, "Active Trader"),
    (1_000, 100, "Flipper"),
    (1, 25, "Shopper"),
)

SHELLIES_PLAY = _table("shellies_play", (50, 150), (10, 75), (1, 25))
SHELLIES_STAKE = _table("shellies_stake", (5, 150), (3, 100), (1, 50))
SHELLIES_RAFFLE = _table("shellies_raffle", (10, 100), (5, 50), (1, 25))

ZNS_REGISTER = _table("zns_register", (3, 200), (1, 100))
ZNS_DEPLOY = _table("zns_deploy", (3, 50), (1, 20))
ZNS_GM = _table("zns_gm", (10, 50), (1, 20))

MARVK_CARD = _table("marvk_card", (1, 100))
MARVK_LOCK = _table("marvk_lock", (5, 100), (1, 50))
MARVK_VEST = _table("marvk_vest", (5, 100), (1, 50))

NADO_DEPOSITS = _table(
    "nado_deposits",
    (50_000, 1250, "Whale"),
    (10_000, 1000, "Shark"),
    (1_000, 600, "Dolphin"),
    (100, 250, "Shrimp"),
    (1, 50, "Beginner"),
)

# The 0 row covers any positive volume below 100k.
NADO_VOLUME = _table(
    "nado_volume",
    (25_000_000, 1250, "Legend"),
    (10_000_000, 1150, "Market Maker"),
    (5_000_000, 1000, "Big Shark"),
    (1_000_000, 800, "Ape"),
    (500_000, 550, "Active Trader"),
    (100_000, 300, "Standard"),
    (0, 50, "Testing"),
)

COPINK_VOLUME = _table("copink_volume", (10_000, 300), (5_000, 250), (1_000, 150), (1, 50))
COPINK_SUBACCOUNTS = _table("copink_subaccounts", (3, 100), (1, 50))

NFT2ME_COLLECTIONS = _table("nft2me_collections", (3, 100), (1, 50))
NFT2ME_MINTS = _table("nft2me_mints", (100, 200), (10, 100), (1, 50))

# Marketplace contracts tracked by the nft_traded analytics endpoint.
NFT_MARKETPLACE_CONTRACTS: dict[str, str] = {
    "squid": "0x9ebf93fdba9f32accab3d6716322dccd617a78f3",
    "net_protocol": "0xd00c96804e9ff35f10c7d2a92239c351ff3f94e5",
    "mintique": "0xbd6a027b85fd5285b1623563bbef6fadbe396afb",
}

NFT_PLATFORM_SQUID = _table("nft_platform_squid", (0, 50), inclusive=False)
NFT_PLATFORM_NET_PROTOCOL = _table("nft_platform_net_protocol", (0, 35), inclusive=False)
NFT_PLATFORM_MINTIQUE = _table("nft_platform_mintique", (0, 15), inclusive=False)
NFT_TRADES = _table("nft_trades", (10, 300), (5, 150), (1, 50))

ALL_TABLES: tuple[TierTable, ...] = (
    NFT_COLLECTIONS,
    TOKEN_HOLDINGS,
    MEME_COINS,
    WALLET_AGE,
    TOTAL_TX,
    BRIDGE_VOLUME,
    GM,
    INKYPUMP_CREATE,
    INKYPUMP_VOLUME,
    TYDRO_SUPPLY,
    TYDRO_BORROW,
    SWAP_VOLUME,
    SHELLIES_PLAY,
    SHELLIES_STAKE,
    SHELLIES_RAFFLE,
    ZNS_REGISTER,
    ZNS_DEPLOY,
    ZNS_GM,
    MARVK_CARD,
    MARVK_LOCK,
    MARVK_VEST,
    NADO_DEPOSITS,
    NADO_VOLUME,
    COPINK_VOLUME,
    COPINK_SUBACCOUNTS,
    NFT2ME_COLLECTIONS,
    NFT2ME_MINTS,
    NFT_PLATFORM_SQUID,
    NFT_PLATFORM_NET_PROTOCOL,
    NFT_PLATFORM_MINTIQUE,
    NFT_TRADES,
)


# ==================== PER-METRIC SCORING ====================


def nft_collections_points(nft_count: float) -> int:
    return resolve_tier(nft_count, NFT_COLLECTIONS)


def token_holdings_points(plain_usd: float) -> int:
    return resolve_tier(plain_usd, TOKEN_HOLDINGS)


def meme_coins_points(meme_usd: float) -> int:
    return resolve_tier(meme_usd, MEME_COINS)


def wallet_age_points(age_days: float) -> int:
    return resolve_tier(age_days, WALLET_AGE)


def total_tx_points(tx_count: float) -> int:
    return resolve_tier(tx_count, TOTAL_TX)


def bridge_volume_points(volume_usd: float) -> int:
    """Used for bridged-in and bridged-out volume alike (max 500 each)."""
    return resolve_tier(volume_usd, BRIDGE_VOLUME)


def gm_points(gm_count: float) -> int:
    return resolve_tier(gm_count, GM)


def inkypump_points(created_count: float, buy_volume_usd: float, sell_volume_usd: float) -> int:
    """Token creation (max 50) + combined buy/sell volume (max 350)."""
    # Buy and sell are scored as one net figure; a negative leg offsets the other.
    volume = (_number(buy_volume_usd) or 0.0) + (_number(sell_volume_usd) or 0.0)
    return resolve_tier(created_count, INKYPUMP_CREATE) + resolve_tier(volume, INKYPUMP_VOLUME)


def tydro_points(supply_usd: float, borrow_usd: float) -> int:
    """Supply (max 1250) + borrow (max 1250)."""
    return resolve_tier(supply_usd, TYDRO_SUPPLY) + resolve_tier(borrow_usd, TYDRO_BORROW)


def swap_volume_points(swap_usd: float) -> int:
    return resolve_tier(swap_usd, SWAP_VOLUME)


def shellies_points(played_games: float, staked_nfts: float, joined_raffles: float) -> int:
    """Pay-to-play (max 150) + staking (max 150) + raffles (max 100)."""
    return (
        resolve_tier(played_games, SHELLIES_PLAY)
        + resolve_tier(staked_nfts, SHELLIES_STAKE)
        + resolve_tier(joined_raffles, SHELLIES_RAFFLE)
    )


def zns_points(deploy_count: float, said_gm_count: float, register_count: float) -> int:
    """Domain registration (max 200) + deploys (max 50) + gm (max 50)."""
    return (
        resolve_tier(register_count, ZNS_REGISTER)
        + resolve_tier(deploy_count, ZNS_DEPLOY)
        + resolve_tier(said_gm_count, ZNS_GM)
    )


def marvk_points(card_minted: float, lock_count: float, vest_count: float) -> int:
    return (
        resolve_tier(card_minted, MARVK_CARD)
        + resolve_tier(lock_count, MARVK_LOCK)
        + resolve_tier(vest_count, MARVK_VEST)
    )


def nado_points(total_deposits: float, total_volume: float) -> int:
    """Deposits (max 1250) + perp volume (max 1250)."""
    return resolve_tier(total_deposits, NADO_DEPOSITS) + resolve_tier(total_volume, NADO_VOLUME)


def copink_points(subaccounts: float, total_volume: float) -> int:
    return resolve_tier(total_volume, COPINK_VOLUME) + resolve_tier(subaccounts, COPINK_SUBACCOUNTS)


def nft2me_points(collections_created: float, nfts_minted: float) -> int:
    return resolve_tier(collections_created, NFT2ME_COLLECTIONS) + resolve_tier(
        nfts_minted, NFT2ME_MINTS
    )


def nft_trading_points(squid_count: float, net_protocol_count: float, mintique_count: float) -> int:
    """Marketplaces used (max 100) + total trades across them (max 300)."""
    platform_points = (
        resolve_tier(squid_count, NFT_PLATFORM_SQUID)
        + resolve_tier(net_protocol_count, NFT_PLATFORM_NET_PROTOCOL)
        + resolve_tier(mintique_count, NFT_PLATFORM_MINTIQUE)
    )
    total_trades = sum(
        _scorable(count) or 0.0 for count in (squid_count, net_protocol_count, mintique_count)
    )
    return platform_points + resolve_tier(total_trades, NFT_TRADES)
