"""Time-boxed in-memory caches in front of the rank and token registries.

Two independent caches with different failure policies:

* ``RankTableCache`` (60s): on a failed refresh the caller gets an empty rank
  list, so scores resolve to "no rank".
* ``MemeTokenCache`` (300s): on a failed refresh the caller gets the fixed
  built-in meme address list, never an empty set.

Fallback payloads are not cached; the next ``get()`` tries the store again.
A refresh replaces the whole slot, so concurrent readers see either the old
or the new generation. Two overlapping refreshes are allowed (last write wins).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from sqlalchemy import select

from models.points import Rank
from models.database import AsyncSessionLocal, RankRecord, TokenAsset
from utils.logger import get_logger
from utils.utcnow import utcnow

logger = get_logger("registry")

T = TypeVar("T")

RANKS_CACHE_TTL_SECONDS = 60.0
MEME_TOKENS_CACHE_TTL_SECONDS = 300.0

FALLBACK_MEME_TOKEN_ADDRESSES: frozenset[str] = frozenset(
    {
        "0x0606fc632ee812ba970af72f8489baaa443c4b98",  # ANITA
        "0x20c69c12abf2b6f8d8ca33604dd25c700c7e70a5",  # CAT
        "0xd642b49d10cc6e1bc1c6945725667c35e0875f22",  # PURPLE
        "0x2a1bce657f919ac3f9ab50b2584cfc77563a02ec",  # ANDRU (AK47)
        "0x32bcb803f696c99eb263d60a05cafd8689026575",  # KRAK (KRAKMASK)
        "0x62c99fac20b33b5423fdf9226179e973a8353e36",  # BERT
    }
)

_RANK_COLUMNS = (
    RankRecord.id,
    RankRecord.name,
    RankRecord.min_points,
    RankRecord.max_points,
    RankRecord.logo_url,
    RankRecord.color,
    RankRecord.description,
    RankRecord.display_order,
    RankRecord.is_active,
)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    payload: T
    fetched_at: float


class TtlCache(Generic[T]):
    """Single-slot cache with an injected loader and clock."""

    def __init__(
        self,
        loader: Callable[[], Awaitable[T]],
        ttl_seconds: float,
        *,
        name: str,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self.name = name
        self._entry: Optional[CacheEntry[T]] = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def is_fresh(self) -> bool:
        entry = self._entry
        return entry is not None and self._clock() - entry.fetched_at < self._ttl_seconds

    def fallback(self) -> T:
        raise NotImplementedError

    async def get(self) -> T:
        entry = self._entry
        if entry is not None and self.is_fresh():
            return entry.payload

        try:
            payload = await self._loader()
        except Exception as exc:
            fallback = self.fallback()
            logger.warning(
                "Registry refresh failed, serving fallback",
                cache=self.name,
                error=str(exc),
                error_type=type(exc).__name__,
                fallback_size=len(fallback),
            )
            return fallback

        self._entry = CacheEntry(payload=payload, fetched_at=self._clock())
        logger.debug("Registry cache refreshed", cache=self.name, size=len(payload))
        return payload


def is_meme_address(address, meme_addresses: frozenset[str]) -> bool:
    """Case-insensitive membership in a lowercase meme address set."""
    return str(address or "").lower() in meme_addresses


def resolve_rank(ranks: list[Rank], total_points: float) -> Optional[Rank]:
    """First rank (ascending ``min_points``) whose range contains the points."""
    for rank in ranks:
        if rank.contains(total_points):
            return rank
    return None


class RankTableCache(TtlCache[list[Rank]]):
    """Active ranks ordered by ``min_points``; empty list when the store fails."""

    def __init__(
        self,
        loader: Optional[Callable[[], Awaitable[list[Rank]]]] = None,
        ttl_seconds: float = RANKS_CACHE_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(
            loader or partial(load_active_ranks, AsyncSessionLocal),
            ttl_seconds,
            name="ranks",
            clock=clock,
        )

    def fallback(self) -> list[Rank]:
        return []

    async def resolve(self, total_points: float) -> Optional[Rank]:
        return resolve_rank(await self.get(), total_points)


class MemeTokenCache(TtlCache[frozenset[str]]):
    """Lowercase meme token addresses; fixed list when the store fails."""

    def __init__(
        self,
        loader: Optional[Callable[[], Awaitable[frozenset[str]]]] = None,
        ttl_seconds: float = MEME_TOKENS_CACHE_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(
            loader or partial(load_meme_token_addresses, AsyncSessionLocal),
            ttl_seconds,
            name="meme_tokens",
            clock=clock,
        )

    def fallback(self) -> frozenset[str]:
        return FALLBACK_MEME_TOKEN_ADDRESSES

    async def is_meme(self, address: str) -> bool:
        return is_meme_address(address, await self.get())


# ==================== STORE QUERIES ====================


async def load_active_ranks(session_factory) -> list[Rank]:
    """Read active ranks, lowest ``min_points`` first."""
    async with session_factory() as session:
        result = await session.execute(
            select(*_RANK_COLUMNS)
            .where(RankRecord.is_active.is_(True))
            .order_by(RankRecord.min_points.asc())
        )
        rows = result.mappings().all()

    parsed_at = utcnow()
    return [Rank.from_row(row, parsed_at=parsed_at) for row in rows]


async def load_meme_token_addresses(session_factory) -> frozenset[str]:
    async with session_factory() as session:
        result = await session.execute(
            select(TokenAsset.address).where(TokenAsset.is_meme.is_(True))
        )
        addresses = result.scalars().all()

    return frozenset(str(address).lower() for address in addresses if address)
