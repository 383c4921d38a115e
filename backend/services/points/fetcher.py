"""Concurrent fan-out to the per-wallet analytics endpoints.

Every source is requested at once and the batch is joined with a barrier.
Each request is wrapped so that its failure becomes a typed result instead
of an exception:

* ``OK``        - 2xx with a JSON object body
* ``DEGRADED``  - any failure on a secondary source; payload is ``{}``
* ``FATAL``     - any failure (or empty body) on the primary wallet-stats source

The caller decides what a ``FATAL`` result means; nothing here raises for
upstream failures.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from config import settings
from utils.logger import get_logger

logger = get_logger("points.fetcher")

PRIMARY_SOURCE = "wallet_stats"


class SourceStatus(enum.Enum):
    OK = "ok"
    DEGRADED = "degraded"
    FATAL = "fatal"


@dataclass(frozen=True)
class MetricSource:
    key: str
    path: str  # formatted with the lowercase wallet address
    primary: bool = False

    def url(self, base_url: str, wallet: str) -> str:
        return f"{base_url}{self.path.format(wallet=wallet)}"


@dataclass
class SourceResult:
    key: str
    status: SourceStatus
    payload: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is SourceStatus.OK


SOURCES: tuple[MetricSource, ...] = (
    MetricSource(PRIMARY_SOURCE, "/api/wallet/{wallet}/stats", primary=True),
    MetricSource("bridge", "/api/wallet/{wallet}/bridge"),
    MetricSource("swap", "/api/wallet/{wallet}/swap"),
    MetricSource("tydro", "/api/wallet/{wallet}/tydro"),
    MetricSource("gm", "/api/analytics/{wallet}/gm_count"),
    MetricSource("inkypump_created", "/api/analytics/{wallet}/inkypump_created_tokens"),
    MetricSource("inkypump_buy", "/api/analytics/{wallet}/inkypump_buy_volume"),
    MetricSource("inkypump_sell", "/api/analytics/{wallet}/inkypump_sell_volume"),
    MetricSource("shellies_raffles", "/api/analytics/{wallet}/shellies_joined_raffles"),
    MetricSource("shellies_pay_to_play", "/api/analytics/{wallet}/shellies_pay_to_play"),
    MetricSource("shellies_staking", "/api/analytics/{wallet}/shellies_staking"),
    MetricSource("zns", "/api/analytics/{wallet}/zns"),
    MetricSource("nft2me", "/api/wallet/{wallet}/nft2me"),
    MetricSource("nft_trading", "/api/analytics/{wallet}/nft_traded"),
    MetricSource("marvk", "/api/marvk/{wallet}"),
    MetricSource("nado", "/api/nado/{wallet}"),
    MetricSource("copink", "/api/copink/{wallet}"),
)


class MetricFetcher:
    """Issues one GET per source for a wallet and collects typed results"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        sources: tuple[MetricSource, ...] = SOURCES,
    ):
        self.base_url = (base_url or settings.POINTS_API_BASE_URL).rstrip("/")
        self.timeout_seconds = float(timeout_seconds or settings.POINTS_SOURCE_TIMEOUT_SECONDS)
        self.sources = sources
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_seconds)
            self._owns_client = True
        return self._client

    async def close(self):
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def fetch_all(self, wallet: str) -> dict[str, SourceResult]:
        """Fetch every source concurrently; returns once all have settled."""
        client = await self._get_client()
        results = await asyncio.gather(
            *(self._fetch_source(client, source, wallet) for source in self.sources)
        )

        degraded = [r.key for r in results if r.status is SourceStatus.DEGRADED]
        if degraded:
            logger.warning(
                "Scoring with degraded sources",
                wallet=wallet,
                degraded=degraded,
            )
        return {result.key: result for result in results}

    async def _fetch_source(
        self, client: httpx.AsyncClient, source: MetricSource, wallet: str
    ) -> SourceResult:
        url = source.url(self.base_url, wallet)
        failed = SourceStatus.FATAL if source.primary else SourceStatus.DEGRADED
        try:
            response = await asyncio.wait_for(client.get(url), timeout=self.timeout_seconds)
            response.raise_for_status()
            if not response.content.strip():
                return self._failure(source, failed, "empty response body")
            payload = response.json()
        except asyncio.TimeoutError:
            return self._failure(source, failed, f"timed out after {self.timeout_seconds:g}s")
        except httpx.HTTPStatusError as exc:
            return self._failure(source, failed, f"HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            return self._failure(source, failed, f"{type(exc).__name__}: {exc}")
        except ValueError as exc:
            return self._failure(source, failed, f"invalid JSON: {exc}")
        except Exception as exc:
            return self._failure(source, failed, f"{type(exc).__name__}: {exc}")

        if not isinstance(payload, dict):
            return self._failure(source, failed, f"unexpected body type {type(payload).__name__}")
        return SourceResult(key=source.key, status=SourceStatus.OK, payload=payload)

    @staticmethod
    def _failure(source: MetricSource, status: SourceStatus, reason: str) -> SourceResult:
        logger.warning(
            "Metric source unavailable",
            source=source.key,
            primary=source.primary,
            reason=reason,
        )
        return SourceResult(key=source.key, status=status, error=reason)
