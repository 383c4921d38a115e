"""Wallet points scoring package."""

from .fetcher import MetricFetcher, SourceResult, SourceStatus
from .registry_cache import MemeTokenCache, RankTableCache, is_meme_address, resolve_rank
from .scoring import (
    PointsError,
    PointsService,
    WalletScoreUnavailable,
    get_points_service,
    shutdown_points_service,
)

__all__ = [
    "MetricFetcher",
    "SourceResult",
    "SourceStatus",
    "MemeTokenCache",
    "RankTableCache",
    "is_meme_address",
    "resolve_rank",
    "PointsError",
    "PointsService",
    "WalletScoreUnavailable",
    "get_points_service",
    "shutdown_points_service",
]
