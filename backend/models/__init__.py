from .points import (
    Rank,
    RankSummary,
    NativeMetric,
    PlatformMetric,
    WalletPointsBreakdown,
    WalletScoreResponse,
)

__all__ = [
    "Rank",
    "RankSummary",
    "NativeMetric",
    "PlatformMetric",
    "WalletPointsBreakdown",
    "WalletScoreResponse",
]
