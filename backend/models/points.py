from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional
from datetime import datetime

from pydantic import BaseModel, Field

from utils.utcnow import utcnow


def parse_points_value(raw: Any) -> int:
    """Coerce a points column to int.

    Numeric columns may come back as text or ``Decimal`` depending on the
    driver. Anything unparsable (or non-finite) becomes 0.
    """
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return 0
    if not value.is_finite():
        return 0
    return int(value)


class Rank(BaseModel):
    """A named points band read from the registry store"""

    id: int
    name: str
    min_points: int
    max_points: Optional[int] = None  # None = no upper bound
    logo_url: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any], parsed_at: Optional[datetime] = None) -> "Rank":
        """Parse a ``ranks`` row. Timestamps are stamped at parse time."""
        stamp = parsed_at or utcnow()
        max_raw = row.get("max_points")
        return cls(
            id=parse_points_value(row.get("id")),
            name=str(row.get("name") or ""),
            min_points=parse_points_value(row.get("min_points")),
            max_points=None if max_raw is None else parse_points_value(max_raw),
            logo_url=row.get("logo_url"),
            color=row.get("color"),
            description=row.get("description"),
            display_order=parse_points_value(row.get("display_order")),
            is_active=bool(row.get("is_active", True)),
            created_at=stamp,
            updated_at=stamp,
        )

    def contains(self, points: float) -> bool:
        if points < self.min_points:
            return False
        return self.max_points is None or points <= self.max_points


class RankSummary(BaseModel):
    """Rank fields exposed in a score response"""

    name: str
    color: Optional[str] = None
    logo_url: Optional[str] = None

    @classmethod
    def from_rank(cls, rank: Rank) -> "RankSummary":
        return cls(name=rank.name, color=rank.color, logo_url=rank.logo_url)


class NativeMetric(BaseModel):
    value: float = 0.0
    points: int = 0


class PlatformMetric(BaseModel):
    tx_count: int = 0
    usd_volume: float = 0.0
    points: int = 0


class WalletPointsBreakdown(BaseModel):
    """Per-category contributions, keyed by category name"""

    native: dict[str, NativeMetric] = Field(default_factory=dict)
    platforms: dict[str, PlatformMetric] = Field(default_factory=dict)

    def total_points(self) -> int:
        return sum(m.points for m in self.native.values()) + sum(
            m.points for m in self.platforms.values()
        )


class WalletScoreResponse(BaseModel):
    wallet_address: str
    total_points: int
    rank: Optional[RankSummary] = None
    breakdown: WalletPointsBreakdown
    last_updated: datetime
