"""Enumerations used across the analytics engine."""

from enum import Enum


class AssetType(str, Enum):
    STOCK = "stock"
    OPTION = "option"
    CRYPTO = "crypto"
    FUTURE = "future"


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


class ResolutionState(str, Enum):
    """Outcome label recorded by the upstream trade tracker."""

    OPEN = "open"
    WON = "won"
    LOST = "lost"
    EXPIRED = "expired"


class OutcomeLabel(str, Enum):
    """Threshold-dependent label assigned by the outcome classifier."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"
    EXPIRED = "expired"


class SampleReliability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _RELIABILITY_RANK[self]


_RELIABILITY_RANK = {
    SampleReliability.LOW: 0,
    SampleReliability.MEDIUM: 1,
    SampleReliability.HIGH: 2,
}


class Severity(str, Enum):
    """Recommendation severity."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class LossSeverity(str, Enum):
    """Size bucket for an individual losing trade."""

    MINOR = "minor"              # >= -2%
    MODERATE = "moderate"        # >= -5%
    SIGNIFICANT = "significant"  # >= -10%
    SEVERE = "severe"            # < -10%
