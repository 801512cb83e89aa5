"""Report models produced by the analytics components.

Every report is a frozen pydantic model, built fresh per request and
never cached.  ``model_dump(mode="json")`` gives the payload handed to
the dashboard and the export collaborator.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from winloss_analytics.core.enums import (
    LossSeverity,
    OutcomeLabel,
    SampleReliability,
    Severity,
)
from winloss_analytics.core.models import RecordWarning, TradeRecord

# Profit factor with no losing trades and positive gross profit
INFINITY = "∞"

ProfitFactor = Union[float, str]


class _Report(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Classification & intervals
# ---------------------------------------------------------------------------


class ClassifiedOutcome(_Report):
    """Threshold-dependent label for one trade."""

    trade_id: str
    label: OutcomeLabel
    effective_gain: float | None = None

    @property
    def is_decided(self) -> bool:
        return self.label in (OutcomeLabel.WIN, OutcomeLabel.LOSS)

    def agrees_with_upstream(self, trade: TradeRecord) -> bool:
        """Does the threshold label match the upstream won/lost flag?

        Breakeven and expired labels never agree with ``won``/``lost``.
        """
        upstream = {"won": OutcomeLabel.WIN, "lost": OutcomeLabel.LOSS}.get(
            trade.resolution_state.value
        )
        return upstream is not None and upstream == self.label


class WilsonInterval(_Report):
    """Wilson score interval for a win rate, in percent (0-100)."""

    center: float = 0.0
    lower: float = 0.0
    upper: float = 0.0
    insufficient_sample: bool = False

    def rounded(self, digits: int = 1) -> WilsonInterval:
        return WilsonInterval(
            center=round(self.center, digits),
            lower=round(self.lower, digits),
            upper=round(self.upper, digits),
            insufficient_sample=self.insufficient_sample,
        )


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


class DistributionBucket(_Report):
    range: str
    count: int = 0
    wins: int = 0
    losses: int = 0


class CategoryBreakdown(_Report):
    """Win/loss counts for one asset type or signal source."""

    key: str
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    avg_gain: float = 0.0


class SummaryReport(_Report):
    loss_threshold_pct: float
    total_trades: int = 0
    open_trades: int = 0
    expired: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    decided_trades: int = 0
    win_rate: float = 0.0
    win_rate_ci: WilsonInterval = Field(
        default_factory=lambda: WilsonInterval(insufficient_sample=True)
    )
    avg_win_percent: float = 0.0
    avg_loss_percent: float = 0.0
    max_win_percent: float = 0.0
    max_loss_percent: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    profit_factor: ProfitFactor = 0.0
    expectancy: float = 0.0
    payoff_ratio: float = 0.0
    distribution: list[DistributionBucket] = Field(default_factory=list)
    by_asset_type: list[CategoryBreakdown] = Field(default_factory=list)
    by_source: list[CategoryBreakdown] = Field(default_factory=list)
    sample_reliability: SampleReliability = SampleReliability.LOW
    warnings: list[RecordWarning] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Stop-loss simulation
# ---------------------------------------------------------------------------


class SimulationPoint(_Report):
    """Summary statistics re-computed at one stop-loss threshold."""

    threshold_percent: float
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    decided_trades: int = 0
    win_rate: float = 0.0
    win_rate_lower: float = 0.0
    win_rate_upper: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    expectancy: float = 0.0
    profit_factor: ProfitFactor = 0.0
    payoff_ratio: float = 0.0
    sample_reliability: SampleReliability = SampleReliability.LOW


class OptimalThreshold(_Report):
    threshold_percent: float
    expected_win_rate: float
    expectancy: float
    profit_factor: ProfitFactor
    decided_trades: int
    sample_reliability: SampleReliability
    rationale: str


class SimulationResult(_Report):
    simulations: list[SimulationPoint] = Field(default_factory=list)
    optimal_threshold: OptimalThreshold | None = None
    total_trades: int = 0
    sample_reliability: SampleReliability = SampleReliability.LOW
    warnings: list[RecordWarning] = Field(default_factory=list)

    def point_for(self, threshold_percent: float) -> SimulationPoint | None:
        for point in self.simulations:
            if point.threshold_percent == threshold_percent:
                return point
        return None


# ---------------------------------------------------------------------------
# Expiration forensics
# ---------------------------------------------------------------------------


class ExpiredTradeDiagnostics(_Report):
    id: str
    symbol: str
    asset_type: str
    direction: str
    holding_period: str
    source: str
    entry_price: float
    target_price: float
    stop_loss: float
    highest_reached: float | None = None
    lowest_reached: float | None = None
    target_distance_percent: float
    stop_distance_percent: float
    risk_reward_ratio: float | None = None
    peak_towards_target_percent: float
    peak_away_from_target_percent: float | None = None
    progress_to_target_percent: float
    needed_more_percent: float
    almost_hit_target: bool
    very_close: bool
    would_have_hit_stop: bool
    holding_time_minutes: float | None = None


class ExpirationSummary(_Report):
    total_expired: int = 0
    analyzed: int = 0
    missing_extremes: int = 0
    almost_hit_target_count: int = 0
    almost_hit_target_percent: float = 0.0
    very_close_count: int = 0
    very_close_percent: float = 0.0
    would_have_hit_stop_count: int = 0
    would_have_hit_stop_percent: float = 0.0
    avg_progress_to_target: float = 0.0
    avg_needed_more_percent: float = 0.0
    message: str | None = None


class HoldingPeriodCohort(_Report):
    period: str
    count: int
    almost_hit_target_count: int
    almost_hit_target_percent: float
    avg_progress_to_target: float
    avg_needed_more_percent: float


class AssetTypeCohort(_Report):
    asset_type: str
    count: int
    almost_hit_target_percent: float
    avg_progress_to_target: float


class Recommendation(_Report):
    type: str
    severity: Severity
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


class ExpirationReport(_Report):
    summary: ExpirationSummary = Field(default_factory=ExpirationSummary)
    by_holding_period: list[HoldingPeriodCohort] = Field(default_factory=list)
    by_asset_type: list[AssetTypeCohort] = Field(default_factory=list)
    trades: list[ExpiredTradeDiagnostics] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    reliability: SampleReliability = SampleReliability.LOW
    warnings: list[RecordWarning] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Loss patterns
# ---------------------------------------------------------------------------


class LossPattern(_Report):
    reason: str
    count: int
    avg_loss: float


class SymbolLoss(_Report):
    symbol: str
    count: int
    total_loss: float


class SourceLoss(_Report):
    source: str
    count: int
    avg_loss: float


class LossSummary(_Report):
    loss_threshold_pct: float
    total_losses: int = 0
    total_loss_percent: float = 0.0
    avg_loss: float = 0.0
    top_reasons: list[LossPattern] = Field(default_factory=list)
    worst_symbols: list[SymbolLoss] = Field(default_factory=list)
    by_source: list[SourceLoss] = Field(default_factory=list)
    severity_counts: dict[LossSeverity, int] = Field(default_factory=dict)
    warnings: list[RecordWarning] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Combined
# ---------------------------------------------------------------------------


class WinLossAnalysis(_Report):
    """Everything the Win/Loss Analysis view renders for one request."""

    trace_id: str
    summary: SummaryReport
    loss_patterns: list[LossPattern]
    simulation: SimulationResult
    expiration: ExpirationReport
