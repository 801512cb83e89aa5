"""Prometheus metrics for analysis runs.

Module-level collectors register on the default registry at import
time; a host process exposes them however it already exposes
prometheus_client metrics.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge, Histogram

if TYPE_CHECKING:
    from winloss_analytics.analytics.models import SimulationResult, SummaryReport

# ---------------------------------------------------------------------------
# Run metrics
# ---------------------------------------------------------------------------

ANALYSES_TOTAL = Counter(
    "winloss_analyses_total",
    "Total combined win/loss analyses computed",
)

ANALYSIS_LATENCY = Histogram(
    "winloss_analysis_seconds",
    "Wall time of one combined analysis",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)

RECORDS_SKIPPED = Counter(
    "winloss_records_skipped_total",
    "Trade records excluded from a computation",
    ["computation"],
)

# ---------------------------------------------------------------------------
# Latest-result gauges
# ---------------------------------------------------------------------------

WIN_RATE = Gauge(
    "winloss_win_rate",
    "Win rate (percent) of the latest summary",
)

PROFIT_FACTOR = Gauge(
    "winloss_profit_factor",
    "Profit factor of the latest summary (unset when unbounded)",
)

EXPECTANCY = Gauge(
    "winloss_expectancy",
    "Expectancy (percent per decided trade) of the latest summary",
)

DECIDED_TRADES = Gauge(
    "winloss_decided_trades",
    "Decided (win + loss) trades in the latest summary",
)

OPTIMAL_THRESHOLD = Gauge(
    "winloss_optimal_threshold_pct",
    "Optimal stop-loss threshold of the latest sweep (-1 when none qualifies)",
)


def record_analysis(seconds: float) -> None:
    ANALYSES_TOTAL.inc()
    ANALYSIS_LATENCY.observe(seconds)


def record_skipped(computation: str, count: int) -> None:
    if count:
        RECORDS_SKIPPED.labels(computation=computation).inc(count)


def update_summary_metrics(report: SummaryReport) -> None:
    """Update the latest-summary gauges from a report."""
    WIN_RATE.set(report.win_rate)
    EXPECTANCY.set(report.expectancy)
    DECIDED_TRADES.set(report.decided_trades)
    if not isinstance(report.profit_factor, str):  # "∞" has no gauge value
        PROFIT_FACTOR.set(report.profit_factor)


def update_simulation_metrics(result: SimulationResult) -> None:
    optimal = result.optimal_threshold
    OPTIMAL_THRESHOLD.set(optimal.threshold_percent if optimal else -1)
