"""Summary statistics — win rate, profit factor, expectancy, distribution.

Classifies every eligible trade at one loss threshold and aggregates
the labelled returns into a ``SummaryReport``.  Breakeven and expired
trades are excluded from the win-rate denominator; open trades are
excluded from everything except the ``open_trades`` count.

Degenerate samples never raise:

* no decided trades      -> win rate 0, expectancy 0, CI sentinel
* no losses, some profit -> profit factor ``"∞"``
* no losses              -> payoff ratio 0

Usage::

    calc = SummaryCalculator()
    report = calc.summarize(trades, loss_threshold_pct=3.0)
    print(report.win_rate, report.win_rate_ci.lower, report.profit_factor)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

import numpy as np

from winloss_analytics.core.config import DEFAULT_BUCKET_EDGES, ReliabilityConfig
from winloss_analytics.core.enums import OutcomeLabel, ResolutionState
from winloss_analytics.core.errors import InvalidParameterError
from winloss_analytics.core.models import TradeRecord

from .classifier import classify_batch
from .intervals import DEFAULT_Z, wilson_interval
from .models import (
    INFINITY,
    CategoryBreakdown,
    ClassifiedOutcome,
    DistributionBucket,
    ProfitFactor,
    SummaryReport,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------- #
# Metric helpers                                                           #
# ---------------------------------------------------------------------- #


def profit_factor(gross_profit: float, gross_loss: float) -> ProfitFactor:
    """Gross profit over gross loss (both absolute).

    ``"∞"`` when there is profit but no loss, ``0.0`` when both are zero.
    """
    if gross_loss > 0:
        return gross_profit / gross_loss
    return INFINITY if gross_profit > 0 else 0.0


def expectancy(win_rate_pct: float, avg_win_pct: float, avg_loss_pct: float) -> float:
    """Expected percent return per decided trade.

    ``avg_loss_pct`` is signed (negative), so it enters additively.
    """
    p = win_rate_pct / 100.0
    return p * avg_win_pct + (1.0 - p) * avg_loss_pct


def payoff_ratio(avg_win_pct: float, avg_loss_pct: float) -> float:
    if avg_loss_pct == 0:
        return 0.0
    return avg_win_pct / abs(avg_loss_pct)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _round_pf(value: ProfitFactor, digits: int = 2) -> ProfitFactor:
    return value if isinstance(value, str) else round(value, digits)


def _edge_label(edge: float) -> str:
    return f"{edge:g}%"


def bucket_labels(edges: Sequence[float]) -> list[str]:
    """Human-readable range labels for ``len(edges) + 1`` buckets."""
    labels = [f"<{_edge_label(edges[0])}"]
    for lo, hi in zip(edges, edges[1:]):
        labels.append(f"{_edge_label(lo)} to {_edge_label(hi)}")
    labels.append(f"≥{_edge_label(edges[-1])}")
    return labels


# ---------------------------------------------------------------------- #
# Calculator                                                               #
# ---------------------------------------------------------------------- #


class SummaryCalculator:
    """Aggregates classified trades into a ``SummaryReport``.

    Parameters
    ----------
    confidence_z : float
        Normal quantile for the win-rate Wilson interval.  Default 1.96.
    bucket_edges : Sequence[float] | None
        Strictly increasing percent-return edges for the distribution.
        Each bucket includes its lower edge.  Default ``[-10, -5, 0, 5, 10]``.
    reliability : ReliabilityConfig | None
        Decided-trade counts for ``high`` / ``medium`` sample reliability.
    """

    def __init__(
        self,
        *,
        confidence_z: float = DEFAULT_Z,
        bucket_edges: Sequence[float] | None = None,
        reliability: ReliabilityConfig | None = None,
    ) -> None:
        edges = list(bucket_edges) if bucket_edges is not None else list(DEFAULT_BUCKET_EDGES)
        if not edges or any(b <= a for a, b in zip(edges, edges[1:])):
            raise InvalidParameterError(
                f"bucket edges must be non-empty and strictly increasing: {edges}"
            )
        self._z = confidence_z
        self._edges = np.asarray(edges, dtype=float)
        self._labels = bucket_labels(edges)
        self._reliability = reliability or ReliabilityConfig()

    @property
    def reliability(self) -> ReliabilityConfig:
        return self._reliability

    def summarize(
        self,
        trades: Iterable[TradeRecord],
        loss_threshold_pct: float,
    ) -> SummaryReport:
        """Compute summary statistics for one loss threshold."""
        return self.summarize_raw(trades, loss_threshold_pct)[0]

    def summarize_raw(
        self,
        trades: Iterable[TradeRecord],
        loss_threshold_pct: float,
    ) -> tuple[SummaryReport, float, ProfitFactor]:
        """Summary plus the unrounded expectancy and profit factor.

        The report carries display-rounded values; ranking thresholds
        against each other uses the full-precision pair.
        """
        trades = list(trades)
        classified, warnings = classify_batch(
            trades, loss_threshold_pct, computation="summary"
        )

        open_trades = sum(
            1 for t in trades if t.resolution_state == ResolutionState.OPEN
        )
        resolved = [
            (t, o) for t, o in classified if o.label != OutcomeLabel.EXPIRED
        ]
        expired = len(classified) - len(resolved)

        win_gains = [o.effective_gain for _, o in resolved if o.label == OutcomeLabel.WIN]
        loss_gains = [o.effective_gain for _, o in resolved if o.label == OutcomeLabel.LOSS]
        wins = len(win_gains)
        losses = len(loss_gains)
        breakeven = len(resolved) - wins - losses
        decided = wins + losses

        win_rate = wins / decided * 100 if decided else 0.0
        ci = wilson_interval(wins, decided, self._z)

        avg_win = _mean(win_gains)
        avg_loss = _mean(loss_gains)
        gross_profit = sum(abs(g) for g in win_gains)
        gross_loss = sum(abs(g) for g in loss_gains)
        raw_expectancy = expectancy(win_rate, avg_win, avg_loss) if decided else 0.0
        raw_pf = profit_factor(gross_profit, gross_loss)

        report = SummaryReport(
            loss_threshold_pct=loss_threshold_pct,
            total_trades=len(trades),
            open_trades=open_trades,
            expired=expired,
            wins=wins,
            losses=losses,
            breakeven=breakeven,
            decided_trades=decided,
            win_rate=round(win_rate, 1),
            win_rate_ci=ci.rounded(1),
            avg_win_percent=round(avg_win, 2),
            avg_loss_percent=round(avg_loss, 2),
            max_win_percent=round(max(win_gains), 2) if win_gains else 0.0,
            max_loss_percent=round(min(loss_gains), 2) if loss_gains else 0.0,
            gross_profit=round(gross_profit, 2),
            gross_loss=round(gross_loss, 2),
            profit_factor=_round_pf(raw_pf),
            expectancy=round(raw_expectancy, 2),
            payoff_ratio=round(payoff_ratio(avg_win, avg_loss), 2),
            distribution=self._distribution(resolved),
            by_asset_type=self._breakdown(resolved, lambda t: t.asset_type.value),
            by_source=self._breakdown(resolved, lambda t: t.source),
            sample_reliability=self._reliability.classify(decided),
            warnings=warnings,
        )

        logger.debug(
            "Summary @%.2f%%: %d trades, %d decided, win_rate=%.1f",
            loss_threshold_pct, len(trades), decided, report.win_rate,
        )
        return report, raw_expectancy, raw_pf

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _distribution(
        self,
        resolved: list[tuple[TradeRecord, ClassifiedOutcome]],
    ) -> list[DistributionBucket]:
        counts = [[0, 0, 0] for _ in self._labels]  # count, wins, losses
        if resolved:
            gains = np.asarray([o.effective_gain for _, o in resolved], dtype=float)
            indices = np.searchsorted(self._edges, gains, side="right")
            for idx, (_, outcome) in zip(indices.tolist(), resolved):
                bucket = counts[idx]
                bucket[0] += 1
                if outcome.label == OutcomeLabel.WIN:
                    bucket[1] += 1
                elif outcome.label == OutcomeLabel.LOSS:
                    bucket[2] += 1

        return [
            DistributionBucket(range=label, count=c, wins=w, losses=l)
            for label, (c, w, l) in zip(self._labels, counts)
        ]

    @staticmethod
    def _breakdown(
        resolved: list[tuple[TradeRecord, ClassifiedOutcome]],
        key_fn,
    ) -> list[CategoryBreakdown]:
        groups: dict[str, list[ClassifiedOutcome]] = defaultdict(list)
        for trade, outcome in resolved:
            groups[key_fn(trade)].append(outcome)

        rows = []
        for key, outcomes in groups.items():
            w = sum(1 for o in outcomes if o.label == OutcomeLabel.WIN)
            l = sum(1 for o in outcomes if o.label == OutcomeLabel.LOSS)
            rows.append(CategoryBreakdown(
                key=key,
                total_trades=len(outcomes),
                wins=w,
                losses=l,
                win_rate=round(w / (w + l) * 100, 1) if (w + l) else 0.0,
                avg_gain=round(_mean([o.effective_gain for o in outcomes]), 2),
            ))
        rows.sort(key=lambda r: (-r.total_trades, r.key))
        return rows


def summarize(
    trades: Iterable[TradeRecord],
    loss_threshold_pct: float = 3.0,
    *,
    confidence_z: float = DEFAULT_Z,
    bucket_edges: Sequence[float] | None = None,
    reliability: ReliabilityConfig | None = None,
) -> SummaryReport:
    """Functional shortcut for ``SummaryCalculator(...).summarize``."""
    calc = SummaryCalculator(
        confidence_z=confidence_z,
        bucket_edges=bucket_edges,
        reliability=reliability,
    )
    return calc.summarize(trades, loss_threshold_pct)
