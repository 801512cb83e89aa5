"""Stop-loss threshold simulator — counterfactual sweep.

Re-runs the summary calculator at each candidate stop-loss threshold
("what if every trade had been stopped out at -X%?") and picks the
threshold with the best expectancy among those with a large enough
decided-trade sample.

Each threshold is evaluated independently from the original batch, so
the sweep is a pure function of (trades, thresholds) and can be fanned
out to a thread pool without changing the result.  Metrics are not
assumed monotone in the threshold: a looser stop can only raise the
win rate, but expectancy can move either way, and no smoothing or
interpolation is applied between points.

Usage::

    simulator = StopLossSimulator()
    result = simulator.simulate(trades, thresholds=[0, 2, 5, 10])
    if result.optimal_threshold is None:
        print("insufficient data")
    else:
        print(result.optimal_threshold.rationale)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from winloss_analytics.core.config import DEFAULT_THRESHOLDS
from winloss_analytics.core.enums import SampleReliability
from winloss_analytics.core.models import TradeRecord

from .classifier import validate_threshold
from .models import (
    INFINITY,
    OptimalThreshold,
    ProfitFactor,
    SimulationPoint,
    SimulationResult,
    SummaryReport,
)
from .summary import SummaryCalculator

logger = logging.getLogger(__name__)


def _pf_sort_key(pf: ProfitFactor) -> float:
    return float("inf") if pf == INFINITY else float(pf)


def _to_point(report: SummaryReport) -> SimulationPoint:
    return SimulationPoint(
        threshold_percent=report.loss_threshold_pct,
        wins=report.wins,
        losses=report.losses,
        breakeven=report.breakeven,
        decided_trades=report.decided_trades,
        win_rate=report.win_rate,
        win_rate_lower=report.win_rate_ci.lower,
        win_rate_upper=report.win_rate_ci.upper,
        avg_win=report.avg_win_percent,
        avg_loss=report.avg_loss_percent,
        expectancy=report.expectancy,
        profit_factor=report.profit_factor,
        payoff_ratio=report.payoff_ratio,
        sample_reliability=report.sample_reliability,
    )


class StopLossSimulator:
    """Sweeps stop-loss thresholds and selects an optimal one.

    Parameters
    ----------
    calculator : SummaryCalculator | None
        Calculator used at each threshold.  Default: a fresh one with
        default configuration.
    min_reliability : SampleReliability
        Minimum sample reliability a threshold must reach to be eligible
        as optimal.  Default ``medium``.
    max_workers : int | None
        ``None`` or ``1`` runs sequentially; larger values evaluate
        thresholds on a thread pool.
    """

    def __init__(
        self,
        *,
        calculator: SummaryCalculator | None = None,
        min_reliability: SampleReliability = SampleReliability.MEDIUM,
        max_workers: int | None = None,
    ) -> None:
        self._calc = calculator or SummaryCalculator()
        self._min_reliability = min_reliability
        self._max_workers = max_workers

    def simulate(
        self,
        trades: Iterable[TradeRecord],
        thresholds: Sequence[float] | None = None,
    ) -> SimulationResult:
        """Run the sweep.

        Thresholds are de-duplicated and evaluated in ascending order;
        the returned points are always sorted by ``threshold_percent``.
        """
        trades = list(trades)
        sweep = sorted(set(thresholds if thresholds is not None else DEFAULT_THRESHOLDS))
        for t in sweep:
            validate_threshold(t)

        if self._max_workers and self._max_workers > 1 and len(sweep) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                runs = list(pool.map(lambda t: self._calc.summarize_raw(trades, t), sweep))
        else:
            runs = [self._calc.summarize_raw(trades, t) for t in sweep]

        reports = [report for report, _, _ in runs]
        points = [_to_point(r) for r in reports]
        optimal = self.select_optimal(
            points, scores=[(exp, pf) for _, exp, pf in runs]
        )

        eligible = sum(1 for t in trades if t.is_closed and t.percent_gain is not None)
        warnings = reports[0].warnings if reports else []

        logger.info(
            "Simulated %d thresholds over %d trades; optimal=%s",
            len(points),
            len(trades),
            optimal.threshold_percent if optimal else None,
        )

        return SimulationResult(
            simulations=points,
            optimal_threshold=optimal,
            total_trades=len(trades),
            sample_reliability=self._calc.reliability.classify(eligible),
            warnings=warnings,
        )

    def select_optimal(
        self,
        points: Sequence[SimulationPoint],
        scores: Sequence[tuple[float, ProfitFactor]] | None = None,
    ) -> OptimalThreshold | None:
        """Pick the best threshold among sufficiently-sampled points.

        Highest expectancy wins; ties go to the higher profit factor
        (``"∞"`` beats any finite value), then to the lower threshold.
        Returns ``None`` when no point reaches ``min_reliability``.

        ``scores`` holds the full-precision ``(expectancy, profit_factor)``
        of each point, in the same order.  Without it the points'
        display-rounded values are compared.
        """
        if scores is None:
            scores = [(p.expectancy, p.profit_factor) for p in points]
        candidates = [
            (p, exp, pf) for p, (exp, pf) in zip(points, scores)
            if p.sample_reliability.rank >= self._min_reliability.rank
        ]
        if not candidates:
            return None

        best, _, _ = min(
            candidates,
            key=lambda c: (-c[1], -_pf_sort_key(c[2]), c[0].threshold_percent),
        )

        if len(candidates) == 1:
            why = "only threshold with an adequate sample"
        else:
            why = f"maximizes expectancy across {len(candidates)} adequately-sampled thresholds"

        rationale = (
            f"{best.threshold_percent:g}% stop {why}: expectancy "
            f"{best.expectancy:+.2f}% per trade, win rate {best.win_rate:.1f}% "
            f"(CI {best.win_rate_lower:.1f}-{best.win_rate_upper:.1f}%), "
            f"profit factor {best.profit_factor}, "
            f"{best.decided_trades} decided trades ({best.sample_reliability.value} reliability)"
        )

        return OptimalThreshold(
            threshold_percent=best.threshold_percent,
            expected_win_rate=best.win_rate,
            expectancy=best.expectancy,
            profit_factor=best.profit_factor,
            decided_trades=best.decided_trades,
            sample_reliability=best.sample_reliability,
            rationale=rationale,
        )


def simulate(
    trades: Iterable[TradeRecord],
    thresholds: Sequence[float] | None = None,
    *,
    min_reliability: SampleReliability = SampleReliability.MEDIUM,
    max_workers: int | None = None,
) -> SimulationResult:
    """Functional shortcut for ``StopLossSimulator(...).simulate``."""
    simulator = StopLossSimulator(
        min_reliability=min_reliability, max_workers=max_workers
    )
    return simulator.simulate(trades, thresholds)
