"""Engine facade — one configured entry point for every report.

Holds an ``EngineConfig`` and builds the component objects from it so
callers can run the whole Win/Loss Analysis view with zero arguments
beyond the trade batch.  Every call re-computes from the batch it is
given; the facade keeps no per-request state.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence

from winloss_analytics.core.config import EngineConfig
from winloss_analytics.core.models import TradeRecord
from winloss_analytics.observability import metrics
from winloss_analytics.observability.logger import new_trace_id

from .expiration import ExpirationAnalyzer
from .loss_patterns import aggregate_loss_patterns, summarize_losses
from .models import (
    ExpirationReport,
    LossPattern,
    LossSummary,
    SimulationResult,
    SummaryReport,
    WinLossAnalysis,
)
from .simulator import StopLossSimulator
from .summary import SummaryCalculator

logger = logging.getLogger(__name__)


class WinLossAnalyzer:
    """Configured facade over the analytics components."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()
        cfg = self._config
        self._calculator = SummaryCalculator(
            confidence_z=cfg.confidence_z,
            bucket_edges=cfg.distribution_bucket_edges,
            reliability=cfg.reliability,
        )
        self._simulator = StopLossSimulator(
            calculator=self._calculator,
            min_reliability=cfg.min_reliability,
            max_workers=cfg.simulation_workers,
        )
        self._expiration = ExpirationAnalyzer(
            config=cfg.expiration,
            reliability=cfg.reliability,
        )

    @property
    def config(self) -> EngineConfig:
        return self._config

    def summary(
        self,
        trades: Iterable[TradeRecord],
        loss_threshold_pct: float | None = None,
    ) -> SummaryReport:
        threshold = self._threshold(loss_threshold_pct)
        return self._calculator.summarize(trades, threshold)

    def simulate(
        self,
        trades: Iterable[TradeRecord],
        thresholds: Sequence[float] | None = None,
    ) -> SimulationResult:
        sweep = thresholds if thresholds is not None else self._config.thresholds
        return self._simulator.simulate(trades, sweep)

    def expirations(self, trades: Iterable[TradeRecord]) -> ExpirationReport:
        return self._expiration.analyze(trades)

    def loss_patterns(
        self,
        trades: Iterable[TradeRecord],
        loss_threshold_pct: float | None = None,
    ) -> list[LossPattern]:
        return aggregate_loss_patterns(trades, self._threshold(loss_threshold_pct))

    def loss_summary(
        self,
        trades: Iterable[TradeRecord],
        loss_threshold_pct: float | None = None,
    ) -> LossSummary:
        return summarize_losses(trades, self._threshold(loss_threshold_pct))

    def analyze(
        self,
        trades: Iterable[TradeRecord],
        loss_threshold_pct: float | None = None,
    ) -> WinLossAnalysis:
        """Run every component over one immutable snapshot of the batch."""
        start = time.perf_counter()
        snapshot = tuple(trades)
        trace_id = new_trace_id()
        threshold = self._threshold(loss_threshold_pct)

        logger.info(
            "Analyzing %d trades at %.2f%% loss threshold (trace %s)",
            len(snapshot), threshold, trace_id,
        )

        analysis = WinLossAnalysis(
            trace_id=trace_id,
            summary=self._calculator.summarize(snapshot, threshold),
            loss_patterns=aggregate_loss_patterns(snapshot, threshold),
            simulation=self.simulate(snapshot),
            expiration=self._expiration.analyze(snapshot),
        )

        metrics.update_summary_metrics(analysis.summary)
        metrics.update_simulation_metrics(analysis.simulation)
        metrics.record_skipped("summary", len(analysis.summary.warnings))
        metrics.record_skipped("expiration", len(analysis.expiration.warnings))
        metrics.record_analysis(time.perf_counter() - start)
        return analysis

    def _threshold(self, loss_threshold_pct: float | None) -> float:
        if loss_threshold_pct is None:
            return self._config.loss_threshold_pct
        return loss_threshold_pct
