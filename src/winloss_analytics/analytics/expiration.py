"""Expiration forensics — how close did expired trades get?

An expired trade reached neither its target nor its stop before its
validity window closed.  Using the price extremes observed over the
trade's life, this module measures how far each one travelled towards
its target, whether the stop would have been breached, and rolls the
results up by holding period and asset type.  A fixed set of heuristics
turns the cohort numbers into advisory recommendations.

Direction-aware progress::

    long:  (highest_reached - entry) / (target - entry) * 100
    short: (lowest_reached  - entry) / (target - entry) * 100

floored at 0 with no upper clamp, so a trade whose extreme went
through the target reports >= 100.

Usage::

    analyzer = ExpirationAnalyzer()
    report = analyzer.analyze(trades)
    for rec in report.recommendations:
        print(rec.severity, rec.message)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence

from winloss_analytics.core.config import ExpirationConfig, ReliabilityConfig
from winloss_analytics.core.enums import ResolutionState, Severity
from winloss_analytics.core.models import RecordWarning, TradeRecord

from .models import (
    AssetTypeCohort,
    ExpirationReport,
    ExpirationSummary,
    ExpiredTradeDiagnostics,
    HoldingPeriodCohort,
    Recommendation,
)

logger = logging.getLogger(__name__)


def _pct(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def _avg(values: Sequence[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


class ExpirationAnalyzer:
    """Forensic analysis of expired trades.

    Parameters
    ----------
    config : ExpirationConfig | None
        Flag cut-offs and recommendation heuristics.
    reliability : ReliabilityConfig | None
        Sample-size cut-offs applied to the analysed trade count.
    """

    def __init__(
        self,
        *,
        config: ExpirationConfig | None = None,
        reliability: ReliabilityConfig | None = None,
    ) -> None:
        self._cfg = config or ExpirationConfig()
        self._reliability = reliability or ReliabilityConfig()

    # ------------------------------------------------------------------ #
    # Per-trade diagnostics                                                #
    # ------------------------------------------------------------------ #

    def diagnose(self, trade: TradeRecord) -> ExpiredTradeDiagnostics | None:
        """Compute diagnostics for one trade.

        Returns ``None`` when the favourable extreme (``highest_reached``
        for longs, ``lowest_reached`` for shorts) is unknown.
        """
        entry = trade.entry_price
        target = trade.target_price
        stop = trade.stop_loss

        if trade.is_long:
            favourable, adverse = trade.highest_reached, trade.lowest_reached
        else:
            favourable, adverse = trade.lowest_reached, trade.highest_reached
        if favourable is None:
            return None

        target_distance = abs(target - entry) / entry * 100
        stop_distance = abs(stop - entry) / entry * 100

        progress = max(0.0, (favourable - entry) / (target - entry) * 100)
        peak_towards = progress * target_distance / 100
        needed_more = max(0.0, target_distance - peak_towards)

        peak_away: float | None = None
        would_hit_stop = False
        if adverse is not None:
            moved_away = (entry - adverse) if trade.is_long else (adverse - entry)
            peak_away = max(0.0, moved_away / entry * 100)
            would_hit_stop = adverse <= stop if trade.is_long else adverse >= stop

        holding_minutes: float | None = None
        if trade.timestamp is not None and trade.exit_by is not None:
            holding_minutes = round(
                (trade.exit_by - trade.timestamp).total_seconds() / 60, 1
            )

        return ExpiredTradeDiagnostics(
            id=trade.id,
            symbol=trade.symbol,
            asset_type=trade.asset_type.value,
            direction=trade.direction.value,
            holding_period=trade.holding_period,
            source=trade.source,
            entry_price=entry,
            target_price=target,
            stop_loss=stop,
            highest_reached=trade.highest_reached,
            lowest_reached=trade.lowest_reached,
            target_distance_percent=round(target_distance, 2),
            stop_distance_percent=round(stop_distance, 2),
            risk_reward_ratio=round(target_distance / stop_distance, 2),
            peak_towards_target_percent=round(peak_towards, 2),
            peak_away_from_target_percent=(
                round(peak_away, 2) if peak_away is not None else None
            ),
            progress_to_target_percent=round(progress, 1),
            needed_more_percent=round(needed_more, 2),
            almost_hit_target=progress >= self._cfg.almost_hit_pct,
            very_close=progress >= self._cfg.very_close_pct,
            would_have_hit_stop=would_hit_stop,
            holding_time_minutes=holding_minutes,
        )

    # ------------------------------------------------------------------ #
    # Batch analysis                                                       #
    # ------------------------------------------------------------------ #

    def analyze(self, trades: Iterable[TradeRecord]) -> ExpirationReport:
        expired = [
            t for t in trades if t.resolution_state == ResolutionState.EXPIRED
        ]
        if not expired:
            return ExpirationReport(
                summary=ExpirationSummary(message="No expired trades to analyze"),
            )

        diagnostics: list[ExpiredTradeDiagnostics] = []
        warnings: list[RecordWarning] = []

        for trade in expired:
            diag = self.diagnose(trade)
            if diag is None:
                field_name = "highest_reached" if trade.is_long else "lowest_reached"
                logger.debug("Expired trade %s lacks %s", trade.id, field_name)
                warnings.append(RecordWarning(
                    trade_id=trade.id,
                    computation="expiration",
                    reason=f"missing {field_name}",
                ))
                continue
            diagnostics.append(diag)

        summary = self._summarize(diagnostics, total_expired=len(expired))
        by_period = self._by_holding_period(diagnostics)
        by_asset = self._by_asset_type(diagnostics)

        # Closest calls first
        diagnostics.sort(key=lambda d: (-d.progress_to_target_percent, d.id))

        report = ExpirationReport(
            summary=summary,
            by_holding_period=by_period,
            by_asset_type=by_asset,
            trades=diagnostics,
            recommendations=self.recommend(summary, by_period, by_asset),
            reliability=self._reliability.classify(len(diagnostics)),
            warnings=warnings,
        )
        logger.debug(
            "Expiration forensics: %d expired, %d analyzed, %d recommendations",
            len(expired), len(diagnostics), len(report.recommendations),
        )
        return report

    def _summarize(
        self,
        diags: list[ExpiredTradeDiagnostics],
        *,
        total_expired: int,
    ) -> ExpirationSummary:
        n = len(diags)
        almost = sum(1 for d in diags if d.almost_hit_target)
        close = sum(1 for d in diags if d.very_close)
        stopped = sum(1 for d in diags if d.would_have_hit_stop)
        return ExpirationSummary(
            total_expired=total_expired,
            analyzed=n,
            missing_extremes=total_expired - n,
            almost_hit_target_count=almost,
            almost_hit_target_percent=_pct(almost, n),
            very_close_count=close,
            very_close_percent=_pct(close, n),
            would_have_hit_stop_count=stopped,
            would_have_hit_stop_percent=_pct(stopped, n),
            avg_progress_to_target=_avg([d.progress_to_target_percent for d in diags]),
            avg_needed_more_percent=_avg([d.needed_more_percent for d in diags]),
            message=None if n else "Expired trades lack price extremes; nothing to analyze",
        )

    @staticmethod
    def _group(
        diags: list[ExpiredTradeDiagnostics],
        key_fn: Callable[[ExpiredTradeDiagnostics], str],
    ) -> list[tuple[str, list[ExpiredTradeDiagnostics]]]:
        groups: dict[str, list[ExpiredTradeDiagnostics]] = defaultdict(list)
        for d in diags:
            groups[key_fn(d)].append(d)
        return sorted(groups.items(), key=lambda kv: (-len(kv[1]), kv[0]))

    def _by_holding_period(
        self, diags: list[ExpiredTradeDiagnostics]
    ) -> list[HoldingPeriodCohort]:
        cohorts = []
        for period, group in self._group(diags, lambda d: d.holding_period):
            almost = sum(1 for d in group if d.almost_hit_target)
            cohorts.append(HoldingPeriodCohort(
                period=period,
                count=len(group),
                almost_hit_target_count=almost,
                almost_hit_target_percent=_pct(almost, len(group)),
                avg_progress_to_target=_avg([d.progress_to_target_percent for d in group]),
                avg_needed_more_percent=_avg([d.needed_more_percent for d in group]),
            ))
        return cohorts

    def _by_asset_type(
        self, diags: list[ExpiredTradeDiagnostics]
    ) -> list[AssetTypeCohort]:
        cohorts = []
        for asset_type, group in self._group(diags, lambda d: d.asset_type):
            almost = sum(1 for d in group if d.almost_hit_target)
            cohorts.append(AssetTypeCohort(
                asset_type=asset_type,
                count=len(group),
                almost_hit_target_percent=_pct(almost, len(group)),
                avg_progress_to_target=_avg([d.progress_to_target_percent for d in group]),
            ))
        return cohorts

    # ------------------------------------------------------------------ #
    # Recommendations                                                      #
    # ------------------------------------------------------------------ #

    def recommend(
        self,
        summary: ExpirationSummary,
        by_period: Sequence[HoldingPeriodCohort],
        by_asset: Sequence[AssetTypeCohort],
    ) -> list[Recommendation]:
        """Advisory heuristics over the cohort statistics.

        Cohorts (and the overall sample) smaller than ``min_cohort_size``
        produce nothing, so an empty or tiny sample yields ``[]``.
        """
        cfg = self._cfg
        recs: list[Recommendation] = []

        for cohort in by_period:
            if cohort.count < cfg.min_cohort_size:
                continue
            if cohort.almost_hit_target_percent > cfg.cohort_alert_pct:
                severity = (
                    Severity.CRITICAL
                    if cohort.almost_hit_target_percent > cfg.cohort_critical_pct
                    else Severity.WARNING
                )
                recs.append(Recommendation(
                    type="extend_exit_window",
                    severity=severity,
                    message=(
                        f"{cohort.almost_hit_target_percent:g}% of expired {cohort.period} "
                        f"trades came within reach of target; consider widening the "
                        f"exit window for {cohort.period} trades"
                    ),
                    data={
                        "holding_period": cohort.period,
                        "count": cohort.count,
                        "almost_hit_target_percent": cohort.almost_hit_target_percent,
                    },
                ))

        for cohort in by_asset:
            if cohort.count < cfg.min_cohort_size:
                continue
            if cohort.almost_hit_target_percent > cfg.cohort_alert_pct:
                recs.append(Recommendation(
                    type="asset_type_near_misses",
                    severity=Severity.INFO,
                    message=(
                        f"{cohort.almost_hit_target_percent:g}% of expired {cohort.asset_type} "
                        f"trades almost hit target; review {cohort.asset_type} expiry rules"
                    ),
                    data={
                        "asset_type": cohort.asset_type,
                        "count": cohort.count,
                        "almost_hit_target_percent": cohort.almost_hit_target_percent,
                    },
                ))

        if summary.analyzed < cfg.min_cohort_size:
            return recs

        if summary.very_close_percent >= cfg.very_close_alert_pct:
            recs.append(Recommendation(
                type="tighten_targets",
                severity=Severity.WARNING,
                message=(
                    f"{summary.very_close_percent:g}% of expired trades got within "
                    f"{100 - cfg.very_close_pct:g}% of "
                    f"target; targets about {summary.avg_needed_more_percent:g}% closer "
                    f"would have converted many of them"
                ),
                data={
                    "very_close_percent": summary.very_close_percent,
                    "avg_needed_more_percent": summary.avg_needed_more_percent,
                },
            ))

        if summary.would_have_hit_stop_percent > cfg.stop_breach_alert_pct:
            recs.append(Recommendation(
                type="expiry_masks_losses",
                severity=Severity.WARNING,
                message=(
                    f"{summary.would_have_hit_stop_percent:g}% of expired trades traded "
                    f"through their stop level; expiry is hiding stop-outs"
                ),
                data={"would_have_hit_stop_percent": summary.would_have_hit_stop_percent},
            ))

        if summary.avg_progress_to_target < cfg.low_progress_pct:
            recs.append(Recommendation(
                type="targets_too_far",
                severity=Severity.INFO,
                message=(
                    f"Expired trades covered only {summary.avg_progress_to_target:g}% of the "
                    f"distance to target on average; targets may be too ambitious"
                ),
                data={"avg_progress_to_target": summary.avg_progress_to_target},
            ))

        return recs


def analyze_expirations(
    trades: Iterable[TradeRecord],
    *,
    config: ExpirationConfig | None = None,
    reliability: ReliabilityConfig | None = None,
) -> ExpirationReport:
    """Functional shortcut for ``ExpirationAnalyzer(...).analyze``."""
    return ExpirationAnalyzer(config=config, reliability=reliability).analyze(trades)
