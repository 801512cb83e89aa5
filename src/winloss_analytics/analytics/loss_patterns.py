"""Loss pattern aggregation — why are trades losing?

Groups trades labelled ``loss`` by the classifier (at one threshold,
normally the platform default) by their post-mortem
``loss_reason_code``.  Missing or blank codes fall into an
``"unknown"`` bucket.

Usage::

    patterns = aggregate_loss_patterns(trades, loss_threshold_pct=3.0)
    print(patterns[0].reason, patterns[0].count, patterns[0].avg_loss)

    summary = summarize_losses(trades)
    print(summary.worst_symbols, summary.severity_counts)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable

from winloss_analytics.core.enums import LossSeverity, OutcomeLabel
from winloss_analytics.core.models import RecordWarning, TradeRecord

from .classifier import classify_batch
from .models import LossPattern, LossSummary, SourceLoss, SymbolLoss

logger = logging.getLogger(__name__)

UNKNOWN_REASON = "unknown"
DEFAULT_LOSS_THRESHOLD = 3.0


def loss_severity(percent_gain: float) -> LossSeverity:
    """Bucket a single losing return by size."""
    if percent_gain >= -2:
        return LossSeverity.MINOR
    if percent_gain >= -5:
        return LossSeverity.MODERATE
    if percent_gain >= -10:
        return LossSeverity.SIGNIFICANT
    return LossSeverity.SEVERE


def _losing_trades(
    trades: Iterable[TradeRecord], loss_threshold_pct: float
) -> tuple[list[TradeRecord], list[RecordWarning]]:
    classified, warnings = classify_batch(
        trades, loss_threshold_pct, computation="loss_patterns"
    )
    return [t for t, o in classified if o.label == OutcomeLabel.LOSS], warnings


def _reason(trade: TradeRecord) -> str:
    code = (trade.loss_reason_code or "").strip()
    return code or UNKNOWN_REASON


def _group_losses(
    losers: list[TradeRecord], key_fn
) -> dict[str, list[float]]:
    groups: dict[str, list[float]] = defaultdict(list)
    for t in losers:
        groups[key_fn(t)].append(t.percent_gain)
    return groups


def aggregate_loss_patterns(
    trades: Iterable[TradeRecord],
    loss_threshold_pct: float = DEFAULT_LOSS_THRESHOLD,
) -> list[LossPattern]:
    """Group losing trades by reason code.

    Returns ``[]`` for an empty batch or a batch with no losses.  Sorted
    by count descending, then reason ascending.
    """
    losers, _ = _losing_trades(trades, loss_threshold_pct)
    patterns = [
        LossPattern(reason=reason, count=len(gains), avg_loss=round(sum(gains) / len(gains), 2))
        for reason, gains in _group_losses(losers, _reason).items()
    ]
    patterns.sort(key=lambda p: (-p.count, p.reason))
    return patterns


def summarize_losses(
    trades: Iterable[TradeRecord],
    loss_threshold_pct: float = DEFAULT_LOSS_THRESHOLD,
    *,
    top_reasons: int = 5,
    worst_symbols: int = 10,
) -> LossSummary:
    """Broader loss report: reasons, worst symbols, sources, severity.

    Won/lost trades without a ``percent_gain`` are left out and listed
    in ``warnings``.
    """
    trades = list(trades)
    losers, warnings = _losing_trades(trades, loss_threshold_pct)
    if not losers:
        return LossSummary(loss_threshold_pct=loss_threshold_pct, warnings=warnings)

    total = sum(t.percent_gain for t in losers)

    symbols = [
        SymbolLoss(symbol=symbol, count=len(gains), total_loss=round(sum(gains), 2))
        for symbol, gains in _group_losses(losers, lambda t: t.symbol).items()
    ]
    symbols.sort(key=lambda s: (s.total_loss, s.symbol))  # Most negative first

    sources = [
        SourceLoss(source=source, count=len(gains), avg_loss=round(sum(gains) / len(gains), 2))
        for source, gains in _group_losses(losers, lambda t: t.source or UNKNOWN_REASON).items()
    ]
    sources.sort(key=lambda s: (-s.count, s.source))

    severity_counts = {sev: 0 for sev in LossSeverity}
    for t in losers:
        severity_counts[loss_severity(t.percent_gain)] += 1

    logger.debug("Loss summary: %d losses at %.2f%% threshold", len(losers), loss_threshold_pct)

    return LossSummary(
        loss_threshold_pct=loss_threshold_pct,
        total_losses=len(losers),
        total_loss_percent=round(total, 2),
        avg_loss=round(total / len(losers), 2),
        top_reasons=aggregate_loss_patterns(trades, loss_threshold_pct)[:top_reasons],
        worst_symbols=symbols[:worst_symbols],
        by_source=sources,
        severity_counts=severity_counts,
        warnings=warnings,
    )
