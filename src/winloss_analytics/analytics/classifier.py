"""Outcome classifier — threshold-dependent win/loss/breakeven labels.

The upstream ``resolution_state`` records whether a trade hit its
*original* target or stop.  This classifier answers a different
question: "had the stop been set at ``loss_threshold_pct`` below entry,
how would this realised return be labelled?"  The two labels may
disagree, and the stop-loss simulator relies on that.

Label rule (evaluated in order)::

    percent_gain >= 0                    -> win  (0% is a win)
    percent_gain <= -loss_threshold_pct  -> loss (boundary inclusive)
    otherwise                            -> breakeven

With ``loss_threshold_pct == 0`` every negative return is a loss and
nothing is breakeven.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from winloss_analytics.core.enums import OutcomeLabel, ResolutionState
from winloss_analytics.core.errors import IncompleteTradeError, InvalidParameterError
from winloss_analytics.core.models import RecordWarning, TradeRecord

from .models import ClassifiedOutcome

logger = logging.getLogger(__name__)


def validate_threshold(loss_threshold_pct: float) -> None:
    if loss_threshold_pct < 0:
        raise InvalidParameterError(
            f"loss_threshold_pct must be >= 0, got {loss_threshold_pct}"
        )


def label_for_gain(percent_gain: float, loss_threshold_pct: float) -> OutcomeLabel:
    """Label a realised percent return against a loss threshold."""
    if percent_gain >= 0:
        return OutcomeLabel.WIN
    if percent_gain <= -loss_threshold_pct:
        return OutcomeLabel.LOSS
    return OutcomeLabel.BREAKEVEN


def classify(
    trade: TradeRecord,
    loss_threshold_pct: float,
) -> ClassifiedOutcome | None:
    """Classify one trade at the given loss threshold.

    Returns
    -------
    ClassifiedOutcome | None
        ``None`` for open trades.  Expired trades are labelled
        ``expired`` regardless of their return.

    Raises
    ------
    IncompleteTradeError
        A won/lost trade has no ``percent_gain``.
    InvalidParameterError
        ``loss_threshold_pct`` is negative.
    """
    validate_threshold(loss_threshold_pct)

    state = trade.resolution_state
    if state == ResolutionState.OPEN:
        return None
    if state == ResolutionState.EXPIRED:
        return ClassifiedOutcome(
            trade_id=trade.id,
            label=OutcomeLabel.EXPIRED,
            effective_gain=trade.percent_gain,
        )
    if trade.percent_gain is None:
        raise IncompleteTradeError(trade.id, "percent_gain", "classification")

    return ClassifiedOutcome(
        trade_id=trade.id,
        label=label_for_gain(trade.percent_gain, loss_threshold_pct),
        effective_gain=trade.percent_gain,
    )


def classify_batch(
    trades: Iterable[TradeRecord],
    loss_threshold_pct: float,
    *,
    computation: str = "classification",
) -> tuple[list[tuple[TradeRecord, ClassifiedOutcome]], list[RecordWarning]]:
    """Classify a batch, skipping incomplete records.

    Open trades are dropped silently; incomplete won/lost trades are
    dropped with a warning.  Input order is preserved.
    """
    validate_threshold(loss_threshold_pct)

    classified: list[tuple[TradeRecord, ClassifiedOutcome]] = []
    warnings: list[RecordWarning] = []

    for trade in trades:
        try:
            outcome = classify(trade, loss_threshold_pct)
        except IncompleteTradeError as exc:
            logger.debug("Excluding trade %s from %s: %s", trade.id, computation, exc)
            warnings.append(RecordWarning(
                trade_id=trade.id,
                computation=computation,
                reason=f"missing {exc.field_name}",
            ))
            continue
        if outcome is not None:
            classified.append((trade, outcome))

    return classified, warnings
