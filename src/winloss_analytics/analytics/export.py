"""Report export — JSON and CSV serialisation.

Turns report models into strings for the download/export collaborator.
Transport and file naming are the caller's concern.

Usage::

    exporter = ReportExporter()
    json_str = exporter.to_json(analysis)
    csv_str = exporter.simulations_to_csv(result)
    rows_csv = exporter.trades_to_csv(trades, loss_threshold_pct=3.0)
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from winloss_analytics.core.errors import IncompleteTradeError
from winloss_analytics.core.models import TradeRecord

from .classifier import classify
from .models import SimulationResult

logger = logging.getLogger(__name__)

_SIMULATION_COLUMNS = [
    "threshold_percent",
    "wins",
    "losses",
    "breakeven",
    "decided_trades",
    "win_rate",
    "win_rate_lower",
    "win_rate_upper",
    "avg_win",
    "avg_loss",
    "expectancy",
    "profit_factor",
    "payoff_ratio",
    "sample_reliability",
]

_TRADE_COLUMNS = [
    "id",
    "symbol",
    "asset_type",
    "source",
    "direction",
    "holding_period",
    "entry_price",
    "target_price",
    "stop_loss",
    "percent_gain",
    "resolution_state",
    "outcome_label",
    "agrees_with_upstream",
    "loss_reason_code",
    "timestamp",
]


class ReportExporter:
    """Serialise reports and labelled trades.

    Parameters
    ----------
    indent : int
        JSON indentation level.  Default 2.
    """

    def __init__(self, *, indent: int = 2) -> None:
        self._indent = indent

    # ------------------------------------------------------------------ #
    # JSON                                                                 #
    # ------------------------------------------------------------------ #

    def to_json(self, report: BaseModel | list[BaseModel]) -> str:
        """Serialise one report (or a list, e.g. loss patterns) to JSON."""
        if isinstance(report, list):
            payload: Any = [r.model_dump(mode="json") for r in report]
        else:
            payload = report.model_dump(mode="json")
        return json.dumps(payload, indent=self._indent, ensure_ascii=False)

    def training_export(
        self,
        trades: Iterable[TradeRecord],
        *,
        loss_threshold_pct: float,
        exported_at: datetime | None = None,
    ) -> dict[str, Any]:
        """Labelled trade rows plus a metadata block, as a JSON-ready dict."""
        rows = [self._trade_to_row(t, loss_threshold_pct) for t in trades]
        return {
            "metadata": {
                "totalRecords": len(rows),
                "lossThresholdPct": loss_threshold_pct,
                "exportedAt": exported_at.isoformat() if exported_at else None,
            },
            "trades": rows,
        }

    # ------------------------------------------------------------------ #
    # CSV                                                                  #
    # ------------------------------------------------------------------ #

    def simulations_to_csv(self, result: SimulationResult) -> str:
        """One CSV row per simulated threshold, ascending."""
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=_SIMULATION_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for point in result.simulations:
            writer.writerow(point.model_dump(mode="json"))
        return buf.getvalue()

    def trades_to_csv(
        self,
        trades: Iterable[TradeRecord],
        *,
        loss_threshold_pct: float,
    ) -> str:
        """Trades with their threshold label next to the upstream state."""
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=_TRADE_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for trade in trades:
            row = self._trade_to_row(trade, loss_threshold_pct)
            writer.writerow({c: "" if row.get(c) is None else row[c] for c in _TRADE_COLUMNS})
        return buf.getvalue()

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _trade_to_row(trade: TradeRecord, loss_threshold_pct: float) -> dict[str, Any]:
        row = trade.model_dump(mode="json")
        try:
            outcome = classify(trade, loss_threshold_pct)
        except IncompleteTradeError:
            logger.debug("Exporting trade %s without a label", trade.id)
            outcome = None
        row["outcome_label"] = outcome.label.value if outcome else None
        row["agrees_with_upstream"] = (
            outcome.agrees_with_upstream(trade) if outcome else None
        )
        return row
