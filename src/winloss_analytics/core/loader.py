"""Trade history loading.

Reads a batch of trade records from a JSON document (a list, or an
object with a ``trades`` key) or a JSONL file (one record per line).
Rows that fail validation are skipped and reported as warnings so one
bad record never discards the whole history.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from winloss_analytics.observability.metrics import record_skipped

from .errors import TradeLoadError
from .models import RecordWarning, TradeRecord

logger = logging.getLogger(__name__)


def parse_trades(
    rows: Iterable[dict[str, Any]],
) -> tuple[list[TradeRecord], list[RecordWarning]]:
    """Validate raw dicts into TradeRecords, collecting per-row warnings."""
    trades: list[TradeRecord] = []
    warnings: list[RecordWarning] = []

    for i, row in enumerate(rows):
        trade_id = str(row.get("id", f"row_{i}")) if isinstance(row, dict) else f"row_{i}"
        try:
            trades.append(TradeRecord.model_validate(row))
        except ValidationError as exc:
            fields = ", ".join(
                ".".join(str(p) for p in err["loc"]) or "record"
                for err in exc.errors()
            )
            logger.warning("Skipping invalid trade %s: %s", trade_id, fields)
            warnings.append(RecordWarning(
                trade_id=trade_id,
                computation="load",
                reason=f"invalid fields: {fields}",
            ))

    record_skipped("load", len(warnings))
    return trades, warnings


def load_trades(path: str | Path) -> tuple[list[TradeRecord], list[RecordWarning]]:
    """Load and validate a trade history file.

    Raises
    ------
    TradeLoadError
        If the file is missing or is not valid JSON / JSONL.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TradeLoadError(f"Cannot read trade history {path}: {exc}") from exc

    try:
        if path.suffix == ".jsonl":
            rows = [json.loads(line) for line in text.splitlines() if line.strip()]
        else:
            doc = json.loads(text) if text.strip() else []
            rows = doc.get("trades", []) if isinstance(doc, dict) else doc
    except json.JSONDecodeError as exc:
        raise TradeLoadError(f"Malformed JSON in {path}: {exc}") from exc

    if not isinstance(rows, list):
        raise TradeLoadError(f"Expected a list of trades in {path}")

    trades, warnings = parse_trades(rows)
    logger.info(
        "Loaded %d trades from %s (%d skipped)", len(trades), path, len(warnings)
    )
    return trades, warnings
