"""Input data model — the closed trade record.

A TradeRecord is supplied by the trade-history provider and is never
mutated by the engine.  Field names are snake_case in Python; the
dashboard's camelCase keys (``entryPrice``, ``percentGain``, ...) are
accepted as aliases so provider payloads validate unchanged.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .enums import AssetType, Direction, ResolutionState


class TradeRecord(BaseModel):
    """One trade idea with its resolution, as recorded upstream."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
        allow_inf_nan=False,
    )

    id: str
    symbol: str
    asset_type: AssetType = AssetType.STOCK
    source: str = "unknown"  # Originating signal engine (ai, quant, flow, ...)
    direction: Direction = Direction.LONG

    entry_price: float = Field(gt=0)
    target_price: float = Field(gt=0)
    stop_loss: float = Field(gt=0)

    percent_gain: float | None = None  # None while open
    resolution_state: ResolutionState = ResolutionState.OPEN
    holding_period: str = "unknown"

    # Price extremes over the trade's life (needed for expiration forensics)
    highest_reached: float | None = Field(default=None, gt=0)
    lowest_reached: float | None = Field(default=None, gt=0)

    loss_reason_code: str | None = None

    timestamp: datetime | None = None
    exit_by: datetime | None = None
    entry_valid_until: datetime | None = None

    @model_validator(mode="after")
    def _check_non_degenerate(self) -> TradeRecord:
        if self.target_price == self.entry_price:
            raise ValueError("target_price must differ from entry_price")
        if self.stop_loss == self.entry_price:
            raise ValueError("stop_loss must differ from entry_price")
        return self

    @property
    def is_long(self) -> bool:
        return self.direction == Direction.LONG

    @property
    def is_closed(self) -> bool:
        """Won or lost upstream (eligible for win/loss statistics)."""
        return self.resolution_state in (ResolutionState.WON, ResolutionState.LOST)


class RecordWarning(BaseModel):
    """A trade excluded from one computation, and why."""

    model_config = ConfigDict(frozen=True)

    trade_id: str
    computation: str  # e.g. "summary", "expiration"
    reason: str
