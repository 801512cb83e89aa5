"""Shared fixtures for the winloss-analytics test suite."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from winloss_analytics.core.enums import AssetType, Direction, ResolutionState
from winloss_analytics.core.models import TradeRecord

BASE_TIME = datetime(2024, 1, 2, 14, 30, 0)


def make_trade(
    trade_id: str = "t1",
    percent_gain: float | None = 5.0,
    *,
    state: ResolutionState | str | None = None,
    symbol: str = "AAPL",
    asset_type: AssetType | str = AssetType.STOCK,
    source: str = "ai",
    direction: Direction | str = Direction.LONG,
    entry_price: float = 100.0,
    target_price: float | None = None,
    stop_loss: float | None = None,
    holding_period: str = "swing",
    highest_reached: float | None = None,
    lowest_reached: float | None = None,
    loss_reason_code: str | None = None,
    timestamp: datetime | None = None,
    exit_by: datetime | None = None,
) -> TradeRecord:
    """Build a TradeRecord with sensible defaults.

    The upstream state defaults to ``won`` for non-negative gains and
    ``lost`` otherwise.  Target/stop default to +10% / -5% of entry
    (mirrored for shorts).
    """
    if state is None:
        state = ResolutionState.WON if (percent_gain or 0) >= 0 else ResolutionState.LOST
    long = Direction(direction) == Direction.LONG
    if target_price is None:
        target_price = entry_price * (1.10 if long else 0.90)
    if stop_loss is None:
        stop_loss = entry_price * (0.95 if long else 1.05)
    return TradeRecord(
        id=trade_id,
        symbol=symbol,
        asset_type=asset_type,
        source=source,
        direction=direction,
        entry_price=entry_price,
        target_price=target_price,
        stop_loss=stop_loss,
        percent_gain=percent_gain,
        resolution_state=state,
        holding_period=holding_period,
        highest_reached=highest_reached,
        lowest_reached=lowest_reached,
        loss_reason_code=loss_reason_code,
        timestamp=timestamp or BASE_TIME,
        exit_by=exit_by,
    )


def make_batch(gains: list[float], prefix: str = "t", **kwargs) -> list[TradeRecord]:
    """One closed trade per gain, ids ``t0``, ``t1``, ..."""
    return [make_trade(f"{prefix}{i}", g, **kwargs) for i, g in enumerate(gains)]


def make_expired(
    trade_id: str,
    *,
    highest_reached: float | None,
    lowest_reached: float | None,
    **kwargs,
) -> TradeRecord:
    return make_trade(
        trade_id,
        None,
        state=ResolutionState.EXPIRED,
        highest_reached=highest_reached,
        lowest_reached=lowest_reached,
        **kwargs,
    )


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def scenario_trades() -> list[TradeRecord]:
    """Six wins (+2..+15) and four losers (-2..-8)."""
    return make_batch([2.0, 4.0, 6.0, 8.0, 10.0, 15.0, -2.0, -4.0, -6.0, -8.0])


@pytest.fixture
def mixed_batch(scenario_trades) -> list[TradeRecord]:
    """Scenario trades plus an open trade and two expired trades."""
    return scenario_trades + [
        make_trade("open1", None, state=ResolutionState.OPEN),
        make_expired("exp1", highest_reached=108.0, lowest_reached=97.0),
        make_expired(
            "exp2",
            highest_reached=102.0,
            lowest_reached=94.0,
            holding_period="intraday",
            exit_by=BASE_TIME + timedelta(hours=6),
        ),
    ]


@pytest.fixture
def sweep_batch() -> list[TradeRecord]:
    """20 wins of +5% and ten losers from -1% to -10%."""
    return make_batch([5.0] * 20 + [-float(i) for i in range(1, 11)])
