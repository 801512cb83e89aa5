"""Tests for the TradeRecord input model."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from winloss_analytics.core.enums import AssetType, Direction, ResolutionState
from winloss_analytics.core.models import TradeRecord

from tests.conftest import make_trade


class TestTradeRecord:
    def test_camel_case_payload(self):
        trade = TradeRecord.model_validate({
            "id": "abc",
            "symbol": "BTC-USD",
            "assetType": "crypto",
            "direction": "short",
            "entryPrice": 100,
            "targetPrice": 90,
            "stopLoss": 105,
            "percentGain": 4.2,
            "resolutionState": "won",
            "holdingPeriod": "swing",
            "highestReached": 104,
            "lowestReached": 89,
            "lossReasonCode": None,
            "timestamp": "2024-01-02T14:30:00",
            "exitBy": "2024-01-05T14:30:00",
        })
        assert trade.asset_type == AssetType.CRYPTO
        assert trade.direction == Direction.SHORT
        assert trade.resolution_state == ResolutionState.WON
        assert trade.percent_gain == 4.2
        assert trade.exit_by == datetime(2024, 1, 5, 14, 30)
        assert not trade.is_long
        assert trade.is_closed

    def test_snake_case_accepted(self):
        trade = make_trade("t", 1.0)
        assert trade.entry_price == 100.0
        assert trade.is_long

    def test_defaults(self):
        trade = TradeRecord(
            id="x", symbol="AAPL", entry_price=10, target_price=12, stop_loss=9
        )
        assert trade.resolution_state == ResolutionState.OPEN
        assert trade.percent_gain is None
        assert trade.source == "unknown"
        assert not trade.is_closed

    def test_frozen(self):
        trade = make_trade("t", 1.0)
        with pytest.raises(ValidationError):
            trade.percent_gain = 2.0

    @pytest.mark.parametrize("field", ["entry_price", "target_price", "stop_loss"])
    def test_prices_positive(self, field):
        with pytest.raises(ValidationError):
            make_trade("t", 1.0, **{field: 0.0})

    @pytest.mark.parametrize(
        "field,value",
        [
            ("percent_gain", float("nan")),
            ("percent_gain", float("-inf")),
            ("highest_reached", float("inf")),
            ("lowest_reached", float("nan")),
        ],
    )
    def test_non_finite_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            make_trade("t", **{"percent_gain": -4.0, field: value})

    def test_target_equal_to_entry_rejected(self):
        with pytest.raises(ValidationError, match="target_price"):
            make_trade("t", 1.0, target_price=100.0)

    def test_stop_equal_to_entry_rejected(self):
        with pytest.raises(ValidationError, match="stop_loss"):
            make_trade("t", 1.0, stop_loss=100.0)

    def test_expired_and_lost_states(self):
        assert not make_trade("e", None, state="expired").is_closed
        assert make_trade("l", -3.0).resolution_state == ResolutionState.LOST
