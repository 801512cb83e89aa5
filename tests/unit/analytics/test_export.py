"""Tests for ReportExporter — JSON and CSV serialisation."""

import csv
import io
import json
from datetime import datetime

import pytest

from winloss_analytics.analytics.export import ReportExporter
from winloss_analytics.analytics.loss_patterns import aggregate_loss_patterns
from winloss_analytics.analytics.simulator import simulate
from winloss_analytics.analytics.summary import summarize
from winloss_analytics.core.enums import ResolutionState

from tests.conftest import make_batch, make_trade


@pytest.fixture
def exporter():
    return ReportExporter()


def _rows(text):
    return list(csv.DictReader(io.StringIO(text)))


class TestJson:
    def test_report_round_trips_to_dict(self, exporter, scenario_trades):
        report = summarize(scenario_trades, 3.0)
        payload = json.loads(exporter.to_json(report))
        assert payload["win_rate"] == 66.7
        assert payload["sample_reliability"] == "low"
        assert payload["win_rate_ci"]["insufficient_sample"] is False

    def test_infinity_sentinel_unescaped(self, exporter):
        report = summarize(make_batch([2.0, 4.0]), 3.0)
        text = exporter.to_json(report)
        assert '"profit_factor": "∞"' in text

    def test_list_of_reports(self, exporter, scenario_trades):
        patterns = aggregate_loss_patterns(scenario_trades, 3.0)
        payload = json.loads(exporter.to_json(patterns))
        assert payload == [{"reason": "unknown", "count": 3, "avg_loss": -6.0}]

    def test_indent(self, scenario_trades):
        compact = ReportExporter(indent=None).to_json(summarize(scenario_trades, 3.0))
        assert "\n" not in compact


class TestCsv:
    def test_simulations(self, exporter, scenario_trades):
        text = exporter.simulations_to_csv(simulate(scenario_trades, [0, 3, 10]))
        rows = _rows(text)
        assert [float(r["threshold_percent"]) for r in rows] == [0, 3, 10]
        assert rows[1]["losses"] == "3"
        assert text.splitlines()[0].startswith("threshold_percent,wins,losses")

    def test_trades_labelled(self, exporter):
        trades = [
            make_trade("w", 4.0),
            make_trade("be", -2.0),
            make_trade("l", -6.0),
            make_trade("o", None, state=ResolutionState.OPEN),
        ]
        rows = {r["id"]: r for r in _rows(exporter.trades_to_csv(trades, loss_threshold_pct=3.0))}

        assert rows["w"]["outcome_label"] == "win"
        assert rows["w"]["agrees_with_upstream"] == "True"
        assert rows["be"]["outcome_label"] == "breakeven"
        assert rows["be"]["agrees_with_upstream"] == "False"
        assert rows["l"]["outcome_label"] == "loss"
        assert rows["o"]["outcome_label"] == ""
        assert rows["o"]["percent_gain"] == ""

    def test_incomplete_trade_still_exported(self, exporter):
        trade = make_trade("bad", None, state=ResolutionState.WON)
        rows = _rows(exporter.trades_to_csv([trade], loss_threshold_pct=3.0))
        assert rows[0]["id"] == "bad"
        assert rows[0]["outcome_label"] == ""


class TestTrainingExport:
    def test_metadata(self, exporter, scenario_trades):
        stamp = datetime(2024, 3, 1, 12, 0, 0)
        doc = exporter.training_export(
            scenario_trades, loss_threshold_pct=3.0, exported_at=stamp
        )
        assert doc["metadata"] == {
            "totalRecords": 10,
            "lossThresholdPct": 3.0,
            "exportedAt": "2024-03-01T12:00:00",
        }
        labels = [row["outcome_label"] for row in doc["trades"]]
        assert labels.count("win") == 6
        assert labels.count("breakeven") == 1
        json.dumps(doc)
