"""Tests for SummaryCalculator — win rate, profit factor, expectancy."""

import pytest

from winloss_analytics.analytics.models import INFINITY
from winloss_analytics.analytics.summary import (
    SummaryCalculator,
    bucket_labels,
    expectancy,
    payoff_ratio,
    profit_factor,
    summarize,
)
from winloss_analytics.core.config import ReliabilityConfig
from winloss_analytics.core.enums import AssetType, ResolutionState, SampleReliability
from winloss_analytics.core.errors import InvalidParameterError

from tests.conftest import make_batch, make_trade


class TestMetricHelpers:
    def test_profit_factor_no_losses(self):
        assert profit_factor(50.0, 0.0) == INFINITY

    def test_profit_factor_nothing(self):
        assert profit_factor(0.0, 0.0) == 0.0

    def test_profit_factor_ratio(self):
        assert profit_factor(30.0, 10.0) == pytest.approx(3.0)

    def test_profit_factor_only_losses(self):
        assert profit_factor(0.0, 12.0) == 0.0

    def test_expectancy(self):
        assert expectancy(50.0, 6.0, -4.0) == pytest.approx(1.0)

    def test_payoff_ratio_guarded(self):
        assert payoff_ratio(7.5, 0.0) == 0.0
        assert payoff_ratio(7.5, -6.0) == pytest.approx(1.25)

    def test_bucket_labels(self):
        assert bucket_labels([-10, -5, 0, 5, 10]) == [
            "<-10%", "-10% to -5%", "-5% to 0%", "0% to 5%", "5% to 10%", "≥10%",
        ]


class TestScenario:
    """Six wins and four losers at a 3% loss threshold."""

    def test_counts(self, scenario_trades):
        report = summarize(scenario_trades, 3.0)
        assert report.total_trades == 10
        assert report.wins == 6
        # -2% sits inside the 3% threshold
        assert report.losses == 3
        assert report.breakeven == 1
        assert report.decided_trades == 9
        assert report.sample_reliability == SampleReliability.LOW

    def test_win_rate_over_decided_only(self, scenario_trades):
        report = summarize(scenario_trades, 3.0)
        assert report.win_rate == 66.7
        assert report.win_rate_ci.lower < report.win_rate < report.win_rate_ci.upper

    def test_averages_and_extremes(self, scenario_trades):
        report = summarize(scenario_trades, 3.0)
        assert report.avg_win_percent == 7.5
        assert report.avg_loss_percent == -6.0
        assert report.max_win_percent == 15.0
        assert report.max_loss_percent == -8.0

    def test_ratios(self, scenario_trades):
        report = summarize(scenario_trades, 3.0)
        assert report.gross_profit == 45.0
        assert report.gross_loss == 18.0
        assert report.profit_factor == 2.5
        assert report.payoff_ratio == 1.25
        assert report.expectancy == 3.0

    def test_distribution(self, scenario_trades):
        report = summarize(scenario_trades, 3.0)
        buckets = {b.range: b for b in report.distribution}
        assert len(report.distribution) == 6
        assert buckets["<-10%"].count == 0
        assert (buckets["-10% to -5%"].count, buckets["-10% to -5%"].losses) == (2, 2)
        # -2 (breakeven) and -4 (loss)
        assert buckets["-5% to 0%"].count == 2
        assert buckets["-5% to 0%"].losses == 1
        assert buckets["-5% to 0%"].wins == 0
        assert buckets["0% to 5%"].wins == 2
        assert buckets["5% to 10%"].wins == 2
        # 10 lands in the top bucket (lower edge inclusive)
        assert buckets["≥10%"].wins == 2

    def test_raw_values_keep_full_precision(self):
        trades = make_batch([1.0] * 20 + [-1.0, -41.5])
        report, raw_expectancy, raw_pf = SummaryCalculator().summarize_raw(trades, 1.0)
        assert report.expectancy == -1.02
        assert raw_expectancy == pytest.approx(-22.5 / 22)
        assert raw_pf == pytest.approx(20 / 42.5)
        assert report.profit_factor == 0.47

    def test_tighter_threshold_counts_breakeven_as_loss(self, scenario_trades):
        report = summarize(scenario_trades, 2.0)
        assert report.losses == 4
        assert report.breakeven == 0
        assert report.win_rate == 60.0


class TestDegenerateInputs:
    def test_empty_batch(self):
        report = summarize([], 3.0)
        assert report.total_trades == 0
        assert report.wins == report.losses == report.breakeven == 0
        assert report.decided_trades == 0
        assert report.win_rate == 0.0
        assert report.profit_factor == 0.0
        assert report.expectancy == 0.0
        assert report.sample_reliability == SampleReliability.LOW
        assert report.win_rate_ci.insufficient_sample is True
        assert all(b.count == 0 for b in report.distribution)

    def test_all_wins(self):
        report = summarize(make_batch([3.0, 5.0, 0.0]), 3.0)
        assert report.wins == 3
        assert report.profit_factor == INFINITY
        assert report.payoff_ratio == 0.0
        assert report.avg_loss_percent == 0.0
        assert report.win_rate == 100.0
        assert report.win_rate_ci.upper <= 100.0

    def test_only_breakeven(self):
        report = summarize(make_batch([-1.0, -2.0]), 3.0)
        assert report.decided_trades == 0
        assert report.breakeven == 2
        assert report.win_rate == 0.0
        assert report.profit_factor == 0.0

    def test_open_and_expired_excluded(self, mixed_batch):
        report = summarize(mixed_batch, 3.0)
        assert report.total_trades == 13
        assert report.open_trades == 1
        assert report.expired == 2
        assert report.decided_trades == 9

    def test_incomplete_trade_warned_not_fatal(self, scenario_trades):
        bad = make_trade("bad", None, state=ResolutionState.WON)
        report = summarize(scenario_trades + [bad], 3.0)
        assert report.wins == 6
        assert [w.trade_id for w in report.warnings] == ["bad"]
        assert report.warnings[0].computation == "summary"

    def test_negative_threshold_raises(self, scenario_trades):
        with pytest.raises(InvalidParameterError):
            summarize(scenario_trades, -2.0)


class TestReliability:
    def test_medium_at_twenty(self):
        report = summarize(make_batch([1.0] * 20), 3.0)
        assert report.sample_reliability == SampleReliability.MEDIUM

    def test_high_at_fifty(self):
        report = summarize(make_batch([1.0] * 30 + [-5.0] * 20), 3.0)
        assert report.sample_reliability == SampleReliability.HIGH

    def test_custom_cutoffs(self):
        calc = SummaryCalculator(reliability=ReliabilityConfig(high=5, medium=2))
        report = calc.summarize(make_batch([1.0, 2.0, -4.0, -5.0, 6.0]), 3.0)
        assert report.sample_reliability == SampleReliability.HIGH

    def test_breakeven_does_not_count_toward_reliability(self):
        report = summarize(make_batch([1.0] * 15 + [-1.0] * 10), 3.0)
        assert report.decided_trades == 15
        assert report.sample_reliability == SampleReliability.LOW


class TestBreakdowns:
    def test_by_asset_type_and_source(self):
        trades = (
            make_batch([4.0, -5.0, 6.0], prefix="s", asset_type=AssetType.STOCK, source="ai")
            + make_batch([-6.0, -7.0], prefix="c", asset_type=AssetType.CRYPTO, source="quant")
        )
        report = summarize(trades, 3.0)

        by_asset = {row.key: row for row in report.by_asset_type}
        assert by_asset["stock"].total_trades == 3
        assert by_asset["stock"].wins == 2
        assert by_asset["stock"].win_rate == 66.7
        assert by_asset["stock"].avg_gain == pytest.approx(1.67)
        assert by_asset["crypto"].win_rate == 0.0
        assert [row.key for row in report.by_asset_type] == ["stock", "crypto"]

        by_source = {row.key: row for row in report.by_source}
        assert by_source["quant"].losses == 2


class TestCustomBuckets:
    def test_custom_edges(self, scenario_trades):
        report = summarize(scenario_trades, 3.0, bucket_edges=[0.0])
        assert [b.range for b in report.distribution] == ["<0%", "≥0%"]
        assert [b.count for b in report.distribution] == [4, 6]

    def test_unsorted_edges_rejected(self):
        with pytest.raises(InvalidParameterError):
            SummaryCalculator(bucket_edges=[5.0, 0.0])


class TestDeterminism:
    def test_repeated_calls_identical(self, mixed_batch):
        first = summarize(mixed_batch, 3.0).model_dump_json()
        second = summarize(mixed_batch, 3.0).model_dump_json()
        assert first == second
