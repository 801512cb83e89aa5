"""Trade outcome statistics & stop-loss simulation.

Pure, synchronous analytics over a batch of closed trade records.
Every function takes the batch as input and returns a fresh, frozen
report; nothing is cached and no trade record is mutated.

Key components
--------------
classify / classify_batch   Threshold-dependent win/loss/breakeven labels
wilson_interval             Wilson score interval for a win rate
SummaryCalculator           Win rate, profit factor, expectancy, distribution
StopLossSimulator           Counterfactual stop-loss sweep + optimal pick
ExpirationAnalyzer          Forensics on trades that expired unresolved
aggregate_loss_patterns     Losing trades grouped by reason code
WinLossAnalyzer             Configured facade running all of the above
ReportExporter              JSON / CSV serialisation
"""

from .classifier import classify, classify_batch, label_for_gain
from .engine import WinLossAnalyzer
from .expiration import ExpirationAnalyzer, analyze_expirations
from .export import ReportExporter
from .intervals import wilson_interval
from .loss_patterns import aggregate_loss_patterns, summarize_losses
from .models import (
    INFINITY,
    ClassifiedOutcome,
    ExpirationReport,
    LossPattern,
    LossSummary,
    OptimalThreshold,
    SimulationPoint,
    SimulationResult,
    SummaryReport,
    WilsonInterval,
    WinLossAnalysis,
)
from .simulator import StopLossSimulator, simulate
from .summary import SummaryCalculator, expectancy, payoff_ratio, profit_factor, summarize

__all__ = [
    "classify",
    "classify_batch",
    "label_for_gain",
    "WinLossAnalyzer",
    "ExpirationAnalyzer",
    "analyze_expirations",
    "ReportExporter",
    "wilson_interval",
    "aggregate_loss_patterns",
    "summarize_losses",
    "INFINITY",
    "ClassifiedOutcome",
    "ExpirationReport",
    "LossPattern",
    "LossSummary",
    "OptimalThreshold",
    "SimulationPoint",
    "SimulationResult",
    "SummaryReport",
    "WilsonInterval",
    "WinLossAnalysis",
    "StopLossSimulator",
    "simulate",
    "SummaryCalculator",
    "expectancy",
    "payoff_ratio",
    "profit_factor",
    "summarize",
]
