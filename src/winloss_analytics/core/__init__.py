"""Core types, configuration and errors."""

from .config import EngineConfig, Settings, load_settings
from .enums import (
    AssetType,
    Direction,
    LossSeverity,
    OutcomeLabel,
    ResolutionState,
    SampleReliability,
    Severity,
)
from .errors import (
    AnalyticsError,
    ConfigError,
    DataError,
    IncompleteTradeError,
    InvalidParameterError,
    TradeLoadError,
)
from .models import RecordWarning, TradeRecord

__all__ = [
    "EngineConfig",
    "Settings",
    "load_settings",
    "AssetType",
    "Direction",
    "LossSeverity",
    "OutcomeLabel",
    "ResolutionState",
    "SampleReliability",
    "Severity",
    "AnalyticsError",
    "ConfigError",
    "DataError",
    "IncompleteTradeError",
    "InvalidParameterError",
    "TradeLoadError",
    "RecordWarning",
    "TradeRecord",
]
