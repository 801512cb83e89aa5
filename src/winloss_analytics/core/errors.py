"""Custom exception hierarchy for the win/loss analytics engine."""


class AnalyticsError(Exception):
    """Base exception for all analytics engine errors."""


# --- Configuration ---
class ConfigError(AnalyticsError):
    """Invalid or missing configuration."""


class InvalidParameterError(AnalyticsError):
    """A call argument is outside its valid domain (e.g. negative threshold)."""


# --- Data ---
class DataError(AnalyticsError):
    """Trade data is unusable for a computation."""


class IncompleteTradeError(DataError):
    """A trade record lacks a field the requested computation needs."""

    def __init__(self, trade_id: str, field_name: str, computation: str):
        self.trade_id = trade_id
        self.field_name = field_name
        self.computation = computation
        super().__init__(
            f"Trade {trade_id} missing '{field_name}' required for {computation}"
        )


class TradeLoadError(DataError):
    """Trade history file could not be read or parsed."""
