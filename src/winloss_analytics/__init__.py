"""Win/loss analytics engine for closed trade histories."""

__version__ = "0.1.0"
