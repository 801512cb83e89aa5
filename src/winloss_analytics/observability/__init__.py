"""Structured logging and Prometheus metrics."""

from .logger import new_trace_id, set_trace_id, setup_logging

__all__ = ["new_trace_id", "set_trace_id", "setup_logging"]
