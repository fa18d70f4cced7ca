from .logging import build_log_context, get_current_context, log_event, redact, set_current_context
from .metrics import Metrics
from .prometheus import render_prometheus

__all__ = [
    "Metrics",
    "build_log_context",
    "get_current_context",
    "log_event",
    "redact",
    "render_prometheus",
    "set_current_context",
]
