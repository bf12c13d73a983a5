"""
Numeric primitives for trainable statistical stages.

Per-worker lookup-table log and sigmoid, loss accounting and cooperative
cancellation. The training algorithms themselves belong to the stages that
use these primitives; this package does not depend on the pipeline.
"""

from .fast_math import (
    LOG_TABLE_SIZE,
    MAX_SIGMOID,
    SIGMOID_TABLE_SIZE,
    build_log_table,
    build_sigmoid_table,
)
from .history import HistoryEntry, TrainingHistory
from .thread_state import TrainingThreadState, create_thread_states

__all__ = [
    "HistoryEntry",
    "LOG_TABLE_SIZE",
    "MAX_SIGMOID",
    "SIGMOID_TABLE_SIZE",
    "TrainingHistory",
    "TrainingThreadState",
    "build_log_table",
    "build_sigmoid_table",
    "create_thread_states",
]
