"""
Per-worker state for multi-threaded training of statistical stages.

Each training worker owns one TrainingThreadState: private hidden, output
and gradient buffers, its own copies of the log and sigmoid lookup tables,
and a running loss. States are never shared between workers; the only
shared member is the cancellation event, which workers read and the
controller sets. How often a training loop checks for cancellation is up to
the stage that owns the loop.

Example:
    >>> cancel = threading.Event()
    >>> states = create_thread_states(corpus, threads=4, hidden_size=100,
    ...                               output_size=5000, gradient_size=100,
    ...                               cancellation=cancel)
    >>> state = states[0]
    >>> state.sigmoid(0.0)
    0.5
"""

import threading
from typing import List, Optional, Sequence

import numpy as np

from lexiflow.training.fast_math import (
    LOG_SATURATION,
    LOG_TABLE_SIZE,
    MAX_SIGMOID,
    SIGMOID_SATURATION,
    SIGMOID_TABLE_SIZE,
    build_log_table,
    build_sigmoid_table,
    log_index,
    sigmoid_index,
)
from lexiflow.training.history import TrainingHistory


class TrainingThreadState:
    """
    Buffers, lookup tables and loss accounting of one training worker.

    Attributes:
        thread_id (int): Worker index; worker 0 keeps the training history
        corpus (Sequence): Training examples, shared read-only between workers
        hidden, output, gradient (np.ndarray): float32 buffers sized to the model
        log_table, sigmoid_table (np.ndarray): This worker's lookup tables
        loss (float): Running sum of per-example loss
        number_of_examples (int): Example counter, starts at 1
        negative_position (int): Cursor into the negative sampling table
        cancellation (threading.Event): Shared cancellation signal
        training_history (Optional[TrainingHistory]): Worker 0 only
    """

    def __init__(
        self,
        corpus: Sequence,
        hidden_size: int,
        output_size: int,
        gradient_size: int,
        thread_id: int,
        cancellation: Optional[threading.Event] = None,
    ):
        self.thread_id = thread_id
        self.corpus = corpus
        self.hidden = np.zeros(hidden_size, dtype=np.float32)
        self.output = np.zeros(output_size, dtype=np.float32)
        self.gradient = np.zeros(gradient_size, dtype=np.float32)
        self.log_table = build_log_table()
        self.sigmoid_table = build_sigmoid_table()
        self.loss = 0.0
        # Starts at 1 so get_loss() is defined before the first example
        self.number_of_examples = 1
        self.negative_position = 0
        self.cancellation = cancellation if cancellation is not None else threading.Event()
        self.training_history: Optional[TrainingHistory] = (
            TrainingHistory() if thread_id == 0 else None
        )

    @property
    def is_cancelled(self) -> bool:
        return self.cancellation.is_set()

    def log(self, x: float) -> float:
        """
        Approximate ln(x) for x in [0, 1).

        Returns 0 from 0.99 upwards; inputs below 0 clamp to the first entry.
        """
        if x >= LOG_SATURATION:
            return 0.0
        return float(self.log_table[max(log_index(x), 0)])

    def sigmoid(self, x: float) -> float:
        """Approximate logistic function; saturates outside (-7.9, 7.9)."""
        if x <= -SIGMOID_SATURATION:
            return 0.0
        if x >= SIGMOID_SATURATION:
            return 1.0
        return float(self.sigmoid_table[sigmoid_index(x)])

    def log_array(self, x: np.ndarray) -> np.ndarray:
        """Vectorized log(); inputs below 0 clamp to the first entry."""
        x = np.asarray(x, dtype=np.float32)
        index = np.clip((x * LOG_TABLE_SIZE).astype(np.int64), 0, LOG_TABLE_SIZE - 1)
        result = self.log_table[index]
        return np.where(x >= LOG_SATURATION, np.float32(0.0), result)

    def sigmoid_array(self, x: np.ndarray) -> np.ndarray:
        """Vectorized sigmoid() with the same saturation guards."""
        x = np.asarray(x, dtype=np.float32)
        scaled = (x + MAX_SIGMOID) * SIGMOID_TABLE_SIZE / MAX_SIGMOID / 2
        index = np.clip(scaled.astype(np.int64), 0, SIGMOID_TABLE_SIZE - 1)
        result = self.sigmoid_table[index]
        result = np.where(x <= -SIGMOID_SATURATION, np.float32(0.0), result)
        return np.where(x >= SIGMOID_SATURATION, np.float32(1.0), result)

    def get_loss(self) -> float:
        return self.loss / self.number_of_examples


def create_thread_states(
    corpus: Sequence,
    threads: int,
    hidden_size: int,
    output_size: int,
    gradient_size: int,
    cancellation: Optional[threading.Event] = None,
) -> List[TrainingThreadState]:
    """
    Create one state per worker, all sharing one cancellation event.

    Raises:
        ValueError: If threads is not positive
    """
    if threads <= 0:
        raise ValueError("threads must be a positive integer")
    cancellation = cancellation if cancellation is not None else threading.Event()
    return [
        TrainingThreadState(corpus, hidden_size, output_size, gradient_size, i, cancellation)
        for i in range(threads)
    ]
