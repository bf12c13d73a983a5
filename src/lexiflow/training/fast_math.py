"""
Lookup tables for approximate log and sigmoid.

Trainable stages evaluate log and sigmoid once or more per token; these
tables replace the exact functions with O(1) lookups at a resolution of
1/512 of the table domain. Table construction is deterministic and has no
side effects, so each worker thread can build its own copy.

Tables:
    log: 512 entries, entry i = ln((i + 1e-5) / 512), domain [0, 1)
    sigmoid: 512 entries over [-8, 8],
        entry i = 1 / (1 + exp(-(i * 2 * 8 / 512 - 8)))
"""

import numpy as np

LOG_TABLE_SIZE = 512
SIGMOID_TABLE_SIZE = 512
MAX_SIGMOID = 8

# Inputs at or beyond these bounds saturate instead of indexing the tables
LOG_SATURATION = 0.99
SIGMOID_SATURATION = MAX_SIGMOID - 0.1


def build_log_table() -> np.ndarray:
    i = np.arange(LOG_TABLE_SIZE, dtype=np.float64)
    return np.log((i + 1e-5) / LOG_TABLE_SIZE).astype(np.float32)


def build_sigmoid_table() -> np.ndarray:
    i = np.arange(SIGMOID_TABLE_SIZE, dtype=np.float64)
    x = (i * 2 * MAX_SIGMOID) / SIGMOID_TABLE_SIZE - MAX_SIGMOID
    return (1.0 / (1.0 + np.exp(-x))).astype(np.float32)


def log_index(x: float) -> int:
    return int(x * LOG_TABLE_SIZE)


def sigmoid_index(x: float) -> int:
    return int((x + MAX_SIGMOID) * SIGMOID_TABLE_SIZE / MAX_SIGMOID / 2)
