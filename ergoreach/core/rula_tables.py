"""
ErgoReach RULA Reference Tables.
Posture Score A (upper limb) and the trunk/neck table, as read-only arrays.
"""
from typing import Sequence

import numpy as np

# --- TABLE DIMENSIONS (shared with bounds validation) ---
UPPER_ARM_BINS = 6
WRIST_BINS = 4
WRIST_TWIST_BINS = 2
LOWER_ARM_BINS = 3
TRUNK_BINS = 6
NECK_BINS = 6

UPPER_SHAPE = (UPPER_ARM_BINS, WRIST_BINS, WRIST_TWIST_BINS, LOWER_ARM_BINS)
LOWER_SHAPE = (TRUNK_BINS, NECK_BINS)


def _frozen(values, shape) -> np.ndarray:
    table = np.array(values, dtype=np.int8)
    if table.shape != shape:
        raise ValueError(f"RULA table has shape {table.shape}, expected {shape}")
    table.flags.writeable = False
    return table


# Indexed [upper arm - 1][wrist - 1][wrist twist - 1][lower arm - 1]
UPPER = _frozen([
    [
        [[1, 2, 2], [2, 2, 3]],
        [[2, 2, 3], [2, 2, 3]],
        [[2, 3, 3], [3, 3, 3]],
        [[3, 3, 4], [3, 3, 4]],
    ],
    [
        [[2, 3, 3], [3, 3, 4]],
        [[3, 3, 4], [3, 3, 4]],
        [[3, 3, 4], [4, 4, 4]],
        [[4, 4, 5], [4, 4, 5]],
    ],
    [
        [[3, 3, 4], [3, 4, 4]],
        [[4, 4, 4], [4, 4, 4]],
        [[4, 4, 4], [4, 4, 5]],
        [[5, 5, 5], [5, 5, 5]],
    ],
    [
        [[4, 4, 4], [4, 4, 4]],
        [[4, 4, 4], [4, 4, 5]],
        [[4, 4, 5], [5, 5, 5]],
        [[5, 5, 6], [5, 5, 6]],
    ],
    [
        [[5, 5, 6], [5, 6, 6]],
        [[5, 6, 6], [5, 6, 7]],
        [[5, 6, 7], [6, 7, 7]],
        [[6, 7, 7], [7, 7, 8]],
    ],
    [
        [[7, 8, 9], [7, 8, 9]],
        [[7, 8, 9], [7, 8, 9]],
        [[7, 8, 9], [8, 9, 9]],
        [[8, 9, 9], [9, 9, 9]],
    ],
], UPPER_SHAPE)

# Indexed [trunk - 1][neck - 1]
LOWER = _frozen([
    [1, 2, 3, 5, 7, 8],
    [2, 2, 3, 5, 7, 8],
    [3, 4, 4, 6, 7, 8],
    [5, 5, 5, 7, 8, 8],
    [6, 6, 6, 7, 8, 9],
    [7, 7, 7, 8, 8, 9],
], LOWER_SHAPE)


def in_bounds(bins: Sequence[int], shape: Sequence[int]) -> bool:
    """True when every 1-based bin addresses a cell of a table with `shape`."""
    return len(bins) == len(shape) and all(1 <= b <= dim for b, dim in zip(bins, shape))
