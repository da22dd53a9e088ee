"""
Random train/test split without replacement.
"""

import math
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

RandomSource = Union[None, int, np.random.Generator]


def split(
    records: Sequence,
    ratio: float,
    rng: RandomSource = None,
) -> Tuple[List, List]:
    """
    Randomly partition `records` into a training and a testing slice.

    Args:
        records: The collection to split.
        ratio: Proportion of training records, strictly between 0 and 1
            (usually 0.5 to 0.8).
        rng: Seed or numpy Generator. None draws fresh OS entropy.

    Returns:
        (train, test). Train holds max(floor(n * ratio), 1) records in draw
        order, test the remainder in input order. An empty collection or a
        ratio outside (0, 1) returns (all records, []).
    """
    records = list(records)
    n = len(records)
    if n == 0 or not (0 < ratio < 1):
        return records, []

    rng = np.random.default_rng(rng)
    n_train = max(int(math.floor(n * ratio)), 1)
    picked = rng.choice(n, size=n_train, replace=False)

    chosen = set(int(i) for i in picked)
    train = [records[int(i)] for i in picked]
    test = [r for i, r in enumerate(records) if i not in chosen]
    return train, test
