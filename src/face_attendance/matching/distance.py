from __future__ import annotations

import math
from typing import Any, Optional

import numpy as np


def _as_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def _as_vector(values: Any) -> Optional[np.ndarray]:
    if isinstance(values, np.ndarray):
        items = values.ravel().tolist()
    elif isinstance(values, (list, tuple)):
        items = values
    else:
        return None
    return np.fromiter((_as_number(v) for v in items), dtype=np.float64, count=len(items))


def euclidean_distance(a: Any, b: Any) -> float:
    """Euclidean distance between two face descriptors.

    Only the overlapping prefix is compared; elements that are not numbers
    count as zero. Anything that is not a list/tuple/ndarray yields ``inf`` so
    it can never win a match. Never raises.
    """

    va = _as_vector(a)
    vb = _as_vector(b)
    if va is None or vb is None:
        return math.inf

    n = min(va.size, vb.size)
    distance = float(np.linalg.norm(va[:n] - vb[:n]))
    # inf - inf
    if math.isnan(distance):
        return math.inf
    return distance
