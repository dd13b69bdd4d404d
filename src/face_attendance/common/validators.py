from __future__ import annotations

import math
from numbers import Real
from typing import Any

from ..core.constants import EMBEDDING_DIMENSION
from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_embedding(value: Any, *, dimension: int = EMBEDDING_DIMENSION) -> list[float]:
    """Validate a face descriptor coming from the embedding producer.

    Accepts any list/tuple of finite real numbers of exactly ``dimension``
    items and returns it as a list of floats.
    """

    if not isinstance(value, (list, tuple)) or len(value) == 0:
        raise ValidationError("Face embedding array is missing or empty")

    if len(value) != dimension:
        raise ValidationError(
            f"Invalid face embedding dimension: expected {dimension}, received {len(value)}"
        )

    out: list[float] = []
    for i, item in enumerate(value):
        if isinstance(item, bool) or not isinstance(item, Real) or not math.isfinite(item):
            raise ValidationError(f"Face embedding value at index {i} is not a finite number")
        out.append(float(item))
    return out
