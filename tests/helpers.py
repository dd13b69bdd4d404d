from __future__ import annotations


def embedding(first: float = 0.0, *, fill: float = 0.0, size: int = 128) -> list[float]:
    """``size``-d vector of ``fill`` with the first component set to ``first``."""
    values = [fill] * size
    values[0] = first
    return values
