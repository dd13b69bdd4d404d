from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_MATCH_THRESHOLD
from .distance import euclidean_distance


def confidence_for(distance: float) -> float:
    """Map a distance to a 0..1 display value (not a probability)."""

    if not math.isfinite(distance):
        return 0.0
    return max(0.0, 1.0 - distance / 2.0)


@dataclass(frozen=True)
class MatchOutcome:
    """Result of one resolution.

    ``student`` is set only when the match was accepted; ``best_distance`` is
    always reported (``inf`` when there was nothing to compare against).
    """

    student: Optional[Any]
    best_distance: float
    threshold: float

    @property
    def matched(self) -> bool:
        return self.student is not None

    @property
    def confidence(self) -> float:
        return confidence_for(self.best_distance)


class MatchResolver(Protocol):
    threshold: float

    def resolve(self, probe: Sequence[float], candidates: Iterable[Any]) -> MatchOutcome:
        raise NotImplementedError


class LinearScanMatcher:
    """Exhaustive nearest-neighbour search over the enrolled students.

    Candidates are anything exposing ``face_embedding``; those with an empty
    embedding are skipped. Ties keep the first candidate seen.
    """

    def __init__(self, threshold: float = DEFAULT_MATCH_THRESHOLD):
        threshold = float(threshold)
        if math.isnan(threshold) or threshold < 0:
            raise ValueError(f"Match threshold must be a non-negative number, got {threshold!r}")
        self.threshold = threshold

    def resolve(self, probe: Sequence[float], candidates: Iterable[Any]) -> MatchOutcome:
        best = None
        best_distance = math.inf

        for candidate in candidates:
            embedding = getattr(candidate, "face_embedding", None)
            if embedding is None or len(embedding) == 0:
                continue

            distance = euclidean_distance(probe, embedding)
            if distance < best_distance:
                best = candidate
                best_distance = distance

        if best is None or best_distance > self.threshold:
            return MatchOutcome(student=None, best_distance=best_distance, threshold=self.threshold)
        return MatchOutcome(student=best, best_distance=best_distance, threshold=self.threshold)
