from .distance import euclidean_distance
from .resolver import LinearScanMatcher, MatchOutcome, MatchResolver, confidence_for

__all__ = ["euclidean_distance", "LinearScanMatcher", "MatchOutcome", "MatchResolver", "confidence_for"]
