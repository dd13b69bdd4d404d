"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EMBEDDING_DIMENSION = 128
DEFAULT_MATCH_THRESHOLD = 0.48

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"

AVERAGE_DISTANCE_PRECISION = 4
PERCENTAGE_PRECISION = 2
