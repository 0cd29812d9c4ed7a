"""
Constants for the hand-strength tables.

Round structures are the block sizes handed to the canonical indexer.
"""

# =============================================================================
# Bucketing
# =============================================================================

# Strength buckets per flop/turn/OCHS histogram
DEFAULT_NUM_BUCKETS = 47

# =============================================================================
# Indexer round structures
# =============================================================================

# Board first, then hole: round 0 enumerates river boards
BOARD_HOLE_ROUNDS = (5, 2)

# Hole first, then board: one entry per street
FLOP_ROUNDS = (2, 3)
TURN_ROUNDS = (2, 4)
RIVER_ROUNDS = (2, 5)

# Hole cards alone (OCHS histograms and cluster assignments)
HOLE_ROUNDS = (2,)

# =============================================================================
# Persisted table names
# =============================================================================

TABLE_NAMES = ("strength", "flop", "turn", "ochs", "river")
