"""
Postflop table builders over suit-isomorphic card combinations.

Key concepts:
- Suits are interchangeable, so every table is indexed by canonical
  combinations (see suit_isomorphism)
- A strength rank credits a hand 2 per worse and 1 per tied opponent
- Flop, turn and OCHS histograms bucket those ranks; river histograms
  measure the same credit per opponent cluster
"""

from src.bucketing.postflop.ochs import build_ochs_histograms
from src.bucketing.postflop.precompute import TablePrecomputer, load_ochs_clusters
from src.bucketing.postflop.river import cluster_sizes, generate_river_histograms
from src.bucketing.postflop.street_histograms import (
    generate_flop_histograms,
    generate_turn_histograms,
)
from src.bucketing.postflop.strength import build_strengths, strength_bucket
from src.bucketing.postflop.suit_isomorphism import (
    HandIndexer,
    get_indexer,
    suit_multiplicity,
)

__all__ = [
    "HandIndexer",
    "get_indexer",
    "suit_multiplicity",
    "build_strengths",
    "strength_bucket",
    "generate_flop_histograms",
    "generate_turn_histograms",
    "build_ochs_histograms",
    "cluster_sizes",
    "generate_river_histograms",
    "TablePrecomputer",
    "load_ochs_clusters",
]
