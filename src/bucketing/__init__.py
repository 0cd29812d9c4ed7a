"""
Hand-strength abstraction tables.

This package precomputes the lookup tables that map poker situations to
strength distributions: strength ranks, flop/turn bucket histograms, OCHS
histograms and per-cluster river histograms.
"""

from src.bucketing.config import TableConfig
from src.bucketing.histogram import Histogram

__all__ = ["Histogram", "TableConfig"]
