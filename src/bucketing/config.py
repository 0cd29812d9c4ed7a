"""
Table precomputation configuration - Single source of truth.

Defaults live in the dataclass; YAML files under config/tables/ contain only
overrides.
"""

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.bucketing.constants import DEFAULT_NUM_BUCKETS, TABLE_NAMES
from src.game.cards import Deck
from src.utils.config_loader import _load_yaml, _merge_config

CONFIG_DIR = Path(__file__).parent.parent.parent / "config" / "tables"

EVALUATOR_KINDS = ("auto", "eval7", "generic")


@dataclass
class TableConfig:
    """Hand-strength table configuration with defaults."""

    # Strength buckets per flop/turn/OCHS histogram
    num_buckets: int = DEFAULT_NUM_BUCKETS

    # Deck geometry (13 x 4 is the standard deck)
    num_ranks: int = 13
    num_suits: int = 4

    # Evaluator: auto | eval7 | generic
    evaluator: str = "auto"

    # Parallel workers (None = CPU count)
    num_workers: int | None = None

    # Outer indices per unit of parallel work
    chunk_size: int = 64

    # Where tables and metadata.json are written
    output_dir: str = "data/tables"

    # Cluster assignment for river histograms (.npy or pickle)
    ochs_path: str | None = None

    # Which tables to build
    tables: list[str] = field(default_factory=lambda: list(TABLE_NAMES))

    # Config name (set from the YAML file name)
    config_name: str | None = None

    def __post_init__(self):
        if self.num_buckets < 1:
            raise ValueError(f"num_buckets must be positive, got {self.num_buckets}")
        if self.evaluator not in EVALUATOR_KINDS:
            raise ValueError(f"evaluator must be one of {EVALUATOR_KINDS}, got {self.evaluator}")
        unknown = [name for name in self.tables if name not in TABLE_NAMES]
        if unknown:
            raise ValueError(f"Unknown tables {unknown}; expected a subset of {TABLE_NAMES}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    @property
    def deck(self) -> Deck:
        return Deck(self.num_ranks, self.num_suits)

    @classmethod
    def from_yaml(cls, config_name: str, **overrides: Any) -> "TableConfig":
        """
        Load a named configuration from config/tables/.

        Args:
            config_name: File name without extension, e.g. 'default', 'fast_test'
            **overrides: Values applied on top of the YAML (e.g. from the CLI)

        Returns:
            TableConfig with YAML overrides applied
        """
        return cls.from_file(CONFIG_DIR / f"{config_name}.yaml", config_name=config_name, **overrides)

    @classmethod
    def from_file(cls, path: str | Path, **overrides: Any) -> "TableConfig":
        """Load configuration from an explicit YAML path."""
        yaml_data = _load_yaml(Path(path))

        # Flatten nested deck block (deck: {ranks:, suits:})
        if isinstance(yaml_data.get("deck"), dict):
            deck = yaml_data.pop("deck")
            yaml_data["num_ranks"] = deck.get("ranks", cls.num_ranks)
            yaml_data["num_suits"] = deck.get("suits", cls.num_suits)

        yaml_data.update({key: value for key, value in overrides.items() if value is not None})
        return _merge_config(cls(), yaml_data)

    @classmethod
    def default(cls) -> "TableConfig":
        """Load the default configuration."""
        return cls.from_yaml("default")

    @classmethod
    def fast_test(cls) -> "TableConfig":
        """Load the fast_test configuration (reduced deck)."""
        return cls.from_yaml("fast_test")

    def get_config_hash(self) -> str:
        """
        Stable hash of the parameters that shape table contents.

        Worker counts, paths and the table selection are excluded: they do
        not change any value in a table.

        Returns:
            16-character hex string
        """
        config_dict = {
            "num_buckets": self.num_buckets,
            "num_ranks": self.num_ranks,
            "num_suits": self.num_suits,
            "evaluator": self.evaluator,
        }
        stable_json = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(stable_json.encode()).hexdigest()[:16]
