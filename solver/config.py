from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict
import yaml

from types_sudoku import Difficulty, GridSpec

# Givens for a 9x9 grid; other sizes scale these by (N/9)^2.
DEFAULT_DIFFICULTY_BANDS: Dict[str, Dict[str, int]] = {
    "Easy": {"min_givens": 36, "max_givens": 45},
    "Medium": {"min_givens": 30, "max_givens": 36},
    "Hard": {"min_givens": 25, "max_givens": 30},
    "Expert": {"min_givens": 17, "max_givens": 25},
    "Custom": {"min_givens": 17, "max_givens": 45},
}

DEFAULT_SUPPORTED_SIZES = [
    {"size": 4, "block_rows": 2, "block_cols": 2},
    {"size": 6, "block_rows": 2, "block_cols": 3},
    {"size": 9, "block_rows": 3, "block_cols": 3},
    {"size": 12, "block_rows": 3, "block_cols": 4},
    {"size": 16, "block_rows": 4, "block_cols": 4},
]


class DotDict(dict):
    __getattr__ = dict.get
    __setattr__ = dict.__setitem__
    __delattr__ = dict.__delitem__


def load_yaml(path: str | Path) -> DotDict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return DotDict(data)


def merge_overrides(cfg: Dict[str, Any], **overrides) -> Dict[str, Any]:
    for k, v in overrides.items():
        if v is None:
            continue
        cfg[k] = v
    return cfg


@dataclass(frozen=True)
class DifficultyBand:
    min_givens: int
    max_givens: int


@dataclass
class Settings:
    bands: Dict[Difficulty, DifficultyBand] = field(default_factory=dict)
    supported_sizes: list[GridSpec] = field(default_factory=list)

    def band(self, difficulty: Difficulty) -> DifficultyBand:
        return self.bands[Difficulty(difficulty)]


def settings_from_dict(cfg: Dict[str, Any]) -> Settings:
    """Build settings from a plain mapping; missing keys fall back to the defaults.

    Expected YAML shape::

        difficulty:
          Easy: {min_givens: 36, max_givens: 45}
        supported_sizes:
          - {size: 9, block_rows: 3, block_cols: 3}
    """
    bands_cfg = {k: dict(v) for k, v in DEFAULT_DIFFICULTY_BANDS.items()}
    for name, band in (cfg.get("difficulty") or {}).items():
        Difficulty(name)  # unknown tiers are rejected, not invented
        bands_cfg[name].update(band)
    bands = {}
    for name, band in bands_cfg.items():
        lo, hi = int(band["min_givens"]), int(band["max_givens"])
        if lo > hi:
            raise ValueError(f"difficulty {name}: min_givens {lo} exceeds max_givens {hi}")
        bands[Difficulty(name)] = DifficultyBand(lo, hi)
    sizes = cfg.get("supported_sizes") or DEFAULT_SUPPORTED_SIZES
    specs = [GridSpec(int(s["size"]), int(s["block_rows"]), int(s["block_cols"])).validate() for s in sizes]
    return Settings(bands=bands, supported_sizes=specs)


def load_settings(path: str | Path | None = None, **overrides) -> Settings:
    cfg: Dict[str, Any] = load_yaml(path) if path else DotDict()
    return settings_from_dict(merge_overrides(cfg, **overrides))


DEFAULT_SETTINGS = settings_from_dict({})
