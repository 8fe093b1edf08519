# types_sudoku.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from solver.errors import InvalidSpecError

Board = list[int]
"""A flat row-major N*N grid of integers (0 = empty, 1..N = placed value)."""

Candidates = dict[str, list[int]]
"""Map from cell key (e.g., 'r1c1') to a list of candidate digits (1..N)."""


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    EXPERT = "Expert"
    CUSTOM = "Custom"


# Ranked tiers used when comparing requested vs achieved difficulty.
DIFFICULTY_ORDER = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EXPERT]


class Symmetry(str, Enum):
    NONE = "none"
    ROTATIONAL = "rotational"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"


class Technique(str, Enum):
    """Human-style techniques, declared in the order the engine tries them."""

    NAKED_SINGLE = "naked_single"
    HIDDEN_SINGLE = "hidden_single"
    NAKED_PAIR = "naked_pair"
    HIDDEN_PAIR = "hidden_pair"
    POINTING = "locked_candidates_pointing"
    X_WING = "x_wing"

    @property
    def is_placement(self) -> bool:
        return self in (Technique.NAKED_SINGLE, Technique.HIDDEN_SINGLE)


@dataclass(frozen=True)
class GridSpec:
    """Size of the grid and the shape of one box (blockRows x blockCols)."""

    size: int = 9
    block_rows: int = 3
    block_cols: int = 3

    @property
    def cell_count(self) -> int:
        return self.size * self.size

    @property
    def box_count(self) -> int:
        return (self.size // self.block_rows) * (self.size // self.block_cols)

    @property
    def boxes_per_row(self) -> int:
        return self.size // self.block_cols

    def problems(self) -> list[str]:
        out = []
        if self.size < 1 or self.block_rows < 1 or self.block_cols < 1:
            out.append("size and block dimensions must be positive")
            return out
        if self.size % self.block_rows:
            out.append(f"size {self.size} is not divisible by blockRows {self.block_rows}")
        if self.size % self.block_cols:
            out.append(f"size {self.size} is not divisible by blockCols {self.block_cols}")
        if not out and self.block_rows * self.block_cols != self.size:
            out.append(
                f"a {self.block_rows}x{self.block_cols} box holds {self.block_rows * self.block_cols} "
                f"cells, expected {self.size}"
            )
        return out

    def validate(self) -> GridSpec:
        issues = self.problems()
        if issues:
            raise InvalidSpecError("; ".join(issues))
        return self


@dataclass(frozen=True)
class Elimination:
    cell: int
    values: tuple[int, ...]


@dataclass(frozen=True)
class SolveStep:
    """A single human-style solving action, immutable once recorded."""

    ordinal: int  # 1-based order in the sequence (0 until recorded)
    technique: Technique
    cells: tuple[int, ...]
    values: tuple[int, ...]
    explanation: str
    eliminations: tuple[Elimination, ...] = ()

    @property
    def action(self) -> str:
        return "place" if self.technique.is_placement else "eliminate"

    def to_dict(self, size: int) -> dict[str, Any]:
        """Payload for UI layers, with 'r{r}c{c}' keys next to flat indices."""

        def index_to_key(i: int, n: int) -> str:
            return f"r{i // n + 1}c{i % n + 1}"

        return {
            "index": self.ordinal,
            "technique": self.technique.value,
            "type": "placement" if self.technique.is_placement else "elimination",
            "action": self.action,
            "cells": list(self.cells),
            "values": list(self.values),
            "eliminations": [{"cell": e.cell, "values": list(e.values)} for e in self.eliminations],
            "explanation": self.explanation,
            "highlights": {
                "cells": [index_to_key(i, size) for i in self.cells],
                "eliminate": [index_to_key(e.cell, size) for e in self.eliminations],
            },
        }


@dataclass(frozen=True)
class Puzzle:
    spec: GridSpec
    cells: tuple[int, ...]
    solution: tuple[int, ...]
    difficulty: Difficulty
    symmetry: Symmetry
    seed: int
    score: int = field(default=0, compare=False)

    @property
    def given_count(self) -> int:
        return sum(1 for v in self.cells if v)

    def to_record(self) -> dict[str, Any]:
        """The shape exchanged with persistence/sharing layers."""
        return {
            "size": self.spec.size,
            "blockRows": self.spec.block_rows,
            "blockCols": self.spec.block_cols,
            "cells": list(self.cells),
            "difficulty": self.difficulty.value,
            "symmetry": self.symmetry.value,
            "seed": self.seed,
            "solution": list(self.solution),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Puzzle:
        spec = GridSpec(record["size"], record.get("blockRows", 3), record.get("blockCols", 3)).validate()
        return cls(
            spec=spec,
            cells=tuple(record["cells"]),
            solution=tuple(record.get("solution") or ()),
            difficulty=Difficulty(record.get("difficulty", Difficulty.MEDIUM.value)),
            symmetry=Symmetry(record.get("symmetry", Symmetry.NONE.value)),
            seed=record.get("seed") or 0,
        )
