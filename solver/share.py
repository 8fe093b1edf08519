"""Puzzle exchange formats: the compact share code and the JSON export. The solution is never stored; it is re-derived with the exact-cover solver on decode/import."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Optional

from types_sudoku import Difficulty, GridSpec, Puzzle, Symmetry

from .exact_cover import ExactCoverSolver
from .solver_core import check_board

logger = logging.getLogger(__name__)

DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

DIFFICULTY_TAGS = {
    Difficulty.EASY: "E",
    Difficulty.MEDIUM: "M",
    Difficulty.HARD: "H",
    Difficulty.EXPERT: "X",
    Difficulty.CUSTOM: "C",
}
SYMMETRY_TAGS = {
    Symmetry.NONE: "n",
    Symmetry.ROTATIONAL: "r",
    Symmetry.HORIZONTAL: "h",
    Symmetry.VERTICAL: "v",
    Symmetry.DIAGONAL: "d",
}


def _with_solution(spec: GridSpec, cells: list[int], difficulty, symmetry, seed) -> Puzzle:
    result = ExactCoverSolver(spec).solve(cells)
    return Puzzle(
        spec=spec,
        cells=tuple(cells),
        solution=tuple(result.solution or ()),
        difficulty=difficulty,
        symmetry=symmetry,
        seed=seed,
    )


def encode_puzzle(puzzle: Puzzle) -> str:
    """Compact, URL-safe share code: base64 of a small JSON object with one digit per cell."""
    spec = puzzle.spec
    if spec.size >= len(DIGITS):
        raise ValueError(f"size {spec.size} cannot be written with single radix-36 digits")
    data = {
        "s": spec.size,
        "br": spec.block_rows,
        "bc": spec.block_cols,
        "c": "".join(DIGITS[v] for v in puzzle.cells),
        "d": DIFFICULTY_TAGS[puzzle.difficulty],
        "y": SYMMETRY_TAGS[puzzle.symmetry],
        "sd": puzzle.seed,
    }
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_puzzle(code: str) -> Optional[Puzzle]:
    """Inverse of encode_puzzle; returns None for anything that is not a valid share code."""
    try:
        data = json.loads(base64.urlsafe_b64decode(code.encode("ascii")))
        spec = GridSpec(int(data["s"]), int(data["br"]), int(data["bc"])).validate()
        cells = check_board([int(ch, 36) for ch in data["c"]], spec)
        difficulty = {v: k for k, v in DIFFICULTY_TAGS.items()}.get(data.get("d"), Difficulty.MEDIUM)
        symmetry = {v: k for k, v in SYMMETRY_TAGS.items()}.get(data.get("y"), Symmetry.ROTATIONAL)
        seed = int(data.get("sd") or 0)
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.warning("could not decode share code: %s", exc)
        return None
    return _with_solution(spec, cells, difficulty, symmetry, seed)


def export_puzzle_json(puzzle: Puzzle) -> str:
    record = puzzle.to_record()
    record.pop("solution")
    return json.dumps(record, indent=2)


def import_puzzle_json(text: str) -> Optional[Puzzle]:
    try:
        data = json.loads(text)
        if not data.get("size") or not isinstance(data.get("cells"), list):
            return None
        spec = GridSpec(int(data["size"]), int(data.get("blockRows") or 3), int(data.get("blockCols") or 3)).validate()
        cells = check_board(data["cells"], spec)
        difficulty = Difficulty(data.get("difficulty") or Difficulty.MEDIUM.value)
        symmetry = Symmetry(data.get("symmetry") or Symmetry.NONE.value)
        seed = int(data.get("seed") or 0)
    except (ValueError, TypeError, AttributeError) as exc:
        logger.warning("could not import puzzle JSON: %s", exc)
        return None
    return _with_solution(spec, cells, difficulty, symmetry, seed)
