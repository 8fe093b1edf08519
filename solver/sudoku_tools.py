from __future__ import annotations
"""Human-style solving helpers: candidate calculation, the fixed-priority technique scan, step-by-step solving and single hints. Also provides tool-friendly wrappers (sanity check, keyed candidates) for the API and CLI."""


# sudoku_tools.py
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Mapping, Optional, Sequence, Union

import numpy as np

from types_sudoku import Board, GridSpec, SolveStep, Technique

from .errors import InvalidBoardError
from .solver_core import (
    TECHNIQUE_FINDERS,
    CandidateGrid,
    apply_step,
    check_board,
    compute_candidates,
    initialize_candidates,
    key_to_index,
    unit_cells_box,
)

logger = logging.getLogger(__name__)

CandidateOverride = Union[Mapping[Union[str, int], Iterable[int]], Sequence[Iterable[int]]]


@dataclass
class StepSolveResult:
    solved: bool
    final_board: Board
    steps: list[SolveStep] = field(default_factory=list)
    elapsed_ms: float = 0.0

    def techniques_used(self) -> list[Technique]:
        return [s.technique for s in self.steps]


def sanity_check(original: Board, current: Board, spec: GridSpec = GridSpec()) -> dict:
    """Report givens that were overwritten and duplicate digits per row, column and box."""
    original = check_board(original, spec)
    current = check_board(current, spec)
    n = spec.size
    issues = []
    for i in range(spec.cell_count):
        if original[i] != 0 and current[i] not in (0, original[i]):
            r, c = divmod(i, n)
            issues.append(
                {"type": "given_overwritten", "cell": f"r{r+1}c{c+1}", "given": original[i], "found": current[i]}
            )

    def duplicates_in_unit(vals):
        seen = set()
        dups = set()
        for v in vals:
            if v == 0:
                continue
            if v in seen:
                dups.add(v)
            seen.add(v)
        return dups

    units = [(f"r{r+1}", [r * n + c for c in range(n)]) for r in range(n)]
    units += [(f"c{c+1}", [r * n + c for r in range(n)]) for c in range(n)]
    units += [(f"b{b+1}", unit_cells_box(b, spec)) for b in range(spec.box_count)]
    for label, cells in units:
        dups = duplicates_in_unit(current[i] for i in cells)
        if dups:
            bad = [f"r{i // n + 1}c{i % n + 1}" for i in cells if current[i] in dups]
            issues.append({"type": "duplicate", "unit": label, "digits": sorted(dups), "cells": bad})
    return {"ok": len(issues) == 0, "issues": issues}


def compute_candidates_tool(current: Board, spec: GridSpec = GridSpec()) -> dict:
    """Compute candidate digits for each empty cell in the current grid. Returns a dict like {'candidates': {'r1c2': [1,2,5], ...}}."""
    return {"candidates": compute_candidates(current, spec)}


def is_complete_solution(board: Board, spec: GridSpec = GridSpec()) -> bool:
    """True when every row, column and box is a permutation of 1..N."""
    n = spec.size
    grid = np.asarray(check_board(board, spec)).reshape(n, n)
    expected = np.arange(1, n + 1)
    boxes = grid.reshape(n // spec.block_rows, spec.block_rows, n // spec.block_cols, spec.block_cols)
    boxes = boxes.swapaxes(1, 2).reshape(n, n)
    return all(np.array_equal(np.sort(units, axis=1), np.tile(expected, (n, 1))) for units in (grid, grid.T, boxes))


def validate_move(solution: Board, index: int, value: int) -> bool:
    return solution[index] == value


def scan_techniques(
    grid: CandidateGrid, techniques: Optional[Iterable[Technique]] = None
) -> Iterator[tuple[Technique, Optional[SolveStep]]]:
    """Try each technique in priority order, yielding (technique, step or None) for every attempt.
    Stops after the first technique that finds a step."""
    for technique in techniques or TECHNIQUE_FINDERS:
        step = TECHNIQUE_FINDERS[technique](grid)
        yield technique, step
        if step is not None:
            return


def find_next_step(grid: CandidateGrid, techniques: Optional[Iterable[Technique]] = None) -> Optional[SolveStep]:
    for _, step in scan_techniques(grid, techniques):
        if step is not None:
            return step
    return None


def solve_with_steps(board: Board, spec: GridSpec = GridSpec()) -> StepSolveResult:
    """Repeatedly apply the first technique that fires until the grid is solved or nothing fires.
    No guessing is performed: an unsolved result means the puzzle needs search or is invalid."""
    start = time.perf_counter()
    grid = initialize_candidates(board, spec)
    steps: list[SolveStep] = []
    while not grid.is_solved():
        step = find_next_step(grid)
        if step is None:
            break
        step = replace(step, ordinal=len(steps) + 1)
        apply_step(grid, step)
        steps.append(step)
    elapsed = (time.perf_counter() - start) * 1000.0
    # a full board can still break a row, column or box when its givens clash
    solved = grid.is_solved() and is_complete_solution(grid.values, spec)
    if not solved:
        logger.debug("technique catalog exhausted after %d steps with %d empty cells", len(steps), grid.values.count(0))
    return StepSolveResult(solved=solved, final_board=grid.board(), steps=steps, elapsed_ms=elapsed)


def replay_steps(board: Board, steps: Iterable[SolveStep], spec: GridSpec = GridSpec()) -> Board:
    """Apply a recorded step list to a fresh candidate grid built from `board`."""
    grid = initialize_candidates(board, spec)
    for step in steps:
        apply_step(grid, step)
    return grid.board()


def _seed_candidates(grid: CandidateGrid, override: CandidateOverride) -> None:
    n = grid.spec.size
    if isinstance(override, Mapping):
        items = [(key_to_index(k, n) if isinstance(k, str) else k, marks) for k, marks in override.items()]
    else:
        items = list(enumerate(override))
    for index, marks in items:
        if not 0 <= index < grid.spec.cell_count:
            raise InvalidBoardError(f"candidate override for cell {index} is outside the grid")
        marks = set(marks or ())
        if any(not 1 <= m <= n for m in marks):
            raise InvalidBoardError(f"candidate override for cell {index} holds values outside 1..{n}")
        # blank pencil marks keep the computed candidates
        if grid.values[index] == 0 and marks:
            grid.candidates[index] = marks


def get_hint(
    board: Board,
    spec: GridSpec = GridSpec(),
    candidates: Optional[CandidateOverride] = None,
    technique: Optional[Technique] = None,
) -> Optional[SolveStep]:
    """First applicable step across the catalog (or for one technique only), optionally honoring
    caller-supplied pencil marks in place of computed candidates."""
    grid = initialize_candidates(board, spec)
    if candidates is not None:
        _seed_candidates(grid, candidates)
    step = find_next_step(grid, [technique] if technique else None)
    if step is None:
        return None
    return replace(step, ordinal=1)
