"""Core Sudoku utilities used by higher-level techniques: index math, peers, house iterators, the candidate grid, and the human-style technique finders."""

# solver_core.py
# Human-style Sudoku utilities for any N x N grid tiled by blockRows x blockCols boxes:
# - index math, units and peers
# - candidate computation
# - naked & hidden singles (placements)
# - naked & hidden pairs, pointing (locked candidates), X-Wing (eliminations)
# Board is a flat row-major list of N*N ints (0..N). 0 = blank.
from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Iterable, Optional

from types_sudoku import Board, Candidates, Elimination, GridSpec, SolveStep, Technique

from .errors import InvalidBoardError, StepPreconditionError

Cell = tuple[int, int]  # (row, col) 1-based


KEY_PATTERN = re.compile(r"r(\d+)c(\d+)")


def rc_to_key(r: int, c: int) -> str:
    return f"r{r}c{c}"


def key_to_rc(key: str) -> Cell:
    m = KEY_PATTERN.fullmatch(key)
    if m is None:
        raise InvalidBoardError(f"cell key {key!r} is not of the form 'r<row>c<col>'")
    return (int(m.group(1)), int(m.group(2)))


def index_to_key(index: int, size: int) -> str:
    return rc_to_key(index // size + 1, index % size + 1)


def key_to_index(key: str, size: int) -> int:
    r, c = key_to_rc(key)
    if not (1 <= r <= size and 1 <= c <= size):
        raise InvalidBoardError(f"cell key {key!r} is outside a {size}x{size} grid")
    return (r - 1) * size + (c - 1)


def check_board(board: Iterable[int], spec: GridSpec) -> Board:
    """Validate shape and value range; returns a fresh list copy."""
    spec.validate()
    try:
        cells = [operator.index(v) for v in board]
    except TypeError as exc:
        raise InvalidBoardError(f"board values must be integers ({exc})") from exc
    if len(cells) != spec.cell_count:
        raise InvalidBoardError(f"expected {spec.cell_count} cells for a {spec.size}x{spec.size} grid, got {len(cells)}")
    for i, v in enumerate(cells):
        if not 0 <= v <= spec.size:
            raise InvalidBoardError(f"cell {index_to_key(i, spec.size)} holds {v!r}, expected 0..{spec.size}")
    return cells


def which_box(row: int, col: int, spec: GridSpec) -> int:
    """0-based box number of a 0-based (row, col)."""
    return (row // spec.block_rows) * spec.boxes_per_row + col // spec.block_cols


def unit_cells_row(row: int, spec: GridSpec) -> list[int]:
    return [row * spec.size + c for c in range(spec.size)]


def unit_cells_col(col: int, spec: GridSpec) -> list[int]:
    return [r * spec.size + col for r in range(spec.size)]


def unit_cells_box(box: int, spec: GridSpec) -> list[int]:
    r0 = (box // spec.boxes_per_row) * spec.block_rows
    c0 = (box % spec.boxes_per_row) * spec.block_cols
    return [(r0 + i) * spec.size + c0 + j for i in range(spec.block_rows) for j in range(spec.block_cols)]


@lru_cache(maxsize=None)
def all_units(spec: GridSpec) -> tuple[tuple[str, tuple[int, ...]], ...]:
    """Every unit as (label, cells): rows, then columns, then boxes, ascending."""
    units = [(f"row {r + 1}", tuple(unit_cells_row(r, spec))) for r in range(spec.size)]
    units += [(f"column {c + 1}", tuple(unit_cells_col(c, spec))) for c in range(spec.size)]
    units += [(f"box {b + 1}", tuple(unit_cells_box(b, spec))) for b in range(spec.box_count)]
    return tuple(units)


@lru_cache(maxsize=None)
def peer_table(spec: GridSpec) -> tuple[tuple[int, ...], ...]:
    """Sorted peers (same row, column or box) of every cell."""
    table = []
    for index in range(spec.cell_count):
        row, col = divmod(index, spec.size)
        ps = set(unit_cells_row(row, spec))
        ps.update(unit_cells_col(col, spec))
        ps.update(unit_cells_box(which_box(row, col, spec), spec))
        ps.discard(index)
        table.append(tuple(sorted(ps)))
    return tuple(table)


def peers(index: int, spec: GridSpec) -> tuple[int, ...]:
    """Return the peer indices for a cell (same row, column, and box)."""
    return peer_table(spec)[index]


@dataclass
class CandidateGrid:
    spec: GridSpec
    values: list[int]
    candidates: list[set[int]]

    def place(self, index: int, value: int) -> None:
        if self.values[index] != 0:
            raise StepPreconditionError(
                f"cannot place {value} in {index_to_key(index, self.spec.size)}: cell already holds {self.values[index]}"
            )
        if value not in self.candidates[index]:
            raise StepPreconditionError(
                f"cannot place {value} in {index_to_key(index, self.spec.size)}: "
                f"not a candidate (candidates {sorted(self.candidates[index])})"
            )
        self.values[index] = value
        self.candidates[index].clear()
        for p in peers(index, self.spec):
            self.candidates[p].discard(value)

    def eliminate(self, index: int, values: Iterable[int]) -> None:
        self.candidates[index].difference_update(values)

    def is_solved(self) -> bool:
        return all(self.values)

    def board(self) -> Board:
        return list(self.values)


def initialize_candidates(board: Board, spec: GridSpec) -> CandidateGrid:
    """Candidates of every empty cell: 1..N minus the values placed in its peers."""
    values = check_board(board, spec)
    candidates = []
    for index, v in enumerate(values):
        if v:
            candidates.append(set())
            continue
        used = {values[p] for p in peers(index, spec)}
        candidates.append({d for d in range(1, spec.size + 1) if d not in used})
    return CandidateGrid(spec, values, candidates)


def compute_candidates(board: Board, spec: GridSpec) -> Candidates:
    grid = initialize_candidates(board, spec)
    return {
        index_to_key(i, spec.size): sorted(grid.candidates[i]) for i in range(spec.cell_count) if grid.values[i] == 0
    }


def _open_with(grid: CandidateGrid, cells: Iterable[int], num: int) -> list[int]:
    return [i for i in cells if grid.values[i] == 0 and num in grid.candidates[i]]


def find_naked_single(grid: CandidateGrid) -> Optional[SolveStep]:
    n = grid.spec.size
    for i, opts in enumerate(grid.candidates):
        if grid.values[i] == 0 and len(opts) == 1:
            (d,) = opts
            return SolveStep(
                ordinal=0,
                technique=Technique.NAKED_SINGLE,
                cells=(i,),
                values=(d,),
                explanation=f"Only one candidate fits {index_to_key(i, n)}: {d}.",
            )
    return None


def find_hidden_single(grid: CandidateGrid) -> Optional[SolveStep]:
    """A digit with exactly one open cell left in some row, column or box."""
    n = grid.spec.size
    for unit_name, cells in all_units(grid.spec):
        for d in range(1, n + 1):
            locs = _open_with(grid, cells, d)
            if len(locs) == 1:
                key = index_to_key(locs[0], n)
                return SolveStep(
                    ordinal=0,
                    technique=Technique.HIDDEN_SINGLE,
                    cells=(locs[0],),
                    values=(d,),
                    explanation=f"Digit {d} appears in only one cell in {unit_name}: {key}.",
                )
    return None


def find_naked_pair(grid: CandidateGrid) -> Optional[SolveStep]:
    n = grid.spec.size
    for unit_name, cells in all_units(grid.spec):
        twos = [i for i in cells if grid.values[i] == 0 and len(grid.candidates[i]) == 2]
        for a in range(len(twos)):
            for b in range(a + 1, len(twos)):
                c1, c2 = twos[a], twos[b]
                if grid.candidates[c1] != grid.candidates[c2]:
                    continue
                pair = sorted(grid.candidates[c1])
                elims = []
                for idx in cells:
                    if idx in (c1, c2) or grid.values[idx]:
                        continue
                    hit = tuple(v for v in pair if v in grid.candidates[idx])
                    if hit:
                        elims.append(Elimination(idx, hit))
                if elims:
                    return SolveStep(
                        ordinal=0,
                        technique=Technique.NAKED_PAIR,
                        cells=(c1, c2),
                        values=tuple(pair),
                        eliminations=tuple(elims),
                        explanation=(
                            f"Cells {index_to_key(c1, n)} and {index_to_key(c2, n)} form a naked pair "
                            f"{{{', '.join(map(str, pair))}}} in {unit_name}. "
                            f"Eliminate these digits from the other cells of {unit_name}."
                        ),
                    )
    return None


def find_hidden_pair(grid: CandidateGrid) -> Optional[SolveStep]:
    n = grid.spec.size
    for unit_name, cells in all_units(grid.spec):
        where = {}
        for d in range(1, n + 1):
            locs = _open_with(grid, cells, d)
            if len(locs) == 2:
                where[d] = locs
        digits = list(where)
        for a in range(len(digits)):
            for b in range(a + 1, len(digits)):
                d1, d2 = digits[a], digits[b]
                if where[d1] != where[d2]:
                    continue
                elims = []
                for cell in where[d1]:
                    others = tuple(sorted(grid.candidates[cell] - {d1, d2}))
                    if others:
                        elims.append(Elimination(cell, others))
                if elims:
                    c1, c2 = where[d1]
                    return SolveStep(
                        ordinal=0,
                        technique=Technique.HIDDEN_PAIR,
                        cells=(c1, c2),
                        values=(d1, d2),
                        eliminations=tuple(elims),
                        explanation=(
                            f"Digits {{{d1}, {d2}}} can only go in {index_to_key(c1, n)} and {index_to_key(c2, n)} "
                            f"in {unit_name}. Eliminate all other candidates from these two cells."
                        ),
                    )
    return None


def find_pointing(grid: CandidateGrid) -> Optional[SolveStep]:
    """If in a box, a digit's candidates (2 up to blockRows of them) lie in a single row (or column),
    eliminate that digit from the rest of that row (or column) outside the box.
    """
    spec = grid.spec
    n = spec.size
    for b in range(spec.box_count):
        box_cells = unit_cells_box(b, spec)
        inside = set(box_cells)
        for d in range(1, n + 1):
            locs = _open_with(grid, box_cells, d)
            if len(locs) < 2 or len(locs) > spec.block_rows:
                continue
            rows = sorted({i // n for i in locs})
            cols = sorted({i % n for i in locs})
            lines = []
            if len(rows) == 1:
                lines.append((f"row {rows[0] + 1}", unit_cells_row(rows[0], spec)))
            if len(cols) == 1:
                lines.append((f"column {cols[0] + 1}", unit_cells_col(cols[0], spec)))
            for line, line_cells in lines:
                elims = tuple(Elimination(i, (d,)) for i in _open_with(grid, line_cells, d) if i not in inside)
                if elims:
                    return SolveStep(
                        ordinal=0,
                        technique=Technique.POINTING,
                        cells=tuple(locs),
                        values=(d,),
                        eliminations=elims,
                        explanation=(
                            f"In box {b + 1}, digit {d}'s candidates lie only in {line}. "
                            f"Eliminate {d} from {line} outside this box."
                        ),
                    )
    return None


def find_x_wing(grid: CandidateGrid) -> Optional[SolveStep]:
    n = grid.spec.size
    for d in range(1, n + 1):
        # rows as base lines, then columns
        for base, cross in (("rows", "columns"), ("columns", "rows")):

            def at(line: int, pos: int) -> int:
                return line * n + pos if base == "rows" else pos * n + line

            lines = []
            for line in range(n):
                positions = [p for p in range(n) if grid.values[at(line, p)] == 0 and d in grid.candidates[at(line, p)]]
                if len(positions) == 2:
                    lines.append((line, positions))
            for a in range(len(lines)):
                for b in range(a + 1, len(lines)):
                    (l1, p1), (l2, p2) = lines[a], lines[b]
                    if p1 != p2:
                        continue
                    elims = []
                    for pos in p1:
                        for line in range(n):
                            idx = at(line, pos)
                            if line not in (l1, l2) and grid.values[idx] == 0 and d in grid.candidates[idx]:
                                elims.append(Elimination(idx, (d,)))
                    if elims:
                        return SolveStep(
                            ordinal=0,
                            technique=Technique.X_WING,
                            cells=(at(l1, p1[0]), at(l1, p1[1]), at(l2, p1[0]), at(l2, p1[1])),
                            values=(d,),
                            eliminations=tuple(elims),
                            explanation=(
                                f"X-Wing on {d} in {base} {l1 + 1} and {l2 + 1}, {cross} {p1[0] + 1} and {p1[1] + 1}. "
                                f"Eliminate {d} from the other cells of these {cross}."
                            ),
                        )
    return None


# Fixed priority: the first finder that returns a step wins the round.
TECHNIQUE_FINDERS: dict[Technique, Callable[[CandidateGrid], Optional[SolveStep]]] = {
    Technique.NAKED_SINGLE: find_naked_single,
    Technique.HIDDEN_SINGLE: find_hidden_single,
    Technique.NAKED_PAIR: find_naked_pair,
    Technique.HIDDEN_PAIR: find_hidden_pair,
    Technique.POINTING: find_pointing,
    Technique.X_WING: find_x_wing,
}


def apply_step(grid: CandidateGrid, step: SolveStep) -> None:
    """Placements set the value and clear it from peers; eliminations strip the listed candidates."""
    if step.technique.is_placement:
        grid.place(step.cells[0], step.values[0])
    else:
        for e in step.eliminations:
            grid.eliminate(e.cell, e.values)
