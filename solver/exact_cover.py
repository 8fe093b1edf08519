"""Exact-cover solver (Algorithm X over dancing links) for generalized Sudoku.

The matrix has one column per constraint (4*N*N: cell filled, row has value,
column has value, box has value) and one row per (cell, value) candidate that
survives the givens. Links live in flat integer arrays instead of node objects;
node 0 is the root header, nodes 1..4*N*N are the column headers and row nodes
follow in construction order.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from types_sudoku import Board, GridSpec

from .solver_core import check_board, which_box

logger = logging.getLogger(__name__)

ROOT = 0


class ExactCoverMatrix:
    """Toroidal doubly-linked sparse matrix addressed by node index."""

    def __init__(self, n_columns: int):
        self.n_columns = n_columns
        count = n_columns + 1
        self.left = [i - 1 for i in range(count)]
        self.left[ROOT] = n_columns
        self.right = [i + 1 for i in range(count)]
        self.right[n_columns] = ROOT
        self.up = list(range(count))
        self.down = list(range(count))
        self.column = list(range(count))
        self.row_id = [-1] * count
        self.size = [0] * count
        self.rows = 0

    def add_row(self, row_id: int, columns: list[int]) -> None:
        """Append one row touching the given 0-based constraint columns."""
        first = None
        for col in columns:
            c = col + 1
            node = len(self.column)
            self.column.append(c)
            self.row_id.append(row_id)
            # vertical: insert above the header, i.e. at the bottom of the column
            self.up.append(self.up[c])
            self.down.append(c)
            self.down[self.up[c]] = node
            self.up[c] = node
            self.size[c] += 1
            # horizontal: insert left of the first node, i.e. at the end of the row
            if first is None:
                first = node
                self.left.append(node)
                self.right.append(node)
            else:
                last = self.left[first]
                self.left.append(last)
                self.right.append(first)
                self.right[last] = node
                self.left[first] = node
        self.rows += 1

    def cover(self, c: int) -> None:
        left, right, up, down = self.left, self.right, self.up, self.down
        right[left[c]] = right[c]
        left[right[c]] = left[c]
        i = down[c]
        while i != c:
            j = right[i]
            while j != i:
                up[down[j]] = up[j]
                down[up[j]] = down[j]
                self.size[self.column[j]] -= 1
                j = right[j]
            i = down[i]

    def uncover(self, c: int) -> None:
        left, right, up, down = self.left, self.right, self.up, self.down
        i = up[c]
        while i != c:
            j = left[i]
            while j != i:
                self.size[self.column[j]] += 1
                up[down[j]] = j
                down[up[j]] = j
                j = left[j]
            i = up[i]
        right[left[c]] = c
        left[right[c]] = c

    def choose_column(self) -> int:
        """Live column with the fewest live rows; first encountered wins ties."""
        best = self.right[ROOT]
        c = self.right[best]
        while c != ROOT:
            if self.size[c] < self.size[best]:
                best = c
            c = self.right[c]
        return best

    def is_empty(self) -> bool:
        return self.right[ROOT] == ROOT

    def snapshot(self) -> tuple:
        return (tuple(self.left), tuple(self.right), tuple(self.up), tuple(self.down), tuple(self.size))


@dataclass
class ExactCoverResult:
    found: bool
    solution: Optional[Board]
    solution_count: int
    elapsed_ms: float


class ExactCoverSolver:
    """One solver per grid spec. Every call builds and owns its own matrix."""

    def __init__(self, spec: GridSpec = GridSpec()):
        self.spec = spec.validate()

    def constraints(self, row: int, col: int, value: int) -> list[int]:
        n = self.spec.size
        nn = n * n
        return [
            row * n + col,
            nn + row * n + value - 1,
            2 * nn + col * n + value - 1,
            3 * nn + which_box(row, col, self.spec) * n + value - 1,
        ]

    def build_matrix(self, board: Board) -> ExactCoverMatrix:
        """Rows in row-major cell order, ascending value. A given contributes only its own value;
        an empty cell contributes every value not already given in its row, column or box."""
        spec = self.spec
        n = spec.size
        cells = check_board(board, spec)
        row_used = [set() for _ in range(n)]
        col_used = [set() for _ in range(n)]
        box_used = [set() for _ in range(spec.box_count)]
        for index, v in enumerate(cells):
            if v:
                r, c = divmod(index, n)
                row_used[r].add(v)
                col_used[c].add(v)
                box_used[which_box(r, c, spec)].add(v)

        matrix = ExactCoverMatrix(4 * n * n)
        for index, given in enumerate(cells):
            r, c = divmod(index, n)
            if given:
                values = [given]
            else:
                used = row_used[r] | col_used[c] | box_used[which_box(r, c, spec)]
                values = [v for v in range(1, n + 1) if v not in used]
            for v in values:
                matrix.add_row(index * n + v - 1, self.constraints(r, c, v))
        logger.debug("exact cover: %d columns, %d candidate rows", matrix.n_columns, matrix.rows)
        return matrix

    def search(self, matrix: ExactCoverMatrix, solution_limit: int = 1) -> tuple[int, Optional[list[int]]]:
        """Return (solutions found up to the limit, row ids of the first solution).
        The matrix is left exactly as it was handed in."""
        partial: list[int] = []
        count = 0
        first: Optional[list[int]] = None

        def descend() -> None:
            nonlocal count, first
            if matrix.is_empty():
                count += 1
                if first is None:
                    first = list(partial)
                return
            c = matrix.choose_column()
            if matrix.size[c] == 0:
                return
            matrix.cover(c)
            r = matrix.down[c]
            while r != c:
                partial.append(matrix.row_id[r])
                j = matrix.right[r]
                while j != r:
                    matrix.cover(matrix.column[j])
                    j = matrix.right[j]
                descend()
                j = matrix.left[r]
                while j != r:
                    matrix.uncover(matrix.column[j])
                    j = matrix.left[j]
                partial.pop()
                if count >= solution_limit:
                    break
                r = matrix.down[r]
            matrix.uncover(c)

        if solution_limit > 0:
            descend()
        return count, first

    def solve(self, board: Board, solution_limit: int = 1) -> ExactCoverResult:
        """Search for up to `solution_limit` completions (1: any solution, 2: uniqueness test)."""
        start = time.perf_counter()
        matrix = self.build_matrix(board)
        count, rows = self.search(matrix, solution_limit)
        solution = None
        if rows is not None:
            n = self.spec.size
            solution = [0] * self.spec.cell_count
            for row_id in rows:
                index, value = divmod(row_id, n)
                solution[index] = value + 1
        elapsed = (time.perf_counter() - start) * 1000.0
        logger.debug("exact cover: %d solution(s) (limit %d) in %.2f ms", count, solution_limit, elapsed)
        return ExactCoverResult(found=count > 0, solution=solution, solution_count=count, elapsed_ms=elapsed)

    def has_unique_solution(self, board: Board) -> bool:
        return self.solve(board, solution_limit=2).solution_count == 1


def solve(board: Board, spec: GridSpec = GridSpec()) -> Optional[Board]:
    """Any completion of the board, or None when it is unsatisfiable."""
    return ExactCoverSolver(spec).solve(board).solution


def has_unique_solution(board: Board, spec: GridSpec = GridSpec()) -> bool:
    return ExactCoverSolver(spec).has_unique_solution(board)


def count_solutions(board: Board, spec: GridSpec = GridSpec(), limit: int = 2) -> int:
    return ExactCoverSolver(spec).solve(board, solution_limit=limit).solution_count
