# tests/test_generator.py
import pytest

from solver import generator
from solver.exact_cover import has_unique_solution
from solver.generator import (
    SeededRandom,
    assess_difficulty,
    fill_solution,
    generate,
    generate_with_difficulty,
    get_config_for_size,
    givens_range,
    random_config,
    symmetric_cells,
)
from solver.sudoku_tools import StepSolveResult, is_complete_solution
from types_sudoku import Difficulty, GridSpec, SolveStep, Symmetry, Technique

SPEC_4 = GridSpec(4, 2, 2)
SPEC_6 = GridSpec(6, 2, 3)


def test_seeded_random_is_a_pure_function_of_its_seed():
    a, b = SeededRandom(42), SeededRandom(42)
    assert [a.next_int(1, 9) for _ in range(50)] == [b.next_int(1, 9) for _ in range(50)]
    first = SeededRandom(1)
    first.next()
    assert first.state == 1103527590
    assert SeededRandom(7).initial_seed == 7


def test_seeded_random_ranges_and_shuffle():
    rng = SeededRandom(99)
    assert all(3 <= rng.next_int(3, 5) <= 5 for _ in range(200))
    items = list(range(20))
    shuffled = rng.shuffle(items)
    assert sorted(shuffled) == items
    assert items == list(range(20))


@pytest.mark.parametrize("spec", [SPEC_4, SPEC_6, GridSpec(6, 3, 2), GridSpec()])
def test_fill_solution_is_complete(spec):
    grid = fill_solution(spec, SeededRandom(2024))
    assert is_complete_solution(grid, spec)


def test_symmetric_cells():
    assert symmetric_cells(0, 9, Symmetry.NONE) == [0]
    assert symmetric_cells(0, 9, Symmetry.ROTATIONAL) == [0, 80]
    assert symmetric_cells(40, 9, Symmetry.ROTATIONAL) == [40]
    assert symmetric_cells(0, 9, Symmetry.HORIZONTAL) == [0, 8]
    assert symmetric_cells(0, 9, Symmetry.VERTICAL) == [0, 72]
    assert symmetric_cells(1, 9, Symmetry.DIAGONAL) == [1, 9, 71, 79]
    assert symmetric_cells(0, 9, Symmetry.DIAGONAL) == [0, 80]


def test_givens_range_scales_with_area():
    band = givens_range(GridSpec(), Difficulty.MEDIUM)
    assert (band.min_givens, band.max_givens) == (30, 36)
    band = givens_range(SPEC_4, Difficulty.EASY)
    assert (band.min_givens, band.max_givens) == (7, 9)


def test_generate_is_reproducible():
    first = generate(GridSpec(), Difficulty.MEDIUM, Symmetry.ROTATIONAL, seed=12345)
    second = generate(GridSpec(), Difficulty.MEDIUM, Symmetry.ROTATIONAL, seed=12345)
    assert first == second
    assert first.cells == second.cells
    assert first.seed == 12345


@pytest.mark.parametrize("spec", [SPEC_4, SPEC_6, GridSpec()])
def test_generated_puzzles_have_unique_solution(spec):
    puzzle = generate(spec, Difficulty.MEDIUM, Symmetry.NONE, seed=7)
    assert puzzle.spec == spec
    assert len(puzzle.cells) == spec.cell_count
    assert has_unique_solution(list(puzzle.cells), spec)
    assert is_complete_solution(list(puzzle.solution), spec)
    assert all(g == s for g, s in zip(puzzle.cells, puzzle.solution) if g)


@pytest.mark.parametrize("symmetry", list(Symmetry))
def test_removal_respects_symmetry(symmetry):
    puzzle = generate(SPEC_6, Difficulty.HARD, symmetry, seed=31)
    for i, v in enumerate(puzzle.cells):
        group = symmetric_cells(i, SPEC_6.size, symmetry)
        assert all((puzzle.cells[j] == 0) == (v == 0) for j in group)
    assert puzzle.symmetry == symmetry
    assert has_unique_solution(list(puzzle.cells), SPEC_6)


def test_generation_exhaustion_degrades_gracefully():
    puzzle = generate(SPEC_4, Difficulty.EXPERT, Symmetry.NONE, seed=5, target_givens=0)
    assert puzzle.given_count > 0
    assert has_unique_solution(list(puzzle.cells), SPEC_4)


def test_generated_givens_stay_within_band():
    band = givens_range(SPEC_6, Difficulty.EASY)
    puzzle = generate(SPEC_6, Difficulty.EASY, Symmetry.NONE, seed=11)
    assert band.min_givens <= puzzle.given_count


def test_assess_difficulty(easy_board, classic):
    difficulty, score = assess_difficulty(easy_board, classic)
    # 51 singles weighted 1 (naked) or 2 (hidden)
    assert 51 <= score <= 102
    assert difficulty in (Difficulty.MEDIUM, Difficulty.HARD)


def graded(monkeypatch, techniques, solved=True):
    steps = [SolveStep(i + 1, t, (0,), (1,), "") for i, t in enumerate(techniques)]
    monkeypatch.setattr(generator, "solve_with_steps", lambda board, spec: StepSolveResult(solved, [], steps))
    return assess_difficulty([0] * 16, SPEC_4)


@pytest.mark.parametrize(
    "techniques, expected",
    [
        ([Technique.NAKED_SINGLE] * 40, (Difficulty.EASY, 40)),
        ([Technique.NAKED_SINGLE] * 41, (Difficulty.MEDIUM, 41)),
        ([Technique.HIDDEN_SINGLE] * 40, (Difficulty.MEDIUM, 80)),
        ([Technique.HIDDEN_SINGLE] * 40 + [Technique.NAKED_SINGLE], (Difficulty.HARD, 81)),
        ([Technique.HIDDEN_SINGLE] * 75, (Difficulty.HARD, 150)),
        ([Technique.HIDDEN_SINGLE] * 75 + [Technique.NAKED_SINGLE], (Difficulty.EXPERT, 151)),
        ([Technique.NAKED_SINGLE, Technique.NAKED_PAIR], (Difficulty.HARD, 5)),
        ([Technique.HIDDEN_PAIR], (Difficulty.HARD, 5)),
        ([Technique.NAKED_SINGLE, Technique.POINTING], (Difficulty.HARD, 5)),
        ([Technique.NAKED_SINGLE, Technique.X_WING], (Difficulty.EXPERT, 9)),
    ],
)
def test_difficulty_tiers(monkeypatch, techniques, expected):
    assert graded(monkeypatch, techniques) == expected


def test_stalled_grading_is_expert_even_with_a_low_score(monkeypatch):
    assert graded(monkeypatch, [Technique.NAKED_SINGLE] * 3, solved=False) == (Difficulty.EXPERT, 3)


def test_one_blank_grades_easy():
    board = fill_solution(SPEC_4, SeededRandom(6))
    board[5] = 0
    assert assess_difficulty(board, SPEC_4) == (Difficulty.EASY, 1)


def test_unsolved_by_techniques_grades_expert():
    difficulty, _ = assess_difficulty([0] * 16, SPEC_4)
    assert difficulty == Difficulty.EXPERT


def test_generate_with_difficulty_returns_closest():
    puzzle = generate_with_difficulty(SPEC_4, Difficulty.EASY, Symmetry.NONE, seed=3, max_attempts=3)
    assert puzzle.difficulty in (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EXPERT)
    assert has_unique_solution(list(puzzle.cells), SPEC_4)


def test_config_for_size():
    assert get_config_for_size(6) == SPEC_6
    assert get_config_for_size(12) == GridSpec(12, 3, 4)
    assert get_config_for_size(7) is None


def test_random_config_draws_supported_specs():
    supported = {get_config_for_size(n) for n in (4, 6, 9, 12, 16)}
    assert {random_config(SeededRandom(s)) for s in range(30)} <= supported
    assert random_config(SeededRandom(8)) == random_config(SeededRandom(8))
    assert random_config() in supported
