"""Command-line front end: generate puzzles, solve boards (exact cover or step by step), ask for a hint, and encode or decode share codes. Every command prints a JSON payload to stdout."""

# sudoku_cli.py
# Usage:
#   python -m apps.cli.sudoku_cli generate --size 9 --difficulty Hard --symmetry rotational --seed 123
#   python -m apps.cli.sudoku_cli solve --board "530070000600195000..."
#   python -m apps.cli.sudoku_cli steps --board ... --size 6 --block-rows 2 --block-cols 3
#   python -m apps.cli.sudoku_cli hint --board ... --candidates '{"r1c3": [1, 2]}'
#   python -m apps.cli.sudoku_cli encode --board ... --difficulty Hard
#   python -m apps.cli.sudoku_cli decode --code <share code>
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from solver.config import load_settings
from solver.exact_cover import ExactCoverSolver
from solver.generator import generate, generate_with_difficulty, get_config_for_size
from solver.share import decode_puzzle, encode_puzzle, import_puzzle_json
from solver.solver_core import check_board
from solver.sudoku_tools import get_hint, solve_with_steps
from types_sudoku import Difficulty, GridSpec, Puzzle, Symmetry, Technique


def parse_board(text: str) -> list[int]:
    """One character per cell: '0' or '.' for blanks, 1-9 then a-z for larger values. Whitespace is ignored."""
    return [0 if ch == "." else int(ch, 36) for ch in text if not ch.isspace()]


def resolve_spec(args, settings) -> GridSpec:
    if args.block_rows and args.block_cols:
        return GridSpec(args.size, args.block_rows, args.block_cols).validate()
    if args.block_rows or args.block_cols:
        raise ValueError("pass both --block-rows and --block-cols, or neither")
    spec = get_config_for_size(args.size, settings)
    if spec is None:
        raise ValueError(f"no default block shape for size {args.size}; pass --block-rows/--block-cols")
    return spec


def load_board(args, settings) -> tuple[GridSpec, list[int]]:
    if args.file:
        puzzle = import_puzzle_json(Path(args.file).read_text(encoding="utf-8"))
        if puzzle is None:
            raise ValueError(f"{args.file} is not a puzzle JSON file")
        return puzzle.spec, list(puzzle.cells)
    if not args.board:
        raise ValueError("pass --board or --file")
    return resolve_spec(args, settings), parse_board(args.board)


def cmd_generate(args, settings) -> dict:
    spec = resolve_spec(args, settings)
    if args.match:
        puzzle = generate_with_difficulty(
            spec, args.difficulty, args.symmetry, seed=args.seed, max_attempts=args.attempts, settings=settings
        )
    else:
        puzzle = generate(
            spec, args.difficulty, args.symmetry, seed=args.seed, target_givens=args.givens, settings=settings
        )
    return {"puzzle": puzzle.to_record(), "givens": puzzle.given_count, "score": puzzle.score, "share_code": encode_puzzle(puzzle)}


def cmd_solve(args, settings) -> dict:
    spec, board = load_board(args, settings)
    result = ExactCoverSolver(spec).solve(board, solution_limit=2)
    return {
        "found": result.found,
        "unique": result.solution_count == 1,
        "solution": result.solution,
        "elapsed_ms": round(result.elapsed_ms, 3),
    }


def cmd_steps(args, settings) -> dict:
    spec, board = load_board(args, settings)
    result = solve_with_steps(board, spec)
    steps = [s.to_dict(spec.size) for s in result.steps]
    return {"solved": result.solved, "final_board": result.final_board, "moves": steps}


def cmd_hint(args, settings) -> dict:
    spec, board = load_board(args, settings)
    marks = json.loads(args.candidates) if args.candidates else None
    if marks is not None and not isinstance(marks, dict):
        raise ValueError('--candidates must be a JSON object like {"r1c1": [1, 2]}')
    step = get_hint(board, spec, candidates=marks, technique=args.technique)
    return {"hint": step.to_dict(spec.size) if step else None}


def cmd_encode(args, settings) -> dict:
    spec, board = load_board(args, settings)
    cells = tuple(check_board(board, spec))
    puzzle = Puzzle(spec, cells, (), args.difficulty, args.symmetry, seed=args.seed or 0)
    return {"share_code": encode_puzzle(puzzle)}


def cmd_decode(args, settings) -> dict:
    puzzle = decode_puzzle(args.code)
    if puzzle is None:
        raise ValueError("not a valid share code")
    return {"puzzle": puzzle.to_record()}


COMMANDS = {
    "generate": cmd_generate,
    "solve": cmd_solve,
    "steps": cmd_steps,
    "hint": cmd_hint,
    "encode": cmd_encode,
    "decode": cmd_decode,
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sudoku-workbench")
    ap.add_argument("--config", type=str, default=None, help="YAML file overriding difficulty bands / sizes")
    ap.add_argument("--json", type=str, default=None, help="write the payload here instead of stdout")
    ap.add_argument("-v", "--verbose", action="count", default=0)
    sub = ap.add_subparsers(dest="command", required=True)

    def add_spec(p):
        p.add_argument("--size", type=int, default=9)
        p.add_argument("--block-rows", type=int, default=None)
        p.add_argument("--block-cols", type=int, default=None)

    g = sub.add_parser("generate")
    add_spec(g)
    g.add_argument("--difficulty", type=Difficulty, default=Difficulty.MEDIUM, choices=list(Difficulty))
    g.add_argument("--symmetry", type=Symmetry, default=Symmetry.ROTATIONAL, choices=list(Symmetry))
    g.add_argument("--seed", type=int, default=None)
    g.add_argument("--givens", type=int, default=None)
    g.add_argument("--match", action="store_true", help="retry until the achieved difficulty matches")
    g.add_argument("--attempts", type=int, default=10)

    for name in ("solve", "steps", "hint", "encode"):
        p = sub.add_parser(name)
        add_spec(p)
        p.add_argument("--board", type=str, default=None)
        p.add_argument("--file", type=str, default=None)
        if name == "hint":
            p.add_argument("--technique", type=Technique, default=None, choices=list(Technique))
            p.add_argument("--candidates", type=str, default=None, help='pencil marks as JSON, e.g. {"r1c1": [1, 2]}')
        if name == "encode":
            p.add_argument("--difficulty", type=Difficulty, default=Difficulty.CUSTOM, choices=list(Difficulty))
            p.add_argument("--symmetry", type=Symmetry, default=Symmetry.NONE, choices=list(Symmetry))
            p.add_argument("--seed", type=int, default=None)

    d = sub.add_parser("decode")
    d.add_argument("--code", required=True)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = load_settings(args.config)
        payload = COMMANDS[args.command](args, settings)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        Path(args.json).write_text(json.dumps(payload, indent=2), encoding="utf-8")
    else:
        print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
