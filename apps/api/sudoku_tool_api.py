# sudoku_tool_api.py
# Optional FastAPI wrapper for the solver, guided-play and generator functions.
# Run with: uvicorn apps.api.sudoku_tool_api:app --reload

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from solver.exact_cover import ExactCoverSolver
from solver.generator import generate
from solver.share import decode_puzzle, encode_puzzle
from solver.sudoku_tools import compute_candidates_tool, get_hint, sanity_check, solve_with_steps
from types_sudoku import Difficulty, GridSpec, Symmetry, Technique

app = FastAPI(title="Sudoku Workbench API")


@app.exception_handler(ValueError)
def invalid_input(request: Request, exc: ValueError):
    # InvalidSpecError / InvalidBoardError are ValueErrors
    return JSONResponse(status_code=422, content={"detail": str(exc)})


class SpecModel(BaseModel):
    size: int = 9
    block_rows: int = 3
    block_cols: int = 3

    def spec(self) -> GridSpec:
        return GridSpec(self.size, self.block_rows, self.block_cols).validate()


class BoardModel(SpecModel):
    board: list[int]


class SanityRequest(SpecModel):
    original: list[int]
    current: list[int]


class HintRequest(BoardModel):
    candidates: dict[str, list[int]] | None = None
    technique: Technique | None = None


class GenerateRequest(SpecModel):
    difficulty: Difficulty = Difficulty.MEDIUM
    symmetry: Symmetry = Symmetry.ROTATIONAL
    seed: int | None = None
    target_givens: int | None = None


class DecodeRequest(BaseModel):
    code: str


@app.post("/sanity_check")
def api_sanity(req: SanityRequest):
    return sanity_check(req.original, req.current, req.spec())


@app.post("/compute_candidates")
def api_cands(req: BoardModel):
    return compute_candidates_tool(req.board, req.spec())


@app.post("/solve")
def api_solve(req: BoardModel):
    result = ExactCoverSolver(req.spec()).solve(req.board)
    return {
        "found": result.found,
        "solution": result.solution,
        "solution_count": result.solution_count,
        "elapsed_ms": result.elapsed_ms,
    }


@app.post("/has_unique_solution")
def api_unique(req: BoardModel):
    return {"unique": ExactCoverSolver(req.spec()).has_unique_solution(req.board)}


@app.post("/solve_steps")
def api_steps(req: BoardModel):
    spec = req.spec()
    result = solve_with_steps(req.board, spec)
    return {
        "solved": result.solved,
        "final_board": result.final_board,
        "steps": [s.to_dict(spec.size) for s in result.steps],
    }


@app.post("/hint")
def api_hint(req: HintRequest):
    spec = req.spec()
    step = get_hint(req.board, spec, candidates=req.candidates, technique=req.technique)
    return {"hint": step.to_dict(spec.size) if step else None}


@app.post("/generate")
def api_generate(req: GenerateRequest):
    puzzle = generate(req.spec(), req.difficulty, req.symmetry, seed=req.seed, target_givens=req.target_givens)
    return {"puzzle": puzzle.to_record(), "share_code": encode_puzzle(puzzle)}


@app.post("/decode")
def api_decode(req: DecodeRequest):
    puzzle = decode_puzzle(req.code)
    if puzzle is None:
        raise HTTPException(status_code=422, detail="not a valid share code")
    return {"puzzle": puzzle.to_record()}
