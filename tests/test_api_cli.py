# tests/test_api_cli.py
import json

from fastapi.testclient import TestClient

from apps.api.sudoku_tool_api import app
from apps.cli.sudoku_cli import main, parse_board

client = TestClient(app)

EASY_STR = (
    "530070000600195000098000060800060003400803001700020006060000280000419005000080079"
)


def test_api_solve(easy_board, easy_solution):
    r = client.post("/solve", json={"board": easy_board})
    assert r.status_code == 200
    body = r.json()
    assert body["found"] is True
    assert body["solution"] == easy_solution


def test_api_unique_and_steps(easy_board):
    assert client.post("/has_unique_solution", json={"board": easy_board}).json() == {"unique": True}
    body = client.post("/solve_steps", json={"board": easy_board}).json()
    assert body["solved"] is True
    assert {m["technique"] for m in body["steps"]} <= {"naked_single", "hidden_single"}


def test_api_hint_with_pencil_marks():
    r = client.post("/hint", json={"board": [0] * 81, "candidates": {"r1c1": [1, 2], "r1c2": [1, 2]}})
    hint = r.json()["hint"]
    assert hint["technique"] == "naked_pair"
    assert hint["cells"] == [0, 1]


def test_api_generate_and_decode():
    body = client.post("/generate", json={"size": 4, "block_rows": 2, "block_cols": 2, "seed": 5}).json()
    assert body["puzzle"]["seed"] == 5
    decoded = client.post("/decode", json={"code": body["share_code"]}).json()
    assert decoded["puzzle"]["cells"] == body["puzzle"]["cells"]
    assert decoded["puzzle"]["solution"] == body["puzzle"]["solution"]


def test_api_rejects_bad_input():
    assert client.post("/solve", json={"board": [0] * 81, "size": 9, "block_rows": 2, "block_cols": 3}).status_code == 422
    assert client.post("/solve", json={"board": [0] * 80}).status_code == 422
    assert client.post("/decode", json={"code": "garbage"}).status_code == 422


def test_api_hint_rejects_malformed_cell_keys():
    for key in ("r1", "x", "r10c1"):
        r = client.post("/hint", json={"board": [0] * 81, "candidates": {key: [1]}})
        assert r.status_code == 422
        assert key in r.json()["detail"]


def test_parse_board():
    assert parse_board("12.4 a0") == [1, 2, 0, 4, 10, 0]


def test_cli_solve(capsys, easy_solution):
    assert main(["solve", "--board", EASY_STR]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["found"] is True
    assert payload["unique"] is True
    assert payload["solution"] == easy_solution


def test_cli_generate_is_reproducible(capsys):
    args = ["generate", "--size", "4", "--difficulty", "Easy", "--symmetry", "none", "--seed", "9"]
    assert main(args) == 0
    first = json.loads(capsys.readouterr().out)
    assert main(args) == 0
    second = json.loads(capsys.readouterr().out)
    assert first == second
    assert first["puzzle"]["size"] == 4


def test_cli_steps_and_hint(capsys):
    assert main(["steps", "--board", EASY_STR]) == 0
    assert json.loads(capsys.readouterr().out)["solved"] is True
    assert main(["hint", "--board", EASY_STR]) == 0
    assert json.loads(capsys.readouterr().out)["hint"]["action"] == "place"


def test_cli_reads_puzzle_file(tmp_path, capsys):
    path = tmp_path / "p.json"
    path.write_text(json.dumps({"size": 4, "blockRows": 2, "blockCols": 2, "cells": [0, 2, 0, 0, 0, 0, 3, 0, 0, 4, 0, 0, 0, 0, 2, 0]}))
    assert main(["solve", "--file", str(path)]) == 0
    assert json.loads(capsys.readouterr().out)["found"] is True


def test_cli_encode_then_decode(capsys, easy_solution):
    assert main(["encode", "--board", EASY_STR, "--difficulty", "Hard", "--seed", "4"]) == 0
    code = json.loads(capsys.readouterr().out)["share_code"]
    assert main(["decode", "--code", code]) == 0
    record = json.loads(capsys.readouterr().out)["puzzle"]
    assert record["cells"] == parse_board(EASY_STR)
    assert record["difficulty"] == "Hard"
    assert record["seed"] == 4
    assert record["solution"] == easy_solution


def test_cli_reports_bad_spec(capsys):
    assert main(["solve", "--board", "0" * 49, "--size", "7"]) == 2
    assert "error" in capsys.readouterr().err


def test_cli_needs_both_block_dimensions(capsys):
    assert main(["solve", "--board", "0" * 36, "--size", "6", "--block-rows", "3"]) == 2
    assert "--block-cols" in capsys.readouterr().err
    assert main(["solve", "--board", "0" * 36, "--size", "6", "--block-cols", "2"]) == 2
    capsys.readouterr()
    assert main(["solve", "--board", "0" * 36, "--size", "6", "--block-rows", "3", "--block-cols", "2"]) == 0


def test_cli_hint_honors_pencil_marks(capsys):
    marks = json.dumps({"r1c1": [1, 2], "r1c2": [1, 2]})
    assert main(["hint", "--board", "0" * 81, "--candidates", marks]) == 0
    hint = json.loads(capsys.readouterr().out)["hint"]
    assert hint["technique"] == "naked_pair"
    assert hint["cells"] == [0, 1]
    assert main(["hint", "--board", "0" * 81, "--candidates", "[1, 2]"]) == 2
    assert main(["hint", "--board", "0" * 81, "--candidates", '{"r1": [1]}']) == 2
