import json
import os
import random
import subprocess
import sys
from pathlib import Path

import pytest

from tictactoe_ai.cli import main

SRC = Path(__file__).resolve().parents[1] / "src"


def _run_cli(args: list[str], cwd: Path, stdin: str | None = None) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC), env.get("PYTHONPATH")]))
    exe = [sys.executable, "-m", "tictactoe_ai.cli"]
    return subprocess.run(exe + args, cwd=cwd, capture_output=True, text=True, input=stdin, env=env)


def test_cli_move_solve_and_tactics(tmp_path: Path):
    r = _run_cli(["move", "--board", "110220000", "--difficulty", "hard"], cwd=tmp_path)
    assert r.returncode == 0
    assert "move=2" in r.stdout + r.stderr

    r = _run_cli(["move", "--board", "220100000", "--turn", "x", "--difficulty", "medium"], cwd=tmp_path)
    assert r.returncode == 0
    assert "move=2" in r.stdout + r.stderr

    r = _run_cli(["solve", "--board", "110220000"], cwd=tmp_path)
    assert r.returncode == 0
    s = r.stdout + r.stderr
    assert "best=2" in s and "score=10" in s

    r = _run_cli(["tactics", "--board", "110220000"], cwd=tmp_path)
    assert r.returncode == 0
    s = r.stdout + r.stderr
    assert "wins=[2]" in s and "blocks=[5]" in s


def test_cli_move_on_finished_board(tmp_path: Path):
    r = _run_cli(["move", "--board", "121122211"], cwd=tmp_path)
    assert r.returncode == 0
    assert "move=None" in r.stdout + r.stderr


def test_cli_solve_stdin_streams_csv(tmp_path: Path):
    r = _run_cli(["solve", "--stdin"], cwd=tmp_path, stdin="110220000\nbogus\n111222111\n121122211\n")
    assert r.returncode == 0
    lines = r.stdout.strip().splitlines()
    assert lines[0] == "board,best_move,score,scores"
    assert lines[1].startswith("110220000,2,10,")
    assert lines[2] == "121122211,,,"
    assert len(lines) == 3


def test_cli_play_and_arena(tmp_path: Path):
    r = _run_cli(["play", "--x", "hard", "--o", "hard"], cwd=tmp_path)
    assert r.returncode == 0
    assert "result=draw" in r.stdout + r.stderr

    outdir = tmp_path / "arena_out"
    r = _run_cli(["--seed", "7", "arena", "--x", "hard", "--o", "easy", "--games", "4", "--out", str(outdir)],
                 cwd=tmp_path)
    assert r.returncode == 0
    assert (outdir / "games.csv").exists()
    manifest = json.loads((outdir / "manifest.json").read_text())
    assert manifest["row_count"] == 4
    assert manifest["args"]["seed"] == 7


@pytest.mark.parametrize("bad", ["abc", "012345678", "0123456789", "12345678x"])
def test_cli_error_invalid_boards(tmp_path: Path, bad: str):
    for cmd in ("move", "solve", "tactics"):
        r = _run_cli([cmd, "--board", bad], cwd=tmp_path)
        assert r.returncode != 0


def test_cli_error_unreachable_state():
    # X and O both have a line
    assert main(["solve", "--board", "111222111"]) == 2
    assert main(["move", "--board", "111222111"]) == 2
    assert main(["tactics", "--board", "220100000"]) == 2


def test_cli_rejects_negative_game_count(tmp_path: Path):
    assert main(["arena", "--games", "-1", "--out", str(tmp_path / "neg")]) == 2


def test_cli_help_smoke(tmp_path: Path):
    for args in (
        ["--help"],
        ["move", "--help"],
        ["solve", "--help"],
        ["tactics", "--help"],
        ["play", "--help"],
        ["arena", "--help"],
    ):
        r = _run_cli(args, cwd=tmp_path)
        assert r.returncode == 0
        assert r.stdout or r.stderr


def test_cli_seed_reproduces_easy_moves(tmp_path: Path):
    args = ["--seed", "11", "move", "--board", "100020000", "--difficulty", "easy"]
    first = _run_cli(args, cwd=tmp_path)
    second = _run_cli(args, cwd=tmp_path)
    assert first.returncode == 0 and second.returncode == 0
    assert "move=" in first.stdout + first.stderr
    assert first.stdout + first.stderr == second.stdout + second.stderr


def test_cli_seed_leaves_stdlib_random_alone(monkeypatch):
    for var in ("PYTHONHASHSEED", "MKL_NUM_THREADS", "OPENBLAS_NUM_THREADS", "NUMEXPR_NUM_THREADS", "OMP_NUM_THREADS"):
        monkeypatch.delenv(var, raising=False)
    state = random.getstate()
    assert main(["--seed", "11", "move", "--board", "100020000", "--difficulty", "easy"]) == 0
    assert random.getstate() == state
    assert os.environ["PYTHONHASHSEED"] == "11"
    assert os.environ["OMP_NUM_THREADS"] == "1"
