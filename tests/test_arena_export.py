import csv
import json
from pathlib import Path

import pytest

from tictactoe_ai.arena import ArenaArgs, play_series, run_arena, summarize
from tictactoe_ai.policies import Difficulty


def test_arena_creates_csv_and_manifest(tmp_path: Path):
    out = run_arena(ArenaArgs(out=tmp_path / "arena", x=Difficulty.HARD, o=Difficulty.EASY, games=8, seed=3))
    games_csv = out / "games.csv"
    assert games_csv.exists()
    with games_csv.open() as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 8
    assert {r["x"] for r in rows} == {"hard"}
    assert all(r["winner"] in {"X", "draw"} for r in rows)

    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["arena_version"]
    assert manifest["row_count"] == 8
    assert manifest["summary"]["o_wins"] == 0
    assert manifest["summary"]["x_wins"] + manifest["summary"]["draws"] == 8
    assert manifest["parquet_written"] is False
    assert manifest["files"]["games_parquet"] is None
    assert manifest["checksums"]["games_csv"]


def test_arena_reproducible_with_seed(tmp_path: Path):
    a = run_arena(ArenaArgs(out=tmp_path / "a", x=Difficulty.MEDIUM, o=Difficulty.EASY, games=12, seed=42))
    b = run_arena(ArenaArgs(out=tmp_path / "b", x=Difficulty.MEDIUM, o=Difficulty.EASY, games=12, seed=42))
    assert (a / "games.csv").read_bytes() == (b / "games.csv").read_bytes()
    ma = json.loads((a / "manifest.json").read_text())
    mb = json.loads((b / "manifest.json").read_text())
    assert ma["summary"] == mb["summary"]


def test_format_both_graceful_without_parquet_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    import importlib

    real_find_spec = importlib.util.find_spec

    def fake_find_spec(name: str, package=None):  # type: ignore[override]
        if name in {"pandas", "pyarrow"}:
            return None
        return real_find_spec(name, package)

    monkeypatch.setattr(importlib.util, "find_spec", fake_find_spec)

    out = run_arena(ArenaArgs(out=tmp_path / "both", games=2, seed=0, format="both"))
    assert (out / "games.csv").exists()
    assert not (out / "games.parquet").exists()
    assert json.loads((out / "manifest.json").read_text())["parquet_written"] is False

    with pytest.raises(RuntimeError, match="Parquet dependencies"):
        run_arena(ArenaArgs(out=tmp_path / "pq", games=2, seed=0, format="parquet"))
    assert not (tmp_path / "pq" / "manifest.json").exists()


def test_parquet_written_when_available(tmp_path: Path):
    pd = pytest.importorskip("pandas")
    pytest.importorskip("pyarrow")
    out = run_arena(ArenaArgs(out=tmp_path / "pq", games=3, seed=1, format="parquet"))
    df = pd.read_parquet(out / "games.parquet")
    assert len(df) == 3
    assert not (out / "games.csv").exists()
    assert json.loads((out / "manifest.json").read_text())["parquet_written"] is True


def test_unknown_format_rejected(tmp_path: Path):
    with pytest.raises(ValueError):
        run_arena(ArenaArgs(out=tmp_path / "x", games=1, format="xlsx"))


def test_summarize_rates():
    records = play_series(Difficulty.HARD, Difficulty.HARD, games=3, seed=0)
    s = summarize(records)
    assert s["games"] == 3
    assert s["draws"] == 3
    assert s["draw_rate"] == 1.0
    assert s["draw_ci95_half"] == 0.0
    assert s["mean_plies"] == 9.0
    empty = summarize([])
    assert empty["games"] == 0
    assert empty["draw_rate"] is None
