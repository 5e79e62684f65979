"""
Arena: play batches of games between two difficulty tiers and export the results.

Writes one CSV row per game (optionally Parquet as well) plus a manifest with
the outcome summary and provenance needed to reproduce the run.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .board import Mark
from .match import GameRecord, difficulty_policy, play_game
from .paths import get_git_commit, get_git_is_dirty
from .policies import Difficulty
from .tracking import log_artifact, log_metrics, log_params

ARENA_VERSION = "1.0.0"
FIELDNAMES = ["game", "x", "o", "start", "final", "winner", "plies", "moves"]


@dataclass
class ArenaArgs:
    out: Path
    x: Difficulty = Difficulty.HARD
    o: Difficulty = Difficulty.EASY
    games: int = 100
    seed: Optional[int] = None
    format: str = "csv"  # one of: "csv", "parquet", "both"
    verbose: bool = False
    cli_argv: Optional[List[str]] = None


def play_series(x: Difficulty, o: Difficulty, games: int, seed: Optional[int] = None) -> List[GameRecord]:
    x_seq, o_seq = np.random.SeedSequence(seed).spawn(2)
    x_policy = difficulty_policy(x, np.random.default_rng(x_seq))
    o_policy = difficulty_policy(o, np.random.default_rng(o_seq))
    return [play_game(x_policy, o_policy) for _ in range(games)]


def summarize(records: Sequence[GameRecord]) -> Dict[str, Any]:
    n = len(records)
    winners = np.array([0 if r.winner is None else int(r.winner) for r in records], dtype=np.int64)
    plies = np.array([r.plies for r in records], dtype=np.float64)
    summary: Dict[str, Any] = {
        "games": n,
        "x_wins": int(np.sum(winners == int(Mark.X))),
        "o_wins": int(np.sum(winners == int(Mark.O))),
        "draws": int(np.sum(winners == 0)),
        "mean_plies": float(plies.mean()) if n else None,
    }
    for label, code in (("x_win", int(Mark.X)), ("o_win", int(Mark.O)), ("draw", 0)):
        if n == 0:
            summary[f"{label}_rate"] = None
            summary[f"{label}_ci95_half"] = None
            continue
        hits = (winners == code).astype(np.float64)
        rate = float(hits.mean())
        summary[f"{label}_rate"] = rate
        summary[f"{label}_ci95_half"] = float(1.96 * hits.std() / np.sqrt(n))
    return summary


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _package_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for pkg in ["numpy", "pandas", "pyarrow"]:
        if importlib.util.find_spec(pkg) is None:
            continue
        mod = __import__(pkg)
        ver = getattr(mod, "__version__", None)
        if ver:
            versions[pkg] = ver
    return versions


def run_arena(args: ArenaArgs) -> Path:
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")
    fmt = (args.format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise ValueError(f"Unknown export format: {args.format}")
    if args.games < 0:
        raise ValueError(f"games must be >= 0, got {args.games}")
    have_parquet = (importlib.util.find_spec("pandas") is not None
                    and importlib.util.find_spec("pyarrow") is not None)
    parquet_msg = (
        "Parquet dependencies not available (install pandas and pyarrow). "
        "Use pip install .[parquet] to enable parquet support."
    )
    if fmt == "parquet" and not have_parquet:
        # Strict: only parquet was requested, fail before writing anything
        raise RuntimeError(parquet_msg)

    x, o = Difficulty.parse(args.x), Difficulty.parse(args.o)
    args.out.mkdir(parents=True, exist_ok=True)
    logging.info("Playing %d games: X=%s vs O=%s (seed=%s)", args.games, x.value, o.value, args.seed)
    records = play_series(x, o, args.games, args.seed)
    rows: List[Dict[str, Any]] = []
    for i, rec in enumerate(records):
        row = {"game": i, "x": x.value, "o": o.value}
        row.update(rec.to_row())
        rows.append(row)
    summary = summarize(records)
    logging.info("X wins=%d O wins=%d draws=%d",
                 summary["x_wins"], summary["o_wins"], summary["draws"])

    games_csv = args.out / "games.csv"
    games_parquet = args.out / "games.parquet"
    wrote_csv = wrote_parquet = False

    if fmt in {"csv", "both"}:
        with games_csv.open("w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=FIELDNAMES)
            w.writeheader()
            w.writerows(rows)
        wrote_csv = True
        logging.info("Wrote CSV: %s (%d rows)", games_csv, len(rows))

    if fmt in {"parquet", "both"}:
        if have_parquet:
            import pandas as pd  # type: ignore

            pd.DataFrame(rows, columns=FIELDNAMES).to_parquet(games_parquet)
            wrote_parquet = True
            logging.info("Wrote Parquet: %s", games_parquet)
        else:
            logging.warning("%s Proceeding with CSV only; manifest will record parquet_written=false.",
                            parquet_msg)

    files: Dict[str, Optional[str]] = {
        "games_csv": str(games_csv) if wrote_csv else None,
        "games_parquet": str(games_parquet) if wrote_parquet else None,
    }
    checksums = {label: _sha256_file(Path(p)) for label, p in files.items() if p is not None}

    manifest = {
        "arena_version": ARENA_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "args": {
            "x": x.value,
            "o": o.value,
            "games": args.games,
            "seed": args.seed,
            "format": fmt,
        },
        "git_commit": get_git_commit(),
        "git_is_dirty": get_git_is_dirty(),
        "python": {
            "python_version": sys.version.split(" ")[0],
            "packages": _package_versions(),
        },
        "cli_argv": args.cli_argv,
        "row_count": len(rows),
        "summary": summary,
        "files": files,
        "checksums": checksums,
        "parquet_written": wrote_parquet,
    }
    manifest_path = args.out / "manifest.json"
    manifest_path.write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json with outcome summary")

    log_params({"x": x.value, "o": o.value, "games": args.games, "seed": args.seed, "format": fmt})
    log_metrics({k: float(v) for k, v in summary.items() if isinstance(v, (int, float))})
    log_artifact(manifest_path)
    for p in files.values():
        if p is not None:
            log_artifact(Path(p))
    return args.out
