#!/usr/bin/env python3
"""Compare alpha-beta and plain minimax: node counts and wall time per position."""
from __future__ import annotations

import argparse
import logging
import math
import statistics as stats
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from tictactoe_ai.board import Board
from tictactoe_ai.search import SearchStats, find_best_move
from tictactoe_ai.tracking import log_metrics, log_params, maybe_mlflow_run

POSITIONS = [
    "000000000",  # opening
    "100000000",  # X in the corner
    "000010000",  # X in the center
    "100020000",  # simple midgame
]


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    m = stats.fmean(values)
    s = stats.pstdev(values) if len(values) > 1 else 0.0
    half = 1.96 * (s / math.sqrt(len(values)))
    return m, half


@dataclass
class Config:
    repeats: int = 3
    tracking: str = "none"  # or "mlflow"
    log_dir: Path = Path("runs")


def bench(board: Board, prune: bool, repeats: int) -> Tuple[int, float, float]:
    times: List[float] = []
    nodes = 0
    for _ in range(repeats):
        st = SearchStats()
        t0 = time.perf_counter()
        find_best_move(board, prune=prune, stats=st)
        times.append(time.perf_counter() - t0)
        nodes = st.nodes
    m, h = ci95(times)
    return nodes, m, h


def main() -> int:
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("--repeats", type=int, default=Config.repeats)
    p.add_argument("--tracking", choices=["none", "mlflow"], default="none")
    ns = p.parse_args()
    cfg = Config(repeats=ns.repeats, tracking=ns.tracking)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    with maybe_mlflow_run(cfg.tracking == "mlflow", run_name="benchmarks", log_dir=cfg.log_dir):
        log_params({"repeats": cfg.repeats})
        for raw in POSITIONS:
            board = Board.from_string(raw)
            ab_nodes, ab_mean, ab_half = bench(board, True, cfg.repeats)
            mm_nodes, mm_mean, mm_half = bench(board, False, cfg.repeats)
            logging.info(
                "%s alpha-beta: nodes=%d %.4fs ± %.4fs | minimax: nodes=%d %.4fs ± %.4fs",
                raw, ab_nodes, ab_mean, ab_half, mm_nodes, mm_mean, mm_half,
            )
            log_metrics({
                f"{raw}_alphabeta_nodes": float(ab_nodes),
                f"{raw}_minimax_nodes": float(mm_nodes),
                f"{raw}_alphabeta_mean_s": ab_mean,
                f"{raw}_minimax_mean_s": mm_mean,
            })
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
