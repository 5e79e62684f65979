from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from .arena import ArenaArgs, run_arena
from .board import Board, InvalidBoard, Mark
from .match import difficulty_policy, play_game
from .paths import results_dir
from .policies import Difficulty, best_move
from .search import find_best_move, score_moves
from .tactics import blocking_moves, fork_moves, immediate_winning_moves
from .tracking import maybe_mlflow_run

DIFFICULTIES = [d.value for d in Difficulty]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt", description="Tic-tac-toe engine with a minimax opponent")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument("--seed", type=int, default=None, help="Seed for the random move generators (move, play, arena)")
    p.add_argument(
        "--deterministic",
        action="store_true",
        help="Enable deterministic mode (sets PYTHONHASHSEED and single-threaded BLAS)",
    )

    board_help = "Board string, e.g., 110220000 (0=empty,1=X,2=O; also ./x/o)"

    p_move = sub.add_parser("move", help="Pick the AI move for the side to move")
    p_move.add_argument("--board", required=True, help=board_help)
    p_move.add_argument("--difficulty", choices=DIFFICULTIES, default="hard")
    p_move.add_argument(
        "--turn",
        choices=["x", "o"],
        default=None,
        help="Side to move (default: derived from piece counts)",
    )

    p_sol = sub.add_parser("solve", help="Score every legal move via minimax from side-to-move")
    p_sol.add_argument("--board", help=board_help + " (omit with --stdin)")
    p_sol.add_argument(
        "--stdin", action="store_true", help="Read many boards from stdin and stream CSV output"
    )

    p_tac = sub.add_parser("tactics", help="List immediate wins, blocks and forks for side-to-move")
    p_tac.add_argument("--board", required=True, help=board_help)

    p_play = sub.add_parser("play", help="Play one game between two difficulty tiers")
    p_play.add_argument("--x", choices=DIFFICULTIES, default="hard", help="Difficulty playing X")
    p_play.add_argument("--o", choices=DIFFICULTIES, default="hard", help="Difficulty playing O")

    p_arena = sub.add_parser(
        "arena",
        help="Play many games and export results (CSV by default; parquet requires pandas+pyarrow)",
    )
    p_arena.add_argument("--x", choices=DIFFICULTIES, default="hard", help="Difficulty playing X")
    p_arena.add_argument("--o", choices=DIFFICULTIES, default="easy", help="Difficulty playing O")
    p_arena.add_argument("--games", type=int, default=100, help="Number of games (default: 100)")
    p_arena.add_argument(
        "--out", type=Path, default=None, help="Output directory (default: $TTT_RESULTS_DIR or results/)"
    )
    p_arena.add_argument(
        "--format",
        choices=["csv", "parquet", "both"],
        default="csv",
        help="Export format: csv (default), parquet, both",
    )
    p_arena.add_argument(
        "--tracking",
        choices=["none", "mlflow"],
        default="none",
        help="Experiment tracking backend",
    )
    p_arena.add_argument(
        "--log-dir",
        type=Path,
        default=Path("runs"),
        help="Directory for tracking logs/artifacts (for mlflow local backend)",
    )

    return p


def _set_deterministic_env(seed: Optional[int]) -> None:
    import os

    if seed is not None:
        os.environ.setdefault("PYTHONHASHSEED", str(seed))
    for var in ("MKL_NUM_THREADS", "OPENBLAS_NUM_THREADS", "NUMEXPR_NUM_THREADS", "OMP_NUM_THREADS"):
        os.environ.setdefault(var, "1")


def _print_info() -> None:
    import importlib.util
    import platform
    import sys

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def _parse_board(raw: Optional[str], turn: Optional[str] = None) -> Optional[Board]:
    mark = None if turn is None else (Mark.X if turn == "x" else Mark.O)
    try:
        board = Board.from_string(raw or "", turn=mark)
    except InvalidBoard as e:
        logging.error("%s", e)
        return None
    # an explicit --turn marks a hand-built analysis position; only derived turns must be reachable
    if turn is None and not board.is_reachable():
        logging.error("Board is not a valid reachable state.")
        return None
    return board


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    # Early exits
    if getattr(ns, "version", False):
        from importlib.metadata import PackageNotFoundError, version as _ver

        try:
            print(_ver("tictactoe-ai"))
        except PackageNotFoundError:
            print("unknown")
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0

    if getattr(ns, "deterministic", False) or getattr(ns, "seed", None) is not None:
        _set_deterministic_env(getattr(ns, "seed", None))

    if ns.cmd == "move":
        b = _parse_board(ns.board, ns.turn)
        if b is None:
            return 2
        mv = best_move(b, Difficulty.parse(ns.difficulty), ns.seed)
        logging.info("to_move=%s difficulty=%s move=%s", b.turn.symbol, ns.difficulty, mv)
        return 0

    if ns.cmd == "solve":
        import sys as _sys
        if ns.stdin:
            import csv as _csv
            w = _csv.writer(_sys.stdout)
            w.writerow(["board", "best_move", "score", "scores"])
            for line in _sys.stdin:
                raw = line.strip()
                if not raw:
                    continue
                try:
                    b = Board.from_string(raw)
                except InvalidBoard:
                    continue
                if not b.is_reachable():
                    continue
                scores = score_moves(b)
                mv = find_best_move(b)
                w.writerow([
                    raw,
                    "" if mv is None else mv,
                    "" if mv is None else scores[mv],
                    " ".join(f"{k}:{v}" for k, v in sorted(scores.items())),
                ])
            return 0
        b = _parse_board(ns.board)
        if b is None:
            return 2
        scores = score_moves(b)
        mv = find_best_move(b)
        logging.info(
            "to_move=%s best=%s score=%s scores=%s",
            b.turn.symbol,
            mv,
            None if mv is None else scores[mv],
            dict(sorted(scores.items())),
        )
        return 0

    if ns.cmd == "tactics":
        b = _parse_board(ns.board)
        if b is None:
            return 2
        logging.info(
            "to_move=%s wins=%s blocks=%s forks=%s",
            b.turn.symbol,
            immediate_winning_moves(b, b.turn),
            blocking_moves(b),
            fork_moves(b, b.turn),
        )
        return 0

    if ns.cmd == "play":
        x, o = Difficulty.parse(ns.x), Difficulty.parse(ns.o)
        seed = ns.seed
        rec = play_game(
            difficulty_policy(x, seed),
            difficulty_policy(o, None if seed is None else seed + 1),
        )
        logging.info("moves=%s", rec.moves)
        for row in rec.final.pretty().splitlines():
            logging.info("  %s", row)
        if rec.winner is None:
            logging.info("result=draw")
        else:
            logging.info("result=%s wins line=%s", rec.winner.symbol, list(rec.winning_line or ()))
        return 0

    if ns.cmd == "arena":
        if ns.games < 0:
            logging.error("--games must be >= 0: %s", ns.games)
            return 2
        out = ns.out if ns.out is not None else results_dir() / f"arena_{ns.x}_vs_{ns.o}"
        with maybe_mlflow_run(ns.tracking == "mlflow", run_name="arena", log_dir=ns.log_dir):
            try:
                out = run_arena(ArenaArgs(
                    out=out,
                    x=Difficulty.parse(ns.x),
                    o=Difficulty.parse(ns.o),
                    games=ns.games,
                    seed=ns.seed,
                    format=ns.format,
                    verbose=ns.verbose,
                    cli_argv=list(argv) if argv is not None else None,
                ))
            except RuntimeError as e:
                logging.error("%s", e)
                return 2
        logging.info("Exported arena results to: %s", out)
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
