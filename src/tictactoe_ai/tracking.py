"""
Experiment tracking helpers (optional MLflow backend).

MLflow is only imported when tracking is requested, so it stays an optional
extra. Every helper is a no-op when MLflow is missing or no run is active.
"""
from __future__ import annotations

import importlib.util
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional


def mlflow_available() -> bool:
    return importlib.util.find_spec("mlflow") is not None


@contextmanager
def maybe_mlflow_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Yield True inside an active MLflow run, False when tracking is off or unavailable."""
    if not enabled:
        yield False
        return
    if not mlflow_available():
        logging.warning("MLflow tracking requested but mlflow is not installed; continuing without it")
        yield False
        return
    import mlflow  # type: ignore

    if log_dir is not None:
        mlflow.set_tracking_uri((log_dir.resolve() / "mlruns").as_uri())
    with mlflow.start_run(run_name=run_name):
        yield True


def _active_mlflow():
    if not mlflow_available():
        return None
    import mlflow  # type: ignore

    return mlflow if mlflow.active_run() is not None else None


def log_params(params: Dict[str, object]) -> None:
    mlflow = _active_mlflow()
    if mlflow is not None:
        mlflow.log_params(params)


def log_metrics(metrics: Dict[str, float]) -> None:
    mlflow = _active_mlflow()
    if mlflow is not None:
        mlflow.log_metrics(metrics)


def log_artifact(path: Path, artifact_path: Optional[str] = None) -> None:
    mlflow = _active_mlflow()
    if mlflow is not None:
        mlflow.log_artifact(str(path), artifact_path=artifact_path)
