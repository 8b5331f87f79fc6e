"""Run directories, log capture, metrics and comparison plots."""

from __future__ import annotations

import json
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


def create_run(output_dir: Union[str, Path], name: Optional[str] = None) -> Path:
    """Create ``output_dir/run_YYYYmmdd_HHMMSS[_name]`` and return it."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    dirname = f"run_{stamp}_{name}" if name else f"run_{stamp}"
    run_dir = Path(output_dir) / dirname

    # Two runs started in the same second get a numeric suffix.
    candidate, i = run_dir, 1
    while candidate.exists():
        candidate = run_dir.with_name(f"{run_dir.name}_{i}")
        i += 1
    candidate.mkdir(parents=True)
    return candidate


def get_run_paths(run_dir: Union[str, Path]) -> Dict[str, Path]:
    run_dir = Path(run_dir)
    return {
        "log": run_dir / "run.log",
        "metrics": run_dir / "metrics.json",
        "plots": run_dir / "plots",
        "config": run_dir / "config.py",
    }


def save_run_config(run_dir: Union[str, Path], config_path: Union[str, Path]) -> None:
    shutil.copy(config_path, get_run_paths(run_dir)["config"])


def list_runs(output_dir: Union[str, Path]) -> List[Path]:
    output_dir = Path(output_dir)
    if not output_dir.exists():
        return []
    return sorted(p for p in output_dir.iterdir() if p.is_dir() and p.name.startswith("run_"))


class _Tee:
    def __init__(self, *streams):
        self.streams = streams

    def write(self, data):
        for s in self.streams:
            s.write(data)
        return len(data)

    def flush(self):
        for s in self.streams:
            s.flush()


class RunLogger:
    """Copy everything printed to stdout into a log file while active."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file = None
        self._stdout = None

    def __enter__(self) -> "RunLogger":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "a", encoding="utf-8")
        self._stdout = sys.stdout
        sys.stdout = _Tee(self._stdout, self._file)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        sys.stdout = self._stdout
        self._file.close()
        self._file = None


def save_metrics(metrics: Any, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(metrics, f, indent=2)


def save_plots(result, plots_dir: Union[str, Path]) -> Optional[Path]:
    """Bar chart of empirical vs exact probabilities for one experiment."""
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError as e:
        print(f"[save_plots] matplotlib import failed: {e}")
        return None

    plots_dir = Path(plots_dir)
    plots_dir.mkdir(parents=True, exist_ok=True)

    keys = result.exact.keys
    exact = result.exact.probabilities.tolist()
    empirical = result.empirical
    observed = [empirical.get(k, 0.0) for k in keys]
    x = list(range(len(keys)))

    fig, ax = plt.subplots(figsize=(max(6, 0.25 * len(keys)), 4))
    ax.bar([i - 0.2 for i in x], exact, width=0.4, label="exact")
    ax.bar([i + 0.2 for i in x], observed, width=0.4, label="Gibbs")
    ax.set_xticks(x)
    ax.set_xticklabels(keys, rotation=90, fontsize=7)
    ax.set_ylabel("probability")
    ax.set_title(f"{result.kind}: {result.n_draws:,} draws, TV={result.tv_distance:.4f}")
    ax.legend()
    fig.tight_layout()

    path = plots_dir / f"{result.kind}.png"
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path
