"""Experiment configuration stored as a Python file with a ``config`` dict."""

from __future__ import annotations

import copy
import importlib.util
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import torch

DEFAULT_CONFIG: Dict[str, Any] = {
    "seed": None,
    "model": {
        "n_visible": 5,
        "n_hidden": 2,
    },
    "experiments": {
        "hidden": {"n_draws": 100_000},
        "visible": {"n_draws": 1_000_000},
        "joint": {"n_draws": 10_000_000, "k": 10},
    },
    "output": {
        "dir": "output",
        "plots": True,
    },
}

CONFIG_TEMPLATE = '''"""Gibbs sampling check configuration."""

config = {
    "seed": None,  # None draws a seed from OS entropy; the seed used is logged

    "model": {
        "n_visible": 5,
        "n_hidden": 2,
    },

    "experiments": {
        "hidden": {"n_draws": 100_000},   # sample h only, v frozen
        "visible": {"n_draws": 1_000_000},  # sample v only, h frozen
        "joint": {"n_draws": 10_000_000, "k": 10},  # k (h, v) sweeps per draw
    },

    "output": {
        "dir": "output",
        "plots": True,
    },
}
'''


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Load ``config`` from a Python file and merge it over the defaults."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    spec = importlib.util.spec_from_file_location(f"_gibbscheck_config_{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    cfg = getattr(module, "config", None)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config file {path} must define a dict named 'config'.")

    return _merge(default_config(), cfg)


def write_config_template(path: Union[str, Path]) -> Path:
    path = Path(path)
    if path.exists():
        raise FileExistsError(f"Config file already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CONFIG_TEMPLATE)
    return path


def make_generator(seed: Optional[int] = None) -> Tuple[torch.Generator, int]:
    """Return a CPU generator and the seed it was initialised with.

    Without ``seed`` the generator is seeded from OS entropy.
    """
    generator = torch.Generator()
    if seed is None:
        seed = generator.seed()
    else:
        generator.manual_seed(int(seed))
    return generator, int(seed)
