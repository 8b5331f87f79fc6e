"""Plain-text reports of empirical and exact distributions.

Marginal experiments (hidden / visible)::

    <frozen layer string>
    <state>,<empirical probability>     one line per observed state
    <exact probability>                 one line per state index

Joint experiment::

    <visible>_<hidden>:<empirical probability>
    <exact probability>                 visible-major, hidden-minor
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Union

from .exact import ExactDistribution

REPORT_FILENAMES = {
    "hidden": "hidden_sample.txt",
    "visible": "visible_sample.txt",
    "joint": "joint_sample.txt",
}


def _exact_lines(exact: ExactDistribution):
    return [repr(p) for p in exact.probabilities.tolist()]


def format_marginal_report(
    frozen: str,
    empirical: Mapping[str, float],
    exact: ExactDistribution,
) -> str:
    lines = [frozen]
    lines += [f"{key},{empirical[key]!r}" for key in sorted(empirical)]
    lines += _exact_lines(exact)
    return "\n".join(lines) + "\n"


def format_joint_report(empirical: Mapping[str, float], exact: ExactDistribution) -> str:
    lines = [f"{key}:{empirical[key]!r}" for key in sorted(empirical)]
    lines += _exact_lines(exact)
    return "\n".join(lines) + "\n"


def format_report(result) -> str:
    """Render an ExperimentResult in the format matching its kind."""
    if result.kind == "joint":
        return format_joint_report(result.empirical, result.exact)
    return format_marginal_report(result.frozen, result.empirical, result.exact)


def write_report(result, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_report(result))
    return path
