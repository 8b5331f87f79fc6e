"""Empirical state histograms and their distance to exact distributions."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Mapping, Optional


class Histogram:
    """Occurrence counts of encoded state strings."""

    def __init__(self) -> None:
        self._counts: Counter = Counter()

    def record(self, key: str) -> None:
        self._counts[key] += 1

    @property
    def total(self) -> int:
        """Number of recorded draws."""
        return sum(self._counts.values())

    @property
    def counts(self) -> Dict[str, int]:
        """Counts keyed by state string, sorted by key."""
        return {k: self._counts[k] for k in sorted(self._counts)}

    def finalize(self, total_draws: Optional[int] = None) -> Dict[str, float]:
        """Divide every count by ``total_draws`` (default: recorded total)."""
        if total_draws is None:
            total_draws = self.total
        if total_draws <= 0:
            raise ValueError(f"total_draws must be positive, got {total_draws}.")
        return {k: c / total_draws for k, c in self.counts.items()}

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, key: str) -> bool:
        return key in self._counts


def total_variation(empirical: Mapping[str, float], exact: Mapping[str, float]) -> float:
    """0.5 * sum |p_hat - p| over the union of keys; missing keys count as 0."""
    keys = set(empirical) | set(exact)
    return 0.5 * sum(abs(empirical.get(k, 0.0) - exact.get(k, 0.0)) for k in keys)
