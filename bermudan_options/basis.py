"""Regression basis functions built from the underlying at an exercise date."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from .random_variable import RandomVariable


@dataclass(frozen=True, slots=True)
class PolynomialBasis:
    """Monomials ``[x^0, x^1, ..., x^order]`` of the underlying.

    With ``centered=True`` the underlying is shifted to zero mean first, so only the
    shape of the distribution enters the regression, not its level.
    """

    order: int = 4
    centered: bool = False

    def __post_init__(self) -> None:
        if int(self.order) != self.order or self.order < 0:
            raise ValueError("Polynomial basis order must be a non-negative integer")

    def __call__(self, underlying: RandomVariable) -> List[RandomVariable]:
        # Regressors are measurable at the exercise date; drop the filtration time.
        x = underlying.at_time(-np.inf)
        if self.centered:
            x = x - x.average()
        return [x.pow(k) for k in range(int(self.order) + 1)]


@dataclass(frozen=True, slots=True)
class BinningBasis:
    """Indicator functions ``1{x >= edge_j}`` on empirical quantile edges.

    Edge ``j`` is the realization at position ``floor(j / number_of_bins * n)`` of the
    sorted sample, so each bin holds roughly the same number of paths.
    """

    number_of_bins: int = 20

    def __post_init__(self) -> None:
        if int(self.number_of_bins) != self.number_of_bins or self.number_of_bins < 1:
            raise ValueError("number_of_bins must be a positive integer")

    def __call__(self, underlying: RandomVariable) -> List[RandomVariable]:
        values = np.sort(underlying.realizations())
        x = underlying.at_time(-np.inf)
        n = values.size
        basis = []
        for j in range(int(self.number_of_bins)):
            left = float(values[int(j / self.number_of_bins * n)])
            basis.append(RandomVariable.select(x - left, 1.0, 0.0))
        return basis
