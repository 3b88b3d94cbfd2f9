"""Valuation settings for Bermudan products."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from .basis import BinningBasis, PolynomialBasis

_BASIS_KINDS = ("polynomial", "centered", "binning")


@dataclass(frozen=True, slots=True)
class BermudanConfig:
    """Regression and calibration settings.

    basis
        ``"polynomial"`` for ``1, S, ..., S^order``; ``"centered"`` for the same
        powers of ``S - E[S]``; ``"binning"`` for quantile-bin indicators.
    intrinsic_value_as_basis
        Build the basis from the intrinsic value ``max(N * (S - K), 0)`` instead of ``S``.
    lambda_bounds, search_tolerance, max_search_iterations
        Bracket and stopping rule of the golden-section search of the dual method.
    """

    regression_order: int = 4
    intrinsic_value_as_basis: bool = False
    basis: str = "polynomial"
    number_of_bins: int = 20
    lambda_bounds: Tuple[float, float] = (-1.0, 1.0)
    search_tolerance: float = 1e-4
    max_search_iterations: int = 100

    def __post_init__(self) -> None:
        kind = str(self.basis).lower().strip()
        if kind not in _BASIS_KINDS:
            raise ValueError(f"basis must be one of {_BASIS_KINDS}, got {self.basis!r}")
        object.__setattr__(self, "basis", kind)

        if int(self.regression_order) != self.regression_order or self.regression_order < 0:
            raise ValueError("regression_order must be a non-negative integer")
        if int(self.number_of_bins) != self.number_of_bins or self.number_of_bins < 1:
            raise ValueError("number_of_bins must be a positive integer")

        lo, hi = (float(x) for x in self.lambda_bounds)
        if not (np.isfinite(lo) and np.isfinite(hi)) or lo >= hi:
            raise ValueError(f"lambda_bounds must be a finite increasing pair, got {self.lambda_bounds}")
        object.__setattr__(self, "lambda_bounds", (lo, hi))

        if not self.search_tolerance > 0.0:
            raise ValueError("search_tolerance must be > 0")
        if int(self.max_search_iterations) < 1:
            raise ValueError("max_search_iterations must be >= 1")

    def make_basis(self) -> Union[PolynomialBasis, BinningBasis]:
        if self.basis == "binning":
            return BinningBasis(int(self.number_of_bins))
        return PolynomialBasis(int(self.regression_order), centered=self.basis == "centered")
