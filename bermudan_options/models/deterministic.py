"""Degenerate model without randomness, for limit cases and checks."""

from __future__ import annotations

from typing import Callable, Sequence, Union

import numpy as np

from ..base_model import MonteCarloAssetModel
from ..errors import CalculationError
from ..random_variable import RandomVariable


class DeterministicModel(MonteCarloAssetModel):
    """Every path carries the same asset value ``asset_value(t)`` (or a constant).

    Asset values, numeraire and weights are deterministic random variables, so the
    whole valuation runs on scalars while still reporting ``n_paths`` paths.
    """

    def __init__(
        self,
        asset_value: Union[float, Callable[[float], float]],
        times: Sequence[float],
        r: float = 0.0,
        n_paths: int = 1_000,
    ):
        super().__init__(times, r, n_paths)
        self.asset_value = asset_value

    def _level(self, t: float) -> float:
        if callable(self.asset_value):
            return float(self.asset_value(t))
        return float(self.asset_value)

    def _simulate(self) -> np.ndarray:
        levels = np.array([self._level(t) for t in self.time_discretization], dtype=float)
        return np.tile(levels, (self.number_of_paths, 1))

    def get_asset_value(self, time: float, asset_index: int = 0) -> RandomVariable:
        if asset_index != 0:
            raise CalculationError(f"Single-asset model has no asset with index {asset_index}")
        idx = self._time_index(time)
        t = self.time_discretization[idx]
        return RandomVariable(self._level(t), t)
