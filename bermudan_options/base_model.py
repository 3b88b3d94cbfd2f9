"""Monte Carlo asset model API.

Contains:
- the protocol a simulation must satisfy to value products
- MonteCarloAssetModel base class (time grid lookup, numeraire, weights, lazy paths)
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

import numpy as np

from .errors import CalculationError
from .random_variable import RandomVariable


@runtime_checkable
class AssetModelMonteCarloSimulation(Protocol):
    """What a product needs from a simulation: time-indexed vectors on one path set."""

    @property
    def number_of_paths(self) -> int: ...

    def get_random_variable_for_constant(self, value: float) -> RandomVariable: ...

    def get_asset_value(self, time: float, asset_index: int = 0) -> RandomVariable: ...

    def get_numeraire(self, time: float) -> RandomVariable: ...

    def get_monte_carlo_weights(self, time: float) -> RandomVariable: ...


class MonteCarloAssetModel:
    """
    Base class for single-asset Monte Carlo models on a fixed time grid.

    The numeraire is the bank account ``exp(r t)``. Monte Carlo weights are the
    likelihood ratios of the sampling measure against plain uniform sampling,
    i.e. 1.0 on every path here; an importance-sampling model would override
    :meth:`get_monte_carlo_weights`. Subclasses implement :meth:`_simulate`, which
    returns the asset paths as an array of shape ``(number_of_paths, len(times))``.
    Paths are generated on first use and then reused, so every query is answered
    from the same path set.
    """

    time_tolerance = 1e-10

    def __init__(self, times: Sequence[float], r: float, n_paths: int):
        grid = np.asarray(sorted(set(float(t) for t in times) | {0.0}), dtype=float)
        if not np.all(np.isfinite(grid)) or grid[0] < 0.0:
            raise ValueError("Simulation times must be finite and non-negative")
        if int(n_paths) < 1:
            raise ValueError("n_paths must be positive")
        self.time_discretization = grid
        self.r = float(r)
        self._n_paths = int(n_paths)
        self._paths: np.ndarray | None = None

    @property
    def number_of_paths(self) -> int:
        return self._n_paths

    def _simulate(self) -> np.ndarray:
        raise NotImplementedError

    def _time_index(self, time: float) -> int:
        t = float(time)
        grid = self.time_discretization
        idx = int(np.argmin(np.abs(grid - t)))
        if not np.isfinite(t) or abs(grid[idx] - t) > self.time_tolerance * max(1.0, abs(t)):
            raise CalculationError(
                f"Time {time} is not part of the simulation time discretization "
                f"[{grid[0]}, ..., {grid[-1]}] ({grid.size} points)"
            )
        return idx

    def paths(self) -> np.ndarray:
        if self._paths is None:
            paths = np.asarray(self._simulate(), dtype=float)
            expected = (self._n_paths, self.time_discretization.size)
            if paths.shape != expected:
                raise CalculationError(f"Simulated paths have shape {paths.shape}, expected {expected}")
            paths.setflags(write=False)
            self._paths = paths
        return self._paths

    def get_random_variable_for_constant(self, value: float) -> RandomVariable:
        return RandomVariable.constant(value)

    def get_asset_value(self, time: float, asset_index: int = 0) -> RandomVariable:
        if asset_index != 0:
            raise CalculationError(f"Single-asset model has no asset with index {asset_index}")
        idx = self._time_index(time)
        return RandomVariable(self.paths()[:, idx], self.time_discretization[idx])

    def get_numeraire(self, time: float) -> RandomVariable:
        idx = self._time_index(time)
        t = self.time_discretization[idx]
        return RandomVariable(np.exp(self.r * t), t)

    def get_monte_carlo_weights(self, time: float) -> RandomVariable:
        idx = self._time_index(time)
        return RandomVariable(1.0, self.time_discretization[idx])
