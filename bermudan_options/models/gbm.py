"""Black-Scholes (GBM) Monte Carlo model."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..base_model import MonteCarloAssetModel


class BlackScholesMonteCarloModel(MonteCarloAssetModel):
    """Log-normal spot ``dS = r S dt + sigma S dW`` simulated exactly on the time grid.

    Usage:
        model = BlackScholesMonteCarloModel(S0=100, r=0.05, sigma=0.3, times=[0.5, 1.0], n_paths=20_000)
    """

    def __init__(
        self,
        S0: float,
        r: float,
        sigma: float,
        times: Sequence[float],
        n_paths: int = 10_000,
        *,
        seed: int = 2025,
        antithetic: bool = False,
    ):
        super().__init__(times, r, n_paths)
        if not np.isfinite(S0) or S0 <= 0.0:
            raise ValueError("S0 must be finite and > 0")
        if not np.isfinite(sigma) or sigma < 0.0:
            raise ValueError("sigma must be finite and >= 0")
        if antithetic and self.number_of_paths % 2:
            raise ValueError("Antithetic sampling requires an even number of paths")
        self.S0 = float(S0)
        self.sigma = float(sigma)
        self.seed = int(seed)
        self.antithetic = bool(antithetic)

    def _normals(self, rng: np.random.Generator, n_steps: int) -> np.ndarray:
        n = self.number_of_paths
        if self.antithetic:
            z = rng.standard_normal((n // 2, n_steps))
            return np.vstack([z, -z])
        return rng.standard_normal((n, n_steps))

    def _simulate(self) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        dt = np.diff(self.time_discretization)
        z = self._normals(rng, dt.size)
        vol = self.sigma
        log_incr = (self.r - 0.5 * vol * vol) * dt + vol * np.sqrt(dt) * z
        log_s = np.log(self.S0) + np.cumsum(log_incr, axis=1)
        S = np.empty((self.number_of_paths, dt.size + 1), dtype=float)
        S[:, 0] = self.S0
        S[:, 1:] = np.exp(log_s)
        return S
