"""Heston stochastic-volatility Monte Carlo model (Euler, full truncation)."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..base_model import MonteCarloAssetModel


class HestonMonteCarloModel(MonteCarloAssetModel):
    """
    Heston dynamics under the bank-account measure:

        dS = r S dt + sqrt(v) S dW1
        dv = kappa (theta - v) dt + xi sqrt(v) dW2,   d<W1, W2> = rho dt

    Each grid interval is split into ``substeps`` Euler steps. Negative variance
    is truncated at zero inside drift and diffusion (full truncation); the spot is
    stepped in log space.
    """

    def __init__(
        self,
        S0: float,
        v0: float,
        r: float,
        kappa: float,
        theta: float,
        xi: float,
        rho: float,
        times: Sequence[float],
        n_paths: int = 10_000,
        *,
        substeps: int = 20,
        seed: int = 2025,
    ):
        super().__init__(times, r, n_paths)
        if not np.isfinite(S0) or S0 <= 0.0:
            raise ValueError("S0 must be finite and > 0")
        if v0 < 0.0 or theta < 0.0:
            raise ValueError("Heston requires v0 >= 0 and theta >= 0")
        if kappa < 0.0 or xi < 0.0:
            raise ValueError("Heston requires kappa >= 0 and xi >= 0")
        if not -1.0 <= rho <= 1.0:
            raise ValueError("Heston correlation rho must be in [-1, 1]")
        if int(substeps) < 1:
            raise ValueError("substeps must be >= 1")
        self.S0 = float(S0)
        self.v0 = float(v0)
        self.kappa = float(kappa)
        self.theta = float(theta)
        self.xi = float(xi)
        self.rho = float(rho)
        self.substeps = int(substeps)
        self.seed = int(seed)

    def _simulate(self) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        n = self.number_of_paths
        grid = self.time_discretization
        S = np.empty((n, grid.size), dtype=float)
        S[:, 0] = self.S0
        log_s = np.full(n, np.log(self.S0))
        v = np.full(n, self.v0)
        rho_c = np.sqrt(1.0 - self.rho * self.rho)

        for k in range(1, grid.size):
            h = (grid[k] - grid[k - 1]) / self.substeps
            sqrt_h = np.sqrt(h)
            for _ in range(self.substeps):
                z1 = rng.standard_normal(n)
                z2 = self.rho * z1 + rho_c * rng.standard_normal(n)
                v_pos = np.maximum(v, 0.0)
                sqrt_v = np.sqrt(v_pos)
                log_s = log_s + (self.r - 0.5 * v_pos) * h + sqrt_v * sqrt_h * z1
                v = v + self.kappa * (self.theta - v_pos) * h + self.xi * sqrt_v * sqrt_h * z2
            S[:, k] = np.exp(log_s)
        return S
