"""Least-squares estimation of conditional expectations on a path set."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np
import scipy.linalg

from .random_variable import RandomVariable


class ConditionalExpectationRegression:
    """Estimate ``E[Y | basis]`` by ordinary least squares across paths.

    The fitted value on path ``p`` is ``sum_k c_k * B_k(p)`` where ``c`` minimises
    ``sum_p (Y(p) - sum_k c_k B_k(p))^2``. The system is solved with an SVD based
    least-squares routine on column-scaled regressors, so collinear or constant
    basis functions yield the minimum-norm solution instead of a singular matrix.
    """

    # Relative cutoff below which singular values of the scaled design matrix count as zero.
    singular_value_cutoff = 1e-12

    def __init__(self, basis_functions: Sequence[RandomVariable]):
        basis_functions = list(basis_functions)
        if not basis_functions:
            raise ValueError("At least one basis function is required")
        self.basis_functions: List[RandomVariable] = basis_functions

    def _path_count(self, target: RandomVariable) -> int:
        return max([target.size] + [b.size for b in self.basis_functions])

    def _design_matrix(self, n_paths: int) -> np.ndarray:
        return np.column_stack([b.realizations(n_paths) for b in self.basis_functions])

    def regression_coefficients(self, target: RandomVariable) -> np.ndarray:
        n_paths = self._path_count(target)
        X = self._design_matrix(n_paths)
        y = target.realizations(n_paths)
        scale = np.linalg.norm(X, axis=0)
        scale[scale == 0.0] = 1.0
        coeffs, _, _, _ = scipy.linalg.lstsq(X / scale, y, cond=self.singular_value_cutoff)
        return coeffs / scale

    def get_conditional_expectation(self, target: RandomVariable) -> RandomVariable:
        if target.is_deterministic or np.ptp(target.realizations()) == 0.0:
            # E[c | F] = c, also for a per-path vector of identical values
            return target
        n_paths = self._path_count(target)
        fitted = self._design_matrix(n_paths) @ self.regression_coefficients(target)
        return RandomVariable(fitted)
