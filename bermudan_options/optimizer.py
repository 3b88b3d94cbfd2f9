"""Bounded one-dimensional minimisation by golden-section search."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .errors import ConvergenceError

logger = logging.getLogger(__name__)

GOLDEN_RATIO_CONJUGATE = (np.sqrt(5.0) - 1.0) / 2.0

# Interior values closer than this (relative) count as equal.
TIE_RELATIVE_TOLERANCE = 1e-12


@dataclass(frozen=True, slots=True)
class SearchResult:
    best_point: float
    best_value: float
    iterations: int
    evaluations: int


def golden_section_search(
    objective: Callable[[float], float],
    lower: float = -1.0,
    upper: float = 1.0,
    *,
    tolerance: float = 1e-4,
    max_iterations: int = 100,
    tie_rtol: float = TIE_RELATIVE_TOLERANCE,
    checkpoint: Optional[Callable[[int], None]] = None,
) -> SearchResult:
    """
    Minimise ``objective`` on ``[lower, upper]``.

    The bracket is shrunk by the golden ratio each iteration, re-using one of the
    two interior evaluations, until its width is below ``tolerance``. When both
    interior values tie (equal up to ``tie_rtol`` relative to the larger
    magnitude, or to 1), the bracket collapses onto the interior interval, which
    holds the minimum of any unimodal objective. The returned point is the better
    of the two final interior points.

    Raises
    ------
    ValueError
        Invalid bracket/tolerance, or the objective returned a non-finite value.
    ConvergenceError
        The bracket is still wider than ``tolerance`` after ``max_iterations``.
    """
    a, b = float(lower), float(upper)
    if not (np.isfinite(a) and np.isfinite(b)) or a >= b:
        raise ValueError(f"Invalid search bracket [{lower}, {upper}]")
    if not tolerance > 0.0:
        raise ValueError("tolerance must be > 0")
    if not tie_rtol >= 0.0:
        raise ValueError("tie_rtol must be >= 0")

    evaluations = 0

    def f(x: float) -> float:
        nonlocal evaluations
        y = float(objective(x))
        evaluations += 1
        if not np.isfinite(y):
            raise ValueError(f"Objective returned non-finite value {y} at {x}")
        logger.debug("golden section: f(%.8g) = %.10g", x, y)
        return y

    x1 = b - GOLDEN_RATIO_CONJUGATE * (b - a)
    x2 = a + GOLDEN_RATIO_CONJUGATE * (b - a)
    f1, f2 = f(x1), f(x2)

    iterations = 0
    while b - a > tolerance:
        if iterations >= max_iterations:
            raise ConvergenceError(
                f"Golden section search did not converge in {max_iterations} iterations: "
                f"bracket [{a}, {b}] wider than {tolerance}"
            )
        if checkpoint is not None:
            checkpoint(iterations)
        iterations += 1

        if abs(f1 - f2) <= tie_rtol * max(abs(f1), abs(f2), 1.0):
            a, b = x1, x2
            x1 = b - GOLDEN_RATIO_CONJUGATE * (b - a)
            x2 = a + GOLDEN_RATIO_CONJUGATE * (b - a)
            f1, f2 = f(x1), f(x2)
        elif f1 < f2:
            b, x2, f2 = x2, x1, f1
            x1 = b - GOLDEN_RATIO_CONJUGATE * (b - a)
            f1 = f(x1)
        else:
            a, x1, f1 = x1, x2, f2
            x2 = a + GOLDEN_RATIO_CONJUGATE * (b - a)
            f2 = f(x2)

    if f1 <= f2:
        best_point, best_value = x1, f1
    else:
        best_point, best_value = x2, f2
    return SearchResult(best_point, best_value, iterations, evaluations)
