"""Exercise-decision strategies for the backward induction.

Each strategy turns the state at one exercise date into a triple
``(value, underlying, trigger)``: the (possibly adjusted) value if not exercised,
the value received on exercise, and a trigger whose negative sign means
"exercise". The comparison itself is done by the induction engine and is the
same for every strategy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from .random_variable import RandomVariable
from .regression import ConditionalExpectationRegression


class ExerciseMethod(Enum):
    ESTIMATE_COND_EXPECTATION = "estimate_cond_expectation"
    UPPER_BOUND_METHOD = "upper_bound_method"


@dataclass(frozen=True, slots=True)
class PrimalExercise:
    """Regression (Longstaff-Schwartz type) policy, gives a lower bound.

    The continuation value is estimated by regressing the realized value of the
    later dates on the basis functions; only the decision uses the estimate, the
    realized value is what is kept when continuing.
    """

    def exercise_trigger(
        self,
        value: RandomVariable,
        payoff: RandomVariable,
        basis_functions: List[RandomVariable],
        relative_underlying: RandomVariable,
        is_last_date: bool,
    ) -> Tuple[RandomVariable, RandomVariable, RandomVariable]:
        estimator = ConditionalExpectationRegression(basis_functions)
        continuation = value.conditional_expectation(estimator)
        return value, payoff, continuation - payoff


@dataclass(frozen=True, slots=True)
class DualExercise:
    """Martingale-corrected policy of the dual (upper bound) method.

    The martingale is ``lam * (S/N - E[S/N])`` at each exercise date, i.e. the
    numeraire-relative underlying shifted to start at zero and scaled by ``lam``.
    """

    lam: float = 0.0

    def exercise_trigger(
        self,
        value: RandomVariable,
        payoff: RandomVariable,
        basis_functions: List[RandomVariable],
        relative_underlying: RandomVariable,
        is_last_date: bool,
    ) -> Tuple[RandomVariable, RandomVariable, RandomVariable]:
        martingale = (relative_underlying - relative_underlying.average()) * float(self.lam)
        if is_last_date:
            # Anchor: value of never exercising is 0 - M(T_n).
            value = value - martingale
        underlying = payoff - martingale
        return value, underlying, value - underlying


ExerciseStrategy = Union[PrimalExercise, DualExercise]


def strategy_for(method: ExerciseMethod, lam: float = 0.0) -> ExerciseStrategy:
    """Map an :class:`ExerciseMethod` (and lambda for the dual method) to a strategy."""
    if method is ExerciseMethod.ESTIMATE_COND_EXPECTATION:
        return PrimalExercise()
    if method is ExerciseMethod.UPPER_BOUND_METHOD:
        return DualExercise(lam)
    raise ValueError(f"Unsupported exercise method: {method!r}")
