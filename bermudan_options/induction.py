"""Backward induction over the exercise dates of a Bermudan option.

Exercise dates are processed from the last to the first. The running ``value``
holds, per path, the numeraire-relative and weighted value of the option given
that it has not been exercised before the current date. The exercise decision at
a date must not look at the path's own entry in ``value`` (perfect foresight);
the strategy supplies a trigger built either from a regression estimate (primal
method) or from a martingale-corrected payoff (dual method).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from .base_model import AssetModelMonteCarloSimulation
from .basis import PolynomialBasis
from .errors import CalculationError
from .exercise import ExerciseStrategy
from .random_variable import RandomVariable
from .schedule import ExerciseSchedule

logger = logging.getLogger(__name__)

BasisGenerator = Callable[[RandomVariable], List[RandomVariable]]


@dataclass(frozen=True, slots=True)
class InductionResult:
    """Value at the evaluation time and the realized exercise date of every path."""

    value: RandomVariable
    exercise_time: RandomVariable


def _fetch(getter: Callable[..., RandomVariable], *args) -> RandomVariable:
    try:
        return getter(*args)
    except CalculationError:
        raise
    except Exception as exc:
        raise CalculationError(f"Model evaluation failed in {getattr(getter, '__name__', getter)}{args}: {exc}") from exc


def backward_induction(
    schedule: ExerciseSchedule,
    model: AssetModelMonteCarloSimulation,
    evaluation_time: float,
    strategy: ExerciseStrategy,
    *,
    basis: Optional[BasisGenerator] = None,
    intrinsic_value_as_basis: bool = False,
    checkpoint: Optional[Callable[[int], None]] = None,
) -> InductionResult:
    """Run the exercise-date recursion once and rebase the value to ``evaluation_time``.

    ``checkpoint`` is called with the exercise-date index before each date is
    processed; raising from it aborts the valuation.
    """
    if basis is None:
        basis = PolynomialBasis()

    # Value of never exercising is zero; the sentinel date marks "not exercised".
    value = model.get_random_variable_for_constant(0.0)
    exercise_time = model.get_random_variable_for_constant(schedule.never_exercised_time)
    last_index = len(schedule) - 1

    for exercise_date in reversed(list(schedule)):
        if checkpoint is not None:
            checkpoint(exercise_date.index)

        underlying = _fetch(model.get_asset_value, exercise_date.date, 0)
        numeraire = _fetch(model.get_numeraire, exercise_date.date)
        weights = _fetch(model.get_monte_carlo_weights, exercise_date.date)

        # Exercise value in the same numeraire-relative, weighted units as `value`.
        payoff = (underlying - exercise_date.strike) * exercise_date.notional / numeraire * weights

        if intrinsic_value_as_basis:
            intrinsic = ((underlying - exercise_date.strike) * exercise_date.notional).floor(0.0)
            basis_functions = basis(intrinsic)
        else:
            basis_functions = basis(underlying)

        value, exercised, trigger = strategy.exercise_trigger(
            value,
            payoff,
            basis_functions,
            underlying / numeraire,
            exercise_date.index == last_index,
        )

        # trigger >= 0: continue (keep value), trigger < 0: exercise.
        value = RandomVariable.select(trigger, value, exercised)
        exercise_time = RandomVariable.select(trigger, exercise_time, exercise_date.date)

        if logger.isEnabledFor(logging.DEBUG):
            n_exercised = int(np.count_nonzero(trigger.realizations(model.number_of_paths) < 0.0))
            logger.debug(
                "exercise date %d (t=%g): %d of %d paths exercise",
                exercise_date.index,
                exercise_date.date,
                n_exercised,
                model.number_of_paths,
            )

    # `value` is numeraire relative and weighted; convert to evaluation-time units.
    numeraire_at_evaluation = _fetch(model.get_numeraire, evaluation_time)
    weights_at_evaluation = _fetch(model.get_monte_carlo_weights, evaluation_time)
    value = value * numeraire_at_evaluation / weights_at_evaluation

    return InductionResult(value=value, exercise_time=exercise_time)
