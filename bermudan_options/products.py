"""Monte Carlo products: Bermudan option (primal and dual methods) and European option."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Union

import numpy as np

from .base_model import AssetModelMonteCarloSimulation
from .config import BermudanConfig
from .exercise import DualExercise, ExerciseMethod, ExerciseStrategy, strategy_for
from .induction import InductionResult, backward_induction
from .optimizer import golden_section_search
from .random_variable import RandomVariable
from .schedule import ExerciseSchedule

logger = logging.getLogger(__name__)


class MonteCarloProduct(Protocol):
    def get_value(self, evaluation_time: float, model: AssetModelMonteCarloSimulation) -> RandomVariable: ...


@dataclass(frozen=True, slots=True)
class ValuationResult:
    """Outcome of one valuation call.

    ``value`` is the per-path value at the evaluation time, ``exercise_time`` the
    realized exercise date per path (``last date + 1`` if never exercised) and
    ``lam`` the martingale scale used (0 for the primal method).
    """

    value: RandomVariable
    exercise_time: RandomVariable
    lam: float = 0.0

    @property
    def average(self) -> float:
        return self.value.average()


class BermudanOption:
    """
    Bermudan option paying ``N(i) * (S(T(i)) - K(i))`` at ``T(i)`` when exercised at ``T(i)``.

    Two exercise methods are available:

    - ``ESTIMATE_COND_EXPECTATION``: the exercise boundary comes from a regression
      estimate of the continuation value. Apart from a possible foresight bias from
      the Monte Carlo error this is a lower bound.
    - ``UPPER_BOUND_METHOD``: the dual method. A martingale ``lam * (S/N - E[S/N])``
      is subtracted from the payoff and ``lam`` is chosen in ``[-1, 1]`` to minimise
      the resulting value, which is an upper bound.

    Usage:
        option = BermudanOption([1.0, 2.0], [1.0, 1.0], [100.0, 100.0])
        result = option.valuation(0.0, model)
        price, exercise_time = result.average, result.exercise_time
    """

    def __init__(
        self,
        exercise_dates: Sequence[float],
        notionals: Sequence[float],
        strikes: Sequence[float],
        exercise_method: Union[ExerciseMethod, str] = ExerciseMethod.ESTIMATE_COND_EXPECTATION,
        *,
        config: Optional[BermudanConfig] = None,
    ):
        self._schedule = ExerciseSchedule(exercise_dates, notionals, strikes)
        self._exercise_method = ExerciseMethod(exercise_method)
        self._config = config if config is not None else BermudanConfig()
        self._basis = self._config.make_basis()

    @property
    def config(self) -> BermudanConfig:
        return self._config

    @property
    def schedule(self) -> ExerciseSchedule:
        return self._schedule

    @property
    def exercise_method(self) -> ExerciseMethod:
        return self._exercise_method

    @property
    def exercise_dates(self) -> np.ndarray:
        return np.array(self._schedule.dates)

    @property
    def notionals(self) -> np.ndarray:
        return np.array(self._schedule.notionals)

    @property
    def strikes(self) -> np.ndarray:
        return np.array(self._schedule.strikes)

    def _induction(
        self,
        evaluation_time: float,
        model: AssetModelMonteCarloSimulation,
        strategy: ExerciseStrategy,
        checkpoint: Optional[Callable[[], None]],
    ) -> InductionResult:
        return backward_induction(
            self._schedule,
            model,
            evaluation_time,
            strategy,
            basis=self._basis,
            intrinsic_value_as_basis=self._config.intrinsic_value_as_basis,
            checkpoint=None if checkpoint is None else (lambda _index: checkpoint()),
        )

    def optimal_lambda(
        self,
        evaluation_time: float,
        model: AssetModelMonteCarloSimulation,
        *,
        checkpoint: Optional[Callable[[], None]] = None,
    ) -> float:
        """Martingale scale minimising the average dual value (one full induction per trial)."""

        def objective(lam: float) -> float:
            return self._induction(evaluation_time, model, DualExercise(lam), checkpoint).value.average()

        lo, hi = self._config.lambda_bounds
        search = golden_section_search(
            objective,
            lo,
            hi,
            tolerance=self._config.search_tolerance,
            max_iterations=self._config.max_search_iterations,
            checkpoint=None if checkpoint is None else (lambda _iteration: checkpoint()),
        )
        logger.info(
            "dual calibration: lambda*=%.6f value=%.8g (%d iterations, %d valuations)",
            search.best_point,
            search.best_value,
            search.iterations,
            search.evaluations,
        )
        return search.best_point

    def valuation(
        self,
        evaluation_time: float,
        model: AssetModelMonteCarloSimulation,
        *,
        checkpoint: Optional[Callable[[], None]] = None,
    ) -> ValuationResult:
        """Value the option at ``evaluation_time``.

        ``checkpoint`` is called between exercise dates and between calibration
        iterations; raising from it aborts the valuation.
        """
        if self._exercise_method is ExerciseMethod.UPPER_BOUND_METHOD:
            lam = self.optimal_lambda(evaluation_time, model, checkpoint=checkpoint)
        else:
            lam = 0.0
        strategy = strategy_for(self._exercise_method, lam)
        result = self._induction(evaluation_time, model, strategy, checkpoint)
        return ValuationResult(result.value, result.exercise_time, lam)

    def get_value(self, evaluation_time: float, model: AssetModelMonteCarloSimulation) -> RandomVariable:
        return self.valuation(evaluation_time, model).value

    def get_value_average(self, evaluation_time: float, model: AssetModelMonteCarloSimulation) -> float:
        return self.get_value(evaluation_time, model).average()

    def __repr__(self) -> str:
        return (
            f"BermudanOption(exercise_dates={list(self._schedule.dates)}, "
            f"exercise_method={self._exercise_method.name})"
        )


class EuropeanOption:
    """European call paying ``N * max(S(T) - K, 0)`` at ``T``."""

    def __init__(self, maturity: float, strike: float, notional: float = 1.0):
        self.maturity = float(maturity)
        self.strike = float(strike)
        self.notional = float(notional)

    def get_value(self, evaluation_time: float, model: AssetModelMonteCarloSimulation) -> RandomVariable:
        underlying = model.get_asset_value(self.maturity, 0)
        numeraire = model.get_numeraire(self.maturity)
        weights = model.get_monte_carlo_weights(self.maturity)

        values = ((underlying - self.strike) * self.notional / numeraire * weights).floor(0.0)

        numeraire_at_evaluation = model.get_numeraire(evaluation_time)
        weights_at_evaluation = model.get_monte_carlo_weights(evaluation_time)
        return values * numeraire_at_evaluation / weights_at_evaluation

    def get_value_average(self, evaluation_time: float, model: AssetModelMonteCarloSimulation) -> float:
        return self.get_value(evaluation_time, model).average()
