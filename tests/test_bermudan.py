"""Tests for the Bermudan option: backward induction, primal and dual methods."""

import math

import numpy as np
import pytest
from scipy.stats import norm

from bermudan_options import (
    BermudanConfig,
    BermudanOption,
    BlackScholesMonteCarloModel,
    CalculationError,
    DeterministicModel,
    DualExercise,
    EuropeanOption,
    ExerciseMethod,
    ExerciseSchedule,
    MonteCarloAssetModel,
    PolynomialBasis,
    PrimalExercise,
    RandomVariable,
    backward_induction,
)


def _bs_price(S0, K, r, vol, T, *, is_call):
    d1 = (math.log(S0 / K) + (r + 0.5 * vol * vol) * T) / (vol * math.sqrt(T))
    d2 = d1 - vol * math.sqrt(T)
    if is_call:
        return S0 * norm.cdf(d1) - K * math.exp(-r * T) * norm.cdf(d2)
    return K * math.exp(-r * T) * norm.cdf(-d2) - S0 * norm.cdf(-d1)


def _put(method=ExerciseMethod.ESTIMATE_COND_EXPECTATION, **config):
    # N * (S - K) with N = -1 is the put payoff K - S.
    dates = [0.25, 0.5, 0.75, 1.0]
    return BermudanOption(dates, [-1.0] * 4, [100.0] * 4, method, config=BermudanConfig(**config))


def test_flat_model_continues_on_tie_and_values_intrinsic():
    model = DeterministicModel(110.0, times=[1.0, 2.0], r=0.0, n_paths=50)
    option = BermudanOption([1.0, 2.0], [1.0, 1.0], [100.0, 100.0])

    result = option.valuation(0.0, model)

    assert result.average == pytest.approx(10.0)
    # Continuation estimate equals the payoff at t=1, so trigger == 0 and the path continues.
    assert np.all(result.exercise_time.realizations(model.number_of_paths) == 2.0)
    assert result.lam == 0.0


def test_flat_model_dual_calibrates_to_zero_lambda():
    model = DeterministicModel(110.0, times=[1.0, 2.0], r=0.0, n_paths=50)
    option = BermudanOption([1.0, 2.0], [1.0, 1.0], [100.0, 100.0], ExerciseMethod.UPPER_BOUND_METHOD)

    result = option.valuation(0.0, model)

    assert result.lam == pytest.approx(0.0, abs=1e-3)
    assert result.average == pytest.approx(10.0)
    assert np.all(result.exercise_time.realizations(model.number_of_paths) == 2.0)


class _FlatPathModel(MonteCarloAssetModel):
    """Asset constant at 110, stored as one value per path."""

    def _simulate(self):
        return np.full((self.number_of_paths, self.time_discretization.size), 110.0)


@pytest.mark.parametrize("n_paths", [50, 1000, 10007])
@pytest.mark.parametrize(
    "config",
    [{}, {"basis": "centered"}, {"basis": "binning"}, {"intrinsic_value_as_basis": True}],
)
def test_per_path_flat_model_continues_on_tie(n_paths, config):
    model = _FlatPathModel(times=[1.0, 2.0], r=0.0, n_paths=n_paths)
    option = BermudanOption([1.0, 2.0], [1.0, 1.0], [100.0, 100.0], config=BermudanConfig(**config))

    result = option.valuation(0.0, model)

    assert result.average == pytest.approx(10.0)
    assert np.all(result.exercise_time.realizations() == 2.0)


def test_zero_volatility_black_scholes_continues_on_tie():
    model = BlackScholesMonteCarloModel(110.0, 0.0, 0.0, times=[1.0, 2.0], n_paths=1000)
    result = BermudanOption([1.0, 2.0], [1.0, 1.0], [100.0, 100.0]).valuation(0.0, model)
    assert result.average == pytest.approx(10.0)
    assert np.all(result.exercise_time.realizations() == 2.0)


@pytest.mark.parametrize(
    "model",
    [
        BlackScholesMonteCarloModel(110.0, 0.0, 0.0, times=[1.0, 2.0], n_paths=1000),
        _FlatPathModel(times=[1.0, 2.0], r=0.0, n_paths=1000),
    ],
    ids=["zero-vol-bs", "flat-paths"],
)
def test_zero_variance_dual_calibrates_to_zero_lambda(model):
    option = BermudanOption([1.0, 2.0], [1.0, 1.0], [100.0, 100.0], ExerciseMethod.UPPER_BOUND_METHOD)
    result = option.valuation(0.0, model)
    assert result.lam == pytest.approx(0.0, abs=1e-3)
    assert result.average == pytest.approx(10.0)


def test_out_of_the_money_flat_model_never_exercises():
    model = DeterministicModel(90.0, times=[1.0, 2.0], n_paths=5)
    result = BermudanOption([1.0, 2.0], [1.0, 1.0], [100.0, 100.0]).valuation(0.0, model)
    assert result.average == 0.0
    assert np.all(result.exercise_time.realizations(5) == 3.0)


def test_single_date_reduces_to_european():
    model = BlackScholesMonteCarloModel(100.0, 0.03, 0.2, times=[1.0], n_paths=50_000, seed=9, antithetic=True)
    bermudan = BermudanOption([1.0], [1.0], [95.0]).get_value(0.0, model)
    european = EuropeanOption(1.0, 95.0).get_value(0.0, model)

    np.testing.assert_allclose(bermudan.realizations(), european.realizations(), rtol=0, atol=1e-12)

    closed_form = _bs_price(100.0, 95.0, 0.03, 0.2, 1.0, is_call=True)
    assert abs(bermudan.average() - closed_form) < 4.0 * bermudan.standard_error()


def test_dual_bound_dominates_primal_bound(bs_model):
    primal = _put().valuation(0.0, bs_model)
    dual = _put(ExerciseMethod.UPPER_BOUND_METHOD).valuation(0.0, bs_model)
    european = _bs_price(100.0, 100.0, 0.05, 0.25, 1.0, is_call=False)

    tol = 3.0 * primal.value.standard_error()
    assert -1.0 <= dual.lam <= 1.0
    assert dual.average + tol >= primal.average
    # Early exercise premium of the put is positive.
    assert primal.average + tol >= european
    # The calibrated martingale does not do worse than no correction at all.
    uncorrected = backward_induction(_put().schedule, bs_model, 0.0, DualExercise(0.0)).value.average()
    assert dual.average <= uncorrected + 1e-2


def test_exercise_times_are_dates_or_sentinel(bs_model):
    option = _put()
    result = option.valuation(0.0, bs_model)
    allowed = set(option.schedule.dates) | {option.schedule.never_exercised_time}
    assert set(np.unique(result.exercise_time.realizations())) <= allowed

    # Paths never exercised are worth zero.
    ex = result.exercise_time.realizations()
    values = result.value.realizations()
    assert np.all(values[ex == option.schedule.never_exercised_time] == 0.0)
    assert np.any(ex < option.schedule.never_exercised_time)


def test_backward_steps_only_move_exercise_earlier(bs_model):
    dates = [0.25, 0.5, 0.75, 1.0]
    full = ExerciseSchedule(dates, [-1.0] * 4, [100.0] * 4)
    full_ex = backward_induction(full, bs_model, 0.0, PrimalExercise()).exercise_time.realizations()
    for start in range(1, 4):
        tail = ExerciseSchedule(dates[start:], [-1.0] * (4 - start), [100.0] * (4 - start))
        tail_ex = backward_induction(tail, bs_model, 0.0, PrimalExercise()).exercise_time.realizations()
        # The tail recursion uses its own sentinel; map it to the full schedule's.
        tail_ex = np.where(tail_ex == tail.never_exercised_time, full.never_exercised_time, tail_ex)
        assert np.all(full_ex <= tail_ex)


def test_order_zero_continuation_is_path_independent():
    rng = np.random.default_rng(0)
    underlying = RandomVariable(rng.lognormal(4.6, 0.2, size=1_000))
    value = RandomVariable(rng.exponential(5.0, size=1_000))
    payoff = (underlying - 100.0).floor(0.0)

    _, _, trigger = PrimalExercise().exercise_trigger(
        value, payoff, PolynomialBasis(order=0)(underlying), underlying, False
    )
    continuation = (trigger + payoff).realizations()
    np.testing.assert_allclose(continuation, value.average())


def test_valuation_is_repeatable_and_rebases_to_evaluation_time(bs_model):
    option = _put()
    first = option.valuation(0.0, bs_model)
    second = option.valuation(0.0, bs_model)
    assert np.array_equal(first.value.realizations(), second.value.realizations())
    assert np.array_equal(first.exercise_time.realizations(), second.exercise_time.realizations())

    later = option.get_value_average(0.5, bs_model)
    assert later == pytest.approx(first.average * math.exp(0.05 * 0.5), rel=1e-12)


@pytest.mark.parametrize(
    "config",
    [
        {"intrinsic_value_as_basis": True},
        {"basis": "centered"},
        {"basis": "binning", "number_of_bins": 16},
        {"regression_order": 2},
    ],
)
def test_alternative_bases_give_similar_lower_bounds(bs_model, config):
    reference = _put().get_value_average(0.0, bs_model)
    alternative = _put(**config).get_value_average(0.0, bs_model)
    assert abs(alternative - reference) < 0.3


def test_missing_exercise_date_in_model_is_a_calculation_error():
    model = BlackScholesMonteCarloModel(100.0, 0.0, 0.2, times=[1.0], n_paths=100)
    option = BermudanOption([1.0, 1.5], [1.0, 1.0], [100.0, 100.0])
    with pytest.raises(CalculationError):
        option.get_value(0.0, model)


class _BrokenNumeraireModel(DeterministicModel):
    def get_numeraire(self, time):
        raise KeyError(time)


def test_model_failures_are_wrapped():
    model = _BrokenNumeraireModel(110.0, times=[1.0])
    with pytest.raises(CalculationError) as excinfo:
        BermudanOption([1.0], [1.0], [100.0]).get_value(0.0, model)
    assert isinstance(excinfo.value.__cause__, KeyError)


class _Abort(Exception):
    pass


def test_checkpoint_is_called_per_exercise_date_and_can_abort(bs_model):
    calls = []
    _put().valuation(0.0, bs_model, checkpoint=lambda: calls.append(1))
    assert len(calls) == 4

    def stop():
        raise _Abort

    with pytest.raises(_Abort):
        _put(ExerciseMethod.UPPER_BOUND_METHOD).valuation(0.0, bs_model, checkpoint=stop)


def test_method_can_be_given_by_name():
    option = BermudanOption([1.0], [1.0], [100.0], "upper_bound_method")
    assert option.exercise_method is ExerciseMethod.UPPER_BOUND_METHOD
    with pytest.raises(ValueError):
        BermudanOption([1.0], [1.0], [100.0], "lower_bound")


def test_config_is_read_only():
    config = BermudanConfig(intrinsic_value_as_basis=True)
    option = BermudanOption([1.0], [1.0], [100.0], config=config)
    with pytest.raises(AttributeError):
        option.config = BermudanConfig()
    assert option.config is config


@pytest.mark.parametrize("strategy", [PrimalExercise(), DualExercise(0.5)])
def test_strategies_expose_exercise_trigger(strategy):
    underlying = RandomVariable(np.linspace(90.0, 110.0, 11))
    payoff = (underlying - 100.0).floor(0.0)
    value, exercised, trigger = strategy.exercise_trigger(
        RandomVariable.constant(0.0), payoff, PolynomialBasis()(underlying), underlying, True
    )
    np.testing.assert_allclose(trigger.realizations(11), (value - exercised).realizations(11))
