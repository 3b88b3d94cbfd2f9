"""Small runnable demo for the Bermudan option bounds."""

import logging

import numpy as np
from bermudan_options import BermudanOption, BlackScholesMonteCarloModel, EuropeanOption, ExerciseMethod
from bermudan_options.models import HestonMonteCarloModel


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Spot, rate and exercise schedule
    S0 = 100.0
    r = 0.05
    dates = [0.25, 0.5, 0.75, 1.0]
    notionals = [-1.0] * len(dates)  # N * (S - K) with N = -1 pays K - S: a Bermudan put
    strikes = [100.0] * len(dates)

    gbm = BlackScholesMonteCarloModel(S0, r, 0.25, times=dates, n_paths=20_000, seed=42, antithetic=True)
    heston = HestonMonteCarloModel(S0, 0.0625, r, 2.0, 0.0625, 0.4, -0.6, times=dates, n_paths=20_000, seed=42)

    primal = BermudanOption(dates, notionals, strikes)
    dual = BermudanOption(dates, notionals, strikes, ExerciseMethod.UPPER_BOUND_METHOD)

    for name, model in (("Black-Scholes", gbm), ("Heston", heston)):
        lower = primal.valuation(0.0, model)
        upper = dual.valuation(0.0, model)
        print(f"{name} Bermudan put lower bound: {lower.average:.4f} +/- {lower.value.standard_error():.4f}")
        print(f"{name} Bermudan put upper bound: {upper.average:.4f} (lambda* = {upper.lam:.4f})")
        print(f"{name} mid estimate: {0.5 * (lower.average + upper.average):.4f}")

        dates_hit, counts = np.unique(lower.exercise_time.realizations(), return_counts=True)
        print(f"{name} exercise dates (sentinel {primal.schedule.never_exercised_time}):", dict(zip(dates_hit, counts)))

    # Single exercise date: Bermudan equals European
    euro = EuropeanOption(1.0, 100.0).get_value_average(0.0, gbm)
    single = BermudanOption([1.0], [1.0], [100.0]).get_value_average(0.0, gbm)
    print("European call:", euro, " single-date Bermudan call:", single)


if __name__ == "__main__":
    main()
