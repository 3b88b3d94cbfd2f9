"""Bermudan option valuation by Monte Carlo: regression lower bound and dual upper bound."""

from .base_model import AssetModelMonteCarloSimulation, MonteCarloAssetModel
from .basis import BinningBasis, PolynomialBasis
from .config import BermudanConfig
from .errors import CalculationError, ConvergenceError, InvalidScheduleError
from .exercise import DualExercise, ExerciseMethod, PrimalExercise, strategy_for
from .induction import InductionResult, backward_induction
from .models import BlackScholesMonteCarloModel, DeterministicModel, HestonMonteCarloModel
from .optimizer import SearchResult, golden_section_search
from .products import BermudanOption, EuropeanOption, MonteCarloProduct, ValuationResult
from .random_variable import RandomVariable
from .regression import ConditionalExpectationRegression
from .schedule import ExerciseDate, ExerciseSchedule

__all__ = [
    # Random variables and regression
    "RandomVariable",
    "ConditionalExpectationRegression",
    "PolynomialBasis",
    "BinningBasis",
    # Models
    "AssetModelMonteCarloSimulation",
    "MonteCarloAssetModel",
    "BlackScholesMonteCarloModel",
    "HestonMonteCarloModel",
    "DeterministicModel",
    # Products
    "MonteCarloProduct",
    "BermudanOption",
    "EuropeanOption",
    "ValuationResult",
    "BermudanConfig",
    "ExerciseSchedule",
    "ExerciseDate",
    # Induction and calibration
    "ExerciseMethod",
    "PrimalExercise",
    "DualExercise",
    "strategy_for",
    "InductionResult",
    "backward_induction",
    "SearchResult",
    "golden_section_search",
    # Errors
    "CalculationError",
    "InvalidScheduleError",
    "ConvergenceError",
]
