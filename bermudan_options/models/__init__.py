"""Model exports."""

from .gbm import BlackScholesMonteCarloModel
from .heston import HestonMonteCarloModel
from .deterministic import DeterministicModel

__all__ = [
    "BlackScholesMonteCarloModel",
    "HestonMonteCarloModel",
    "DeterministicModel",
]
