import os
import sys

import pytest


# Put the repo root on sys.path so tests import the local `bermudan_options` package
# without an installed copy.
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from bermudan_options import BlackScholesMonteCarloModel  # noqa: E402

PUT_DATES = [0.25, 0.5, 0.75, 1.0]


@pytest.fixture(scope="session")
def bs_model():
    """Black-Scholes paths on the quarterly exercise grid used by the Bermudan put tests."""
    return BlackScholesMonteCarloModel(100.0, 0.05, 0.25, times=PUT_DATES, n_paths=20_000, seed=2024, antithetic=True)
