"""Exception types raised by the Bermudan valuation code."""

from __future__ import annotations


class CalculationError(RuntimeError):
    """A model quantity required by a valuation could not be produced."""


class InvalidScheduleError(ValueError):
    """Exercise schedule arrays are inconsistent (lengths, ordering, NaNs)."""


class ConvergenceError(RuntimeError):
    """A bounded search did not shrink its bracket within the iteration limit."""
