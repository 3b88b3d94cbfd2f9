"""Path-wise random variables sampled on a Monte Carlo path set.

A :class:`RandomVariable` is either deterministic (a single float shared by every
path) or stochastic (a 1-D array with one realization per path). It carries the
filtration time at which it becomes known; ``-inf`` means "known at all times".

All operations return new objects; the underlying arrays are never mutated.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, Tuple, Union

import numpy as np

Operand = Union["RandomVariable", float, int]


def _freeze(values: np.ndarray) -> np.ndarray:
    values.setflags(write=False)
    return values


class RandomVariable:
    """Immutable per-path vector of floats with an associated filtration time."""

    __slots__ = ("_values", "_time")

    def __init__(self, value: Any, time: float = -np.inf):
        arr = np.asarray(value, dtype=float)
        if arr.ndim == 0:
            self._values: Union[float, np.ndarray] = float(arr)
        elif arr.ndim == 1:
            if arr.size == 0:
                raise ValueError("RandomVariable requires at least one realization")
            self._values = _freeze(np.array(arr, dtype=float, copy=True))
        else:
            raise ValueError(f"RandomVariable expects a scalar or 1-D array, got shape {arr.shape}")
        self._time = float(time)

    @classmethod
    def constant(cls, value: float, time: float = -np.inf) -> "RandomVariable":
        return cls(float(value), time)

    @classmethod
    def _wrap(cls, values: Union[float, np.ndarray], time: float) -> "RandomVariable":
        # Internal constructor that skips the defensive copy for freshly computed arrays.
        rv = cls.__new__(cls)
        if isinstance(values, np.ndarray) and values.ndim > 0:
            rv._values = _freeze(values)
        else:
            rv._values = float(values)
        rv._time = float(time)
        return rv

    # ------------------------------------------------------------------ #
    # properties
    # ------------------------------------------------------------------ #
    @property
    def time(self) -> float:
        return self._time

    @property
    def is_deterministic(self) -> bool:
        return not isinstance(self._values, np.ndarray)

    @property
    def size(self) -> int:
        if self.is_deterministic:
            return 1
        return int(self._values.size)

    def __len__(self) -> int:
        return self.size

    def at_time(self, time: float) -> "RandomVariable":
        """Same realizations, different filtration time."""
        return RandomVariable._wrap(self._values, time)

    def realizations(self, size: int | None = None) -> np.ndarray:
        """Read-only array of realizations.

        A deterministic value is broadcast to ``size`` entries (one entry if ``size`` is None).
        """
        if self.is_deterministic:
            n = 1 if size is None else int(size)
            return _freeze(np.full(n, self._values, dtype=float))
        if size is not None and int(size) != self._values.size:
            raise ValueError(f"Requested {size} realizations from a vector of {self._values.size}")
        return self._values

    # ------------------------------------------------------------------ #
    # arithmetic
    # ------------------------------------------------------------------ #
    @staticmethod
    def _unpack(other: Operand) -> Tuple[Union[float, np.ndarray], float]:
        if isinstance(other, RandomVariable):
            return other._values, other._time
        return float(other), -np.inf

    def _apply(self, other: Operand, op: Callable[[Any, Any], Any]) -> "RandomVariable":
        b, t_b = self._unpack(other)
        a = self._values
        if isinstance(a, np.ndarray) and isinstance(b, np.ndarray) and a.shape != b.shape:
            raise ValueError(f"Path count mismatch: {a.size} vs {b.size}")
        return RandomVariable._wrap(op(a, b), max(self._time, t_b))

    def __add__(self, other: Operand) -> "RandomVariable":
        return self._apply(other, np.add)

    def __radd__(self, other: Operand) -> "RandomVariable":
        return self._apply(other, lambda a, b: np.add(b, a))

    def __sub__(self, other: Operand) -> "RandomVariable":
        return self._apply(other, np.subtract)

    def __rsub__(self, other: Operand) -> "RandomVariable":
        return self._apply(other, lambda a, b: np.subtract(b, a))

    def __mul__(self, other: Operand) -> "RandomVariable":
        return self._apply(other, np.multiply)

    def __rmul__(self, other: Operand) -> "RandomVariable":
        return self._apply(other, lambda a, b: np.multiply(b, a))

    def __truediv__(self, other: Operand) -> "RandomVariable":
        return self._apply(other, np.divide)

    def __rtruediv__(self, other: Operand) -> "RandomVariable":
        return self._apply(other, lambda a, b: np.divide(b, a))

    def __neg__(self) -> "RandomVariable":
        return RandomVariable._wrap(np.negative(self._values), self._time)

    def floor(self, floor: float) -> "RandomVariable":
        """Path-wise ``max(x, floor)``."""
        return RandomVariable._wrap(np.maximum(self._values, float(floor)), self._time)

    def cap(self, cap: float) -> "RandomVariable":
        """Path-wise ``min(x, cap)``."""
        return RandomVariable._wrap(np.minimum(self._values, float(cap)), self._time)

    def pow(self, exponent: float) -> "RandomVariable":
        return RandomVariable._wrap(np.power(self._values, exponent), self._time)

    def abs(self) -> "RandomVariable":
        return RandomVariable._wrap(np.abs(self._values), self._time)

    def exp(self) -> "RandomVariable":
        return RandomVariable._wrap(np.exp(self._values), self._time)

    def log(self) -> "RandomVariable":
        return RandomVariable._wrap(np.log(self._values), self._time)

    def sqrt(self) -> "RandomVariable":
        return RandomVariable._wrap(np.sqrt(self._values), self._time)

    # ------------------------------------------------------------------ #
    # statistics
    # ------------------------------------------------------------------ #
    def average(self) -> float:
        if self.is_deterministic:
            return float(self._values)
        return float(np.mean(self._values))

    def variance(self) -> float:
        if self.is_deterministic:
            return 0.0
        return float(np.var(self._values))

    def standard_error(self) -> float:
        return float(np.sqrt(self.variance() / self.size))

    def min(self) -> float:
        return float(np.min(self._values))

    def max(self) -> float:
        return float(np.max(self._values))

    def histogram(self, bins: int | Sequence[float] = 10) -> Tuple[np.ndarray, np.ndarray]:
        """Counts and bin edges of the realizations (see ``numpy.histogram``)."""
        return np.histogram(self.realizations(), bins=bins)

    # ------------------------------------------------------------------ #
    # selection and conditioning
    # ------------------------------------------------------------------ #
    @staticmethod
    def select(trigger: Operand, when_non_negative: Operand, when_negative: Operand) -> "RandomVariable":
        """Path-wise ``when_non_negative if trigger >= 0 else when_negative``.

        ``trigger == 0`` picks ``when_non_negative``.
        """
        t_vals, t_time = RandomVariable._unpack(trigger)
        a_vals, a_time = RandomVariable._unpack(when_non_negative)
        b_vals, b_time = RandomVariable._unpack(when_negative)
        sizes = {v.size for v in (t_vals, a_vals, b_vals) if isinstance(v, np.ndarray)}
        if len(sizes) > 1:
            raise ValueError(f"Path count mismatch in select: {sorted(sizes)}")
        out = np.where(np.asarray(t_vals) >= 0.0, a_vals, b_vals)
        if out.ndim == 0:
            out = float(out)
        return RandomVariable._wrap(out, max(t_time, a_time, b_time))

    def barrier(self, trigger: Operand, when_non_negative: Operand, when_negative: Operand) -> "RandomVariable":
        return RandomVariable.select(trigger, when_non_negative, when_negative)

    def conditional_expectation(self, estimator: Any) -> "RandomVariable":
        """Delegate to an estimator exposing ``get_conditional_expectation``."""
        return estimator.get_conditional_expectation(self)

    def __repr__(self) -> str:
        if self.is_deterministic:
            return f"RandomVariable(time={self._time}, value={self._values})"
        return f"RandomVariable(time={self._time}, size={self.size}, mean={self.average():.6g})"
