"""Exercise schedule of a Bermudan option."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Tuple

import numpy as np

from .errors import InvalidScheduleError


class ExerciseDate(NamedTuple):
    index: int
    date: float
    notional: float
    strike: float


@dataclass(frozen=True, slots=True)
class ExerciseSchedule:
    """Exercise opportunities of a Bermudan option.

    Exercising at ``dates[i]`` pays ``notionals[i] * (S(dates[i]) - strikes[i])``.

    The three sequences are stored as tuples and validated on construction:
    equal non-zero length, finite entries, strictly increasing dates.
    """

    dates: Tuple[float, ...]
    notionals: Tuple[float, ...]
    strikes: Tuple[float, ...]

    def __post_init__(self) -> None:
        # Accept any float sequence (lists, numpy arrays); store immutable tuples.
        for name in ("dates", "notionals", "strikes"):
            object.__setattr__(self, name, tuple(float(x) for x in getattr(self, name)))

        n = len(self.dates)
        if n == 0:
            raise InvalidScheduleError("Exercise schedule must contain at least one date")
        if len(self.notionals) != n or len(self.strikes) != n:
            raise InvalidScheduleError(
                f"Schedule length mismatch: {n} dates, {len(self.notionals)} notionals, {len(self.strikes)} strikes"
            )
        for name, seq in (("dates", self.dates), ("notionals", self.notionals), ("strikes", self.strikes)):
            if not np.all(np.isfinite(seq)):
                raise InvalidScheduleError(f"Exercise schedule {name} must be finite")
        if n > 1 and not np.all(np.diff(self.dates) > 0.0):
            raise InvalidScheduleError(f"Exercise dates must be strictly increasing: {self.dates}")

    def __len__(self) -> int:
        return len(self.dates)

    def __iter__(self) -> Iterator[ExerciseDate]:
        for i, (t, n, k) in enumerate(zip(self.dates, self.notionals, self.strikes)):
            yield ExerciseDate(i, t, n, k)

    def __getitem__(self, index: int) -> ExerciseDate:
        i = range(len(self))[index]
        return ExerciseDate(i, self.dates[i], self.notionals[i], self.strikes[i])

    @property
    def last_date(self) -> float:
        return self.dates[-1]

    @property
    def never_exercised_time(self) -> float:
        """Sentinel recorded for paths that are never exercised."""
        return self.last_date + 1.0
