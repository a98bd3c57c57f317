"""Busy-wait sleeping with nanosecond granularity on a tick counter."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

Clock = Callable[[], int]

US_IN_MSEC = 1_000
NS_IN_USEC = 1_000

DEFAULT_CORRECTION_WAIT_NS = 800
DEFAULT_WARMUP_COUNT = 10
DEFAULT_CORRECTION_COUNT = 30


def median(sorted_values: Sequence[int]) -> int:
    """Median of an already sorted sequence; the mean of the middle pair is floored."""
    if not sorted_values:
        raise ValueError("Cannot take the median of an empty sequence.")
    mid = len(sorted_values) // 2
    if len(sorted_values) % 2 == 0:
        return (sorted_values[mid - 1] + sorted_values[mid]) // 2
    return sorted_values[mid]


def filter_outliers(samples: Sequence[int]) -> list[int]:
    """Sort the samples and drop those far outside the interquartile range.

    The quartiles are the medians of the lower and upper halves (the middle
    element is left out when the count is odd); values further than three
    interquartile ranges from them are dropped.
    """
    ordered = sorted(samples)
    if len(ordered) < 2:
        raise ValueError("At least two samples are needed to filter outliers.")
    half = len(ordered) // 2
    quartile_1 = median(ordered[:half])
    quartile_3 = median(ordered[len(ordered) - half:])
    shift = (quartile_3 - quartile_1) * 3
    low, high = quartile_1 - shift, quartile_3 + shift
    return [value for value in ordered if low <= value <= high]


@dataclass
class NanoSleep:
    """Spins on ``clock`` until the requested number of nanoseconds has passed.

    ``clock`` returns a monotonically increasing tick count;
    ``ticks_per_microsecond`` says how fast it runs and ``correction_ticks``
    is subtracted from every wait to make up for the call overhead.
    """

    ticks_per_microsecond: int
    correction_ticks: int = 0
    clock: Clock = field(default=time.perf_counter_ns, repr=False, compare=False)

    @classmethod
    def calibrate(cls, calibration_msec: int, clock: Clock = time.perf_counter_ns) -> NanoSleep:
        """Measure the tick rate of ``clock`` over ``calibration_msec`` of wall time.

        Time-based measurement is too coarse for a meaningful correction, so
        the result has none.
        """
        if calibration_msec <= 0:
            raise ValueError("Calibration time must be a positive number of milliseconds.")
        deadline = time.monotonic_ns() + calibration_msec * US_IN_MSEC * NS_IN_USEC
        ticks_begin = clock()
        while time.monotonic_ns() < deadline:
            pass
        ticks_end = clock()
        ticks_per_usec = (ticks_end - ticks_begin) // (calibration_msec * US_IN_MSEC)
        return cls(ticks_per_usec, 0, clock)

    def calibrate_correction(
        self,
        wait_ns: int = DEFAULT_CORRECTION_WAIT_NS,
        warmup: int = DEFAULT_WARMUP_COUNT,
        count: int = DEFAULT_CORRECTION_COUNT,
    ) -> int:
        """Measure the overhead of a wait of ``wait_ns`` and store it as the correction.

        Returns the new correction in ticks.
        """
        if count < 2:
            raise ValueError("At least two measurements are needed for the correction.")
        self.correction_ticks = 0
        for _ in range(warmup):
            self.nano_sleep(wait_ns)

        deltas = []
        for _ in range(count):
            start = self.clock()
            self.nano_sleep(wait_ns)
            deltas.append(self.clock() - start)

        kept = filter_outliers(deltas)
        average = sum(kept) // len(kept)
        expected = wait_ns * self.ticks_per_microsecond // NS_IN_USEC
        self.correction_ticks = max(0, average - expected)
        return self.correction_ticks

    def nano_sleep(self, nanoseconds: int) -> None:
        """Spin for about ``nanoseconds``.

        Waits under 8 ns return at once; waits up to 12 ns cost a single clock
        read.
        """
        if nanoseconds < 8:
            return
        if nanoseconds <= 12:
            self.clock()
            return
        current = self.clock()
        end = current - self.correction_ticks + nanoseconds * self.ticks_per_microsecond // NS_IN_USEC
        while self.clock() < end:
            pass

    def ticks_in_nanosecond(self) -> float:
        return self.ticks_per_microsecond / NS_IN_USEC