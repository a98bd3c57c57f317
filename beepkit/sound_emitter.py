"""Frequency and divisor values for the PC speaker and the emitter interface.

The system clock generator runs at 1 193 182 Hz and its divisor is 16 bits
wide (1..65535), so the playable range is roughly 19 Hz to 1 193 182 Hz.
"""

from __future__ import annotations

import math
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

CLOCK_BASE_FREQUENCY_HZ = 1_193_182
DIVISOR_MIN = 1
DIVISOR_MAX = 0xFFFF
FREQUENCY_MIN_HZ = CLOCK_BASE_FREQUENCY_HZ // DIVISOR_MAX + 1
FREQUENCY_MAX_HZ = CLOCK_BASE_FREQUENCY_HZ


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


@dataclass(frozen=True)
class BeeperFrequency:
    """A frequency in Hz that the speaker can produce."""

    hz: int

    MIN: ClassVar[BeeperFrequency]
    MAX: ClassVar[BeeperFrequency]

    def __post_init__(self) -> None:
        hz = operator.index(self.hz)
        if not FREQUENCY_MIN_HZ <= hz <= FREQUENCY_MAX_HZ:
            raise ValueError(
                f"Frequency must be in the range of "
                f"{FREQUENCY_MIN_HZ}..{FREQUENCY_MAX_HZ} Hz, got {hz}."
            )
        object.__setattr__(self, "hz", hz)

    @classmethod
    def clamped(cls, hz: int) -> BeeperFrequency:
        """Clamp an integer frequency into the playable range."""
        return cls(_clamp(operator.index(hz), FREQUENCY_MIN_HZ, FREQUENCY_MAX_HZ))

    @classmethod
    def from_float(cls, hz: float) -> BeeperFrequency:
        """Round a float frequency (half away from zero) and clamp it."""
        if math.isnan(hz) or hz < 0.0:
            value = FREQUENCY_MIN_HZ
        elif hz > FREQUENCY_MAX_HZ:
            value = FREQUENCY_MAX_HZ
        else:
            value = math.floor(hz + 0.5)
        return cls.clamped(value)

    def to_divisor(self) -> BeeperDivisor:
        return BeeperDivisor.from_freq(self.hz)


BeeperFrequency.MIN = BeeperFrequency(FREQUENCY_MIN_HZ)
BeeperFrequency.MAX = BeeperFrequency(FREQUENCY_MAX_HZ)


@dataclass(frozen=True)
class BeeperDivisor:
    """A 16-bit clock divisor; zero is replaced by the minimum, 1."""

    value: int

    MIN: ClassVar[BeeperDivisor]
    MAX: ClassVar[BeeperDivisor]

    def __post_init__(self) -> None:
        value = operator.index(self.value)
        if not 0 <= value <= DIVISOR_MAX:
            raise ValueError(f"Divisor must be in the range of 0..{DIVISOR_MAX}, got {value}.")
        object.__setattr__(self, "value", value or DIVISOR_MIN)

    @classmethod
    def from_freq(cls, hz: int) -> BeeperDivisor:
        """Divisor for a frequency, clamped into the playable range first."""
        freq = BeeperFrequency.clamped(hz)
        return cls(CLOCK_BASE_FREQUENCY_HZ // freq.hz)


BeeperDivisor.MIN = BeeperDivisor(DIVISOR_MIN)
BeeperDivisor.MAX = BeeperDivisor(DIVISOR_MAX)


class SoundEmitter(ABC):
    """Something that drives the PC speaker."""

    @abstractmethod
    def prepare(self) -> None:
        """Set up the beeper regime; raises if that is not possible."""

    @abstractmethod
    def play(self) -> None:
        """Start sounding."""

    @abstractmethod
    def mute(self) -> None:
        """Stop sounding."""

    @abstractmethod
    def set_divisor(self, divisor: BeeperDivisor) -> None:
        """Program the clock divisor."""

    def set_frequency(self, freq: BeeperFrequency) -> None:
        """Program the divisor that matches ``freq``."""
        self.set_divisor(freq.to_divisor())

    @abstractmethod
    def up(self) -> None:
        """Raise the speaker membrane."""

    @abstractmethod
    def down(self) -> None:
        """Lower the speaker membrane."""