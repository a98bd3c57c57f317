"""PC speaker driven by direct read-modify-write access to the I/O ports."""

from __future__ import annotations

from beepkit.beeper import (
    PIT_CHANNEL2_PORT,
    PIT_CONTROL_PORT,
    PIT_SQUARE_WAVE_MODE,
    SPEAKER_CONTROL_PORT,
    PortAccessor,
)
from beepkit.sound_emitter import BeeperDivisor, BeeperFrequency, SoundEmitter

IOPL_BITMASK = 0x3000

_GATE_AND_DATA = 0b11
_DATA = 0b10


class PortBeeper(SoundEmitter):
    """Speaker control that re-reads the control port before every change.

    Port failures raised by the accessor propagate to the caller.
    """

    def __init__(self, ports: PortAccessor) -> None:
        self._ports = ports

    def _update(self, set_bits: int = 0, clear_bits: int = 0) -> None:
        value = self._ports.read_byte(SPEAKER_CONTROL_PORT)
        self._ports.write_byte(SPEAKER_CONTROL_PORT, (value | set_bits) & ~clear_bits & 0xFF)

    def prepare(self) -> None:
        self._ports.write_byte(PIT_CONTROL_PORT, PIT_SQUARE_WAVE_MODE)

    def play(self) -> None:
        self._update(set_bits=_GATE_AND_DATA)

    def mute(self) -> None:
        self._update(clear_bits=_GATE_AND_DATA)

    def set_divisor(self, divisor: BeeperDivisor) -> None:
        self._ports.write_byte(PIT_CHANNEL2_PORT, divisor.value & 0xFF)
        self._ports.write_byte(PIT_CHANNEL2_PORT, divisor.value >> 8)

    def set_frequency(self, freq: BeeperFrequency) -> None:
        self.set_divisor(freq.to_divisor())

    def up(self) -> None:
        self._update(set_bits=_DATA)

    def down(self) -> None:
        self._update(clear_bits=_DATA)

    @staticmethod
    def is_iopl_raised(eflags: int) -> bool:
        """Whether the I/O privilege level bits of ``eflags`` are non-zero."""
        return (eflags & IOPL_BITMASK) != 0