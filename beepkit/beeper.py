"""PC speaker driven through an I/O port accessor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import suppress

from beepkit.sound_emitter import BeeperDivisor, BeeperFrequency, SoundEmitter

PIT_CHANNEL2_PORT = 0x42
PIT_CONTROL_PORT = 0x43
SPEAKER_CONTROL_PORT = 0x61
PIT_SQUARE_WAVE_MODE = 0xB6

_GATE_AND_DATA = 0b11
_DATA = 0b10


class PortAccessor(ABC):
    """Byte access to I/O ports. Failures are reported by raising ``OSError``."""

    @abstractmethod
    def read_byte(self, port: int) -> int:
        """Read one byte from ``port``."""

    @abstractmethod
    def write_byte(self, port: int, value: int) -> None:
        """Write one byte to ``port``."""


class BeeperError(Exception):
    """The beeper could not be prepared."""


class Beeper(SoundEmitter):
    """Speaker control through a :class:`PortAccessor`.

    Only :meth:`prepare` reports port failures; the other operations ignore
    failed writes.
    """

    def __init__(self, ports: PortAccessor) -> None:
        self._ports = ports
        self._control = 0

    def _write(self, port: int, value: int) -> None:
        with suppress(OSError):
            self._ports.write_byte(port, value & 0xFF)

    def prepare(self) -> None:
        try:
            self._ports.write_byte(PIT_CONTROL_PORT, PIT_SQUARE_WAVE_MODE)
        except OSError as err:
            raise BeeperError("Unable to set the beeper regime.") from err
        try:
            self._control = self._ports.read_byte(SPEAKER_CONTROL_PORT) & 0xFF
        except OSError as err:
            raise BeeperError("Unable to read the speaker control port.") from err

    def play(self) -> None:
        self._write(SPEAKER_CONTROL_PORT, self._control | _GATE_AND_DATA)

    def mute(self) -> None:
        self._write(SPEAKER_CONTROL_PORT, self._control & ~_GATE_AND_DATA)

    def set_divisor(self, divisor: BeeperDivisor) -> None:
        self._write(PIT_CHANNEL2_PORT, divisor.value & 0xFF)
        self._write(PIT_CHANNEL2_PORT, divisor.value >> 8)

    def set_frequency(self, freq: BeeperFrequency) -> None:
        self.set_divisor(freq.to_divisor())

    def up(self) -> None:
        self._write(SPEAKER_CONTROL_PORT, self._control | _DATA)

    def down(self) -> None:
        self._write(SPEAKER_CONTROL_PORT, self._control & ~_DATA)