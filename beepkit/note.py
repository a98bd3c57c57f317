"""Musical notes in twelve-tone equal temperament, tuned to A4 = 440 Hz."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

SEMITONE_COUNT = 12
MAX_OCTAVE = 255
MAX_SEMITONE = 255

_A4_FREQ_HZ = 440.0
_A4_SEMITONE = 4 * SEMITONE_COUNT + 9


class Shift(Enum):
    """Semitone shift of a note: none, sharp (diesis) or flat (bemolle)."""

    NONE = "none"
    DIESIS = "diesis"
    BEMOLLE = "bemolle"


class NoteName(Enum):
    """Note names within an octave, including enharmonic spellings."""

    C = ("C", 0, Shift.NONE)
    Cs = ("C", 1, Shift.DIESIS)
    Db = ("D", 1, Shift.BEMOLLE)
    D = ("D", 2, Shift.NONE)
    Ds = ("D", 3, Shift.DIESIS)
    Eb = ("E", 3, Shift.BEMOLLE)
    E = ("E", 4, Shift.NONE)
    F = ("F", 5, Shift.NONE)
    Fs = ("F", 6, Shift.DIESIS)
    Gb = ("G", 6, Shift.BEMOLLE)
    G = ("G", 7, Shift.NONE)
    Gs = ("G", 8, Shift.DIESIS)
    Ab = ("A", 8, Shift.BEMOLLE)
    A = ("A", 9, Shift.NONE)
    As = ("A", 10, Shift.DIESIS)
    Bb = ("B", 10, Shift.BEMOLLE)
    B = ("B", 11, Shift.NONE)

    def __init__(self, letter: str, offset: int, shift: Shift) -> None:
        self.letter = letter
        self.offset = offset
        self.shift = shift

    @property
    def suffix(self) -> str:
        return {Shift.NONE: "", Shift.DIESIS: "#", Shift.BEMOLLE: "b"}[self.shift]


_BY_OFFSET = (
    NoteName.C, NoteName.Cs, NoteName.D, NoteName.Ds, NoteName.E, NoteName.F,
    NoteName.Fs, NoteName.G, NoteName.Gs, NoteName.A, NoteName.As, NoteName.B,
)

_SHIFT_CHARS = {
    "s": Shift.DIESIS,
    "#": Shift.DIESIS,
    "\u266f": Shift.DIESIS,
    "b": Shift.BEMOLLE,
    "\u266d": Shift.BEMOLLE,
}

# (letter, shift) -> (note name, octave adjustment)
_SPELLINGS = {
    ("A", Shift.NONE): (NoteName.A, 0),
    ("A", Shift.DIESIS): (NoteName.As, 0),
    ("A", Shift.BEMOLLE): (NoteName.Ab, 0),
    ("B", Shift.NONE): (NoteName.B, 0),
    ("B", Shift.DIESIS): (NoteName.C, 1),
    ("B", Shift.BEMOLLE): (NoteName.Bb, 0),
    ("C", Shift.NONE): (NoteName.C, 0),
    ("C", Shift.DIESIS): (NoteName.Cs, 0),
    ("C", Shift.BEMOLLE): (NoteName.B, -1),
    ("D", Shift.NONE): (NoteName.D, 0),
    ("D", Shift.DIESIS): (NoteName.Ds, 0),
    ("D", Shift.BEMOLLE): (NoteName.Db, 0),
    ("E", Shift.NONE): (NoteName.E, 0),
    ("E", Shift.DIESIS): (NoteName.F, 0),
    ("E", Shift.BEMOLLE): (NoteName.Eb, 0),
    ("F", Shift.NONE): (NoteName.F, 0),
    ("F", Shift.DIESIS): (NoteName.Fs, 0),
    ("F", Shift.BEMOLLE): (NoteName.E, 0),
    ("G", Shift.NONE): (NoteName.G, 0),
    ("G", Shift.DIESIS): (NoteName.Gs, 0),
    ("G", Shift.BEMOLLE): (NoteName.Gb, 0),
}


@dataclass(frozen=True, eq=False)
class Note:
    """A note name in a given octave (0..255)."""

    name: NoteName
    octave: int

    def __post_init__(self) -> None:
        if not 0 <= self.octave <= MAX_OCTAVE:
            raise ValueError(f"Octave number must be in the range of 0..{MAX_OCTAVE}.")

    @classmethod
    def from_semitone(cls, semitone: int) -> Note:
        """Return the note with the given absolute semitone number (0..255)."""
        if not 0 <= semitone <= MAX_SEMITONE:
            raise ValueError(f"Semitone number must be in the range of 0..{MAX_SEMITONE}.")
        octave, offset = divmod(semitone, SEMITONE_COUNT)
        return cls(_BY_OFFSET[offset], octave)

    @classmethod
    def find_nearest(cls, freq_hz: float) -> Note:
        """Return the note whose frequency is closest to ``freq_hz``."""
        lower, upper = 0, MAX_SEMITONE
        while True:
            median = lower + (upper - lower) // 2
            probe = cls.from_semitone(median)
            probe_freq = probe.freq()
            delta = abs(freq_hz - probe_freq)

            if lower == upper or delta < 0.5:
                return probe

            if median == lower:
                upper_note = cls.from_semitone(upper)
                return probe if abs(upper_note.freq() - freq_hz) > delta else upper_note

            if median == upper:
                lower_note = cls.from_semitone(lower)
                return probe if abs(lower_note.freq() - freq_hz) > delta else lower_note

            if freq_hz < probe_freq:
                upper = median
            elif freq_hz > probe_freq:
                lower = median
            else:
                return probe

    @classmethod
    def parse(cls, text: str) -> Note:
        """Parse a note such as ``C4``, ``c4s``, ``D3#`` or ``B2b``.

        Characters after the optional shift sign are ignored.
        """
        if not text:
            raise ValueError(
                "Invalid note format: the note letter [A..G] or [a..g] is not present."
            )
        letter, rest = text[0], text[1:]

        digit_count = 0
        for ch in rest:
            if not "0" <= ch <= "9":
                break
            digit_count += 1
        if digit_count == 0:
            raise ValueError("Invalid octave format: must be the integer number.")

        octave = int(rest[:digit_count])
        if octave > MAX_OCTAVE:
            raise ValueError("Invalid octave number: must be in the range of 0..255.")

        tail = rest[digit_count:]
        if tail:
            try:
                shift = _SHIFT_CHARS[tail[0]]
            except KeyError:
                raise ValueError(
                    "Invalid semitone shift format: must absent or be one of [s, #, \u266f, b, \u266d]"
                ) from None
        else:
            shift = Shift.NONE

        if len(letter) != 1 or letter not in "ABCDEFGabcdefg":
            raise ValueError(
                "Invalid note name: unexpected note letter, must be in the range of [A..G] or [a..g]."
            )
        name, octave_delta = _SPELLINGS[(letter.upper(), shift)]
        octave += octave_delta
        if octave < 0:
            raise ValueError("Note is too low.")
        if octave > MAX_OCTAVE:
            raise ValueError("Note is too high.")
        return cls(name, octave)

    def semitone_shift(self) -> Shift:
        return self.name.shift

    def semitone_number(self) -> int:
        return self.octave * SEMITONE_COUNT + self.name.offset

    def freq(self) -> float:
        """Frequency in Hz: 440 * 2^(n/12), n counted from A4."""
        power = (self.semitone_number() - _A4_SEMITONE) / SEMITONE_COUNT
        return _A4_FREQ_HZ * math.pow(2.0, power)

    def __str__(self) -> str:
        return f"{self.name.letter}{self.octave}{self.name.suffix}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Note):
            return NotImplemented
        return self.name.offset == other.name.offset and self.octave == other.octave

    def __hash__(self) -> int:
        return hash((self.name.offset, self.octave))