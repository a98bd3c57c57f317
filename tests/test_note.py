import pytest

from beepkit.note import Note, NoteName, Shift


def test_parse_sharp_lowercase():
    assert Note.parse("c4s") == Note(NoteName.Cs, 4)


def test_parse_sharp_equals_enharmonic_flat():
    assert Note.parse("C4#") == Note(NoteName.Db, 4)


def test_parse_then_str():
    assert str(Note.parse("c135s")) == "C135#"


def test_from_semitone():
    assert Note.from_semitone(16) == Note(NoteName.E, 1)


def test_find_nearest_recovers_every_semitone():
    for i in range(256):
        probe = Note.from_semitone(i)
        assert Note.find_nearest(probe.freq()) == probe
        assert Note.find_nearest(probe.freq()) == probe


def test_a4_frequency():
    assert Note(NoteName.A, 4).freq() == pytest.approx(440.0)


def test_octave_doubles_frequency():
    low = Note(NoteName.G, 3).freq()
    high = Note(NoteName.G, 4).freq()
    assert high == pytest.approx(2 * low)


def test_semitone_number_roundtrip():
    for i in range(256):
        assert Note.from_semitone(i).semitone_number() == i


def test_enharmonic_hash_matches():
    assert hash(Note(NoteName.As, 2)) == hash(Note(NoteName.Bb, 2))
    assert len({Note(NoteName.As, 2), Note(NoteName.Bb, 2)}) == 1


def test_different_octave_not_equal():
    assert not Note(NoteName.C, 3) == Note(NoteName.C, 4)


@pytest.mark.parametrize(
    "note, shift",
    [
        (Note(NoteName.Fs, 1), Shift.DIESIS),
        (Note(NoteName.Eb, 1), Shift.BEMOLLE),
        (Note(NoteName.D, 1), Shift.NONE),
    ],
)
def test_semitone_shift(note, shift):
    assert note.semitone_shift() is shift


@pytest.mark.parametrize(
    "text, expected",
    [
        ("B4#", Note(NoteName.C, 5)),
        ("C4b", Note(NoteName.B, 3)),
        ("E2s", Note(NoteName.F, 2)),
        ("F2b", Note(NoteName.E, 2)),
        ("g7\u266d", Note(NoteName.Gb, 7)),
        ("a0\u266f", Note(NoteName.As, 0)),
        ("d3sx", Note(NoteName.Ds, 3)),
        ("A04", Note(NoteName.A, 4)),
    ],
)
def test_parse_variants(text, expected):
    assert Note.parse(text) == expected


@pytest.mark.parametrize(
    "note, text",
    [
        (Note(NoteName.Db, 4), "D4b"),
        (Note(NoteName.Bb, 0), "B0b"),
        (Note(NoteName.F, 9), "F9"),
    ],
)
def test_str(note, text):
    assert str(note) == text


@pytest.mark.parametrize(
    "text, message",
    [
        ("", "Invalid note format"),
        ("c", "Invalid octave format"),
        ("cx", "Invalid octave format"),
        ("c256", "Invalid octave number"),
        ("c4x", "Invalid semitone shift format"),
        ("x4", "Invalid note name"),
        ("C0b", "Note is too low."),
        ("B255#", "Note is too high."),
    ],
)
def test_parse_errors(text, message):
    with pytest.raises(ValueError, match=message):
        Note.parse(text)


def test_from_semitone_out_of_range():
    with pytest.raises(ValueError):
        Note.from_semitone(256)
    with pytest.raises(ValueError):
        Note.from_semitone(-1)


def test_octave_out_of_range():
    with pytest.raises(ValueError):
        Note(NoteName.C, 256)