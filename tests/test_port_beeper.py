import pytest

from beepkit.beeper import PortAccessor
from beepkit.port_beeper import PortBeeper
from beepkit.sound_emitter import BeeperDivisor, BeeperFrequency


class FakePorts(PortAccessor):
    def __init__(self, speaker=0x4C):
        self.values = {0x61: speaker}
        self.writes = []

    def read_byte(self, port):
        if port not in self.values:
            raise OSError(f"cannot read port {port}")
        return self.values[port]

    def write_byte(self, port, value):
        assert 0 <= value <= 0xFF
        self.writes.append((port, value))
        self.values[port] = value


def test_prepare_sets_square_wave_mode():
    ports = FakePorts()
    PortBeeper(ports).prepare()
    assert ports.writes == [(0x43, 0xB6)]


@pytest.mark.parametrize("initial", [0x00, 0x4C, 0xFF, 0x4E])
def test_play_and_mute_touch_only_low_bits(initial):
    ports = FakePorts(initial)
    beeper = PortBeeper(ports)
    beeper.play()
    played = ports.values[0x61]
    assert played & 0b11 == 0b11
    assert played & ~0b11 == initial & ~0b11
    beeper.mute()
    muted = ports.values[0x61]
    assert muted & 0b11 == 0
    assert muted & ~0b11 == initial & ~0b11


@pytest.mark.parametrize("initial", [0x00, 0x4D, 0xFF])
def test_up_and_down_touch_only_data_bit(initial):
    ports = FakePorts(initial)
    beeper = PortBeeper(ports)
    beeper.up()
    assert ports.values[0x61] & 0b10 == 0b10
    assert ports.values[0x61] & ~0b10 == initial & ~0b10
    beeper.down()
    assert ports.values[0x61] & 0b10 == 0
    assert ports.values[0x61] & ~0b10 == initial & ~0b10


def test_rereads_control_port_each_time():
    ports = FakePorts(0x00)
    beeper = PortBeeper(ports)
    beeper.play()
    ports.values[0x61] = 0x80 | ports.values[0x61]
    beeper.mute()
    assert ports.values[0x61] & 0x80 == 0x80
    assert ports.values[0x61] & 0b11 == 0


def test_set_divisor_writes_low_then_high():
    ports = FakePorts()
    PortBeeper(ports).set_divisor(BeeperDivisor(0x1234))
    assert ports.writes == [(0x42, 0x34), (0x42, 0x12)]


@pytest.mark.parametrize("hz", [19, 440, 1000, 1_193_182])
def test_set_frequency_writes_matching_divisor(hz):
    ports = FakePorts()
    freq = BeeperFrequency(hz)
    PortBeeper(ports).set_frequency(freq)
    (port_low, low), (port_high, high) = ports.writes
    assert port_low == port_high == 0x42
    assert low | (high << 8) == freq.to_divisor().value


def test_read_failure_propagates():
    ports = FakePorts()
    del ports.values[0x61]
    with pytest.raises(OSError):
        PortBeeper(ports).play()
    assert ports.writes == []


@pytest.mark.parametrize(
    "eflags, expected",
    [(0x3000, True), (0x1000, True), (0x2202, True), (0x0202, False), (0, False)],
)
def test_is_iopl_raised(eflags, expected):
    assert PortBeeper.is_iopl_raised(eflags) is expected