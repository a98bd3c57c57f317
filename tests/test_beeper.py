import pytest

from beepkit.beeper import Beeper, BeeperError, PortAccessor
from beepkit.sound_emitter import BeeperDivisor, BeeperFrequency

CONTROL = 0x4C


class FakePorts(PortAccessor):
    def __init__(self, control=CONTROL, fail_writes=(), fail_reads=()):
        self.values = {0x61: control}
        self.fail_writes = set(fail_writes)
        self.fail_reads = set(fail_reads)
        self.writes = []
        self.reads = []

    def read_byte(self, port):
        self.reads.append(port)
        if port in self.fail_reads:
            raise OSError("read failed")
        return self.values.get(port, 0)

    def write_byte(self, port, value):
        self.writes.append((port, value))
        if port in self.fail_writes:
            raise OSError("write failed")


def prepared(ports):
    beeper = Beeper(ports)
    beeper.prepare()
    ports.writes.clear()
    return beeper


def test_prepare_sets_regime_then_reads_control():
    ports = FakePorts()
    Beeper(ports).prepare()
    assert ports.writes == [(0x43, 0xB6)]
    assert ports.reads == [0x61]


def test_prepare_write_failure():
    ports = FakePorts(fail_writes={0x43})
    with pytest.raises(BeeperError):
        Beeper(ports).prepare()
    assert ports.reads == []


def test_prepare_read_failure():
    ports = FakePorts(fail_reads={0x61})
    with pytest.raises(BeeperError) as info:
        Beeper(ports).prepare()
    assert isinstance(info.value.__cause__, OSError)


def test_play_sets_low_bits_and_keeps_others():
    ports = FakePorts()
    prepared(ports).play()
    [(port, value)] = ports.writes
    assert port == 0x61
    assert value & 0b11 == 0b11
    assert value & ~0b11 == CONTROL & ~0b11


def test_mute_clears_low_bits_and_keeps_others():
    ports = FakePorts(control=CONTROL | 0b11)
    prepared(ports).mute()
    [(port, value)] = ports.writes
    assert port == 0x61
    assert value & 0b11 == 0
    assert value & ~0b11 & 0xFF == CONTROL & ~0b11


def test_up_and_down_toggle_data_bit_only():
    ports = FakePorts(control=CONTROL | 0b01)
    beeper = prepared(ports)
    beeper.up()
    beeper.down()
    (_, up_value), (_, down_value) = ports.writes
    assert up_value & 0b10
    assert not down_value & 0b10
    assert up_value & ~0b10 == down_value & ~0b10 == (CONTROL | 0b01) & ~0b10


def test_set_divisor_writes_low_then_high_byte():
    ports = FakePorts()
    prepared(ports).set_divisor(BeeperDivisor(0xBEEF))
    (port_low, low), (port_high, high) = ports.writes
    assert port_low == port_high == 0x42
    assert low | (high << 8) == 0xBEEF
    assert 0 <= low <= 0xFF and 0 <= high <= 0xFF


def test_set_frequency_writes_matching_divisor():
    ports = FakePorts()
    prepared(ports).set_frequency(BeeperFrequency(440))
    (_, low), (_, high) = ports.writes
    assert low | (high << 8) == BeeperDivisor.from_freq(440).value


def test_play_ignores_write_failure():
    ports = FakePorts(fail_writes={0x61})
    beeper = prepared(ports)
    beeper.play()
    beeper.mute()
    assert [port for port, _ in ports.writes] == [0x61, 0x61]


def test_play_before_prepare_uses_zero_control():
    ports = FakePorts()
    Beeper(ports).play()
    [(_, value)] = ports.writes
    assert value & ~0b11 == 0
    assert ports.reads == []