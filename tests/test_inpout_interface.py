import pytest

from beepkit.inpout_interface import (
    INPOUT_DEVICE_TYPE,
    CreateServiceError,
    DeleteServiceError,
    Func,
    InpoutError,
    InvalidPathError,
    Mapping32,
    Mapping64,
    OpenDeviceError,
    OpenScmError,
    PhysMapping,
    PortWidth,
    UnpackError,
    make_ioctl,
)


def test_func_numbers():
    assert make_ioctl(Func.READ_PORT_BYTE).function == 1
    assert make_ioctl(Func.WRITE_PORT_DWORD).function == 6
    assert make_ioctl(Func.MAP_PHYSICAL_MEMORY).function == 7
    assert make_ioctl(Func.UNMAP_PHYSICAL_MEMORY).function == 8


def test_port_widths_use_matching_functions():
    assert make_ioctl(PortWidth.BYTE.read_func).function == 1
    assert make_ioctl(PortWidth.WORD.write_func).function == 4
    assert make_ioctl(PortWidth.DWORD.read_func).function == 5


def test_port_value_round_trip():
    assert PortWidth.BYTE.unpack_value(PortWidth.BYTE.pack_value(0xFF)) == 0xFF
    assert PortWidth.WORD.unpack_value(PortWidth.WORD.pack_value(0xFFFF)) == 0xFFFF
    assert PortWidth.DWORD.unpack_value(PortWidth.DWORD.pack_value(0xFFFFFFFF)) == 0xFFFFFFFF
    assert len(PortWidth.BYTE.pack_value(0)) == 1
    assert len(PortWidth.WORD.pack_value(0)) == 2
    assert len(PortWidth.DWORD.pack_value(0)) == 4


def test_port_value_out_of_range():
    with pytest.raises(ValueError):
        PortWidth.BYTE.pack_value(0x100)
    with pytest.raises(ValueError):
        PortWidth.WORD.pack_value(0x10000)
    with pytest.raises(ValueError):
        PortWidth.DWORD.pack_value(0x100000000)


def test_unpack_value_wrong_length():
    with pytest.raises(ValueError):
        PortWidth.WORD.unpack_value(b"\x01")


def test_write_request_carries_port_then_value():
    request = PortWidth.BYTE.write_request(0x61, 0xB6)
    assert request[:2] == PortWidth.BYTE.read_request(0x61)
    assert PortWidth.BYTE.unpack_value(request[2:]) == 0xB6


def test_port_number_out_of_range():
    with pytest.raises(ValueError):
        PortWidth.BYTE.read_request(0x10000)


def test_make_ioctl():
    request = make_ioctl(Func.MAP_PHYSICAL_MEMORY)
    assert request.device_type == INPOUT_DEVICE_TYPE == 40_000
    assert request.function == 7
    assert request.code >> 16 == 40_000
    assert (request.code >> 2) & 0xFFF == 7


def test_phys_mapping_validity():
    assert not PhysMapping().is_valid()
    assert PhysMapping(section=1, size=4096, phys_address=0, mapped=0x1000).is_valid()
    assert not PhysMapping(section=1, size=0, mapped=0x1000).is_valid()
    assert not PhysMapping(section=1, size=4096, mapped=0).is_valid()


def test_phys_mapping_read_write_round_trip():
    memory = bytearray(16)
    mapping = PhysMapping(section=1, size=len(memory), mapped=1)
    mapping.write(memory, 4, "<I", 0x1EE7C0DE)
    assert mapping.read(memory, 4, "<I") == 0x1EE7C0DE
    assert mapping.read(memory, 0, "<I") == 0


def test_phys_mapping_out_of_bounds():
    memory = bytearray(8)
    mapping = PhysMapping(section=1, size=8, mapped=1)
    with pytest.raises(IndexError):
        mapping.read(memory, 6, "<I")
    with pytest.raises(IndexError):
        mapping.write(memory, -1, "<B", 1)


@pytest.mark.parametrize("cls", [Mapping64, Mapping32])
def test_mapping_round_trip(cls):
    record = cls(section=3, size=4096, phys_address=0xF0000, mapped=0x7000)
    assert cls.unpack(record.pack()) == record


def test_mapping_sizes():
    assert len(Mapping64().pack()) == 32
    assert len(Mapping32().pack()) == 16


def test_mapping32_rejects_wide_values():
    with pytest.raises(ValueError):
        Mapping32(size=1 << 32)
    assert Mapping64(size=1 << 32).size == 1 << 32


def test_mapping_unpack_wrong_length():
    with pytest.raises(ValueError):
        Mapping64.unpack(Mapping32().pack())


@pytest.mark.parametrize("cls", [Mapping64, Mapping32])
def test_mapping_to_phys_mapping(cls):
    mapping = cls(section=5, size=100, phys_address=200, mapped=300).to_phys_mapping()
    assert mapping == PhysMapping(section=5, size=100, phys_address=200, mapped=300)


@pytest.mark.parametrize(
    "cls, prefix",
    [
        (OpenScmError, "Unable to open service manager: "),
        (UnpackError, "Unable to unpack the driver: "),
        (OpenDeviceError, "Unable to open the device: "),
        (CreateServiceError, "Unable to create the service: "),
        (DeleteServiceError, "Unable to delete the service: "),
    ],
)
def test_errors_with_cause(cls, prefix):
    cause = OSError("denied")
    err = cls(cause)
    assert str(err) == prefix + "denied"
    assert err.__cause__ is cause
    assert isinstance(err, InpoutError)


def test_invalid_path_error():
    err = InvalidPathError()
    assert str(err) == "Invalid path."
    assert err.__cause__ is None