"""Request layouts, physical mappings and errors of the port I/O driver."""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass, fields
from enum import Enum, IntEnum
from typing import ClassVar

INPOUT_DEVICE_TYPE = 40_000
METHOD_BUFFERED = 0
FILE_ANY_ACCESS = 0

_PORT_FORMAT = "<H"


class Func(IntEnum):
    """Driver function numbers."""

    READ_PORT_BYTE = 1
    WRITE_PORT_BYTE = 2
    READ_PORT_WORD = 3
    WRITE_PORT_WORD = 4
    READ_PORT_DWORD = 5
    WRITE_PORT_DWORD = 6
    MAP_PHYSICAL_MEMORY = 7
    UNMAP_PHYSICAL_MEMORY = 8


class PortWidth(Enum):
    """Width of a port access with its driver functions."""

    BYTE = (1, "B", Func.READ_PORT_BYTE, Func.WRITE_PORT_BYTE)
    WORD = (2, "H", Func.READ_PORT_WORD, Func.WRITE_PORT_WORD)
    DWORD = (4, "I", Func.READ_PORT_DWORD, Func.WRITE_PORT_DWORD)

    def __init__(self, size: int, code: str, read_func: Func, write_func: Func) -> None:
        self.size = size
        self.code = code
        self.read_func = read_func
        self.write_func = write_func

    @property
    def max_value(self) -> int:
        return (1 << (8 * self.size)) - 1

    def pack_value(self, value: int) -> bytes:
        """Little-endian bytes of a value of this width."""
        if not 0 <= value <= self.max_value:
            raise ValueError(f"Value must be in the range of 0..{self.max_value}, got {value}.")
        return struct.pack("<" + self.code, value)

    def unpack_value(self, data: bytes) -> int:
        """Value of this width from exactly ``size`` little-endian bytes."""
        if len(data) != self.size:
            raise ValueError(f"Expected {self.size} bytes, got {len(data)}.")
        return struct.unpack("<" + self.code, data)[0]

    def read_request(self, port_number: int) -> bytes:
        """Input buffer of a port read: the port number."""
        return _pack_port(port_number)

    def write_request(self, port_number: int, value: int) -> bytes:
        """Input buffer of a port write: the port number followed by the value."""
        return _pack_port(port_number) + self.pack_value(value)


def _pack_port(port_number: int) -> bytes:
    if not 0 <= port_number <= 0xFFFF:
        raise ValueError(f"Port number must be in the range of 0..65535, got {port_number}.")
    return struct.pack(_PORT_FORMAT, port_number)


@dataclass(frozen=True)
class IoctlRequest:
    """A device I/O control request."""

    device_type: int
    function: int
    method: int = METHOD_BUFFERED
    access: int = FILE_ANY_ACCESS

    @property
    def code(self) -> int:
        return (self.device_type << 16) | (self.access << 14) | (self.function << 2) | self.method


def make_ioctl(func: Func) -> IoctlRequest:
    """Buffered, any-access request for a driver function."""
    return IoctlRequest(INPOUT_DEVICE_TYPE, int(func), METHOD_BUFFERED, FILE_ANY_ACCESS)


@dataclass
class PhysMapping:
    """Architecture-independent description of mapped physical memory."""

    section: int = 0
    size: int = 0
    phys_address: int = 0
    mapped: int = 0

    def is_valid(self) -> bool:
        return self.section != 0 and self.size > 0 and self.mapped != 0

    def read(self, memory, byte_offset: int, fmt: str):
        """Read a value of struct format ``fmt`` at ``byte_offset`` in ``memory``."""
        _check_bounds(memory, byte_offset, fmt)
        values = struct.unpack_from(fmt, memory, byte_offset)
        return values[0] if len(values) == 1 else values

    def write(self, memory, byte_offset: int, fmt: str, value) -> None:
        """Write ``value`` with struct format ``fmt`` at ``byte_offset`` in ``memory``."""
        _check_bounds(memory, byte_offset, fmt)
        values = value if isinstance(value, tuple) else (value,)
        struct.pack_into(fmt, memory, byte_offset, *values)


def _check_bounds(memory, byte_offset: int, fmt: str) -> None:
    length = memoryview(memory).nbytes
    if byte_offset < 0 or byte_offset + struct.calcsize(fmt) > length:
        raise IndexError(f"Access at offset {byte_offset} is outside the mapping of {length} bytes.")


def _check_record(record, limit: int) -> None:
    for field in fields(record):
        value = getattr(record, field.name)
        if not 0 <= value <= limit:
            raise ValueError(f"{field.name} must be in the range of 0..{limit}, got {value}.")


def _unpack_record(fmt: str, data: bytes) -> tuple:
    expected = struct.calcsize(fmt)
    if len(data) != expected:
        raise ValueError(f"Expected {expected} bytes, got {len(data)}.")
    return struct.unpack(fmt, data)


@dataclass(frozen=True)
class Mapping64:
    """Physical mapping record of the 64-bit driver."""

    section: int = 0
    size: int = 0
    phys_address: int = 0
    mapped: int = 0

    _FORMAT: ClassVar[str] = "<4Q"
    _LIMIT: ClassVar[int] = (1 << 64) - 1

    def __post_init__(self) -> None:
        _check_record(self, self._LIMIT)

    def pack(self) -> bytes:
        return struct.pack(self._FORMAT, *astuple(self))

    @classmethod
    def unpack(cls, data: bytes) -> Mapping64:
        return cls(*_unpack_record(cls._FORMAT, data))

    def to_phys_mapping(self) -> PhysMapping:
        return PhysMapping(self.section, self.size, self.phys_address, self.mapped)


@dataclass(frozen=True)
class Mapping32:
    """Physical mapping record of the 32-bit driver."""

    section: int = 0
    size: int = 0
    phys_address: int = 0
    mapped: int = 0

    _FORMAT: ClassVar[str] = "<4I"
    _LIMIT: ClassVar[int] = (1 << 32) - 1

    def __post_init__(self) -> None:
        _check_record(self, self._LIMIT)

    def pack(self) -> bytes:
        return struct.pack(self._FORMAT, *astuple(self))

    @classmethod
    def unpack(cls, data: bytes) -> Mapping32:
        return cls(*_unpack_record(cls._FORMAT, data))

    def to_phys_mapping(self) -> PhysMapping:
        return PhysMapping(self.section, self.size, self.phys_address, self.mapped)


class InpoutError(Exception):
    """The driver could not be loaded or opened."""


class _CausedInpoutError(InpoutError):
    _prefix: ClassVar[str] = ""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"{self._prefix}: {cause}")
        self.cause = cause
        self.__cause__ = cause


class OpenScmError(_CausedInpoutError):
    _prefix = "Unable to open service manager"


class UnpackError(_CausedInpoutError):
    _prefix = "Unable to unpack the driver"


class OpenDeviceError(_CausedInpoutError):
    _prefix = "Unable to open the device"


class CreateServiceError(_CausedInpoutError):
    _prefix = "Unable to create the service"


class InvalidPathError(InpoutError):
    def __init__(self) -> None:
        super().__init__("Invalid path.")


class DeleteServiceError(_CausedInpoutError):
    _prefix = "Unable to delete the service"