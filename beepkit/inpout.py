"""Port I/O and physical memory access through the inpout kernel driver."""

from __future__ import annotations

import os
import platform
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from beepkit.inpout_interface import (
    CreateServiceError,
    DeleteServiceError,
    Func,
    InvalidPathError,
    IoctlRequest,
    Mapping32,
    Mapping64,
    OpenScmError,
    PhysMapping,
    PortWidth,
    UnpackError,
    make_ioctl,
)

SERVICE_NAME = "inpout"
DRIVER_FILE_NAME = "inpout.sys"


class Arch(Enum):
    """Architecture of the running operating system."""

    X64 = "x64"
    I386 = "i386"
    UNKNOWN = "unknown"

    @classmethod
    def current(cls) -> Arch:
        machine = platform.machine().lower()
        if machine in ("amd64", "x86_64", "x64"):
            return cls.X64
        if machine in ("x86", "i386", "i486", "i586", "i686"):
            return cls.I386
        return cls.UNKNOWN


class Device(ABC):
    """An opened driver device. Failed requests raise ``OSError``."""

    @abstractmethod
    def ioctl_in(self, request: IoctlRequest, data: bytes) -> None:
        """Send ``data`` to the driver."""

    @abstractmethod
    def ioctl_inout(self, request: IoctlRequest, data: bytes, out_size: int) -> bytes:
        """Send ``data`` and return the ``out_size`` bytes the driver answers with."""


class Service(ABC):
    """An installed driver service. Failures raise ``OSError``."""

    @abstractmethod
    def start(self) -> None:
        """Start the service."""

    @abstractmethod
    def delete(self) -> None:
        """Remove the service."""


class ServiceManager(ABC):
    """The system service manager. Failures raise ``OSError``."""

    @abstractmethod
    def create_service(self, name: str, path: str) -> Service:
        """Install a kernel driver service from the file at ``path``."""

    @abstractmethod
    def open_service(self, name: str) -> Service:
        """Open an installed service."""


class Inpout:
    """Requests to the inpout driver over an opened device."""

    def __init__(self, device: Device, arch: Arch | None = None) -> None:
        self.device = device
        self.arch = Arch.current() if arch is None else arch

    def read_port(self, width: PortWidth, port_number: int) -> int:
        """Read a value of ``width`` from an I/O port."""
        reply = self.device.ioctl_inout(
            make_ioctl(width.read_func), width.read_request(port_number), width.size
        )
        return width.unpack_value(bytes(reply))

    def write_port(self, width: PortWidth, port_number: int, value: int) -> None:
        """Write a value of ``width`` to an I/O port."""
        self.device.ioctl_in(make_ioctl(width.write_func), width.write_request(port_number, value))

    def _record_type(self) -> type[Mapping64] | type[Mapping32]:
        if self.arch is Arch.X64:
            return Mapping64
        if self.arch is Arch.I386:
            return Mapping32
        raise OSError("Unsupported platform: the only supported platforms are i386 and amd64.")

    def map_physical_memory(self, phys_address: int, size: int) -> PhysMapping:
        """Map ``size`` bytes of physical memory starting at ``phys_address``.

        Raises ``ValueError`` when the values do not fit the driver's record.
        """
        record_type = self._record_type()
        record = record_type(0, size, phys_address, 0)
        packed = record.pack()
        reply = self.device.ioctl_inout(
            make_ioctl(Func.MAP_PHYSICAL_MEMORY), packed, len(packed)
        )
        return record_type.unpack(bytes(reply)).to_phys_mapping()

    def unmap_physical_memory(self, mapping: PhysMapping) -> None:
        """Release a mapping made by :meth:`map_physical_memory`."""
        record_type = self._record_type()
        record = record_type(mapping.section, mapping.size, mapping.phys_address, mapping.mapped)
        self.device.ioctl_in(make_ioctl(Func.UNMAP_PHYSICAL_MEMORY), record.pack())


def extract_driver(working_dir: str | os.PathLike[str] | None, driver_image: bytes) -> Path:
    """Write the driver image next to ``working_dir`` unless it is already there.

    The file goes to the parent of ``working_dir`` (the current directory when
    ``None``); its path is returned.
    """
    base = Path.cwd() if working_dir is None else Path(working_dir)
    parent = base.parent
    if parent == base:
        raise FileNotFoundError(f"{base} has no parent directory.")
    driver_path = parent / DRIVER_FILE_NAME
    if not driver_path.exists():
        driver_path.write_bytes(driver_image)
    return driver_path


def _install(manager: ServiceManager, extract: Callable[[], os.PathLike[str] | str]) -> Service:
    try:
        driver_path = extract()
    except OSError as err:
        raise UnpackError(err) from err
    try:
        path_text = os.fsdecode(driver_path)
        path_text.encode("utf-8")
    except UnicodeError:
        raise InvalidPathError() from None
    try:
        return manager.create_service(SERVICE_NAME, path_text)
    except OSError as err:
        raise CreateServiceError(err) from err


def load(
    scm: Callable[[], ServiceManager],
    open_device: Callable[[], Inpout],
    extract: Callable[[], os.PathLike[str] | str],
) -> Inpout:
    """Open the driver device, installing and starting the service as needed.

    ``scm`` opens the service manager, ``open_device`` opens the device and
    ``extract`` puts the driver file on disk and returns its path; each
    raises ``OSError`` on failure. A service that fails to start is deleted
    and installed again.
    """
    try:
        manager = scm()
    except OSError as err:
        raise OpenScmError(err) from err

    service: Service | None = None
    while True:
        if service is None:
            try:
                return open_device()
            except OSError:
                pass
            try:
                service = manager.open_service(SERVICE_NAME)
            except OSError:
                service = _install(manager, extract)

        try:
            service.start()
        except OSError:
            try:
                service.delete()
            except OSError as err:
                raise DeleteServiceError(err) from err
            service = _install(manager, extract)
            continue
        service = None