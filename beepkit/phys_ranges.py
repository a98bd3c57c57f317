"""Physical memory regions described by a binary resource list."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

_U64_MASK = (1 << 64) - 1

CM_RESOURCE_MEMORY_READ_WRITE = 0x0000
CM_RESOURCE_MEMORY_READ_ONLY = 0x0001
CM_RESOURCE_MEMORY_WRITE_ONLY = 0x0002
CM_RESOURCE_MEMORY_PREFETCHABLE = 0x0004
CM_RESOURCE_MEMORY_COMBINEDWRITE = 0x0008
CM_RESOURCE_MEMORY_CACHEABLE = 0x0020

CM_RESOURCE_MEMORY_LARGE_40 = 0x0200
CM_RESOURCE_MEMORY_LARGE_48 = 0x0400
CM_RESOURCE_MEMORY_LARGE_64 = 0x0800

# Resource list header: count of full descriptors.
_LIST_HEADER = struct.Struct("<I")
# Full descriptor header: interface type, bus number, then the partial
# list's version, revision and count.
_FULL_HEADER = struct.Struct("<IIHHI")
# Partial descriptor: type, share disposition, flags, start, length.
_PARTIAL = struct.Struct("<BBHQQ")


class ResourceType(IntEnum):
    """Type of a partial resource descriptor."""

    NULL = 0
    PORT = 1
    INTERRUPT = 2
    MEMORY = 3
    DMA = 4
    DEVICE_SPECIFIC = 5
    BUS_NUMBER = 6
    MEMORY_LARGE = 7
    CONFIG_DATA = 128
    DEVICE_PRIVATE = 129
    PC_CARD_CONFIG = 130
    MF_CARD_CONFIG = 131
    CONNECTION = 132


def _region_size(resource_type: int, flags: int, size: int) -> int:
    if resource_type == ResourceType.MEMORY:
        return size
    if resource_type == ResourceType.MEMORY_LARGE:
        if flags & CM_RESOURCE_MEMORY_LARGE_40:
            return (size << 8) & _U64_MASK
        if flags & CM_RESOURCE_MEMORY_LARGE_48:
            return (size << 16) & _U64_MASK
        if flags & CM_RESOURCE_MEMORY_LARGE_64:
            return (size << 32) & _U64_MASK
    return 0


@dataclass(frozen=True)
class PhysicalRegion:
    """A range of physical memory with its access flags."""

    beginning: int
    size: int
    flags: int

    @classmethod
    def from_descriptor(cls, resource_type: int, flags: int, start: int, size: int) -> PhysicalRegion:
        """Region of a partial descriptor; non-memory descriptors get size 0."""
        return cls(start, _region_size(resource_type, flags, size), flags)

    @property
    def readwrite(self) -> bool:
        return (self.flags & 0xFF) == CM_RESOURCE_MEMORY_READ_WRITE

    @property
    def readonly(self) -> bool:
        return bool(self.flags & CM_RESOURCE_MEMORY_READ_ONLY)

    @property
    def writeonly(self) -> bool:
        return bool(self.flags & CM_RESOURCE_MEMORY_WRITE_ONLY)

    @property
    def prefetchable(self) -> bool:
        return bool(self.flags & CM_RESOURCE_MEMORY_PREFETCHABLE)

    @property
    def cacheable(self) -> bool:
        return bool(self.flags & CM_RESOURCE_MEMORY_CACHEABLE)

    @property
    def write_combined(self) -> bool:
        return bool(self.flags & CM_RESOURCE_MEMORY_COMBINEDWRITE)


def _unpack(layout: struct.Struct, data: bytes, offset: int) -> tuple:
    if offset + layout.size > len(data):
        raise ValueError(
            f"Resource list is truncated: need {layout.size} bytes at offset {offset}, "
            f"have {len(data) - offset}."
        )
    return layout.unpack_from(data, offset)


def parse_resource_list(data: bytes) -> list[PhysicalRegion]:
    """Regions of every partial descriptor in a binary resource list."""
    data = bytes(data)
    (full_count,) = _unpack(_LIST_HEADER, data, 0)
    offset = _LIST_HEADER.size
    regions = []
    for _ in range(full_count):
        *_, partial_count = _unpack(_FULL_HEADER, data, offset)
        offset += _FULL_HEADER.size
        for _ in range(partial_count):
            resource_type, _share, flags, start, size = _unpack(_PARTIAL, data, offset)
            offset += _PARTIAL.size
            regions.append(PhysicalRegion.from_descriptor(resource_type, flags, start, size))
    return regions