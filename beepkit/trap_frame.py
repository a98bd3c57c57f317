"""Binary layout of the 64-bit kernel trap frame."""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields

_ZERO_XMM = bytes(16)

# (field name, struct code, number of values or None for a single value)
_LAYOUT: tuple[tuple[str, str, int | None], ...] = (
    ("p1_home", "Q", None),
    ("p2_home", "Q", None),
    ("p3_home", "Q", None),
    ("p4_home", "Q", None),
    ("p5", "Q", None),
    ("previous_mode", "B", None),
    ("previous_irql", "B", None),
    ("fault_indicator", "B", None),
    ("exception_active", "B", None),
    ("mxcsr", "I", None),
    ("rax", "Q", None),
    ("rcx", "Q", None),
    ("rdx", "Q", None),
    ("r8", "Q", None),
    ("r9", "Q", None),
    ("r10", "Q", None),
    ("r11", "Q", None),
    ("gs_base_or_gs_swap", "Q", None),
    ("xmm0", "16s", None),
    ("xmm1", "16s", None),
    ("xmm2", "16s", None),
    ("xmm3", "16s", None),
    ("xmm4", "16s", None),
    ("xmm5", "16s", None),
    ("fault_address_or_context_record", "Q", None),
    ("dr_or_shadow_stack", "6Q", 6),
    ("special_debug_registers", "5Q", 5),
    ("seg_ds", "H", None),
    ("seg_es", "H", None),
    ("seg_fs", "H", None),
    ("seg_gs", "H", None),
    ("trap_frame", "Q", None),
    ("rbx", "Q", None),
    ("rdi", "Q", None),
    ("rsi", "Q", None),
    ("rbp", "Q", None),
    ("error_code_or_exception_frame", "Q", None),
    ("rip", "Q", None),
    ("seg_cs", "H", None),
    ("fill_0", "B", None),
    ("logging", "B", None),
    ("fill_1", "2H", 2),
    ("eflags", "I", None),
    ("fill_2", "I", None),
    ("rsp", "Q", None),
    ("seg_ss", "H", None),
    ("fill_3", "H", None),
    ("fill_4", "I", None),
)

_STRUCT = struct.Struct("<" + "".join(code for _, code, _ in _LAYOUT))

_OFFSETS: dict[str, int] = {}
_prefix = "<"
for _name, _code, _ in _LAYOUT:
    _OFFSETS[_name] = struct.calcsize(_prefix)
    _prefix += _code

TRAP_FRAME_SIZE = _STRUCT.size


def field_offset(name: str) -> int:
    """Byte offset of a trap frame field."""
    try:
        return _OFFSETS[name]
    except KeyError:
        raise ValueError(f"Unknown trap frame field: {name!r}.") from None


@dataclass
class TrapFrame:
    """Registers saved by the kernel on entry from a trap, interrupt or system call."""

    p1_home: int = 0
    p2_home: int = 0
    p3_home: int = 0
    p4_home: int = 0
    p5: int = 0
    previous_mode: int = 0
    previous_irql: int = 0
    fault_indicator: int = 0
    exception_active: int = 0
    mxcsr: int = 0
    rax: int = 0
    rcx: int = 0
    rdx: int = 0
    r8: int = 0
    r9: int = 0
    r10: int = 0
    r11: int = 0
    gs_base_or_gs_swap: int = 0
    xmm0: bytes = _ZERO_XMM
    xmm1: bytes = _ZERO_XMM
    xmm2: bytes = _ZERO_XMM
    xmm3: bytes = _ZERO_XMM
    xmm4: bytes = _ZERO_XMM
    xmm5: bytes = _ZERO_XMM
    fault_address_or_context_record: int = 0
    dr_or_shadow_stack: tuple[int, ...] = (0,) * 6
    special_debug_registers: tuple[int, ...] = (0,) * 5
    seg_ds: int = 0
    seg_es: int = 0
    seg_fs: int = 0
    seg_gs: int = 0
    trap_frame: int = 0
    rbx: int = 0
    rdi: int = 0
    rsi: int = 0
    rbp: int = 0
    error_code_or_exception_frame: int = 0
    rip: int = 0
    seg_cs: int = 0
    fill_0: int = 0
    logging: int = 0
    fill_1: tuple[int, ...] = (0, 0)
    eflags: int = 0
    fill_2: int = 0
    rsp: int = 0
    seg_ss: int = 0
    fill_3: int = 0
    fill_4: int = 0

    @classmethod
    def unpack_from(cls, buffer, offset: int = 0) -> TrapFrame:
        """Read a trap frame from ``buffer`` starting at ``offset``."""
        if offset < 0:
            raise ValueError(f"Offset must not be negative, got {offset}.")
        try:
            values = iter(_STRUCT.unpack_from(buffer, offset))
        except struct.error as err:
            raise ValueError(f"Buffer too small for a trap frame at offset {offset}.") from err
        kwargs = {}
        for name, _code, arity in _LAYOUT:
            if arity is None:
                kwargs[name] = next(values)
            else:
                kwargs[name] = tuple(next(values) for _ in range(arity))
        return cls(**kwargs)

    def pack(self) -> bytes:
        """The frame's bytes in the kernel layout."""
        flat = []
        for name, _code, arity in _LAYOUT:
            value = getattr(self, name)
            if arity is None:
                flat.append(value)
            else:
                if len(value) != arity:
                    raise ValueError(f"{name} must hold {arity} values, got {len(value)}.")
                flat.extend(value)
        try:
            return _STRUCT.pack(*flat)
        except struct.error as err:
            raise ValueError(f"Trap frame field out of range: {err}") from err


assert [f.name for f in fields(TrapFrame)] == [name for name, _, _ in _LAYOUT]