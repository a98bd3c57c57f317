"""Thread register state, thread control and physical memory mapping interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

# Size in bytes of the 64-bit thread CONTEXT record (16-byte aligned).
ALIGNED_CONTEXT_SIZE = 0x4D0


@dataclass(frozen=True)
class ThreadContext:
    """The registers of a thread's saved context that the patcher works with."""

    context_flags: int = 0
    rax: int = 0
    rcx: int = 0
    rdx: int = 0
    r8: int = 0
    r9: int = 0
    rip: int = 0
    rsp: int = 0
    eflags: int = 0


@dataclass(frozen=True)
class ThreadState:
    """Instruction and stack pointers of a thread."""

    rip: int = 0
    rsp: int = 0

    @classmethod
    def from_context(cls, context: ThreadContext) -> ThreadState:
        return cls(context.rip, context.rsp)


class ThreadControl(ABC):
    """An opened thread. Failures raise ``OSError``."""

    @abstractmethod
    def suspend(self) -> None:
        """Suspend the thread."""

    @abstractmethod
    def resume(self) -> None:
        """Resume the thread."""

    @abstractmethod
    def get_context(self) -> ThreadContext:
        """Read the thread's register context."""

    @abstractmethod
    def set_context(self, context: ThreadContext) -> None:
        """Replace the thread's register context."""


class Mapping(ABC):
    """A mapped range of physical memory; also a context manager that unmaps."""

    @property
    @abstractmethod
    def mapping(self):
        """Writable buffer over the mapped memory."""

    @property
    def size(self) -> int:
        return memoryview(self.mapping).nbytes

    @abstractmethod
    def unmap(self) -> None:
        """Release the mapping."""

    def __enter__(self) -> Mapping:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unmap()


class Mapper(ABC):
    """Maps physical memory into the process."""

    @abstractmethod
    def map(self, phys_addr: int, size: int) -> Mapping | None:
        """Map ``size`` bytes at ``phys_addr``, or return ``None`` if impossible."""


@contextmanager
def suspended(thread: ThreadControl) -> Iterator[ThreadControl]:
    """Keep ``thread`` suspended for the duration of the block."""
    thread.suspend()
    try:
        yield thread
    finally:
        thread.resume()


@contextmanager
def context_restored(thread: ThreadControl, context: ThreadContext) -> Iterator[ThreadContext]:
    """Set ``context`` back on ``thread`` when the block ends, however it ends."""
    try:
        yield context
    finally:
        thread.set_context(context)