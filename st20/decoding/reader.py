from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class ByteSource(Protocol):
    def read_byte(self, addr: int) -> int: ...


@dataclass(frozen=True)
class ByteReader:
    """
    Random-access reader over a short buffer that starts at `pc`.

    Binary Ninja hands the architecture hooks a slice of bytes beginning at
    the instruction address; reads past the end of that slice raise so the
    caller can report the bytes as data instead of guessing.
    """

    pc: int
    data: bytes

    def _require(self, offset: int) -> None:
        if not 0 <= offset < len(self.data):
            raise ValueError(
                f"Insufficient bytes: need offset {offset}, "
                f"have {len(self.data)} bytes at {self.pc:#x}"
            )

    def read_byte(self, addr: int) -> int:
        offset = addr - self.pc
        self._require(offset)
        return self.data[offset]


@dataclass(frozen=True)
class MemoryImage:
    """Loaded program image: `data` mapped at host address `base`.

    Out-of-range reads are the caller's responsibility; they surface as
    `IndexError` from the underlying buffer.
    """

    base: int
    data: bytes

    def read_byte(self, addr: int) -> int:
        offset = addr - self.base
        if offset < 0:
            raise IndexError(f"Address {addr:#x} below image base {self.base:#x}")
        return self.data[offset]

    @property
    def end(self) -> int:
        return self.base + len(self.data)

    def __contains__(self, addr: object) -> bool:
        return isinstance(addr, int) and self.base <= addr < self.end
