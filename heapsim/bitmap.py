"""A fixed-size block pool tracked by one bit per block."""

from __future__ import annotations

from .errors import InvalidFreeError, OutOfMemoryError
from .freelist import _align, _Arena


class BitmapPool(_Arena):
    """Pool of equally sized blocks whose use is recorded in a bitmap.

    Pointers are integer offsets into the pool's memory; the lowest free
    block is always handed out first.
    """

    def __init__(self, block_size: int, block_count: int) -> None:
        if block_size <= 0:
            raise ValueError("block size must be positive")
        if block_count < 0:
            raise ValueError("block count must not be negative")
        self.block_size = _align(block_size)
        self.block_count = block_count
        super().__init__(self.block_size * block_count)
        self._bitmap = 0

    @property
    def size(self) -> int:
        """Total bytes of memory in the pool."""
        return len(self._pool)

    def alloc(self) -> int:
        """Claim the lowest free block and return its offset."""
        lowest_clear = ~self._bitmap & (self._bitmap + 1)
        index = lowest_clear.bit_length() - 1
        if index >= self.block_count:
            raise OutOfMemoryError("every block of the pool is in use")
        self._bitmap |= lowest_clear
        return index * self.block_size

    def free(self, ptr: int | None) -> None:
        """Release the block that contains ``ptr``."""
        if ptr is None or not 0 <= ptr < self.size:
            raise InvalidFreeError("pointer is null or does not belong to this pool")
        self._bitmap &= ~(1 << (ptr // self.block_size))

    def read(self, ptr: int, size: int) -> bytes:
        """Return ``size`` bytes of the pool starting at ``ptr``."""
        return self._read_bytes(ptr, size)

    def write(self, ptr: int, data: bytes) -> None:
        """Copy ``data`` into the pool at ``ptr``; block bounds are not enforced."""
        self._write_bytes(ptr, data)