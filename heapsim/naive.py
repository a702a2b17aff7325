"""A minimal free-list allocator that performs no safety checks."""

from __future__ import annotations

from .freelist import (
    ALIGNMENT,
    DEFAULT_POOL_SIZE,
    SIZE_MAX,
    FreeBlock,
    _align,
    _StackFreeList,
)

# An allocated block starts with its size only.
HEADER_SIZE = 8


class NaiveAllocator(_StackFreeList):
    """First-fit allocator without any checks on misuse.

    Double frees, overflows and wrapped array sizes go unnoticed, and a
    request that cannot be met yields ``None``. Freed blocks are pushed
    onto the front of the free list, and an empty free list is refilled
    with the entire pool, as on first use. Pointers are integer offsets
    into the pool.
    """

    def __init__(self, pool_size: int = DEFAULT_POOL_SIZE) -> None:
        super().__init__(pool_size, HEADER_SIZE + ALIGNMENT)

    def malloc(self, size: int) -> int | None:
        """Allocate ``size`` bytes; ``None`` when empty or out of memory."""
        if not self._accepts(size):
            return None

        total = _align(size) + HEADER_SIZE
        block = self._claim(total)
        if block is None:
            return None
        self._store(block.address, HEADER_SIZE, total)
        return block.address + HEADER_SIZE

    def free(self, ptr: int | None) -> None:
        """Push the block back onto the free list without any validation."""
        if ptr is None:
            return
        address = ptr - HEADER_SIZE
        if address < 0 or ptr > self.pool_size:
            raise ValueError(f"pointer {ptr:#x} lies outside the pool")
        self._release(address, self._load(address, HEADER_SIZE))

    def malloc_array(self, count: int, item_size: int) -> int | None:
        """Allocate ``count * item_size`` bytes, wrapping like the size type."""
        self._check_array(count, item_size)
        return self.malloc((count * item_size) & SIZE_MAX)

    def read(self, ptr: int, size: int) -> bytes:
        """Return ``size`` bytes of the pool starting at ``ptr``."""
        return self._read_bytes(ptr, size)

    def write(self, ptr: int, data: bytes) -> None:
        """Copy ``data`` into the pool at ``ptr``; block bounds are not enforced."""
        self._write_bytes(ptr, data)

    def free_blocks(self) -> list[FreeBlock]:
        """The free list, most recently freed block first."""
        return self._free_list()