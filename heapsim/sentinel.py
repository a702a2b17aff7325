"""A defensive allocator that guards blocks with magic numbers and canaries."""

from __future__ import annotations

from .errors import (
    AllocationOverflowError,
    BufferOverflowError,
    InvalidFreeError,
    OutOfMemoryError,
)
from .freelist import (
    ALIGNMENT,
    DEFAULT_POOL_SIZE,
    SIZE_MAX,
    FreeBlock,
    _align,
    _StackFreeList,
)

SENTINEL_MAGIC = 0xDEADBEEF
CANARY_VALUE = 0xAFAFAFAF
FREED_PATTERN = 0xCC

_SIZE_FIELD = 8
_MAGIC_OFFSET = 8
_MAGIC_FIELD = 4
_CANARY_FIELD = 4

# An allocated block starts with its size and a magic number, padded out.
HEADER_SIZE = _align(_SIZE_FIELD + _MAGIC_FIELD + 4)
# Room reserved after the user data for the canary.
CANARY_SIZE = _align(_CANARY_FIELD)


class SentinelAllocator(_StackFreeList):
    """Free-list allocator that detects double frees and buffer overflows.

    Each block carries a magic number in its header and a canary just past
    the user data. Freed data is overwritten with ``FREED_PATTERN``. Freed
    blocks are pushed onto the front of the free list whole, and an empty
    free list is refilled with the entire pool, as on first use.
    Pointers are integer offsets into the pool.
    """

    def __init__(self, pool_size: int = DEFAULT_POOL_SIZE) -> None:
        super().__init__(pool_size, HEADER_SIZE + ALIGNMENT + CANARY_SIZE)

    def malloc(self, size: int) -> int | None:
        """Allocate ``size`` bytes; return ``None`` for a zero-byte request."""
        if not self._accepts(size):
            return None

        aligned = _align(size)
        total = HEADER_SIZE + aligned + CANARY_SIZE
        block = self._claim(total)
        if block is None:
            raise OutOfMemoryError(f"cannot allocate {size} bytes")

        self._store(block.address, _SIZE_FIELD, total)
        self._store(block.address + _MAGIC_OFFSET, _MAGIC_FIELD, SENTINEL_MAGIC)
        user = block.address + HEADER_SIZE
        self._store(user + aligned, _CANARY_FIELD, CANARY_VALUE)
        return user

    def free(self, ptr: int | None) -> None:
        """Release a block, checking its magic number and its canary.

        A smashed canary is reported after the block has been released.
        """
        if ptr is None:
            return
        address = ptr - HEADER_SIZE
        if address < 0 or ptr > self.pool_size:
            raise InvalidFreeError(f"pointer {ptr:#x} lies outside the pool")
        if self._load(address + _MAGIC_OFFSET, _MAGIC_FIELD) != SENTINEL_MAGIC:
            raise InvalidFreeError(f"double free or invalid pointer {ptr:#x}")

        block_size = self._load(address, _SIZE_FIELD)
        user_size = block_size - HEADER_SIZE - CANARY_SIZE
        if user_size < 0 or ptr + user_size + CANARY_SIZE > self.pool_size:
            raise InvalidFreeError(f"corrupted header at {address:#x}")

        smashed = self._load(ptr + user_size, _CANARY_FIELD) != CANARY_VALUE

        self._store(address + _MAGIC_OFFSET, _MAGIC_FIELD, 0)
        self._pool[ptr:ptr + user_size] = bytes([FREED_PATTERN]) * user_size
        self._release(address, block_size)

        if smashed:
            raise BufferOverflowError(f"canary of block {ptr:#x} was overwritten")

    def malloc_array(self, count: int, item_size: int) -> int | None:
        """Allocate ``count`` items of ``item_size`` bytes, refusing overflow."""
        self._check_array(count, item_size)
        if item_size > 0 and count > SIZE_MAX // item_size:
            raise AllocationOverflowError(
                f"{count} items of {item_size} bytes overflow the size type"
            )
        return self.malloc(count * item_size)

    def read(self, ptr: int, size: int) -> bytes:
        """Return ``size`` bytes of the pool starting at ``ptr``."""
        return self._read_bytes(ptr, size)

    def write(self, ptr: int, data: bytes) -> None:
        """Copy ``data`` into the pool at ``ptr``; block bounds are not enforced."""
        self._write_bytes(ptr, data)

    def free_blocks(self) -> list[FreeBlock]:
        """The free list, most recently freed block first."""
        return self._free_list()