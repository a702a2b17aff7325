"""Free-list allocators over a fixed byte pool, with a first-fit coalescing one."""

from __future__ import annotations

import bisect
from dataclasses import dataclass

from .errors import InvalidFreeError, OutOfMemoryError

DEFAULT_POOL_SIZE = 1024 * 1024
ALIGNMENT = 8
SIZE_MAX = (1 << 64) - 1
SIZE_T_BYTES = 8
POINTER_BYTES = 8

# Header of a free block: its size and the link to the next free block.
FREE_HEADER_SIZE = SIZE_T_BYTES + POINTER_BYTES
# Header of an allocated block: its size only.
ALLOCATED_HEADER_SIZE = SIZE_T_BYTES
# Smallest remainder worth splitting off as its own free block.
MIN_BLOCK_SIZE = FREE_HEADER_SIZE


def _align(size: int) -> int:
    return (size + ALIGNMENT - 1) & ~(ALIGNMENT - 1)


@dataclass(frozen=True)
class FreeBlock:
    """A free region of the pool; ``size`` includes its header."""

    address: int
    size: int

    @property
    def end(self) -> int:
        return self.address + self.size


@dataclass(frozen=True)
class MemoryStats:
    """Usage counters of an allocator."""

    pool_size: int
    allocated: int
    free: int
    allocations: int
    frees: int


class _Arena:
    """Byte memory addressed by integer offsets."""

    def __init__(self, size: int) -> None:
        self._pool = bytearray(size)

    def _check_range(self, ptr: int, size: int) -> None:
        if ptr < 0 or size < 0 or ptr + size > len(self._pool):
            raise ValueError(f"range {ptr:#x}+{size} lies outside the pool")

    def _load(self, offset: int, width: int) -> int:
        return int.from_bytes(self._pool[offset:offset + width], "little")

    def _store(self, offset: int, width: int, value: int) -> None:
        self._pool[offset:offset + width] = value.to_bytes(width, "little")

    def _read_bytes(self, ptr: int, size: int) -> bytes:
        self._check_range(ptr, size)
        return bytes(self._pool[ptr:ptr + size])

    def _write_bytes(self, ptr: int, data: bytes) -> None:
        self._check_range(ptr, len(data))
        self._pool[ptr:ptr + len(data)] = data


class _FreeListBase(_Arena):
    """A pool that starts out as one free block covering all of it."""

    def __init__(self, pool_size: int, minimum: int) -> None:
        if pool_size < minimum:
            raise ValueError(f"pool size must be at least {minimum} bytes")
        super().__init__(pool_size)
        self.pool_size = pool_size
        self._free: list[FreeBlock] = [FreeBlock(0, pool_size)]

    @staticmethod
    def _check_size(size: int) -> None:
        if size < 0:
            raise ValueError("size must not be negative")

    def _free_list(self) -> list[FreeBlock]:
        return list(self._free)


class _StackFreeList(_FreeListBase):
    """Free list that takes freed blocks whole at its front.

    An empty free list is refilled with the entire pool, as on first use.
    """

    def _accepts(self, size: int) -> bool:
        """Validate a request; ``False`` means a zero-byte request."""
        self._check_size(size)
        if not self._free:
            self._free = [FreeBlock(0, self.pool_size)]
        return size != 0

    def _claim(self, total: int) -> FreeBlock | None:
        """Remove and return the first block of at least ``total`` bytes."""
        index = next(
            (i for i, block in enumerate(self._free) if block.size >= total), None
        )
        return None if index is None else self._free.pop(index)

    def _release(self, address: int, size: int) -> None:
        self._free.insert(0, FreeBlock(address, size))

    @staticmethod
    def _check_array(count: int, item_size: int) -> None:
        if count < 0 or item_size < 0:
            raise ValueError("count and item size must not be negative")


class FreeListAllocator(_FreeListBase):
    """Allocator that splits and coalesces blocks of a single pool.

    Pointers are integer offsets into the pool, pointing just past the
    block header, exactly where user data starts. The free list is kept
    in address order.
    """

    def __init__(self, pool_size: int = DEFAULT_POOL_SIZE) -> None:
        super().__init__(pool_size, MIN_BLOCK_SIZE)
        self._allocated: dict[int, int] = {}
        self._allocated_bytes = 0
        self._free_bytes = pool_size
        self._allocations = 0
        self._frees = 0

    def _block_size(self, ptr: int) -> int:
        address = ptr - ALLOCATED_HEADER_SIZE
        if address not in self._allocated:
            raise InvalidFreeError(f"pointer {ptr:#x} is not an allocated block")
        return self._allocated[address]

    def malloc(self, size: int) -> int | None:
        """Allocate ``size`` bytes; return ``None`` for a zero-byte request."""
        self._check_size(size)
        if size == 0:
            return None

        total = _align(size) + ALLOCATED_HEADER_SIZE
        for index, block in enumerate(self._free):
            if block.size >= total:
                break
        else:
            raise OutOfMemoryError(f"cannot allocate {size} bytes")

        if block.size >= total + MIN_BLOCK_SIZE:
            self._free[index] = FreeBlock(block.address + total, block.size - total)
            block_size = total
        else:
            del self._free[index]
            block_size = block.size

        self._allocated[block.address] = block_size
        self._allocated_bytes += block_size
        self._free_bytes -= block_size
        self._allocations += 1
        return block.address + ALLOCATED_HEADER_SIZE

    def free(self, ptr: int | None) -> None:
        """Return a block to the pool, merging it with adjacent free blocks."""
        if ptr is None:
            return
        block_size = self._block_size(ptr)
        address = ptr - ALLOCATED_HEADER_SIZE
        del self._allocated[address]

        self._allocated_bytes -= block_size
        self._free_bytes += block_size
        self._frees += 1

        block = FreeBlock(address, block_size)
        index = bisect.bisect_left([b.address for b in self._free], address)
        self._free.insert(index, block)

        if index + 1 < len(self._free) and block.end == self._free[index + 1].address:
            following = self._free.pop(index + 1)
            block = FreeBlock(block.address, block.size + following.size)
            self._free[index] = block

        if index > 0 and self._free[index - 1].end == block.address:
            preceding = self._free[index - 1]
            self._free[index - 1] = FreeBlock(preceding.address, preceding.size + block.size)
            del self._free[index]

    def realloc(self, ptr: int | None, new_size: int) -> int | None:
        """Resize a block, moving and copying its data when it must grow."""
        if ptr is None:
            return self.malloc(new_size)
        if new_size == 0:
            self.free(ptr)
            return None

        old_size = self._block_size(ptr) - ALLOCATED_HEADER_SIZE
        if new_size <= old_size:
            return ptr

        new_ptr = self.malloc(new_size)
        self._pool[new_ptr:new_ptr + old_size] = self._pool[ptr:ptr + old_size]
        self.free(ptr)
        return new_ptr

    def read(self, ptr: int, size: int) -> bytes:
        """Return ``size`` bytes of the pool starting at ``ptr``."""
        return self._read_bytes(ptr, size)

    def write(self, ptr: int, data: bytes) -> None:
        """Copy ``data`` into the pool at ``ptr``; block bounds are not enforced."""
        self._write_bytes(ptr, data)

    def free_blocks(self) -> list[FreeBlock]:
        """The free list, in address order."""
        return self._free_list()

    def stats(self) -> MemoryStats:
        return MemoryStats(
            pool_size=self.pool_size,
            allocated=self._allocated_bytes,
            free=self._free_bytes,
            allocations=self._allocations,
            frees=self._frees,
        )

    def format_stats(self) -> str:
        """Render the counters and the free list as text."""
        stats = self.stats()
        lines = [
            "",
            "--- Memory Allocator Statistics ---",
            f"Total Memory Pool Size: {stats.pool_size} bytes",
            f"Total Allocated Memory: {stats.allocated} bytes",
            f"Total Free Memory:      {stats.free} bytes",
            f"Total Allocations:      {stats.allocations}",
            f"Total Frees:            {stats.frees}",
            "",
            "--- Free List ---",
        ]
        lines.extend(
            f"Block {number}: Address = {block.address:#x}, Size = {block.size} bytes"
            for number, block in enumerate(self._free)
        )
        lines.append("-----------------------------------")
        lines.append("")
        return "\n".join(lines) + "\n"