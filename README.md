# heapsim

heapsim simulates classic heap allocators over a fixed byte pool. Addresses
are plain integer offsets into the pool. Every allocator has `read(ptr, size)`
and `write(ptr, data)` to move bytes in and out of its memory. These check only
that the range lies inside the pool, not inside a block, so overruns can be
staged on purpose.

## Allocators

- `heapsim.freelist.FreeListAllocator(pool_size=1 MiB)` is a first-fit
  allocator with a free list kept in address order. `malloc` splits a block
  when the remainder is large enough to stand alone. `free` merges the freed
  block with adjacent free blocks. `realloc` keeps the block when it is already
  big enough, and otherwise moves the data to a new block. `stats()` returns a
  `MemoryStats` record, `format_stats()` renders the counters and the free list
  as text, and `free_blocks()` lists `FreeBlock(address, size)` entries.
  `malloc(0)` returns `None`. A request that does not fit raises
  `OutOfMemoryError`, and freeing a pointer that is not an allocated block
  raises `InvalidFreeError`.
- `heapsim.sentinel.SentinelAllocator(pool_size=1 MiB)` is a debugging
  allocator. It writes a magic number into each block header, places a canary
  after the user data, and overwrites freed data with `0xCC`. Double frees and
  invalid pointers raise `InvalidFreeError`. A smashed canary raises
  `BufferOverflowError` once the block has been released. `malloc_array(count,
  item_size)` raises `AllocationOverflowError` when the product would overflow
  a 64-bit size.
- `heapsim.naive.NaiveAllocator(pool_size=1 MiB)` does no checking. Double
  frees and overflows pass silently, `malloc_array` wraps the product to 64
  bits, and a request that cannot be met returns `None`.
- `heapsim.bitmap.BitmapPool(block_size, block_count)` hands out blocks of one
  size, rounded up to a multiple of 8 bytes, and records which ones are in use
  with one bit per block. `alloc()` always returns the lowest free block and
  raises `OutOfMemoryError` when every block is in use. `free(ptr)` raises
  `InvalidFreeError` for `None` or for a pointer outside the pool.

The sentinel and naive allocators do not split or merge blocks. Each
allocation takes a whole free block, and freed blocks are pushed onto the front
of the free list. When the free list is empty, it is refilled with the entire
pool, as on first use.

All errors derive from `heapsim.errors.AllocatorError`. The subclasses are
`OutOfMemoryError` (also a `MemoryError`), `InvalidFreeError` (also a
`ValueError`), `BufferOverflowError` and `AllocationOverflowError` (also an
`OverflowError`).

## Example

```python
from heapsim.freelist import FreeListAllocator
from heapsim.sentinel import SentinelAllocator
from heapsim.errors import InvalidFreeError

heap = FreeListAllocator(1024 * 1024)
p = heap.malloc(100)
heap.write(p, b"This is a test string.")
p = heap.realloc(p, 200)
print(heap.read(p, 22))
heap.free(p)
print(heap.format_stats())

guarded = SentinelAllocator(1024 * 1024)
q = guarded.malloc(16)
guarded.free(q)
try:
    guarded.free(q)
except InvalidFreeError as exc:
    print("caught:", exc)
```

## Demonstration

The `heapsim-demo` command prints running reports to standard output. It has
three demonstrations:

- `basic`: the free-list walkthrough
- `comparison`: the naive allocator set against the sentinel allocator
- `sentinel`: the sentinel allocator and the bitmap pool

Without an argument, the command runs all three.

```
heapsim-demo
heapsim-demo comparison
```

The same demonstrations can be called from Python as
`heapsim.demo.run_basic_demo(out)`, `run_comparison(out)` and
`run_sentinel_demo(out)`. Each one writes its report to the text stream `out`.

## Limits

heapsim is a simulation. Its pools are Python `bytearray` objects, and it
neither manages nor replaces the memory of the Python process.

## Tests

```
pip install -e .[test]
pytest
```