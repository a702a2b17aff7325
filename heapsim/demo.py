"""Demonstrations of the allocators, printed as a running report."""

from __future__ import annotations

import argparse
import sys
from typing import TextIO

from .bitmap import BitmapPool
from .errors import (
    AllocationOverflowError,
    BufferOverflowError,
    InvalidFreeError,
    OutOfMemoryError,
)
from .freelist import FreeListAllocator
from .naive import SIZE_MAX, NaiveAllocator
from .sentinel import SentinelAllocator

SAMPLE_TEXT = "This is a test string."
RULE = "--------------------------------------------------------"


def _c_string(allocator, ptr: int, limit: int) -> str:
    """Read a NUL-terminated string of at most ``limit`` bytes."""
    data = allocator.read(ptr, limit)
    return data.split(b"\0", 1)[0].decode("ascii", errors="replace")


def _store_c_string(allocator, ptr: int, text: str) -> None:
    allocator.write(ptr, text.encode("ascii") + b"\0")


def run_basic_demo(out: TextIO) -> None:
    """Exercise the splitting and coalescing free-list allocator."""
    allocator = FreeListAllocator()

    def report() -> None:
        out.write(allocator.format_stats())

    def allocate(size: int, name: str) -> int | None:
        print(f"Allocating {size} bytes for {name}...", file=out)
        try:
            ptr = allocator.malloc(size)
        except OutOfMemoryError:
            print("customMalloc: Out of memory", file=out)
            ptr = None
        report()
        return ptr

    def release(ptr: int | None, label: str) -> None:
        print(f"Freeing {label}...", file=out)
        allocator.free(ptr)
        report()

    print("Initial state of the allocator:", file=out)
    report()

    ptr1 = allocate(128, "ptr1")
    ptr2 = allocate(256, "ptr2")
    ptr3 = allocate(512, "ptr3")
    release(ptr2, "ptr2 (256 bytes)")
    ptr4 = allocate(64, "ptr4")
    release(ptr1, "ptr1 (128 bytes)")
    release(ptr3, "ptr3 (512 bytes)")
    release(ptr4, "ptr4 (64 bytes)")

    print("Allocating 100 bytes for realloc_ptr...", file=out)
    realloc_ptr = allocator.malloc(100)
    _store_c_string(allocator, realloc_ptr, SAMPLE_TEXT)
    print(f"Original string: {_c_string(allocator, realloc_ptr, 100)}", file=out)
    report()

    print("Reallocating realloc_ptr to 200 bytes...", file=out)
    realloc_ptr = allocator.realloc(realloc_ptr, 200)
    print(
        f"String after realloc: {_c_string(allocator, realloc_ptr, 200)}", file=out
    )
    report()

    release(realloc_ptr, "realloc_ptr")


def run_comparison(out: TextIO) -> None:
    """Show how the naive and sentinel allocators react to common bugs."""
    naive = NaiveAllocator()
    sentinel = SentinelAllocator()

    print("", file=out)
    print("=========================================================", file=out)
    print("     CUSTOM ALLOCATOR SHOWDOWN: NORMAL vs. MODIFIED/SENTINEL", file=out)
    print("=========================================================", file=out)
    print("", file=out)

    print("---[ Test 1: Buffer Overflow ]--------------------------", file=out)
    print(">>> Running on NORMAL Allocator:", file=out)
    naive_ptr1 = naive.malloc(32)
    naive.write(naive_ptr1, b"A" * 40)
    naive.free(naive_ptr1)
    print(
        "    RESULT: No error reported. The heap is now silently corrupted.\n",
        file=out,
    )

    print(">>> Running on SENTINEL Allocator:", file=out)
    sentinel_ptr1 = sentinel.malloc(32)
    sentinel.write(sentinel_ptr1, b"A" * 40)
    try:
        sentinel.free(sentinel_ptr1)
    except BufferOverflowError:
        print("SENTINEL ERROR: Buffer overflow detected! Canary was smashed.", file=out)
    print("    RESULT: The error was successfully detected and reported.", file=out)
    print(RULE + "\n", file=out)

    print("---[ Test 2: Double Free ]------------------------------", file=out)
    print(">>> Running on NORMAL Allocator:", file=out)
    naive_ptr2 = naive.malloc(16)
    naive.free(naive_ptr2)
    naive.free(naive_ptr2)
    print(
        "    RESULT: No error reported. The free list is now corrupted.\n", file=out
    )

    print(">>> Running on SENTINEL Allocator:", file=out)
    sentinel_ptr2 = sentinel.malloc(16)
    sentinel.free(sentinel_ptr2)
    try:
        sentinel.free(sentinel_ptr2)
    except InvalidFreeError:
        print(
            "SENTINEL ERROR: Double-free or invalid pointer detected!", file=out
        )
    print("    RESULT: The error was successfully detected and reported.", file=out)
    print(RULE + "\n", file=out)

    print("---[ Test 3: Integer Overflow ]-------------------------", file=out)
    print(">>> Running on NORMAL Allocator:", file=out)
    naive_ptr3 = naive.malloc_array(SIZE_MAX // 2, 4)
    if naive_ptr3 is not None:
        print("    RESULT: DANGEROUSLY returned a non-NULL pointer.\n", file=out)
    else:
        print(
            "    RESULT: Allocation failed (as expected), but without a clear error.\n",
            file=out,
        )

    print(">>> Running on Modified/SENTINEl Allocator:", file=out)
    try:
        sentinel.malloc_array(SIZE_MAX // 2, 4)
    except AllocationOverflowError:
        print(
            "SENTINEL ERROR: Integer overflow in array allocation request.", file=out
        )
        print(
            "    RESULT: SAFELY returned NULL after detecting the overflow.", file=out
        )
    print(RULE + "\n", file=out)


def run_sentinel_demo(out: TextIO) -> None:
    """Walk through the sentinel allocator and the bitmap pool."""
    print("--- DEMONSTRATING THE SENTINEL ALLOCATOR SUITE ---\n", file=out)

    allocator = SentinelAllocator()

    def guarded_free(ptr: int | None) -> None:
        try:
            allocator.free(ptr)
        except InvalidFreeError:
            print(
                "SENTINEL ERROR: Attempt to free invalid pointer or "
                "double-free detected!",
                file=out,
            )
        except BufferOverflowError:
            print(
                "SENTINEL ERROR: Buffer overflow detected! Canary was smashed.",
                file=out,
            )

    print("--- 1. Sentinel General-Purpose Allocator Demo ---", file=out)
    print("Allocating 32 bytes...", file=out)
    ptr = allocator.malloc(32)
    _store_c_string(allocator, ptr, SAMPLE_TEXT)
    print(f"String content: {_c_string(allocator, ptr, 32)}", file=out)

    print("\nTEST: Simulating buffer overflow...", file=out)
    allocator.write(ptr + 40, b"X")
    print("Freeing the pointer...", file=out)
    guarded_free(ptr)

    print("\nTEST: Simulating double-free...", file=out)
    ptr2 = allocator.malloc(16)
    guarded_free(ptr2)
    print("Attempting to free the same pointer again...", file=out)
    guarded_free(ptr2)

    print("\n--- 2. Fail-Safe Array Allocator Demo ---", file=out)
    print("Attempting to allocate a huge array that would overflow...", file=out)
    try:
        allocator.malloc_array(SIZE_MAX // 2, 8)
    except AllocationOverflowError:
        print(
            "SENTINEL ERROR: Integer overflow in array allocation request.", file=out
        )
        print(
            "SUCCESS: The fail-safe check correctly prevented the allocation.",
            file=out,
        )

    print("\n--- 3. Minimalist Bitmap Pool Demo ---", file=out)
    print("Creating a pool for 128 objects of 64 bytes each.", file=out)
    pool = BitmapPool(64, 128)
    obj1 = pool.alloc()
    pool.free(obj1)
    obj2 = pool.alloc()
    print(
        "Pool allocated one object, freed it, and allocated another at the "
        f"same address: {obj2:#x}",
        file=out,
    )

    print("\n--- DEMO COMPLETE ---", file=out)


_DEMOS = {
    "basic": run_basic_demo,
    "comparison": run_comparison,
    "sentinel": run_sentinel_demo,
}


def main(argv: list[str] | None = None) -> int:
    """Run one demonstration, or all of them in turn."""
    parser = argparse.ArgumentParser(
        prog="heapsim", description="Demonstrate the simulated allocators."
    )
    parser.add_argument(
        "demo",
        nargs="?",
        default="all",
        choices=[*_DEMOS, "all"],
        help="which demonstration to run (default: all)",
    )
    args = parser.parse_args(argv)
    chosen = list(_DEMOS.values()) if args.demo == "all" else [_DEMOS[args.demo]]
    for demo in chosen:
        demo(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())