import pytest

from heapsim.bitmap import BitmapPool
from heapsim.errors import InvalidFreeError, OutOfMemoryError


def test_free_then_alloc_reuses_address():
    pool = BitmapPool(64, 128)
    first = pool.alloc()
    pool.free(first)
    assert pool.alloc() == first


def test_all_blocks_distinct_and_on_block_boundaries():
    pool = BitmapPool(64, 40)
    addresses = [pool.alloc() for _ in range(40)]
    assert len(set(addresses)) == 40
    assert all(address % pool.block_size == 0 for address in addresses)
    assert all(0 <= address < pool.size for address in addresses)


def test_exhaustion_raises():
    pool = BitmapPool(16, 3)
    for _ in range(3):
        pool.alloc()
    with pytest.raises(OutOfMemoryError):
        pool.alloc()


def test_empty_pool_cannot_allocate():
    pool = BitmapPool(16, 0)
    with pytest.raises(OutOfMemoryError):
        pool.alloc()


def test_lowest_free_block_is_reused():
    pool = BitmapPool(32, 5)
    addresses = [pool.alloc() for _ in range(5)]
    pool.free(addresses[3])
    pool.free(addresses[1])
    assert pool.alloc() == addresses[1]
    assert pool.alloc() == addresses[3]


def test_block_size_is_aligned():
    pool = BitmapPool(10, 4)
    assert pool.block_size % 8 == 0
    assert pool.block_size >= 10
    assert pool.size == pool.block_size * 4


def test_free_inside_block_releases_it():
    pool = BitmapPool(64, 2)
    first = pool.alloc()
    pool.alloc()
    pool.free(first + 5)
    assert pool.alloc() == first


def test_free_outside_pool_rejected():
    pool = BitmapPool(64, 2)
    with pytest.raises(InvalidFreeError):
        pool.free(pool.size)


def test_free_none_rejected():
    pool = BitmapPool(64, 2)
    with pytest.raises(InvalidFreeError):
        pool.free(None)


def test_write_then_read_round_trip():
    pool = BitmapPool(64, 2)
    ptr = pool.alloc()
    pool.write(ptr, b"payload")
    assert pool.read(ptr, 7) == b"payload"


def test_write_outside_pool_rejected():
    pool = BitmapPool(8, 1)
    with pytest.raises(ValueError):
        pool.write(4, b"too long")


@pytest.mark.parametrize("block_size, block_count", [(0, 4), (8, -1)])
def test_invalid_construction(block_size, block_count):
    with pytest.raises(ValueError):
        BitmapPool(block_size, block_count)