import pytest

from heapsim.naive import SIZE_MAX, NaiveAllocator


@pytest.fixture
def heap():
    return NaiveAllocator()


def test_block_holds_written_bytes(heap):
    ptr = heap.malloc(32)
    heap.write(ptr, b"hello world")
    assert heap.read(ptr, 11) == b"hello world"


def test_small_request_aligned_and_empty_request_none(heap):
    assert heap.malloc(3) % 8 == 0
    assert heap.malloc(0) is None


def test_free_of_none_changes_nothing(heap):
    heap.malloc(16)
    snapshot = heap.free_blocks()
    heap.free(None)
    assert heap.free_blocks() == snapshot


def test_overflow_goes_unnoticed(heap):
    ptr = heap.malloc(32)
    heap.write(ptr, b"A" * 40)
    heap.free(ptr)
    assert len(heap.free_blocks()) == 1


def test_double_free_duplicates_block_and_hands_it_out_twice(heap):
    ptr = heap.malloc(16)
    heap.free(ptr)
    heap.free(ptr)
    blocks = heap.free_blocks()
    assert len(blocks) == 2
    assert blocks[0] == blocks[1]
    assert [heap.malloc(16), heap.malloc(16)] == [ptr, ptr]


@pytest.mark.parametrize("first, second", [(32, 24), (32, 8)])
def test_released_or_exhausted_block_comes_back(heap, first, second):
    ptr = heap.malloc(first)
    assert heap.free_blocks() == []
    assert heap.malloc(second) == ptr


def test_freed_block_is_reused(heap):
    ptr = heap.malloc(32)
    heap.free(ptr)
    assert heap.malloc(24) == ptr


@pytest.mark.parametrize(
    "allocate",
    [lambda h: NaiveAllocator(64).malloc(100), lambda h: h.malloc_array(SIZE_MAX // 2, 4)],
    ids=["too-large", "huge-array"],
)
def test_failed_requests_return_none(heap, allocate):
    assert allocate(heap) is None


def test_array_size_wraps_to_small_block(heap):
    ptr = heap.malloc_array((1 << 62) + 1, 4)
    heap.write(ptr, b"wrap")
    assert heap.read(ptr, 4) == b"wrap"


@pytest.mark.parametrize(
    "misuse",
    [lambda h: h.free(h.pool_size + 8), lambda h: h.read(-1, 4)],
    ids=["free", "read"],
)
def test_outside_pool_rejected(heap, misuse):
    before = heap.free_blocks()
    with pytest.raises(ValueError) as excinfo:
        misuse(heap)
    assert "outside the pool" in str(excinfo.value)
    assert heap.free_blocks() == before