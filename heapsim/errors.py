"""Exceptions raised by the simulated allocators."""


class AllocatorError(Exception):
    """Base class for every allocator failure."""


class OutOfMemoryError(AllocatorError, MemoryError):
    pass


class InvalidFreeError(AllocatorError, ValueError):
    pass


class BufferOverflowError(AllocatorError):
    pass


class AllocationOverflowError(AllocatorError, OverflowError):
    pass