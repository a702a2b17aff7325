"""Simulated heap allocators over fixed byte pools: free-list, sentinel, naive and bitmap."""

__version__ = "0.1.0"