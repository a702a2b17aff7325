[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "heapsim"
version = "0.1.0"
description = "Simulated heap allocators: a coalescing free list, a guarded sentinel allocator, a naive allocator and a bitmap pool"
requires-python = ">=3.10"
dependencies = []
keywords = ["allocator", "malloc", "free list", "memory pool", "bitmap", "simulation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
heapsim-demo = "heapsim.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["heapsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
