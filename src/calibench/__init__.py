"""calibench — calibrated micro-benchmarks for in-process Python callables."""

__version__ = "0.1.0"
