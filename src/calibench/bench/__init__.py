"""Measurement core for calibench.

Provides the sample runner and calibration protocol that turn a single
call of an opaque benchmark body into stable per-iteration timings,
the integer statistics reduced from those samples, and deterministic
selection of which registered benchmarks to run.
"""
