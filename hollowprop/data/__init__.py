"""Data storage, statistics and diagnostics."""
