"""Numerical helper functions."""
