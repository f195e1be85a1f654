"""Propagation solvers."""
