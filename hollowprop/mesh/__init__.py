"""Simulation time and frequency grids."""
