"""Physical models: gases, modes, pulses and nonlinear responses."""
