"""Environment services consumed by the simulation."""
