"""FlightCore: headless flight simulation core.

Couples a kinematic flight integrator, a piston engine with failure
modeling and a weather model behind a per-tick driver.
"""

__version__ = "0.1.0"
