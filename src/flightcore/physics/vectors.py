"""3D vector type shared by the integrator, weather model and recorder.

World axes follow the simulation convention: ``y`` is up, ``x``/``z`` span
the horizontal plane. The same type carries Euler angles (pitch=x, yaw=y,
roll=z) in radians.

Typical usage example:
    from flightcore.physics.vectors import Vector3

    position = Vector3(0.0, 10.0, 0.0)
    velocity = Vector3(50.0, 0.0, -10.0)
    position = position + velocity * dt
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt


@dataclass
class Vector3:
    """3D vector with the handful of operations the simulation needs.

    Attributes:
        x: X component (east-west, or pitch for rotations).
        y: Y component (up, or yaw for rotations).
        z: Z component (north-south, or roll for rotations).

    Examples:
        >>> Vector3(1.0, 2.0, 3.0) + Vector3(4.0, 5.0, 6.0)
        Vector3(x=5.0, y=7.0, z=9.0)
    """

    x: float
    y: float
    z: float

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> "Vector3":
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> "Vector3":
        """Divide vector by scalar.

        Raises:
            ZeroDivisionError: If scalar is zero.
        """
        if scalar == 0:
            raise ZeroDivisionError("Cannot divide vector by zero")
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def magnitude(self) -> float:
        """Length of the vector.

        Examples:
            >>> Vector3(3.0, 4.0, 0.0).magnitude()
            5.0
        """
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def horizontal_magnitude(self) -> float:
        """Length of the projection onto the horizontal (x/z) plane.

        Examples:
            >>> Vector3(3.0, 100.0, 4.0).horizontal_magnitude()
            5.0
        """
        return math.sqrt(self.x * self.x + self.z * self.z)

    def normalized(self) -> "Vector3":
        """Return a unit vector in the same direction.

        Raises:
            ValueError: If magnitude is zero.
        """
        mag = self.magnitude()
        if mag == 0:
            raise ValueError("Cannot normalize zero vector")
        return self / mag

    def copy(self) -> "Vector3":
        """Return an independent copy."""
        return Vector3(self.x, self.y, self.z)

    def is_finite(self) -> bool:
        """Check that no component is NaN or infinite."""
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def to_array(self) -> npt.NDArray[np.float64]:
        """Convert to a numpy array ``[x, y, z]``."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: npt.NDArray[np.float64]) -> "Vector3":
        """Create a vector from the first three elements of an array."""
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def zero(cls) -> "Vector3":
        """Create a zero vector (0, 0, 0)."""
        return cls(0.0, 0.0, 0.0)

    def __str__(self) -> str:
        return f"Vector3(x={self.x:.2f}, y={self.y:.2f}, z={self.z:.2f})"
