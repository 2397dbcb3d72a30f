# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Immutable 3-vectors and Cartesian orbital states.

Components are plain floats; ``from_array`` builds a vector from any
indexable of three numbers (numpy arrays included).
"""
import math
from dataclasses import dataclass

_NORMALIZE_EPS = 1e-14


@dataclass(frozen=True)
class Vector3:
    """Cartesian quantity (SI units)."""
    x: float
    y: float
    z: float

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def norm_sq(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def norm(self) -> float:
        return math.sqrt(self.norm_sq())

    def normalized(self) -> "Vector3 | None":
        """Unit vector, or None for a zero / non-finite vector."""
        m = self.norm()
        if not math.isfinite(m) or m <= _NORMALIZE_EPS:
            return None
        return self * (1.0 / m)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    @classmethod
    def from_array(cls, arr) -> "Vector3":
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))


ZERO = Vector3(0.0, 0.0, 0.0)
UNIT_Z = Vector3(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class OrbitalState:
    """Instantaneous kinematics: position (m) and velocity (m/s)."""
    position: Vector3
    velocity: Vector3
