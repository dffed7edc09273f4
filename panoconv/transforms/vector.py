"""
Vector primitives used by the projection mappings.

Components are plain floats or NumPy arrays of equal shape, so the same
Vector3 can describe a single direction or a whole grid of them.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Vector2:
    """Normalized UV coordinate or (theta, phi) angle pair"""

    x: object
    y: object


@dataclass(frozen=True)
class Vector3:
    """Point or direction in Euclidean space"""

    x: object
    y: object
    z: object

    def length(self):
        return np.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self):
        """
        Unit-length copy of this vector.

        Raises:
            ValueError: if any component vector has zero length
        """
        length = self.length()
        if np.any(length == 0):
            raise ValueError("Cannot normalize a zero-length vector")
        return Vector3(self.x / length, self.y / length, self.z / length)

    def dot(self, other):
        return self.x * other.x + self.y * other.y + self.z * other.z


# +Y pole the polar angle is measured from
UP = Vector3(0.0, 1.0, 0.0)
