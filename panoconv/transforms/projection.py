"""
Projection Mapping Library
Pure functions converting between the coordinate spaces of a panorama:

- normalized texture UV of a lat-long (equirectangular) image
- spherical angles (theta, phi)
- 3D Euclidean directions
- per-face cubemap UV, or UV on a horizontal strip of six faces

Spherical convention: theta (azimuth) is measured from +X toward +Z and lies
in (-pi, pi]; phi (polar angle) is measured from +Y toward -Y and lies in
[0, pi].

Cubemap face order: +X, -X, +Y, -Y, +Z, -Z (indices 0..5).

Every function accepts plain floats or NumPy arrays; array inputs are
mapped element-wise. All math runs in float64.
"""

import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

import numpy as np

from .vector import Vector2, Vector3, UP
from ..config.defaults import CUBEMAP_FACE_COUNT

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


class ProjectionKind(Enum):
    """Panorama projections the converter can read and write"""
    LAT_LONG = "latlong"
    CUBEMAP = "cubemap"


class CubemapLayout(Enum):
    """Cubemap output layout formats"""
    STRIP = "strip"                     # 6:1 aspect, faces left to right
    SEPARATE_FACES = "separate-faces"   # 6 individual face images


# Direction of each face for remapped coordinates u', v' in [-1, 1)
_FACE_TABLE = (
    lambda u, v: (1.0, -v, u),      # +X
    lambda u, v: (-1.0, -v, -u),    # -X
    lambda u, v: (-u, 1.0, v),      # +Y
    lambda u, v: (-u, -1.0, -v),    # -Y
    lambda u, v: (-u, -v, 1.0),     # +Z
    lambda u, v: (u, -v, -1.0),     # -Z
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# === LAT-LONG ===

def euclidean_to_lat_long(direction: Vector3) -> Vector2:
    """Direction on the unit sphere -> (theta, phi)"""
    theta = np.arctan2(direction.z, direction.x)
    cos_phi = np.clip(direction.normalized().dot(UP), -1.0, 1.0)
    return Vector2(theta, np.arccos(cos_phi))


def lat_long_to_uv(angles: Vector2) -> Vector2:
    """
    (theta, phi) -> normalized lat-long texture coordinate.

    theta is in (-pi, pi], so x can be negative; the wraparound sampler
    resolves it, no offset is applied here.
    """
    return Vector2(angles.x / TWO_PI, angles.y / math.pi)


def lat_long_uv_to_angles(uv: Vector2) -> Vector2:
    """Normalized lat-long texture coordinate -> (theta, phi), theta in [0, 2*pi)"""
    return Vector2(uv.x * TWO_PI, uv.y * math.pi)


def lat_long_to_euclidean(angles: Vector2) -> Vector3:
    """(theta, phi) -> unit direction; inverse of euclidean_to_lat_long"""
    theta, phi = angles.x, angles.y
    sin_phi = np.sin(phi)
    return Vector3(sin_phi * np.cos(theta), np.cos(phi), sin_phi * np.sin(theta))


def target_size_for_lat_long(pixel_count: int) -> Tuple[int, int]:
    """2:1 lat-long image holding roughly pixel_count pixels"""
    height = _round_half_up(math.sqrt(pixel_count / 2.0))
    return height * 2, height


# === CUBEMAP ===

def _face_uv_to_euclidean(uv: Vector2, face) -> Vector3:
    u = 2.0 * uv.x - 1.0
    v = 2.0 * uv.y - 1.0

    if np.ndim(face) == 0:
        face = int(face)
        if not (0 <= face < CUBEMAP_FACE_COUNT):
            raise ValueError(f"Face index must be in 0..{CUBEMAP_FACE_COUNT - 1}, got {face}")
        return Vector3(*_FACE_TABLE[face](u, v))

    # Per-element faces: evaluate every row of the table and pick
    candidates = [entry(u, v) for entry in _FACE_TABLE]
    return Vector3(*(np.choose(face, [c[axis] for c in candidates]) for axis in range(3)))


def cubemap_uv_to_euclidean(uv: Vector2, face=None) -> Vector3:
    """
    Cubemap UV -> direction vector (not normalized).

    With a face index, uv is the coordinate inside that face. Without one,
    uv addresses a horizontal strip of six faces: face = floor(6u) mod 6 and
    the in-face u is frac(6u).
    """
    if face is None:
        scaled = np.asarray(uv.x, dtype=np.float64) * CUBEMAP_FACE_COUNT
        whole = np.floor(scaled)
        # mod 6 guards rounding at the u = 1.0 boundary
        face = whole.astype(np.intp) % CUBEMAP_FACE_COUNT
        uv = Vector2(scaled - whole, uv.y)
    return _face_uv_to_euclidean(uv, face)


def cubemap_uv_to_lat_long(uv: Vector2, face=None) -> Vector2:
    return euclidean_to_lat_long(cubemap_uv_to_euclidean(uv, face))


def euclidean_to_cubemap_uv(direction: Vector3):
    """
    Direction -> (face, in-face uv) by major-axis selection.

    Inverts the face table. Ties between axes resolve X, then Y, then Z.
    The direction must not be zero.
    """
    x = np.asarray(direction.x, dtype=np.float64)
    y = np.asarray(direction.y, dtype=np.float64)
    z = np.asarray(direction.z, dtype=np.float64)
    ax, ay, az = np.abs(x), np.abs(y), np.abs(z)

    x_major = (ax >= ay) & (ax >= az)
    y_major = ~x_major & (ay >= az)

    face = np.where(
        x_major, np.where(x >= 0, 0, 1),
        np.where(y_major, np.where(y >= 0, 2, 3), np.where(z >= 0, 4, 5))
    )
    major = np.where(x_major, ax, np.where(y_major, ay, az))

    u = np.choose(face, [z, -z, -x, -x, -x, x]) / major
    v = np.choose(face, [-y, -y, z, -z, -y, -y]) / major
    return face, Vector2((u + 1.0) * 0.5, (v + 1.0) * 0.5)


def lat_long_to_cubemap_uv(angles: Vector2, face_size: Optional[int] = None) -> Vector2:
    """
    (theta, phi) -> normalized coordinate on a horizontal strip cubemap.

    When face_size is given the coordinate is snapped onto the texel that
    covers the direction (index floor(u * face_size), clamped to the face),
    so nearest-neighbour lookups never bleed into the neighbouring face or
    wrap to the top row.
    """
    face, uv = euclidean_to_cubemap_uv(lat_long_to_euclidean(angles))
    u, v = uv.x, uv.y
    if face_size is not None:
        u = np.clip(np.floor(u * face_size), 0, face_size - 1) / face_size
        v = np.clip(np.floor(v * face_size), 0, face_size - 1) / face_size
    return Vector2((face + u) / CUBEMAP_FACE_COUNT, v)


def target_size_for_cubemap(pixel_count: int) -> Tuple[int, int]:
    """
    Strip cubemap size for a pixel budget.

    Per-face edge h = round(sqrt(pixel_count / 6)); the strip is 6h x h.
    A separate-faces layout uses six h x h images instead.
    """
    face_size = _round_half_up(math.sqrt(pixel_count / float(CUBEMAP_FACE_COUNT)))
    return face_size * CUBEMAP_FACE_COUNT, face_size


# === DISPATCH TABLE ===

@dataclass(frozen=True)
class Projection:
    """
    Operations one projection kind provides to the renderer.

    target_size(pixel_count) -> (width, height)
    uv_to_lat_long(uv) -> angles, for this projection as destination
    lat_long_to_uv(angles, source_size) -> uv, for this projection as source;
        source_size is the (width, height) of the image being sampled
    """
    kind: ProjectionKind
    target_size: Callable
    uv_to_lat_long: Callable
    lat_long_to_uv: Callable


def _lat_long_source_uv(angles, source_size=None):
    return lat_long_to_uv(angles)


def _cubemap_source_uv(angles, source_size=None):
    face_size = source_size[1] if source_size is not None else None
    return lat_long_to_cubemap_uv(angles, face_size)


def _cubemap_target_lat_long(uv):
    return cubemap_uv_to_lat_long(uv)


PROJECTIONS = {
    ProjectionKind.LAT_LONG: Projection(
        kind=ProjectionKind.LAT_LONG,
        target_size=target_size_for_lat_long,
        uv_to_lat_long=lat_long_uv_to_angles,
        lat_long_to_uv=_lat_long_source_uv,
    ),
    ProjectionKind.CUBEMAP: Projection(
        kind=ProjectionKind.CUBEMAP,
        target_size=target_size_for_cubemap,
        uv_to_lat_long=_cubemap_target_lat_long,
        lat_long_to_uv=_cubemap_source_uv,
    ),
}


def get_projection(kind) -> Projection:
    """Look up a projection by ProjectionKind or its string value ('latlong', 'cubemap')"""
    if not isinstance(kind, ProjectionKind):
        kind = ProjectionKind(kind)
    return PROJECTIONS[kind]
