import math

import numpy as np
import pytest

from panoconv.transforms import (
    Vector2, Vector3, ProjectionKind, PROJECTIONS, get_projection,
    euclidean_to_lat_long, lat_long_to_uv, lat_long_uv_to_angles, lat_long_to_euclidean,
    cubemap_uv_to_euclidean, cubemap_uv_to_lat_long, euclidean_to_cubemap_uv,
    lat_long_to_cubemap_uv, target_size_for_cubemap, target_size_for_lat_long
)

FACE_CENTERS = [
    (1.0, 0.0, 0.0),    # +X
    (-1.0, 0.0, 0.0),   # -X
    (0.0, 1.0, 0.0),    # +Y
    (0.0, -1.0, 0.0),   # -Y
    (0.0, 0.0, 1.0),    # +Z
    (0.0, 0.0, -1.0),   # -Z
]


def as_tuple(v):
    return (float(v.x), float(v.y), float(v.z))


# === SPHERICAL MAPPING ===

def test_equator_prime_meridian():
    angles = euclidean_to_lat_long(Vector3(1.0, 0.0, 0.0))
    assert angles.x == 0.0
    assert angles.y == math.pi / 2


def test_north_pole_has_zero_phi():
    # theta is undefined at the pole; only phi is checked
    assert euclidean_to_lat_long(Vector3(0.0, 1.0, 0.0)).y == 0.0


def test_south_pole_has_pi_phi():
    assert euclidean_to_lat_long(Vector3(0.0, -1.0, 0.0)).y == pytest.approx(math.pi)


def test_azimuth_runs_from_x_toward_z():
    assert euclidean_to_lat_long(Vector3(0.0, 0.0, 1.0)).x == pytest.approx(math.pi / 2)
    assert euclidean_to_lat_long(Vector3(0.0, 0.0, -1.0)).x == pytest.approx(-math.pi / 2)
    assert euclidean_to_lat_long(Vector3(-1.0, 0.0, 0.0)).x == pytest.approx(math.pi)


def test_lat_long_ignores_direction_length():
    short = euclidean_to_lat_long(Vector3(1.0, 1.0, 0.5))
    long = euclidean_to_lat_long(Vector3(4.0, 4.0, 2.0))
    assert (short.x, short.y) == pytest.approx((long.x, long.y))


def test_lat_long_to_uv():
    uv = lat_long_to_uv(Vector2(math.pi / 2, math.pi / 2))
    assert (uv.x, uv.y) == pytest.approx((0.25, 0.5))


def test_lat_long_to_uv_keeps_negative_azimuth():
    uv = lat_long_to_uv(Vector2(-math.pi / 2, math.pi))
    assert (uv.x, uv.y) == pytest.approx((-0.25, 1.0))


def test_lat_long_uv_to_angles_inverts_lat_long_to_uv():
    angles = lat_long_uv_to_angles(Vector2(0.375, 0.25))
    uv = lat_long_to_uv(angles)
    assert (uv.x, uv.y) == pytest.approx((0.375, 0.25))


def test_lat_long_to_euclidean_inverts_euclidean_to_lat_long():
    rng = np.random.default_rng(3)
    theta = rng.uniform(-math.pi + 0.01, math.pi - 0.01, size=200)
    phi = rng.uniform(0.05, math.pi - 0.05, size=200)
    direction = lat_long_to_euclidean(Vector2(theta, phi))
    np.testing.assert_allclose(direction.length(), 1.0)
    angles = euclidean_to_lat_long(direction)
    np.testing.assert_allclose(angles.x, theta, atol=1e-12)
    np.testing.assert_allclose(angles.y, phi, atol=1e-12)


# === CUBEMAP FACE TABLE ===

@pytest.mark.parametrize("face, expected", list(enumerate(FACE_CENTERS)))
def test_face_centers(face, expected):
    assert as_tuple(cubemap_uv_to_euclidean(Vector2(0.5, 0.5), face)) == expected


@pytest.mark.parametrize("face, expected", [
    # uv = (0.25, 0.75) -> u' = -0.5, v' = 0.5
    (0, (1.0, -0.5, -0.5)),
    (1, (-1.0, -0.5, 0.5)),
    (2, (0.5, 1.0, 0.5)),
    (3, (0.5, -1.0, -0.5)),
    (4, (0.5, -0.5, 1.0)),
    (5, (-0.5, -0.5, -1.0)),
])
def test_face_table(face, expected):
    assert as_tuple(cubemap_uv_to_euclidean(Vector2(0.25, 0.75), face)) == expected


def test_face_index_out_of_range():
    with pytest.raises(ValueError):
        cubemap_uv_to_euclidean(Vector2(0.5, 0.5), 6)
    with pytest.raises(ValueError):
        cubemap_uv_to_euclidean(Vector2(0.5, 0.5), -1)


@pytest.mark.parametrize("face, expected", list(enumerate(FACE_CENTERS)))
def test_strip_face_centers(face, expected):
    direction = cubemap_uv_to_euclidean(Vector2((face + 0.5) / 6.0, 0.5))
    assert as_tuple(direction) == pytest.approx(expected, abs=1e-12)


def test_strip_wraps_at_right_edge():
    # u = 1.0 falls back onto face 0 (+X) at its left edge
    assert as_tuple(cubemap_uv_to_euclidean(Vector2(1.0, 0.5))) == (1.0, 0.0, -1.0)


def test_strip_variant_accepts_arrays():
    u = np.array([0.5 / 6.0, 2.5 / 6.0, 5.5 / 6.0])
    direction = cubemap_uv_to_euclidean(Vector2(u, np.full(3, 0.5)))
    np.testing.assert_allclose(direction.x, [1.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(direction.y, [0.0, 1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(direction.z, [0.0, 0.0, -1.0], atol=1e-12)


def test_cubemap_uv_to_lat_long_composes():
    angles = cubemap_uv_to_lat_long(Vector2(0.5, 0.5), 4)
    assert (angles.x, angles.y) == pytest.approx((math.pi / 2, math.pi / 2))

    strip = cubemap_uv_to_lat_long(Vector2(4.5 / 6.0, 0.5))
    assert (strip.x, strip.y) == pytest.approx((math.pi / 2, math.pi / 2))


# === CUBEMAP INVERSE ===

def test_euclidean_to_cubemap_uv_inverts_face_table():
    rng = np.random.default_rng(11)
    directions = rng.normal(size=(3, 500))
    direction = Vector3(*directions)
    face, uv = euclidean_to_cubemap_uv(direction)

    assert face.min() >= 0 and face.max() <= 5
    assert uv.x.min() >= 0.0 and uv.x.max() <= 1.0
    assert uv.y.min() >= 0.0 and uv.y.max() <= 1.0

    back = cubemap_uv_to_euclidean(uv, face).normalized()
    unit = direction.normalized()
    np.testing.assert_allclose(back.x, unit.x, atol=1e-12)
    np.testing.assert_allclose(back.y, unit.y, atol=1e-12)
    np.testing.assert_allclose(back.z, unit.z, atol=1e-12)


@pytest.mark.parametrize("face, center", list(enumerate(FACE_CENTERS)))
def test_euclidean_to_cubemap_uv_face_centers(face, center):
    found, uv = euclidean_to_cubemap_uv(Vector3(*center))
    assert int(found) == face
    assert (float(uv.x), float(uv.y)) == pytest.approx((0.5, 0.5))


def test_lat_long_to_cubemap_uv_strip_coordinates():
    # +Z direction: face 4, centre of the face
    uv = lat_long_to_cubemap_uv(Vector2(math.pi / 2, math.pi / 2))
    assert (float(uv.x), float(uv.y)) == pytest.approx((4.5 / 6.0, 0.5))


def test_lat_long_to_cubemap_uv_snaps_to_face_texels():
    rng = np.random.default_rng(5)
    theta = rng.uniform(-math.pi, math.pi, size=1000)
    phi = rng.uniform(0.0, math.pi, size=1000)
    face_size = 7
    uv = lat_long_to_cubemap_uv(Vector2(theta, phi), face_size)

    columns = uv.x * 6 * face_size
    rows = uv.y * face_size
    np.testing.assert_allclose(columns, np.round(columns), atol=1e-9)
    np.testing.assert_allclose(rows, np.round(rows), atol=1e-9)
    assert rows.max() <= face_size - 1 + 1e-9

    # The snapped texel stays on the face the direction belongs to
    face, _ = euclidean_to_cubemap_uv(lat_long_to_euclidean(Vector2(theta, phi)))
    np.testing.assert_array_equal(np.round(columns).astype(int) // face_size, face)


# === TARGET SIZING ===

def test_target_size_for_cubemap():
    assert target_size_for_cubemap(4096 * 2048) == (7092, 1182)


@pytest.mark.parametrize("pixel_count, expected", [
    (6, (6, 1)),
    (600, (60, 10)),
    (2048, (108, 18)),
])
def test_target_size_for_cubemap_small(pixel_count, expected):
    assert target_size_for_cubemap(pixel_count) == expected


def test_target_size_for_lat_long():
    assert target_size_for_lat_long(7092 * 1182) == (4094, 2047)
    assert target_size_for_lat_long(444 * 74) == (256, 128)


# === DISPATCH TABLE ===

def test_dispatch_table_covers_every_kind():
    assert set(PROJECTIONS) == set(ProjectionKind)
    for kind, projection in PROJECTIONS.items():
        assert projection.kind is kind


def test_get_projection_accepts_strings():
    assert get_projection("latlong") is PROJECTIONS[ProjectionKind.LAT_LONG]
    assert get_projection(ProjectionKind.CUBEMAP) is PROJECTIONS[ProjectionKind.CUBEMAP]
    with pytest.raises(ValueError):
        get_projection("mercator")
