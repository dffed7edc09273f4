"""
Projection Rendering Driver
Resamples a source panorama into a destination panorama of another projection.

For every destination pixel the centre coordinate ((col + 0.5) / width,
(row + 0.5) / height) is mapped through the target projection's
uv_to_lat_long and the source projection's lat_long_to_uv, and the wrapped
nearest source pixel is copied over.

Pixels are independent, so the destination is split into disjoint row bands
that can run on a thread pool; the source is only ever read. NumPy releases
the GIL for the heavy array work.

For a strip cubemap destination the face-sharing path computes one face's
(u, v) grid per band and reuses it for all six faces. It produces the same
pixels as the generic path.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Tuple

import numpy as np

from .vector import Vector2
from .projection import (
    ProjectionKind, get_projection, cubemap_uv_to_lat_long
)
from ..config.defaults import CUBEMAP_FACE_COUNT, DEFAULT_WORKERS, DEFAULT_SHARE_FACES
from ..imaging.image_buffer import ImageBuffer, copy_pixel

logger = logging.getLogger(__name__)


def pixel_centers(width: int, height: int, row_start: int = 0, row_stop: int = None):
    """
    Centre-sampled normalized coordinates of a row band.

    Returns:
        u, v: arrays of shape (row_stop - row_start, width)
    """
    if row_stop is None:
        row_stop = height
    cols = (np.arange(width, dtype=np.float64) + 0.5) / width
    rows = (np.arange(row_start, row_stop, dtype=np.float64) + 0.5) / height
    return np.meshgrid(cols, rows)


def partition_rows(height: int, parts: int) -> List[Tuple[int, int]]:
    """Split [0, height) into at most `parts` contiguous, disjoint bands"""
    parts = max(1, min(parts, height))
    bounds = np.linspace(0, height, parts + 1).round().astype(int)
    return [(int(start), int(stop)) for start, stop in zip(bounds[:-1], bounds[1:]) if stop > start]


def destination_size(source: ImageBuffer, target_kind) -> Tuple[int, int]:
    """(width, height) of the destination, sized from the source pixel count"""
    return get_projection(target_kind).target_size(source.pixel_count)


def is_strip(buffer: ImageBuffer) -> bool:
    return buffer.width == buffer.height * CUBEMAP_FACE_COUNT


def _check_band(destination: ImageBuffer, row_start: int, row_stop: int):
    if not (0 <= row_start <= row_stop <= destination.height):
        raise ValueError(f"Row band [{row_start}, {row_stop}) outside 0..{destination.height}")


# === SAMPLE MAPS ===

def sample_map_rows(source: ImageBuffer, source_kind, destination_shape, target_kind,
                    row_start: int, row_stop: int):
    """
    Source pixel indices for a band of destination rows (generic path).

    Args:
        destination_shape: (width, height) of the destination image

    Returns:
        rows, cols: index arrays of shape (row_stop - row_start, width)
    """
    width, height = destination_shape
    target = get_projection(target_kind)
    origin = get_projection(source_kind)

    u, v = pixel_centers(width, height, row_start, row_stop)
    angles = target.uv_to_lat_long(Vector2(u, v))
    source_uv = origin.lat_long_to_uv(angles, (source.width, source.height))
    return source.sample_indices(source_uv.x, source_uv.y)


def strip_sample_map_rows(source: ImageBuffer, source_kind, face_size: int,
                          row_start: int, row_stop: int):
    """
    Source pixel indices for a band of rows of a strip cubemap destination.

    One face's (u, v) grid is computed once and mapped through every face
    index; face f lands at columns [f * face_size, (f + 1) * face_size).
    """
    origin = get_projection(source_kind)
    u, v = pixel_centers(face_size, face_size, row_start, row_stop)
    face_uv = Vector2(u, v)

    band = row_stop - row_start
    rows = np.empty((band, face_size * CUBEMAP_FACE_COUNT), dtype=np.intp)
    cols = np.empty_like(rows)
    for face in range(CUBEMAP_FACE_COUNT):
        angles = cubemap_uv_to_lat_long(face_uv, face)
        source_uv = origin.lat_long_to_uv(angles, (source.width, source.height))
        face_rows, face_cols = source.sample_indices(source_uv.x, source_uv.y)
        rows[:, face * face_size:(face + 1) * face_size] = face_rows
        cols[:, face * face_size:(face + 1) * face_size] = face_cols
    return rows, cols


# === PER-BAND RENDERING ===

def render_pixel(source: ImageBuffer, source_kind, destination: ImageBuffer, target_kind,
                 col: int, row: int):
    """Render one destination pixel; scalar form of render_rows"""
    target = get_projection(target_kind)
    origin = get_projection(source_kind)
    uv = Vector2((col + 0.5) / destination.width, (row + 0.5) / destination.height)
    source_uv = origin.lat_long_to_uv(target.uv_to_lat_long(uv), (source.width, source.height))
    copy_pixel(source, source_uv, destination, col, row)


def render_rows(source: ImageBuffer, source_kind, destination: ImageBuffer, target_kind,
                row_start: int = 0, row_stop: int = None):
    """Render a band of destination rows with the generic per-pixel mapping"""
    if row_stop is None:
        row_stop = destination.height
    _check_band(destination, row_start, row_stop)
    rows, cols = sample_map_rows(
        source, source_kind, (destination.width, destination.height), target_kind,
        row_start, row_stop
    )
    destination.pixels[row_start:row_stop] = source.pixels[rows, cols]


def render_strip_rows(source: ImageBuffer, source_kind, destination: ImageBuffer,
                      row_start: int = 0, row_stop: int = None):
    """Render a band of rows of a strip cubemap destination, sharing (u, v) across faces"""
    if not is_strip(destination):
        raise ValueError(f"{destination!r} is not a {CUBEMAP_FACE_COUNT}:1 cubemap strip")
    if row_stop is None:
        row_stop = destination.height
    _check_band(destination, row_start, row_stop)
    rows, cols = strip_sample_map_rows(source, source_kind, destination.height, row_start, row_stop)
    destination.pixels[row_start:row_stop] = source.pixels[rows, cols]


class ProjectionRenderer:
    """Projection-to-projection renderer with a cache of sample maps"""

    def __init__(self, workers: int = DEFAULT_WORKERS, share_faces: bool = DEFAULT_SHARE_FACES,
                 use_cache: bool = True):
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.workers = workers
        self.share_faces = share_faces
        self.use_cache = use_cache
        self.cache = {}  # Cache for sample maps

    def render(self, source: ImageBuffer, source_kind, destination: ImageBuffer, target_kind):
        """
        Fill every destination pixel from the source.

        Args:
            source: Image sampled in source_kind projection (read only)
            source_kind: ProjectionKind or its string value
            destination: Pre-sized buffer for the target projection
            target_kind: ProjectionKind or its string value

        Raises:
            ValueError: channel counts differ (caller error)
        """
        source_kind = get_projection(source_kind).kind
        target_kind = get_projection(target_kind).kind
        if source.channels != destination.channels:
            raise ValueError(
                f"Channel count mismatch: source has {source.channels}, "
                f"destination has {destination.channels}"
            )

        share_faces = (
            self.share_faces
            and target_kind is ProjectionKind.CUBEMAP
            and is_strip(destination)
        )

        cache_key = (source_kind, target_kind,
                     source.width, source.height,
                     destination.width, destination.height, share_faces)

        if self.use_cache and cache_key in self.cache:
            rows, cols = self.cache[cache_key]
            logger.debug(f"Using cached sample map for {source_kind.value} -> {target_kind.value}")
        else:
            logger.debug(
                f"Generating sample map {source_kind.value} {source.width}x{source.height} -> "
                f"{target_kind.value} {destination.width}x{destination.height} "
                f"(workers={self.workers}, share_faces={share_faces})"
            )
            rows, cols = self._generate_sample_map(source, source_kind, destination, target_kind, share_faces)
            if self.use_cache:
                self.cache[cache_key] = (rows, cols)

        def copy_band(start, stop):
            destination.pixels[start:stop] = source.pixels[rows[start:stop], cols[start:stop]]

        # Each band owns its destination rows; no locking needed
        self._run_bands(destination.height, copy_band)

    def _generate_sample_map(self, source, source_kind, destination, target_kind, share_faces):
        rows_map = np.empty((destination.height, destination.width), dtype=np.int32)
        cols_map = np.empty_like(rows_map)

        def fill(start, stop):
            if share_faces:
                rows, cols = strip_sample_map_rows(source, source_kind, destination.height, start, stop)
            else:
                rows, cols = sample_map_rows(
                    source, source_kind, (destination.width, destination.height), target_kind,
                    start, stop
                )
            rows_map[start:stop] = rows
            cols_map[start:stop] = cols

        self._run_bands(destination.height, fill)
        return rows_map, cols_map

    def _run_bands(self, height, work):
        bands = partition_rows(height, self.workers)
        if len(bands) == 1:
            work(*bands[0])
            return

        with ThreadPoolExecutor(max_workers=len(bands)) as executor:
            futures = {executor.submit(work, start, stop): (start, stop) for start, stop in bands}
            for future in as_completed(futures):
                # Re-raise worker exceptions in the caller
                future.result()

    def clear_cache(self):
        """Clear the sample map cache"""
        cache_size = len(self.cache)
        self.cache.clear()
        logger.info(f"Cleared sample map cache ({cache_size} entries)")

    def get_cache_size(self):
        """Return number of cached sample maps"""
        return len(self.cache)
