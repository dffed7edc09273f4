"""
Transform Engines Module
Projection mappings between lat-long and cubemap panoramas, and the renderer
that resamples one into the other.
"""

from .vector import Vector2, Vector3
from .projection import (
    ProjectionKind, CubemapLayout, Projection, PROJECTIONS, get_projection,
    euclidean_to_lat_long, lat_long_to_uv, lat_long_uv_to_angles, lat_long_to_euclidean,
    cubemap_uv_to_euclidean, cubemap_uv_to_lat_long, euclidean_to_cubemap_uv,
    lat_long_to_cubemap_uv, target_size_for_cubemap, target_size_for_lat_long
)
from .renderer import ProjectionRenderer, destination_size, pixel_centers

__all__ = [
    'Vector2', 'Vector3',
    'ProjectionKind', 'CubemapLayout', 'Projection', 'PROJECTIONS', 'get_projection',
    'euclidean_to_lat_long', 'lat_long_to_uv', 'lat_long_uv_to_angles', 'lat_long_to_euclidean',
    'cubemap_uv_to_euclidean', 'cubemap_uv_to_lat_long', 'euclidean_to_cubemap_uv',
    'lat_long_to_cubemap_uv', 'target_size_for_cubemap', 'target_size_for_lat_long',
    'ProjectionRenderer', 'destination_size', 'pixel_centers',
]
