"""
panoconv - equirectangular <-> cubemap panorama converter.
"""

from .config.defaults import APP_VERSION as __version__
from .errors import ConversionError, UsageError, DecodeError, AllocationError, EncodeError
from .imaging import ImageBuffer
from .transforms import ProjectionKind, CubemapLayout, ProjectionRenderer
from .pipeline import ImageConverter, ConversionOptions

__all__ = [
    'ConversionError', 'UsageError', 'DecodeError', 'AllocationError', 'EncodeError',
    'ImageBuffer', 'ProjectionKind', 'CubemapLayout', 'ProjectionRenderer',
    'ImageConverter', 'ConversionOptions',
]
