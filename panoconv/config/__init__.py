"""
panoconv Configuration Module
Provides access to default settings and saved conversion presets.
"""

from .defaults import *
from .config_manager import ConfigManager

__all__ = [
    # Export all defaults
    'PROJECTION_KINDS', 'DEFAULT_SOURCE_PROJECTION', 'DEFAULT_TARGET_PROJECTION',
    'CUBEMAP_LAYOUTS', 'DEFAULT_CUBEMAP_LAYOUT',
    'CUBEMAP_FACE_COUNT', 'CUBEMAP_FACE_NAMES',
    'FORCED_CHANNEL_COUNT', 'SUPPORTED_IMAGE_FORMATS',
    'ATOMIC_WRITES', 'DEFAULT_WORKERS', 'WORKERS_MIN', 'WORKERS_MAX',
    'DEFAULT_SHARE_FACES',
    'EXIT_SUCCESS', 'EXIT_USAGE_ERROR', 'EXIT_DECODE_ERROR',
    'EXIT_ALLOCATION_ERROR', 'EXIT_ENCODE_ERROR',
    'LOG_FORMAT', 'CONFIG_FILE_VERSION',
    'APP_NAME', 'APP_VERSION', 'APP_DESCRIPTION',
    'ConfigManager',
]
