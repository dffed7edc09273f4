"""
panoconv - Default Configuration Parameters
Central location for all default settings across the converter.
"""

# ============================================================================
# PROJECTION DEFAULTS
# ============================================================================

# Projection kinds (values accepted on the command line)
PROJECTION_KINDS = {
    'latlong': 'Equirectangular (lat-long)',
    'cubemap': 'Cubemap (6 faces)'
}
DEFAULT_SOURCE_PROJECTION = 'latlong'
DEFAULT_TARGET_PROJECTION = 'cubemap'

# Cubemap layouts
CUBEMAP_LAYOUTS = {
    'strip': 'Horizontal strip (6:1, faces +X -X +Y -Y +Z -Z)',
    'separate-faces': 'Six separate face images'
}
DEFAULT_CUBEMAP_LAYOUT = 'strip'

# Face order is a fixed convention: +X, -X, +Y, -Y, +Z, -Z
CUBEMAP_FACE_COUNT = 6
CUBEMAP_FACE_NAMES = ['px', 'nx', 'py', 'ny', 'pz', 'nz']

# ============================================================================
# IMAGE DEFAULTS
# ============================================================================

# Every decoded image is forced to RGB
FORCED_CHANNEL_COUNT = 3

# Extensions accepted for output images
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'tiff', 'tif', 'webp']

# Write to a temp file and rename into place
ATOMIC_WRITES = True

# ============================================================================
# RENDERING DEFAULTS
# ============================================================================

DEFAULT_WORKERS = 1
WORKERS_MIN = 1
WORKERS_MAX = 64

# Reuse one face's (u, v) grid for all six faces of a strip target
DEFAULT_SHARE_FACES = True

# ============================================================================
# PROCESS EXIT CODES
# ============================================================================

EXIT_SUCCESS = 0
EXIT_USAGE_ERROR = 1
EXIT_DECODE_ERROR = 2
EXIT_ALLOCATION_ERROR = 4
EXIT_ENCODE_ERROR = 5

# ============================================================================
# LOGGING
# ============================================================================

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# ============================================================================
# CONFIG FILE SETTINGS
# ============================================================================

CONFIG_FILE_VERSION = '1.0'

# ============================================================================
# VERSION INFO
# ============================================================================

APP_NAME = 'panoconv'
APP_VERSION = '1.0.0'
APP_DESCRIPTION = 'Equirectangular <-> cubemap panorama converter'
