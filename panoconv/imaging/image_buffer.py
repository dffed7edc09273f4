"""
Image buffer with wraparound sampling.

ImageBuffer owns a contiguous (height, width, channels) uint8 NumPy array.
Lookups by normalized coordinate wrap on both axes, so every sample lands
inside the buffer; lookups by pixel coordinate are bounds-checked.

Decoding and encoding go through OpenCV. Decoded images are always forced
to RGB, whatever the file stores (grey, alpha, 16-bit).
"""

import os
import logging
from pathlib import Path

import numpy as np
import cv2

from ..config.defaults import FORCED_CHANNEL_COUNT, CUBEMAP_FACE_COUNT, SUPPORTED_IMAGE_FORMATS
from ..errors import DecodeError, AllocationError, EncodeError

logger = logging.getLogger(__name__)


class ImageBuffer:
    """Rectangular grid of fixed-channel-count pixels"""

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3:
            raise ValueError(f"Expected a (height, width, channels) array, got shape {pixels.shape}")
        height, width, channels = pixels.shape
        if width <= 0 or height <= 0 or channels <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}x{channels}")
        self._pixels = pixels

    # === CONSTRUCTION ===

    @classmethod
    def load(cls, path) -> 'ImageBuffer':
        """
        Decode an image file into a new RGB buffer.

        Raises:
            DecodeError: missing file, unsupported format or corrupt data
        """
        path = Path(path)
        if not path.is_file():
            raise DecodeError(f"Input image not found: {path}")

        # IMREAD_COLOR forces 3 channels: grey is expanded, alpha dropped
        bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if bgr is None:
            raise DecodeError(f"Could not decode image: {path}")

        rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
        logger.debug(f"Decoded {path} ({rgb.shape[1]}x{rgb.shape[0]}, {rgb.shape[2]} channels)")
        return cls(np.ascontiguousarray(rgb))

    @classmethod
    def allocate(cls, width: int, height: int, channels: int = FORCED_CHANNEL_COUNT) -> 'ImageBuffer':
        """
        Reserve a zero-filled buffer.

        Raises:
            AllocationError: non-positive size or not enough memory
        """
        if width <= 0 or height <= 0 or channels <= 0:
            raise AllocationError(f"Invalid image size {width}x{height}x{channels}")
        try:
            pixels = np.zeros((height, width, channels), dtype=np.uint8)
        except MemoryError:
            raise AllocationError(
                f"Cannot allocate {width}x{height}x{channels} image "
                f"({width * height * channels} bytes)"
            ) from None
        return cls(pixels)

    @classmethod
    def from_faces(cls, faces) -> 'ImageBuffer':
        """
        Concatenate six square face buffers (+X, -X, +Y, -Y, +Z, -Z)
        into one horizontal strip.
        """
        faces = list(faces)
        if len(faces) != CUBEMAP_FACE_COUNT:
            raise ValueError(f"A cubemap needs {CUBEMAP_FACE_COUNT} faces, got {len(faces)}")

        size = faces[0].height
        channels = faces[0].channels
        for index, face in enumerate(faces):
            if face.width != size or face.height != size or face.channels != channels:
                raise ValueError(
                    f"Face {index} is {face.width}x{face.height}x{face.channels}, "
                    f"expected {size}x{size}x{channels}"
                )

        strip = cls.allocate(size * CUBEMAP_FACE_COUNT, size, channels)
        for index, face in enumerate(faces):
            strip.face(index).pixels[:] = face.pixels
        return strip

    # === PROPERTIES ===

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def channels(self) -> int:
        return self._pixels.shape[2]

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def __repr__(self):
        return f"ImageBuffer({self.width}x{self.height}x{self.channels})"

    # === WRAPAROUND SAMPLING ===

    @staticmethod
    def warp(v):
        """Reduce a coordinate into [0, 1)"""
        v = np.asarray(v, dtype=np.float64)
        return v - np.floor(v)

    def sample_indices(self, u, v):
        """
        Map normalized coordinates to (row, column) pixel indices.

        Each axis is wrapped into [0, 1), scaled by its dimension, rounded
        to the nearest pixel and reduced modulo the dimension again, in that
        order. Works on scalars and arrays alike.
        """
        # Values are non-negative after warp(), so floor(x + 0.5) rounds half away from zero
        cols = np.floor(self.warp(u) * self.width + 0.5).astype(np.intp) % self.width
        rows = np.floor(self.warp(v) * self.height + 0.5).astype(np.intp) % self.height
        return rows, cols

    def sample_index(self, uv):
        """Pixel coordinate (column, row) of the wrapped sample at uv"""
        row, col = self.sample_indices(uv.x, uv.y)
        return int(col), int(row)

    def sample(self, uv) -> np.ndarray:
        """Read-only view of the pixel at normalized coordinate uv"""
        col, row = self.sample_index(uv)
        return self.pixel(col, row)

    def gather(self, u, v) -> np.ndarray:
        """Pixels at arrays of normalized coordinates, shape u.shape + (channels,)"""
        rows, cols = self.sample_indices(u, v)
        return self._pixels[rows, cols]

    # === INDEXED ACCESS ===

    def _check_bounds(self, col: int, row: int):
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(f"Pixel ({col}, {row}) outside {self.width}x{self.height} image")

    def pixel(self, col: int, row: int) -> np.ndarray:
        """Read-only view of one pixel"""
        self._check_bounds(col, row)
        view = self._pixels[row, col]
        view.flags.writeable = False
        return view

    def set_pixel(self, col: int, row: int, value):
        """Overwrite one pixel, channel for channel"""
        self._check_bounds(col, row)
        value = np.asarray(value, dtype=np.uint8)
        if value.shape != (self.channels,):
            raise ValueError(f"Expected {self.channels} channels, got shape {value.shape}")
        self._pixels[row, col] = value

    # === LAYOUT ===

    def face(self, index: int, face_size: int = None) -> 'ImageBuffer':
        """
        View of one square face of a horizontal strip cubemap.

        The view shares memory with this buffer.
        """
        if face_size is None:
            face_size = self.height
        if not (0 <= index < CUBEMAP_FACE_COUNT):
            raise IndexError(f"Face index {index} outside 0..{CUBEMAP_FACE_COUNT - 1}")
        if self.width != face_size * CUBEMAP_FACE_COUNT or self.height != face_size:
            raise ValueError(f"{self!r} is not a strip of {face_size}px faces")
        return ImageBuffer(self._pixels[:, index * face_size:(index + 1) * face_size])

    # === ENCODING ===

    def save(self, path, atomic: bool = True):
        """
        Encode the buffer to an image file (format picked from the extension).

        With atomic=True the image is written to a temporary file next to
        the target and renamed into place, so a failed write never leaves a
        truncated output behind.

        Raises:
            EncodeError: unsupported extension or write failure
        """
        save_all([(self, path)], atomic=atomic)

    def write_temp(self, path) -> Path:
        """
        Encode to a hidden temporary file beside path and return its location.

        The caller moves it into place with os.replace (or removes it).

        Raises:
            EncodeError: unsupported extension or write failure
        """
        path = Path(path)
        temp = path.with_name(f".{path.stem}.tmp{path.suffix}")
        self._encode(temp, path)
        return temp

    def _encode(self, target: Path, path: Path):
        ext = path.suffix.lower().lstrip('.')
        if ext not in SUPPORTED_IMAGE_FORMATS:
            raise EncodeError(f"Unsupported output format '{path.suffix}': {path}")

        # Face views of a strip are strided; OpenCV wants a packed buffer
        pixels = np.ascontiguousarray(self._pixels)
        if self.channels == 3:
            out = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
        elif self.channels == 4:
            out = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
        else:
            out = pixels

        if ext == 'png':
            params = [cv2.IMWRITE_PNG_COMPRESSION, 6]
        elif ext in ('jpg', 'jpeg'):
            params = [cv2.IMWRITE_JPEG_QUALITY, 95]
        else:
            params = []

        try:
            success = cv2.imwrite(str(target), out, params)
        except cv2.error as e:
            success = False
            logger.debug(f"OpenCV refused to encode {path}: {e}")

        if not success:
            _remove_files([target])
            raise EncodeError(f"Could not write image: {path}")

        logger.debug(f"Encoded {path} ({self.width}x{self.height})")


def _remove_files(paths):
    for path in paths:
        if path.is_file():
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove {path}: {e}")


def save_all(items, atomic: bool = True):
    """
    Encode several buffers as one unit: either every file ends up in place
    or none does.

    Atomic mode works in two phases. Every buffer is first encoded to its
    temporary file; only when all of them succeeded are they renamed into
    place. On any failure the temporary files and the outputs already moved
    are removed.

    Args:
        items: iterable of (ImageBuffer, path) pairs

    Raises:
        EncodeError: any file could not be written
    """
    items = [(buffer, Path(path)) for buffer, path in items]
    written = []

    if not atomic:
        try:
            for buffer, path in items:
                buffer._encode(path, path)
                written.append(path)
        except EncodeError:
            _remove_files(written)
            raise
        return

    temps = []
    try:
        for buffer, path in items:
            temps.append(buffer.write_temp(path))
    except EncodeError:
        _remove_files(temps)
        raise

    for index, (temp, (_, path)) in enumerate(zip(temps, items)):
        try:
            os.replace(temp, path)
        except OSError as e:
            _remove_files(temps[index:] + written)
            raise EncodeError(f"Could not move image into place: {path} ({e})") from e
        written.append(path)


def copy_pixel(source: ImageBuffer, source_uv, destination: ImageBuffer, col: int, row: int):
    """Copy the wrapped source sample at source_uv into destination pixel (col, row)"""
    if source.channels != destination.channels:
        raise ValueError(
            f"Channel count mismatch: source has {source.channels}, "
            f"destination has {destination.channels}"
        )
    destination.set_pixel(col, row, source.sample(source_uv))
