"""
Conversion Pipeline for panoconv
Coordinates one conversion: Load → Size → Allocate → Render → Save

Every failure surfaces as a ConversionError subclass from panoconv.errors;
nothing is written unless rendering has completed.
"""

import time
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, List

from ..config.defaults import (
    DEFAULT_SOURCE_PROJECTION, DEFAULT_TARGET_PROJECTION, DEFAULT_CUBEMAP_LAYOUT,
    DEFAULT_WORKERS, DEFAULT_SHARE_FACES, ATOMIC_WRITES, CUBEMAP_FACE_NAMES
)
from ..errors import DecodeError
from ..imaging import ImageBuffer, save_all
from ..transforms import ProjectionKind, CubemapLayout, ProjectionRenderer, destination_size
from ..transforms.renderer import is_strip

logger = logging.getLogger(__name__)


@dataclass
class ConversionOptions:
    """Runtime choices for one conversion"""
    source_projection: str = DEFAULT_SOURCE_PROJECTION
    target_projection: str = DEFAULT_TARGET_PROJECTION
    layout: str = DEFAULT_CUBEMAP_LAYOUT
    workers: int = DEFAULT_WORKERS
    share_faces: bool = DEFAULT_SHARE_FACES
    atomic_write: bool = ATOMIC_WRITES

    @property
    def source_kind(self) -> ProjectionKind:
        return ProjectionKind(self.source_projection)

    @property
    def target_kind(self) -> ProjectionKind:
        return ProjectionKind(self.target_projection)

    @property
    def cubemap_layout(self) -> CubemapLayout:
        return CubemapLayout(self.layout)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'ConversionOptions':
        """Build options from a config dict, ignoring unknown keys"""
        known = {key: value for key, value in config.items() if key in cls.__dataclass_fields__}
        return cls(**known)


def face_paths(path) -> List[Path]:
    """
    Per-face file names for the separate-faces layout.

    out.png -> out_px.png, out_nx.png, out_py.png, out_ny.png, out_pz.png, out_nz.png
    """
    path = Path(path)
    return [path.with_name(f"{path.stem}_{name}{path.suffix}") for name in CUBEMAP_FACE_NAMES]


class ImageConverter:
    """
    Converts one panorama file into another projection.

    Cubemaps are always held in memory as a horizontal strip; the
    separate-faces layout only changes how they are read and written.
    """

    def __init__(self, options: ConversionOptions = None, renderer: ProjectionRenderer = None):
        self.options = options or ConversionOptions()
        self.renderer = renderer or ProjectionRenderer(
            workers=self.options.workers,
            share_faces=self.options.share_faces
        )

        separate = self.options.cubemap_layout is CubemapLayout.SEPARATE_FACES
        uses_cubemap = ProjectionKind.CUBEMAP in (self.options.source_kind, self.options.target_kind)
        if separate and not uses_cubemap:
            logger.warning("Layout 'separate-faces' has no effect without a cubemap side")

    def _separate_faces(self, kind: ProjectionKind) -> bool:
        return kind is ProjectionKind.CUBEMAP and \
            self.options.cubemap_layout is CubemapLayout.SEPARATE_FACES

    def load_source(self, input_path) -> ImageBuffer:
        """
        Decode the source image (six face files for a separate-faces cubemap).

        Raises:
            DecodeError: unreadable input, or a cubemap that is not 6:1 / six equal squares
        """
        kind = self.options.source_kind

        if self._separate_faces(kind):
            faces = [ImageBuffer.load(path) for path in face_paths(input_path)]
            try:
                source = ImageBuffer.from_faces(faces)
            except ValueError as e:
                raise DecodeError(f"Unsupported cubemap faces for {input_path}: {e}") from e
        else:
            source = ImageBuffer.load(input_path)

        if kind is ProjectionKind.CUBEMAP and not is_strip(source):
            raise DecodeError(
                f"Cubemap input must be a 6:1 strip, got {source.width}x{source.height}"
            )
        return source

    def allocate_destination(self, source: ImageBuffer) -> ImageBuffer:
        """
        Size and allocate the destination from the source pixel count.

        Raises:
            AllocationError: the computed size is empty or memory is exhausted
        """
        width, height = destination_size(source, self.options.target_kind)
        return ImageBuffer.allocate(width, height, source.channels)

    def save_destination(self, destination: ImageBuffer, output_path) -> List[Path]:
        """
        Encode the destination (six face files for a separate-faces cubemap).

        Raises:
            EncodeError: any file could not be written
        """
        if self._separate_faces(self.options.target_kind):
            paths = face_paths(output_path)
            items = [(destination.face(index), path) for index, path in enumerate(paths)]
        else:
            paths = [Path(output_path)]
            items = [(destination, paths[0])]

        # All files land together or not at all
        save_all(items, atomic=self.options.atomic_write)
        return paths

    def convert(self, input_path, output_path) -> Dict[str, Any]:
        """
        Run one conversion end to end.

        Returns:
            Summary dict with sizes, written paths and per-stage timings (seconds)
        """
        timings = {}
        source_kind = self.options.source_kind
        target_kind = self.options.target_kind

        logger.info("Loading input image...")
        start = time.time()
        source = self.load_source(input_path)
        timings['load'] = time.time() - start
        logger.info(
            f"Input image size: {source.width}x{source.height} "
            f"({source_kind.value}, {timings['load']:.2f}s)"
        )

        destination = self.allocate_destination(source)
        logger.info(f"Output image size: {destination.width}x{destination.height} ({target_kind.value})")

        logger.info("Rendering...")
        start = time.time()
        self.renderer.render(source, source_kind, destination, target_kind)
        timings['render'] = time.time() - start
        logger.info(f"Rendering finished ({timings['render']:.2f}s)")

        logger.info("Saving output image...")
        start = time.time()
        written = self.save_destination(destination, output_path)
        timings['save'] = time.time() - start
        for path in written:
            logger.info(f"Saved {path}")
        logger.info(f"Saving finished ({timings['save']:.2f}s)")

        return {
            'source_size': (source.width, source.height),
            'destination_size': (destination.width, destination.height),
            'outputs': written,
            'timings': timings,
        }
