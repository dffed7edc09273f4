"""
Imaging Module
Pixel buffers with wraparound sampling, plus image decode/encode.
"""

from .image_buffer import ImageBuffer, copy_pixel, save_all

__all__ = ['ImageBuffer', 'copy_pixel', 'save_all']
