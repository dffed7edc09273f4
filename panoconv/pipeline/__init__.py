"""
Pipeline Module
Conversion orchestration: decode, render, encode.
"""

from .converter import ImageConverter, ConversionOptions, face_paths

__all__ = ['ImageConverter', 'ConversionOptions', 'face_paths']
