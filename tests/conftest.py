import numpy as np
import cv2
import pytest

from panoconv.imaging import ImageBuffer


def make_block_image(width, height, block):
    """RGB image made of block x block tiles, each with a unique colour"""
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    for by in range(height // block):
        for bx in range(width // block):
            index = by * (width // block) + bx
            colour = (40 + 25 * bx, 60 + 45 * by, (index * 37) % 256)
            pixels[by * block:(by + 1) * block, bx * block:(bx + 1) * block] = colour
    return pixels


def write_rgb(path, pixels):
    assert cv2.imwrite(str(path), cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR))


def read_rgb(path):
    bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
    assert bgr is not None
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


@pytest.fixture
def gradient_buffer():
    """8x4 buffer where pixel (col, row) holds (col, row, col + 10 * row)"""
    pixels = np.zeros((4, 8, 3), dtype=np.uint8)
    for row in range(4):
        for col in range(8):
            pixels[row, col] = (col, row, col + 10 * row)
    return ImageBuffer(pixels)


@pytest.fixture
def block_latlong():
    return ImageBuffer(make_block_image(256, 128, 32))


@pytest.fixture
def flat_latlong():
    pixels = np.empty((32, 64, 3), dtype=np.uint8)
    pixels[:] = (200, 100, 50)
    return ImageBuffer(pixels)
