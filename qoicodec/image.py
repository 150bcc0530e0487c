from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple

import numpy as np

from .errors import OutOfMemory
from .qoi import QOI


class Pixel(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255


OPAQUE_BLACK = Pixel(0, 0, 0, 255)


class Colorspace(IntEnum):
    SRGB = 0  # sRGB with linear alpha
    LINEAR = 1  # all channels linear


def check_pixel_limit(width: int, height: int, operation: str) -> int:
    """Return width * height, or raise OutOfMemory above QOI.PIXELS_MAX."""
    total_pixels = width * height
    if total_pixels > QOI.PIXELS_MAX:
        raise OutOfMemory(
            f"QOI.{operation}: {width}x{height} exceeds the limit of "
            f"{QOI.PIXELS_MAX} pixels"
        )
    return total_pixels


def allocate_pixels(width: int, height: int, operation: str) -> list:
    """
    Pre-size a row-major pixel list for a width x height image.

    :raises OutOfMemory: if the image exceeds QOI.PIXELS_MAX or the list
        cannot be allocated.
    """
    total_pixels = check_pixel_limit(width, height, operation)
    try:
        return [OPAQUE_BLACK] * total_pixels
    except MemoryError as exc:
        raise OutOfMemory(
            f"QOI.{operation}: Failed to acquire storage for pixels"
        ) from exc


@dataclass
class Image:
    """
    A decoded QOI image.

    Pixels are stored row-major as :class:`Pixel` tuples. Images without an
    alpha channel still carry an alpha value of 255 in every pixel.
    """

    width: int
    height: int
    pixels: list = field(repr=False)
    has_alpha: bool = True
    colorspace: int = Colorspace.SRGB

    @property
    def channels(self) -> int:
        return QOI.CHANNELS_RGBA if self.has_alpha else QOI.CHANNELS_RGB

    @classmethod
    def from_array(cls, array: np.ndarray, colorspace: int = Colorspace.SRGB):
        """
        Build an image from a (height, width, 3|4) uint8 array.
        """
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(
                f"Image.from_array: Expected (height, width, 3|4) array, got {array.shape}"
            )

        height, width, channels = array.shape
        rows = np.asarray(array, dtype=np.uint8).reshape(-1, channels).tolist()

        if channels == QOI.CHANNELS_RGBA:
            pixels = [Pixel(r, g, b, a) for r, g, b, a in rows]
        else:
            pixels = [Pixel(r, g, b) for r, g, b in rows]

        return cls(
            width=width,
            height=height,
            pixels=pixels,
            has_alpha=channels == QOI.CHANNELS_RGBA,
            colorspace=Colorspace(colorspace),
        )

    @classmethod
    def from_bytes(
        cls,
        color_data,
        width: int,
        height: int,
        channels: int,
        colorspace: int = Colorspace.SRGB,
    ):
        """
        Build an image from interleaved RGB or RGBA bytes.

        :param color_data: Bytes-like object containing pixel data.
        :param channels: 3 (RGB) or 4 (RGBA).
        """
        if channels not in (QOI.CHANNELS_RGB, QOI.CHANNELS_RGBA):
            raise ValueError("Image.from_bytes: channels must be 3 or 4")

        if len(color_data) != width * height * channels:
            raise ValueError("Image.from_bytes: The length of color_data is incorrect")

        array = np.frombuffer(bytes(color_data), dtype=np.uint8)
        return cls.from_array(array.reshape(height, width, channels), colorspace)

    def to_array(self, channels: int = None) -> np.ndarray:
        """
        Pixels as a (height, width, channels) uint8 array.

        :param channels: Number of channels to include (3 or 4). If None, uses
            4 for images with alpha and 3 otherwise.
        """
        if channels is None:
            channels = self.channels
        if channels not in (QOI.CHANNELS_RGB, QOI.CHANNELS_RGBA):
            raise ValueError("Image.to_array: channels must be 3 or 4")

        array = np.array(self.pixels, dtype=np.uint8).reshape(
            self.height, self.width, 4
        )
        return array[:, :, :channels]

    def to_bytes(self, channels: int = None) -> bytes:
        return self.to_array(channels).tobytes()
