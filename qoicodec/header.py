import struct
from typing import NamedTuple

from .errors import (
    BadMagic,
    InvalidDimension,
    UnexpectedEof,
    UnsupportedChannels,
    UnsupportedColorspace,
)
from .qoi import QOI


class HeaderInfo(NamedTuple):
    width: int
    height: int
    channels: int
    colorspace: int

    @property
    def has_alpha(self) -> bool:
        return self.channels == QOI.CHANNELS_RGBA


def is_qoi(prefix: bytes) -> bool:
    """Cheap format sniffing on the first bytes of a file."""
    return prefix[:4] == QOI.MAGIC


def _validate(width, height, channels, colorspace, max_dimension, operation):
    if channels not in (QOI.CHANNELS_RGB, QOI.CHANNELS_RGBA):
        raise UnsupportedChannels(
            f"QOI.{operation}: Unsupported or unknown number of channels: {channels}"
        )

    if colorspace not in (0, 1):
        raise UnsupportedColorspace(
            f"QOI.{operation}: Unsupported or unknown colorspace: {colorspace}"
        )

    if not (0 < width <= max_dimension):
        raise InvalidDimension(
            f"QOI.{operation}: Invalid or unsupported width: {width}"
        )

    if not (0 < height <= max_dimension):
        raise InvalidDimension(
            f"QOI.{operation}: Invalid or unsupported height: {height}"
        )


def parse_header(data: bytes, max_dimension: int = QOI.MAX_DIMENSION) -> HeaderInfo:
    """
    Read and validate the 14 byte QOI header at the start of data.

    :raises FormatError: if the header is truncated or invalid.
    """
    if len(data) < QOI.HEADER_SIZE:
        raise UnexpectedEof("QOI.decode: File too short for header")

    magic, width, height, channels, colorspace = struct.unpack(
        QOI.HEADER_FORMAT, data[: QOI.HEADER_SIZE]
    )

    if magic != QOI.MAGIC:
        raise BadMagic("QOI.decode: The signature of the QOI file is invalid")

    _validate(width, height, channels, colorspace, max_dimension, "decode")

    return HeaderInfo(width, height, channels, colorspace)


def serialize_header(
    width: int,
    height: int,
    channels: int,
    colorspace: int,
    max_dimension: int = QOI.MAX_DIMENSION,
) -> bytes:
    _validate(width, height, channels, colorspace, max_dimension, "encode")
    return struct.pack(
        QOI.HEADER_FORMAT, QOI.MAGIC, width, height, channels, int(colorspace)
    )
