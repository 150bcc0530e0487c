from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .errors import (
    BadEndMarker,
    BadMagic,
    EncodeError,
    FormatError,
    InvalidDimension,
    OutOfMemory,
    QOIError,
    RunOverflow,
    TrailingData,
    UnexpectedEof,
    UnsupportedChannels,
    UnsupportedColorspace,
)
from .header import HeaderInfo, is_qoi, parse_header, serialize_header
from .image import Colorspace, Image, Pixel
from .qoi import QOI
from .utils import ExportOptions, load_image, load_qoi, save_qoi

decode = QOIDecoder.decode
encode = QOIEncoder.encode

__all__ = [
    "QOI",
    "QOIEncoder",
    "QOIDecoder",
    "decode",
    "encode",
    "parse_header",
    "serialize_header",
    "is_qoi",
    "HeaderInfo",
    "Image",
    "Pixel",
    "Colorspace",
    "ExportOptions",
    "load_image",
    "load_qoi",
    "save_qoi",
    "QOIError",
    "FormatError",
    "EncodeError",
    "OutOfMemory",
    "BadMagic",
    "UnsupportedChannels",
    "UnsupportedColorspace",
    "InvalidDimension",
    "UnexpectedEof",
    "BadEndMarker",
    "TrailingData",
    "RunOverflow",
]
