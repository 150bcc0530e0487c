class QOI:
    # QOI Constants
    MAGIC = b"qoif"
    HEADER_SIZE = 14
    # magic(4), width(4), height(4), channels(1), colorspace(1), big endian
    HEADER_FORMAT = ">4sIIBB"

    # 7 bytes of 0x00 followed by 1 byte of 0x01
    END_MARKER = b"\x00\x00\x00\x00\x00\x00\x00\x01"
    END_MARKER_SIZE = 8

    OP_INDEX = 0x00
    OP_DIFF = 0x40
    OP_LUMA = 0x80
    OP_RUN = 0xC0
    OP_RGB = 0xFE
    OP_RGBA = 0xFF

    MASK_2 = 0xC0
    MASK_6 = 0x3F

    CHANNELS_RGB = 3
    CHANNELS_RGBA = 4

    MAX_RUN = 62
    DIFF_BIAS = 2
    LUMA_GREEN_BIAS = 32
    LUMA_RED_BLUE_BIAS = 8

    INDEX_SIZE = 64
    # Worst case per pixel is a QOI_OP_RGBA chunk
    MAX_BYTES_PER_PIXEL = 5

    # Largest width or height the host editor accepts
    MAX_DIMENSION = 524288
    PIXELS_MAX = 400000000  # Safety limit (400MP)


def pixel_hash(pixel) -> int:
    """Calculates the index position for the color array."""
    r, g, b, a = pixel
    return (r * 3 + g * 5 + b * 7 + a * 11) % 64


def new_index() -> list:
    """A fresh color lookup table, zero initialized."""
    return [(0, 0, 0, 0)] * QOI.INDEX_SIZE


def signed_delta(current: int, previous: int) -> int:
    """Byte-wrapped difference of two channels, shifted into -128..127."""
    delta = (current - previous) & 0xFF
    return delta - 256 if delta > 127 else delta
