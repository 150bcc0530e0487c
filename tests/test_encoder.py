import pytest

from qoicodec import (
    QOI,
    Colorspace,
    EncodeError,
    Image,
    InvalidDimension,
    OutOfMemory,
    Pixel,
    decode,
    encode,
)
from qoicodec import encoder as encoder_module
from qoicodec.qoi import pixel_hash

A = Pixel(10, 20, 30)
B = Pixel(200, 100, 50)


def chunks(encoded: bytes) -> bytes:
    """The chunk stream between the header and the end marker."""
    assert encoded[-QOI.END_MARKER_SIZE :] == QOI.END_MARKER
    return encoded[QOI.HEADER_SIZE : -QOI.END_MARKER_SIZE]


def rgb_image(pixels, width=None, height=1):
    return Image(
        width=width or len(pixels), height=height, pixels=pixels, has_alpha=False
    )


def test_small_image():
    # Red, Green, Blue, White: each step is a small wrapped difference
    image = Image.from_bytes(
        [255, 0, 0, 0, 255, 0, 0, 0, 255, 255, 255, 255], 2, 2, 3
    )
    encoded = encode(image)
    assert encoded[: QOI.HEADER_SIZE] == (
        b"qoif\x00\x00\x00\x02\x00\x00\x00\x02\x03\x00"
    )
    assert chunks(encoded) == b"\x5a\x76\x6d\x56"


def test_run_boundary():
    pixels = [Pixel(0, 0, 0)] * 70 + [A]
    encoded = encode(rgb_image(pixels))

    assert chunks(encoded) == bytes([0xFD, 0xC7, 0xFE, 10, 20, 30])
    assert decode(encoded).pixels == pixels


def test_long_run_is_split():
    pixels = [A] + [A] * 124
    encoded = encode(rgb_image(pixels))
    # literal, then two full runs of 62
    assert chunks(encoded) == bytes([0xFE, 10, 20, 30, 0xFD, 0xFD])
    assert decode(encoded).pixels == pixels


def test_cache_hit():
    assert pixel_hash(A) != pixel_hash(B)
    encoded = encode(rgb_image([A, B, A]))

    stream = chunks(encoded)
    assert stream == bytes([0xFE, 10, 20, 30, 0xFE, 200, 100, 50, pixel_hash(A)])


def test_wrap_around_diff():
    pixels = [Pixel(255, 0, 0), Pixel(0, 0, 0)]
    encoded = encode(rgb_image(pixels))

    # Both transitions are one-byte QOI_OP_DIFF chunks, not literals
    assert chunks(encoded) == b"\x5a\x7a"
    assert decode(encoded).pixels == pixels


def test_luma():
    encoded = encode(rgb_image([Pixel(13, 10, 5)]))
    assert chunks(encoded) == b"\xaa\xb3"


def test_luma_bounds():
    # dg = 31 with dr - dg = 8 falls outside QOI_OP_LUMA
    encoded = encode(rgb_image([Pixel(39, 31, 31)]))
    assert chunks(encoded) == bytes([0xFE, 39, 31, 31])


def test_alpha_change_uses_rgba():
    image = Image(width=2, height=1, pixels=[Pixel(1, 2, 3, 4), Pixel(2, 3, 4, 4)])
    encoded = encode(image)

    assert encoded[12] == QOI.CHANNELS_RGBA
    # Second pixel keeps alpha, so it is a diff again
    assert chunks(encoded) == b"\xff\x01\x02\x03\x04\x7f"
    assert decode(encoded) == image


def test_alpha_is_ignored_without_alpha_channel():
    image = Image(
        width=1, height=1, pixels=[(100, 2, 3, 0)], has_alpha=False
    )
    encoded = encode(image)
    assert chunks(encoded) == b"\xfe\x64\x02\x03"
    assert decode(encoded).pixels == [(100, 2, 3, 255)]


def test_colorspace_is_written():
    image = rgb_image([A])
    image.colorspace = Colorspace.LINEAR
    encoded = encode(image)
    assert encoded[13] == 1
    assert decode(encoded).colorspace == Colorspace.LINEAR


def test_pixel_count_mismatch():
    with pytest.raises(EncodeError):
        encode(rgb_image([A, B], width=3))


def test_invalid_dimension():
    with pytest.raises(EncodeError) as excinfo:
        encode(Image(width=0, height=1, pixels=[]))
    assert isinstance(excinfo.value.__cause__, InvalidDimension)


def test_invalid_colorspace():
    with pytest.raises(EncodeError):
        encode(Image(width=1, height=1, pixels=[A], colorspace=2))


def test_too_many_pixels():
    with pytest.raises(OutOfMemory):
        encode(Image(width=20000, height=20001, pixels=[]))


def test_repeated_pixel_is_a_run_before_index():
    # A is already cached at its slot, the run still takes priority
    encoded = encode(rgb_image([A, A]))
    assert chunks(encoded) == bytes([0xFE, 10, 20, 30, 0xC0])


@pytest.mark.parametrize(
    "pixel,has_alpha",
    [
        (Pixel(256, 0, 0), False),
        (Pixel(-1, 0, 0), False),
        (Pixel(0, 0, 0, 300), True),
    ],
)
def test_channel_out_of_range(pixel, has_alpha):
    image = Image(
        width=2, height=1, pixels=[Pixel(255, 0, 0), pixel], has_alpha=has_alpha
    )
    with pytest.raises(EncodeError):
        encode(image)


def test_output_buffer_allocation_failure(monkeypatch):
    def fail(size):
        raise MemoryError()

    monkeypatch.setattr(encoder_module, "bytearray", fail, raising=False)
    with pytest.raises(OutOfMemory):
        encode(rgb_image([A]))


def test_output_is_trimmed_to_written_bytes():
    encoded = encode(rgb_image([A] * 16, width=4, height=4))
    # literal, one run of 15, end marker
    assert len(encoded) == QOI.HEADER_SIZE + 4 + 1 + QOI.END_MARKER_SIZE
