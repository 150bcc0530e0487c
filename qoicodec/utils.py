import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image as PILImage

from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .errors import OutOfMemory
from .image import Colorspace, Image

logger = logging.getLogger(__name__)

RAW_EXTENSIONS = ("dng", "cr2", "nef", "arw", "raw")


@dataclass
class ExportOptions:
    """Settings chosen by the user when exporting to QOI."""

    colorspace: int = Colorspace.SRGB
    export_alpha: bool = True


def read_file(filepath: str) -> bytes:
    with open(filepath, "rb") as f:
        return f.read()


def write_file(filepath: str, data: bytes) -> None:
    with open(filepath, "wb") as f:
        f.write(data)


def srgb_to_linear(values: np.ndarray) -> np.ndarray:
    """Apply the inverse sRGB transfer function to uint8 channel values."""
    v = values / 255.0
    linear = np.where(v <= 0.04045, v / 12.92, ((v + 0.055) / 1.055) ** 2.4)
    return np.rint(linear * 255.0).astype(np.uint8)


def linear_to_srgb(values: np.ndarray) -> np.ndarray:
    """Apply the sRGB transfer function to uint8 channel values."""
    v = values / 255.0
    srgb = np.where(v <= 0.0031308, v * 12.92, 1.055 * v ** (1 / 2.4) - 0.055)
    return np.rint(srgb * 255.0).astype(np.uint8)


def image_from_pil(img: PILImage.Image, options: ExportOptions = None) -> Image:
    """
    Convert a Pillow image to an Image, keeping alpha only for RGBA input.

    Pillow pixels are sRGB encoded; a linear export converts the color
    channels to linear light. Alpha is always stored as is.
    """
    if options is None:
        options = ExportOptions()

    # Convert to RGB or RGBA
    if img.mode != "RGBA" or not options.export_alpha:
        img = img.convert("RGB")

    array = np.array(img)
    if options.colorspace == Colorspace.LINEAR:
        array[:, :, :3] = srgb_to_linear(array[:, :, :3])

    return Image.from_array(array, options.colorspace)


def image_to_pil(image: Image) -> PILImage.Image:
    """Convert an Image back to sRGB encoded Pillow pixels."""
    array = np.array(image.to_array())
    if image.colorspace == Colorspace.LINEAR:
        array[:, :, :3] = linear_to_srgb(array[:, :, :3])

    try:
        return PILImage.fromarray(array)
    except MemoryError as exc:
        raise OutOfMemory(
            f"Could not allocate a {image.width}x{image.height} image"
        ) from exc


def load_image(filepath: str, options: ExportOptions = None) -> Image:
    """Load an image file of any format Pillow (or rawpy) understands."""

    ext = filepath.lower().split(".")[-1]

    if ext in RAW_EXTENSIONS:
        # RAW formats - requires rawpy
        import rawpy

        with rawpy.imread(filepath) as raw:
            rgb = raw.postprocess()
        img = PILImage.fromarray(rgb)
    else:
        # Standard formats (PNG, JPEG, etc.)
        img = PILImage.open(filepath)

    image = image_from_pil(img, options)
    logger.info(
        "Loaded %s: %dx%d, %d channels",
        filepath,
        image.width,
        image.height,
        image.channels,
    )
    return image


def load_qoi(filepath: str) -> Image:
    image = QOIDecoder.decode(read_file(filepath))
    logger.info("Opened %s: %dx%d", filepath, image.width, image.height)
    return image


def save_qoi(image: Image, filepath: str) -> int:
    """Encode image and write it to filepath, returning the encoded size."""
    encoded = QOIEncoder.encode(image)
    write_file(filepath, encoded)
    logger.info("Exported %s: %d bytes", filepath, len(encoded))
    return len(encoded)
