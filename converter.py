import sys

from qoicodec import ExportOptions, load_image, load_qoi, save_qoi
from qoicodec.utils import image_to_pil

INPUT_IMAGE = "fruits.png"


def png_to_qoi(png_path, qoi_path, options=None):
    image = load_image(png_path, options)
    size = save_qoi(image, qoi_path)
    print(
        f"Converted {png_path} ({image.width}x{image.height}, "
        f"{image.channels} channels) to {qoi_path}: {size} bytes"
    )


def qoi_to_png(qoi_path, png_path):
    image = load_qoi(qoi_path)
    image_to_pil(image).save(png_path, format="PNG")
    print(f"Converted {qoi_path} to {png_path}")


if __name__ == "__main__":
    input_image = sys.argv[1] if len(sys.argv) > 1 else INPUT_IMAGE
    stem = input_image.rsplit(".", 1)[0]

    png_to_qoi(input_image, f"{stem}_converted.qoi", ExportOptions())
    qoi_to_png(f"{stem}_converted.qoi", f"{stem}_reconverted.png")
