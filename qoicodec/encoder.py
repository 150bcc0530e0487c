import logging

from .errors import EncodeError, FormatError, OutOfMemory
from .header import serialize_header
from .image import OPAQUE_BLACK, Image, Pixel, check_pixel_limit
from .qoi import QOI, new_index, pixel_hash, signed_delta

logger = logging.getLogger(__name__)


class QOIEncoder:
    @staticmethod
    def encode(image: Image, max_dimension: int = QOI.MAX_DIMENSION) -> bytes:
        """
        Encode a QOI file.

        :param image: The Image to encode.
        :param max_dimension: Largest width or height to accept.
        :return: bytes object containing the QOI file content.
        :raises EncodeError: if the image cannot be stored as QOI.
        :raises OutOfMemory: if the image exceeds QOI.PIXELS_MAX or the output
            buffer cannot be allocated.
        """
        width = image.width
        height = image.height
        channels = image.channels

        # --- Validation ---
        try:
            header = serialize_header(
                width, height, channels, image.colorspace, max_dimension
            )
        except FormatError as exc:
            raise EncodeError(str(exc)) from exc

        total_pixels = check_pixel_limit(width, height, "encode")

        if len(image.pixels) != total_pixels:
            raise EncodeError(
                f"QOI.encode: Expected {total_pixels} pixels, got {len(image.pixels)}"
            )

        pixels = []
        for p in image.pixels:
            if image.has_alpha:
                pixel = Pixel(*p)
            else:
                # Images without alpha are encoded as fully opaque
                pixel = Pixel(p[0], p[1], p[2])
            if not all(0 <= channel <= 255 for channel in pixel):
                raise EncodeError(
                    f"QOI.encode: Channel out of range in pixel {len(pixels)}: {tuple(p)}"
                )
            pixels.append(pixel)

        # --- Initialization ---
        # Worst case size: every pixel a QOI_OP_RGBA chunk
        try:
            result = bytearray(
                QOI.HEADER_SIZE
                + total_pixels * QOI.MAX_BYTES_PER_PIXEL
                + QOI.END_MARKER_SIZE
            )
        except MemoryError as exc:
            raise OutOfMemory(
                "QOI.encode: Failed to acquire storage for the encoded file"
            ) from exc

        result[: QOI.HEADER_SIZE] = header
        write_pos = QOI.HEADER_SIZE

        prev = OPAQUE_BLACK
        index = new_index()

        # --- Pixel Loop ---
        pixel_index = 0
        while pixel_index < total_pixels:
            pixel = pixels[pixel_index]

            # QOI_OP_RUN
            if pixel == prev:
                run = 0
                while pixel_index < total_pixels and pixels[pixel_index] == prev:
                    run += 1
                    pixel_index += 1
                    if run == QOI.MAX_RUN:
                        result[write_pos] = QOI.OP_RUN | (run - 1)
                        write_pos += 1
                        run = 0
                if run > 0:
                    result[write_pos] = QOI.OP_RUN | (run - 1)
                    write_pos += 1
                continue

            r, g, b, a = pixel
            index_pos = pixel_hash(pixel)

            # QOI_OP_INDEX
            if index[index_pos] == pixel:
                result[write_pos] = QOI.OP_INDEX | index_pos
                write_pos += 1

            elif a == prev[3]:
                dr = signed_delta(r, prev[0])
                dg = signed_delta(g, prev[1])
                db = signed_delta(b, prev[2])
                dr_dg = dr - dg
                db_dg = db - dg

                # QOI_OP_DIFF
                if -2 <= dr <= 1 and -2 <= dg <= 1 and -2 <= db <= 1:
                    result[write_pos] = (
                        QOI.OP_DIFF
                        | ((dr + QOI.DIFF_BIAS) << 4)
                        | ((dg + QOI.DIFF_BIAS) << 2)
                        | (db + QOI.DIFF_BIAS)
                    )
                    write_pos += 1

                # QOI_OP_LUMA
                elif -32 <= dg <= 31 and -8 <= dr_dg <= 7 and -8 <= db_dg <= 7:
                    result[write_pos] = QOI.OP_LUMA | (dg + QOI.LUMA_GREEN_BIAS)
                    result[write_pos + 1] = (
                        (dr_dg + QOI.LUMA_RED_BLUE_BIAS) << 4
                    ) | (db_dg + QOI.LUMA_RED_BLUE_BIAS)
                    write_pos += 2

                # QOI_OP_RGB
                else:
                    result[write_pos : write_pos + 4] = bytes((QOI.OP_RGB, r, g, b))
                    write_pos += 4

            # QOI_OP_RGBA
            else:
                result[write_pos : write_pos + 5] = bytes((QOI.OP_RGBA, r, g, b, a))
                write_pos += 5

            index[index_pos] = pixel
            prev = pixel
            pixel_index += 1

        # --- End Marker ---
        result[write_pos : write_pos + QOI.END_MARKER_SIZE] = QOI.END_MARKER
        write_pos += QOI.END_MARKER_SIZE

        logger.debug(
            "Encoded %dx%d QOI image into %d bytes", width, height, write_pos
        )

        return bytes(result[:write_pos])
