import logging

from .errors import BadEndMarker, RunOverflow, TrailingData, UnexpectedEof
from .header import parse_header
from .image import Colorspace, Image, Pixel, allocate_pixels, check_pixel_limit
from .qoi import QOI, new_index, pixel_hash

logger = logging.getLogger(__name__)


class QOIDecoder:
    """
    A class to decode QOI (Quite OK Image) files into pixels.
    """

    @staticmethod
    def decode(file_data: bytes, max_dimension: int = QOI.MAX_DIMENSION) -> Image:
        """
        Decode a QOI file given as a bytes/bytearray object.

        :param file_data: Bytes containing the whole QOI file.
        :param max_dimension: Largest width or height to accept.
        :return: The decoded Image.
        :raises FormatError: if the file is malformed in any way.
        :raises OutOfMemory: if the declared size cannot be allocated.
        """
        header = parse_header(file_data, max_dimension)
        total_pixels = check_pixel_limit(header.width, header.height, "decode")

        # Every chunk covers at most MAX_RUN pixels
        min_size = (
            QOI.HEADER_SIZE
            + -(-total_pixels // QOI.MAX_RUN)
            + QOI.END_MARKER_SIZE
        )
        if len(file_data) < min_size:
            raise UnexpectedEof(
                f"QOI.decode: {len(file_data)} bytes cannot hold {total_pixels} pixels"
            )

        pixels = allocate_pixels(header.width, header.height, "decode")

        # --- Initialization ---
        index = new_index()
        r, g, b, a = 0, 0, 0, 255

        file_size = len(file_data)
        read_pos = QOI.HEADER_SIZE
        pixel_index = 0

        # --- Decoding Loop ---
        while pixel_index < total_pixels:
            # Enough room for the end marker means enough room for any chunk
            if file_size < read_pos + QOI.END_MARKER_SIZE:
                raise UnexpectedEof("QOI.decode: The file ends unexpectedly")

            tag = file_data[read_pos]
            read_pos += 1

            # QOI_OP_RGB (0xFE/0b11111110)
            if tag == QOI.OP_RGB:
                r = file_data[read_pos]
                g = file_data[read_pos + 1]
                b = file_data[read_pos + 2]
                read_pos += 3

            # QOI_OP_RGBA (0xFF/0b11111111)
            elif tag == QOI.OP_RGBA:
                r = file_data[read_pos]
                g = file_data[read_pos + 1]
                b = file_data[read_pos + 2]
                a = file_data[read_pos + 3]
                read_pos += 4

            # QOI_OP_INDEX (00xxxxxx)
            elif (tag & QOI.MASK_2) == QOI.OP_INDEX:
                # A zero tag may be the first byte of the end marker
                marker_pos = read_pos - 1
                if (
                    file_data[marker_pos : marker_pos + QOI.END_MARKER_SIZE]
                    == QOI.END_MARKER
                ):
                    read_pos = marker_pos
                    break

                r, g, b, a = index[tag & QOI.MASK_6]
                pixels[pixel_index] = Pixel(r, g, b, a)
                pixel_index += 1
                continue

            # QOI_OP_DIFF (01xxxxxx)
            elif (tag & QOI.MASK_2) == QOI.OP_DIFF:
                # 2-bit differences with a bias of 2, wrapped to 8-bit unsigned
                r = (r + ((tag >> 4) & 0x03) - QOI.DIFF_BIAS) & 0xFF
                g = (g + ((tag >> 2) & 0x03) - QOI.DIFF_BIAS) & 0xFF
                b = (b + (tag & 0x03) - QOI.DIFF_BIAS) & 0xFF

            # QOI_OP_LUMA (10xxxxxx)
            elif (tag & QOI.MASK_2) == QOI.OP_LUMA:
                b2 = file_data[read_pos]
                read_pos += 1

                dg = (tag & QOI.MASK_6) - QOI.LUMA_GREEN_BIAS
                dr = ((b2 >> 4) & 0x0F) - QOI.LUMA_RED_BLUE_BIAS + dg
                db = (b2 & 0x0F) - QOI.LUMA_RED_BLUE_BIAS + dg

                r = (r + dr) & 0xFF
                g = (g + dg) & 0xFF
                b = (b + db) & 0xFF

            # QOI_OP_RUN (11xxxxxx)
            else:
                run = (tag & QOI.MASK_6) + 1
                if pixel_index + run > total_pixels:
                    raise RunOverflow("QOI.decode: Too many encoded pixels")

                pixels[pixel_index : pixel_index + run] = [Pixel(r, g, b, a)] * run
                pixel_index += run
                continue

            pixel = Pixel(r, g, b, a)
            index[pixel_hash(pixel)] = pixel
            pixels[pixel_index] = pixel
            pixel_index += 1

        # --- End Marker ---
        if pixel_index < total_pixels:
            raise UnexpectedEof(
                f"QOI.decode: End marker after {pixel_index} of {total_pixels} pixels"
            )

        if file_size < read_pos + QOI.END_MARKER_SIZE:
            raise UnexpectedEof("QOI.decode: The file ends unexpectedly")

        if file_data[read_pos : read_pos + QOI.END_MARKER_SIZE] != QOI.END_MARKER:
            raise BadEndMarker("QOI.decode: Invalid end marker")
        read_pos += QOI.END_MARKER_SIZE

        if read_pos != file_size:
            raise TrailingData(
                f"QOI.decode: File contains {file_size - read_pos} bytes past the end marker"
            )

        if not header.has_alpha:
            # QOI_OP_RGBA chunks may appear in 3 channel files
            pixels = [p if p.a == 255 else p._replace(a=255) for p in pixels]

        logger.debug(
            "Decoded %dx%d QOI image (%d channels, colorspace %d)",
            header.width,
            header.height,
            header.channels,
            header.colorspace,
        )

        return Image(
            width=header.width,
            height=header.height,
            pixels=pixels,
            has_alpha=header.has_alpha,
            colorspace=Colorspace(header.colorspace),
        )
