"""
Carrier image loading and saving
BMP goes through the hand-written BMPParser, PNG through Pillow
"""

import io
import os

from PIL import Image, UnidentifiedImageError

from BMP_parser import BMPParser, build_bmp
from Constants import FORMAT_EXTENSIONS, SUPPORTED_FORMATS
from Errors import ImageCorruptedError, ImageFormatError
from utils import detect_image_format, ensure_output_directory, read_file_bytes, write_file_bytes


class Carrier:
    """Flat row-major RGBA pixel grid plus what is needed to write it back"""

    def __init__(self, width, height, pixels, image_format, parser=None, path=None):
        if len(pixels) != width * height:
            raise ValueError(f"Expected {width * height} pixels, got {len(pixels)}")
        self.width = width
        self.height = height
        self.pixels = list(pixels)
        self.image_format = image_format
        self.parser = parser
        self.path = path

    @property
    def total_pixels(self):
        return self.width * self.height

    def coordinates(self, index):
        """Map a row-major pixel index to (x, y)"""
        return (index % self.width, index // self.width)

    def get_image_info(self):
        info = {
            'format': self.image_format,
            'width': self.width,
            'height': self.height,
            'total_pixels': self.total_pixels,
        }
        if self.parser is not None:
            info['bit_depth'] = self.parser.bit_depth
            info['is_top_down'] = self.parser.is_top_down
        return info


def load_carrier(path):
    """
    Read a carrier image from disk

    Raises:
        FileReadError: If the file cannot be read
        ImageFormatError: If the format cannot hold exact pixel values
        ImageCorruptedError: If the file cannot be decoded
    """
    file_bytes = read_file_bytes(path)
    image_format, is_supported, warning = detect_image_format(file_bytes)

    if not is_supported:
        raise ImageFormatError(image_format, warning)

    if image_format == 'BMP':
        parser = BMPParser(file_bytes)
        return Carrier(parser.width, parser.height, parser.get_pixels(), 'BMP', parser=parser, path=path)

    try:
        with Image.open(io.BytesIO(file_bytes)) as img:
            img = img.convert("RGBA")
            width, height = img.size
            raw = img.tobytes()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageCorruptedError(f"Cannot decode {image_format} image {path}: {e}") from e

    pixels = [tuple(raw[i:i + 4]) for i in range(0, len(raw), 4)]
    return Carrier(width, height, pixels, image_format, path=path)


def output_format_for(path):
    """Pick the output format from the file extension"""
    extension = os.path.splitext(path)[1].lower()
    image_format = FORMAT_EXTENSIONS.get(extension)
    if image_format is None:
        raise ImageFormatError(
            extension or "(no extension)",
            f"Output must be one of: {', '.join(sorted(FORMAT_EXTENSIONS))}"
        )
    return image_format


def encode_carrier(carrier, image_format):
    """Serialize carrier pixels into image file bytes"""
    if image_format not in SUPPORTED_FORMATS:
        raise ImageFormatError(image_format)

    if image_format == 'BMP':
        if carrier.parser is not None:
            return carrier.parser.reconstruct_bmp(carrier.pixels)
        return build_bmp(carrier.width, carrier.height, carrier.pixels)

    raw = b"".join(bytes(pixel) for pixel in carrier.pixels)
    img = Image.frombytes("RGBA", (carrier.width, carrier.height), raw)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def save_carrier(carrier, path):
    """Write a carrier to disk in the format named by the path's extension"""
    image_format = output_format_for(path)
    data = encode_carrier(carrier, image_format)
    ensure_output_directory(path)
    write_file_bytes(path, data)
    return len(data)
