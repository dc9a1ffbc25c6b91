"""
BMP Parser for image program carriers
Reads 24/32-bit uncompressed BMPs into RGBA pixels and writes them back as 32-bit
"""

from Constants import *
from utils import bytes_to_int, int_to_bytes
from Errors import *


class BMPParser:
    """Parse BMP files manually"""

    def __init__(self, file_bytes):
        self.file_bytes = bytes(file_bytes)
        self.width = 0
        self.height = 0
        self.bit_depth = 0
        self.compression = 0
        self.pixel_data_offset = 0
        self.channels = 0
        self.row_padding = 0
        self.pixels = None
        self.is_top_down = False

        self.parse()

    def parse(self):
        """Parse BMP structure with validation"""
        # 1. Check minimum file size
        if len(self.file_bytes) < BMP_HEADER_SIZE:
            raise ImageCorruptedError("File too small to be a valid BMP")

        # 2. Check signature
        if self.file_bytes[:2] != BMP_SIGNATURE:
            raise ImageCorruptedError("Invalid BMP signature")

        # 3. Parse basic headers
        self.pixel_data_offset = bytes_to_int(self.file_bytes, 10, 4, 'little')
        dib_header_size = bytes_to_int(self.file_bytes, 14, 4, 'little')
        if dib_header_size < BMP_INFO_HEADER_SIZE:
            raise ImageFormatError("BMP", f"Unsupported DIB header size: {dib_header_size}")

        self.width = bytes_to_int(self.file_bytes, 18, 4, 'little', signed=True)
        self.height = bytes_to_int(self.file_bytes, 22, 4, 'little', signed=True)

        # Negative height means rows are stored top-down
        if self.height < 0:
            self.height = -self.height
            self.is_top_down = True

        if self.width <= 0 or self.height == 0:
            raise ImageCorruptedError(f"Invalid BMP dimensions: {self.width} x {self.height}")

        # 4. Check color planes (must be 1)
        planes = bytes_to_int(self.file_bytes, 26, 2, 'little')
        if planes != 1:
            raise ImageCorruptedError(f"Invalid BMP: planes = {planes} (must be 1)")

        self.bit_depth = bytes_to_int(self.file_bytes, 28, 2, 'little')
        self.compression = bytes_to_int(self.file_bytes, 30, 4, 'little')

        # 5. Validate against supported bit depths
        if self.bit_depth not in SUPPORTED_BIT_DEPTHS:
            raise ImageFormatError(
                f"{self.bit_depth}-bit BMP",
                f"Unsupported bit depth: {self.bit_depth}"
            )
        self.channels = self.bit_depth // 8

        # 6. Check compression
        if self.compression != 0:
            raise CompressionDetectedError("BMP uses compression - only uncompressed BMP supported")

        self._calculate_row_padding()

        required = self.pixel_data_offset + self.row_size * self.height
        if len(self.file_bytes) < required:
            raise ImageCorruptedError(
                f"Pixel data truncated: need {required} bytes, file has {len(self.file_bytes)}"
            )

    def _calculate_row_padding(self):
        """BMP rows must be a multiple of 4 bytes"""
        row_size = self.width * self.channels
        self.row_padding = (4 - (row_size % 4)) % 4

    @property
    def row_size(self):
        return self.width * self.channels + self.row_padding

    def _row_offset(self, y):
        """File offset of top-down row y"""
        row_index = y if self.is_top_down else self.height - 1 - y
        return self.pixel_data_offset + row_index * self.row_size

    def get_pixels(self):
        """
        Extract pixels as (r, g, b, a) tuples, top-down row-major
        24-bit images read with alpha 255
        """
        if self.pixels is not None:
            return list(self.pixels)

        data = self.file_bytes
        pixels = []

        for y in range(self.height):
            offset = self._row_offset(y)
            for x in range(self.width):
                pos = offset + x * self.channels
                blue, green, red = data[pos], data[pos + 1], data[pos + 2]
                alpha = data[pos + 3] if self.channels == 4 else OPAQUE
                pixels.append((red, green, blue, alpha))

        self.pixels = tuple(pixels)
        return list(self.pixels)

    def get_dimensions(self):
        """Return (width, height, channels)"""
        return (self.width, self.height, self.channels)

    def has_alpha(self):
        return self.bit_depth == 32

    def get_image_info(self):
        """Get image information"""
        return {
            'format': 'BMP',
            'width': self.width,
            'height': self.height,
            'bit_depth': self.bit_depth,
            'channels': self.channels,
            'has_alpha': self.has_alpha(),
            'pixel_data_offset': self.pixel_data_offset,
            'row_padding': self.row_padding,
            'is_top_down': self.is_top_down,
            'total_pixels': self.width * self.height,
        }

    def reconstruct_bmp(self, modified_pixels):
        """
        Rebuild the BMP with modified pixels

        32-bit sources keep their original headers. 24-bit sources are
        promoted to 32-bit so the alpha channel survives.

        Returns: complete BMP file bytes
        """
        if len(modified_pixels) != self.width * self.height:
            raise ValueError(
                f"Expected {self.width * self.height} pixels, got {len(modified_pixels)}"
            )

        if self.bit_depth != 32:
            return build_bmp(self.width, self.height, modified_pixels, top_down=self.is_top_down)

        data = bytearray(self.file_bytes)
        for y in range(self.height):
            offset = self._row_offset(y)
            row = modified_pixels[y * self.width:(y + 1) * self.width]
            data[offset:offset + self.width * 4] = _pack_row(row)

        return bytes(data)


def _pack_row(row):
    packed = bytearray()
    for red, green, blue, alpha in row:
        packed.extend((blue, green, red, alpha))
    return packed


def build_bmp(width, height, pixels, top_down=False):
    """
    Write RGBA pixels as an uncompressed 32-bit BMP

    Args:
        width, height: Image dimensions
        pixels: Top-down row-major (r, g, b, a) tuples
        top_down: Store rows top-down (negative height)

    Returns:
        BMP file bytes
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid dimensions: {width} x {height}")
    if len(pixels) != width * height:
        raise ValueError(f"Expected {width * height} pixels, got {len(pixels)}")

    rows = [_pack_row(pixels[y * width:(y + 1) * width]) for y in range(height)]
    if not top_down:
        rows.reverse()
    pixel_data = b''.join(rows)

    file_size = BMP_HEADER_SIZE + len(pixel_data)
    header = (
        BMP_SIGNATURE
        + int_to_bytes(file_size, 4)
        + int_to_bytes(0, 4)  # reserved
        + int_to_bytes(BMP_HEADER_SIZE, 4)
    )
    info = (
        int_to_bytes(BMP_INFO_HEADER_SIZE, 4)
        + int_to_bytes(width, 4, signed=True)
        + int_to_bytes(-height if top_down else height, 4, signed=True)
        + int_to_bytes(1, 2)  # planes
        + int_to_bytes(32, 2)
        + int_to_bytes(0, 4)  # BI_RGB
        + int_to_bytes(len(pixel_data), 4)
        + int_to_bytes(2835, 4)  # 72 DPI
        + int_to_bytes(2835, 4)
        + int_to_bytes(0, 4)
        + int_to_bytes(0, 4)
    )
    return header + info + pixel_data
