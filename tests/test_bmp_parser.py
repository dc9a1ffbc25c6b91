import pytest

from BMP_parser import BMPParser, build_bmp
from Errors import CompressionDetectedError, ImageCorruptedError, ImageFormatError
from utils import int_to_bytes


def _pixels(width, height):
    return [(x * 40, y * 60, 7, 200 + x) for y in range(height) for x in range(width)]


def build_24bit_bmp(width, height, pixels):
    """Bottom-up 24-bit BMP with row padding"""
    padding = (4 - (width * 3) % 4) % 4
    rows = []
    for y in range(height):
        row = bytearray()
        for red, green, blue, _ in pixels[y * width:(y + 1) * width]:
            row.extend((blue, green, red))
        row.extend(b'\x00' * padding)
        rows.append(bytes(row))
    pixel_data = b''.join(reversed(rows))

    header = b'BM' + int_to_bytes(54 + len(pixel_data), 4) + int_to_bytes(0, 4) + int_to_bytes(54, 4)
    info = (
        int_to_bytes(40, 4) + int_to_bytes(width, 4) + int_to_bytes(height, 4)
        + int_to_bytes(1, 2) + int_to_bytes(24, 2) + int_to_bytes(0, 4)
        + int_to_bytes(len(pixel_data), 4) + int_to_bytes(0, 16)
    )
    return header + info + pixel_data


@pytest.mark.parametrize("top_down", [False, True])
def test_build_and_parse_32bit(top_down):
    pixels = _pixels(3, 2)
    parser = BMPParser(build_bmp(3, 2, pixels, top_down=top_down))

    assert parser.get_dimensions() == (3, 2, 4)
    assert parser.is_top_down is top_down
    assert parser.has_alpha()
    assert parser.get_pixels() == pixels


def test_parse_24bit_with_padding():
    pixels = _pixels(3, 2)
    parser = BMPParser(build_24bit_bmp(3, 2, pixels))

    assert parser.bit_depth == 24
    assert parser.row_padding == 3
    assert parser.get_pixels() == [(r, g, b, 255) for r, g, b, _ in pixels]


def test_24bit_reconstruct_is_promoted_to_32bit():
    parser = BMPParser(build_24bit_bmp(3, 2, _pixels(3, 2)))
    modified = [(1, 2, 3, 4)] * 6

    rebuilt = BMPParser(parser.reconstruct_bmp(modified))

    assert rebuilt.bit_depth == 32
    assert rebuilt.get_pixels() == modified


def test_32bit_reconstruct_keeps_headers():
    original = build_bmp(2, 2, _pixels(2, 2))
    parser = BMPParser(original)
    modified = [(9, 9, 9, 9), (8, 8, 8, 8), (7, 7, 7, 7), (6, 6, 6, 6)]

    rebuilt = parser.reconstruct_bmp(modified)

    assert rebuilt[:54] == original[:54]
    assert BMPParser(rebuilt).get_pixels() == modified


def test_reconstruct_rejects_wrong_pixel_count():
    parser = BMPParser(build_bmp(2, 2, _pixels(2, 2)))
    with pytest.raises(ValueError):
        parser.reconstruct_bmp([(0, 0, 0, 0)])


def test_image_info():
    info = BMPParser(build_bmp(4, 3, _pixels(4, 3))).get_image_info()
    assert info['width'] == 4
    assert info['height'] == 3
    assert info['total_pixels'] == 12
    assert info['bit_depth'] == 32


def test_rejects_bad_signature():
    data = bytearray(build_bmp(2, 2, _pixels(2, 2)))
    data[0:2] = b'XX'
    with pytest.raises(ImageCorruptedError):
        BMPParser(bytes(data))


def test_rejects_short_file():
    with pytest.raises(ImageCorruptedError):
        BMPParser(b'BM' + b'\x00' * 10)


def test_rejects_compression():
    data = bytearray(build_bmp(2, 2, _pixels(2, 2)))
    data[30:34] = int_to_bytes(1, 4)
    with pytest.raises(CompressionDetectedError):
        BMPParser(bytes(data))


def test_rejects_unsupported_bit_depth():
    data = bytearray(build_bmp(2, 2, _pixels(2, 2)))
    data[28:30] = int_to_bytes(16, 2)
    with pytest.raises(ImageFormatError):
        BMPParser(bytes(data))


def test_rejects_truncated_pixel_data():
    data = build_bmp(4, 4, _pixels(4, 4))
    with pytest.raises(ImageCorruptedError):
        BMPParser(data[:-5])
