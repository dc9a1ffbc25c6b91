import pytest

from Errors import FileReadError, ImageFormatError
from image_io import Carrier, load_carrier, output_format_for, save_carrier
from utils import detect_image_format


def test_png_round_trip_is_exact(tmp_path):
    pixels = [(x, 255 - x, (x * 31) % 256, 100 + x) for x in range(12)]
    path = str(tmp_path / "exact.png")

    save_carrier(Carrier(4, 3, pixels, 'PNG'), path)
    carrier = load_carrier(path)

    assert carrier.image_format == 'PNG'
    assert (carrier.width, carrier.height) == (4, 3)
    assert carrier.pixels == pixels


def test_bmp_carrier_can_be_saved_as_png(bmp_carrier, tmp_path):
    carrier = load_carrier(bmp_carrier(5, 4))
    path = str(tmp_path / "converted.png")

    save_carrier(carrier, path)

    assert load_carrier(path).pixels == carrier.pixels


def test_png_carrier_can_be_saved_as_bmp(png_carrier, tmp_path):
    carrier = load_carrier(png_carrier(5, 4))
    path = str(tmp_path / "nested" / "converted.bmp")

    save_carrier(carrier, path)

    reloaded = load_carrier(path)
    assert reloaded.image_format == 'BMP'
    assert reloaded.pixels == carrier.pixels


def test_lossy_format_is_rejected(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b'\xff\xd8\xff\xe0' + b'\x00' * 32)

    with pytest.raises(ImageFormatError) as excinfo:
        load_carrier(str(path))
    assert excinfo.value.format_found == 'JPEG'


def test_unknown_format_is_rejected(tmp_path):
    path = tmp_path / "noise.bin"
    path.write_bytes(b'\x00' * 64)

    with pytest.raises(ImageFormatError):
        load_carrier(str(path))


def test_missing_file(tmp_path):
    with pytest.raises(FileReadError):
        load_carrier(str(tmp_path / "missing.png"))


def test_output_format_from_extension():
    assert output_format_for("out.PNG") == 'PNG'
    assert output_format_for("dir/out.bmp") == 'BMP'
    with pytest.raises(ImageFormatError):
        output_format_for("out.jpg")


def test_detect_image_format():
    assert detect_image_format(b'BM' + b'\x00' * 20)[:2] == ('BMP', True)
    assert detect_image_format(b'GIF89a' + b'\x00' * 20)[:2] == ('GIF', False)


def test_carrier_coordinates():
    carrier = Carrier(4, 2, [(0, 0, 0, 0)] * 8, 'PNG')
    assert carrier.coordinates(0) == (0, 0)
    assert carrier.coordinates(5) == (1, 1)


def test_carrier_rejects_wrong_pixel_count():
    with pytest.raises(ValueError):
        Carrier(2, 2, [(0, 0, 0, 0)] * 3, 'PNG')
