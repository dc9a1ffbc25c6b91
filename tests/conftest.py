import pytest

from BMP_parser import build_bmp
from image_io import Carrier, save_carrier


HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


def gradient_pixels(width, height):
    return [
        ((x * 7) % 256, (y * 13) % 256, (x + y) % 256, 255)
        for y in range(height)
        for x in range(width)
    ]


@pytest.fixture
def bmp_carrier(tmp_path):
    """Factory writing a 32-bit BMP carrier and returning its path"""
    def make(width=16, height=16, name="carrier.bmp", top_down=False):
        path = tmp_path / name
        path.write_bytes(build_bmp(width, height, gradient_pixels(width, height), top_down=top_down))
        return str(path)
    return make


@pytest.fixture
def png_carrier(tmp_path):
    """Factory writing a PNG carrier through Pillow and returning its path"""
    def make(width=16, height=16, name="carrier.png"):
        path = tmp_path / name
        save_carrier(Carrier(width, height, gradient_pixels(width, height), 'PNG'), str(path))
        return str(path)
    return make


@pytest.fixture
def program_file(tmp_path):
    def make(source, name="program.bf"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return str(path)
    return make


@pytest.fixture
def hello_world():
    return HELLO_WORLD
