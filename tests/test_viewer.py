import pytest

pytest.importorskip('PyQt5.QtGui')
pytest.importorskip('PyQt5.QtWidgets')

from PyQt5.QtGui import QColor  # noqa: E402

from image_buffer import ImageBuffer  # noqa: E402
from viewer import buffer_to_qimage  # noqa: E402


@pytest.fixture
def buf():
    b = ImageBuffer(2, 1)
    b.set(0, 0, (200, 100, 50))
    b.set(1, 0, (10, 20, 30))
    return b


def _rgb(image, x, y):
    c = QColor(image.pixel(x, y))
    return c.red(), c.green(), c.blue()


def test_plain_copy(buf):
    image = buffer_to_qimage(buf)
    assert (image.width(), image.height()) == (2, 1)
    assert _rgb(image, 0, 0) == (200, 100, 50)
    assert _rgb(image, 1, 0) == (10, 20, 30)


def test_channel_toggle_and_brightness(buf):
    image = buffer_to_qimage(buf, brightness=0.5, channels=(True, False, True))
    assert _rgb(image, 0, 0) == (100, 0, 25)


def test_scaling_nearest_neighbour(buf):
    image = buffer_to_qimage(buf, scale=2.0)
    assert (image.width(), image.height()) == (4, 2)
    assert _rgb(image, 1, 1) == (200, 100, 50)
    assert _rgb(image, 3, 0) == (10, 20, 30)
