import io
import pytest
from PIL import Image

from core.errors import ThumbnailError, ThumbnailErrorKind
from plugins.pil_plugin import PILThumbnailGenerator
from tests.conftest import make_image


@pytest.fixture()
def generator():
    return PILThumbnailGenerator(width=160, height=120, quality=75)


def test_fits_within_box_and_keeps_aspect(generator, tmp_path):
    src = make_image(tmp_path / "wide.jpg", size=(800, 200))
    with Image.open(io.BytesIO(generator.generate(src))) as thumb:
        assert thumb.format == "JPEG"
        assert thumb.size == (160, 40)


def test_does_not_upscale(generator, tmp_path):
    src = make_image(tmp_path / "small.jpg", size=(50, 40))
    with Image.open(io.BytesIO(generator.generate(src))) as thumb:
        assert thumb.size == (50, 40)


def test_converts_transparent_png(generator, tmp_path):
    src = tmp_path / "alpha.png"
    Image.new("RGBA", (300, 300), (0, 0, 255, 128)).save(str(src))
    with Image.open(io.BytesIO(generator.generate(str(src)))) as thumb:
        assert thumb.mode == "RGB"


def test_deterministic(generator, tmp_path):
    src = make_image(tmp_path / "a.jpg")
    assert generator.generate(src) == generator.generate(src)


def test_missing_original(generator, tmp_path):
    with pytest.raises(ThumbnailError) as excinfo:
        generator.generate(str(tmp_path / "missing.jpg"))
    assert excinfo.value.kind is ThumbnailErrorKind.MISSING_ORIGINAL
    assert excinfo.value.is_not_found
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_directory_is_unreadable(generator, tmp_path):
    (tmp_path / "dir.jpg").mkdir()
    with pytest.raises(ThumbnailError) as excinfo:
        generator.generate(str(tmp_path / "dir.jpg"))
    assert excinfo.value.kind is ThumbnailErrorKind.UNREADABLE_ORIGINAL
    assert excinfo.value.is_not_found


def test_corrupt_image(generator, tmp_path):
    src = tmp_path / "corrupt.jpg"
    src.write_bytes(b"this is not a jpeg")
    with pytest.raises(ThumbnailError) as excinfo:
        generator.generate(str(src))
    assert excinfo.value.kind is ThumbnailErrorKind.UNDECODABLE
    assert not excinfo.value.is_not_found


@pytest.mark.parametrize("kwargs", [{"width": 0}, {"height": -1}, {"quality": 0}, {"quality": 101}])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        PILThumbnailGenerator(**kwargs)
