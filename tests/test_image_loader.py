import asyncio
import base64

import pytest

from app.exceptions import ImageDecodeError, ImageLoadError
from app.services.image_loader import TemplateImageLoader
from tests.conftest import png_bytes


@pytest.fixture
def loader(tmp_path):
    return TemplateImageLoader(upload_dir=str(tmp_path), timeout=1.0)


def test_loads_data_url(loader):
    url = "data:image/png;base64," + base64.b64encode(png_bytes((30, 20))).decode()
    image = asyncio.run(loader.load(url))
    assert image.size == (30, 20)


def test_loads_uploaded_file(loader, tmp_path):
    (tmp_path / "bg.png").write_bytes(png_bytes((64, 48)))
    image = asyncio.run(loader.load("/uploads/bg.png"))
    assert image.size == (64, 48)


def test_missing_upload_is_a_load_error(loader):
    with pytest.raises(ImageLoadError):
        asyncio.run(loader.load("/uploads/missing.png"))


def test_upload_paths_cannot_escape(loader):
    with pytest.raises(ImageLoadError):
        loader.local_path("/uploads/../secret.png")


@pytest.mark.parametrize("url", ["", "ftp://example.com/a.png", "data:image/png,raw", "data:image/png;base64,@@@"])
def test_unusable_references(loader, url):
    with pytest.raises(ImageLoadError):
        asyncio.run(loader.fetch_bytes(url))


def test_undecodable_bytes(loader):
    with pytest.raises(ImageDecodeError):
        loader.decode(b"definitely not an image")


def test_decode_error_is_a_load_error():
    assert issubclass(ImageDecodeError, ImageLoadError)
