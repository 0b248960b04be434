import os
import tempfile

# Settings are read at import time, so point them at throwaway locations first
_TMP_DIR = tempfile.mkdtemp(prefix="certforge-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["FONT_DIRS"] = os.path.join(_TMP_DIR, "fonts")
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import replace  # noqa: E402
from io import BytesIO  # noqa: E402

import pytest  # noqa: E402
from PIL import Image  # noqa: E402

from app.exceptions import CertificateRenderError  # noqa: E402
from app.services.certificate_renderer import CertificateRenderer, PaintState  # noqa: E402


def char_measure(text, font):
    """Ten pixels per character, independent of the font"""
    return len(text) * 10


class RecordingSurface:
    """Surface that records paint calls instead of rasterizing"""

    def __init__(self, measure=char_measure):
        self.state = PaintState()
        self._saved = []
        self._measure = measure
        self.calls = []

    def save(self):
        self._saved.append(replace(self.state))
        self.calls.append(("save",))

    def restore(self):
        self.state = self._saved.pop()
        self.calls.append(("restore",))

    def draw_image(self, image, x=0, y=0):
        self.calls.append(("draw_image", x, y))

    def measure_text(self, text, font):
        return self._measure(text, font)

    def fill_text(self, text, x, y):
        # Snapshot, the live state keeps changing after this call
        self.calls.append(("fill_text", text, x, y, replace(self.state)))

    @property
    def fills(self):
        return [c for c in self.calls if c[0] == "fill_text"]


def png_bytes(size=(800, 600), color="white", fmt="PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def recording_surface():
    return RecordingSurface()


@pytest.fixture
def template_image():
    return Image.new("RGB", (800, 600), "white")


@pytest.fixture(scope="session")
def client():
    from fastapi.testclient import TestClient
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


class FlakyRenderer(CertificateRenderer):
    """Fails for members named "Broken", renders everyone else"""

    def render(self, template_image, text_boxes, record):
        if record.get("name") == "Broken":
            raise CertificateRenderError("boom")
        return super().render(template_image, text_boxes, record)
