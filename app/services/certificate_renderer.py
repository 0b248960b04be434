"""
Certificate Renderer
Composites a template image and its text boxes for one record at native resolution
"""

from dataclasses import dataclass, field, replace
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw

from app.exceptions import ImageLoadError
from app.schemas.template import TextAlignment, TextBox
from app.services.field_resolver import resolve_text
from app.services.font_registry import FontRegistry, font_registry
from app.services.text_layout import FontSpec, layout_lines

CANVAS_WHITESPACE = str.maketrans("\t\n\f\r", "    ")


@dataclass
class PaintState:
    """Canvas-style paint state saved and restored around each text box"""
    font: FontSpec = field(default_factory=lambda: FontSpec(10, "sans-serif"))
    fill: str = "#000000"
    align: TextAlignment = TextAlignment.LEFT
    baseline: str = "alphabetic"


class PillowSurface:
    """Raster surface backed by an RGBA Pillow image"""

    ALIGN_ANCHORS = {
        TextAlignment.LEFT: "l",
        TextAlignment.CENTER: "m",
        TextAlignment.RIGHT: "r",
    }
    # "top" anchors at the ascender so every line of a box shares one reference
    BASELINE_ANCHORS = {
        "top": "a",
        "middle": "m",
        "alphabetic": "s",
        "bottom": "d",
    }

    def __init__(self, width: int, height: int, fonts: FontRegistry):
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self.fonts = fonts
        self.state = PaintState()
        self._saved: List[PaintState] = []

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def save(self) -> None:
        self._saved.append(replace(self.state))

    def restore(self) -> None:
        if self._saved:
            self.state = self._saved.pop()

    def draw_image(self, image: Image.Image, x: int = 0, y: int = 0) -> None:
        layer = image if image.mode == "RGBA" else image.convert("RGBA")
        self.image.alpha_composite(layer, dest=(int(x), int(y)))

    @staticmethod
    def _prepare_text(text: str) -> str:
        # Canvas text preparation: ASCII whitespace becomes a plain space, text is one line
        return text.translate(CANVAS_WHITESPACE)

    def measure_text(self, text: str, font: FontSpec) -> float:
        return self.fonts.measure(self._prepare_text(text), font)

    def _fill_color(self) -> Tuple[int, int, int, int]:
        try:
            color = ImageColor.getrgb(self.state.fill)
        except ValueError:
            # Unparseable colors paint with the default ink
            return (0, 0, 0, 255)
        return color if len(color) == 4 else (*color, 255)

    def fill_text(self, text: str, x: float, y: float) -> None:
        """Draw one line of text composited over what is already painted"""
        anchor = self.ALIGN_ANCHORS[self.state.align] + self.BASELINE_ANCHORS.get(self.state.baseline, "s")
        # Glyph coverage as a mask; ImageDraw overwrites RGBA pixels rather than blending them
        coverage = Image.new("L", self.image.size, 0)
        ImageDraw.Draw(coverage).text(
            (x, y),
            self._prepare_text(text),
            fill=255,
            font=self.fonts.get(self.state.font),
            anchor=anchor
        )
        red, green, blue, alpha = self._fill_color()
        if alpha < 255:
            coverage = coverage.point(lambda value: value * alpha // 255)
        ink = Image.new("RGBA", self.image.size, (red, green, blue, 0))
        ink.putalpha(coverage)
        self.image.alpha_composite(ink)


class CertificateRenderer:
    """Deterministic template + text boxes + record -> raster"""

    LINE_HEIGHT = 1.2

    def __init__(self, fonts: Optional[FontRegistry] = None):
        self.fonts = fonts or font_registry

    @staticmethod
    def anchor_x(box: TextBox) -> float:
        width = box.width or 0
        if box.alignment == TextAlignment.CENTER:
            return box.x + width / 2
        if box.alignment == TextAlignment.RIGHT:
            return box.x + width
        return box.x

    def render(
        self,
        template_image: Optional[Image.Image],
        text_boxes: Sequence[TextBox],
        record: Mapping[str, Any]
    ) -> Image.Image:
        """
        Render one certificate.

        The surface has exactly the template image's pixel size. Text boxes
        paint in order, so later boxes cover earlier ones.

        Raises:
            ImageLoadError: No decoded template image was supplied
            MeasurementUnavailable: A wrapping box had no text metrics
        """
        if template_image is None:
            raise ImageLoadError("Template image is not loaded")
        surface = PillowSurface(template_image.width, template_image.height, self.fonts)
        self.paint(surface, template_image, text_boxes, record)
        return surface.image

    def paint(self, surface, template_image: Image.Image, text_boxes: Sequence[TextBox], record: Mapping[str, Any]) -> None:
        """Paint onto any surface exposing save/restore/draw_image/measure_text/fill_text"""
        surface.draw_image(template_image, 0, 0)
        for box in text_boxes:
            self._paint_text_box(surface, box, record)

    def _paint_text_box(self, surface, box: TextBox, record: Mapping[str, Any]) -> None:
        text = resolve_text(box, record)
        if not text:
            return

        surface.save()
        try:
            font = FontSpec(box.font_size, box.font_family)
            surface.state.font = font
            surface.state.fill = box.color
            surface.state.align = box.alignment
            surface.state.baseline = "top"

            x = self.anchor_x(box)
            y = box.y
            line_height = box.font_size * self.LINE_HEIGHT
            for line in layout_lines(text, font, box.width, surface.measure_text):
                surface.fill_text(line, x, y)
                y += line_height
        finally:
            surface.restore()


# Singleton
certificate_renderer = CertificateRenderer()
