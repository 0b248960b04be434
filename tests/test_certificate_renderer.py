import pytest
from PIL import Image

from app.exceptions import ImageLoadError, MeasurementUnavailable
from app.schemas.template import TextAlignment, TextBox
from app.services.certificate_exporter import CertificateExporter
from app.services.certificate_renderer import CertificateRenderer, PillowSurface
from app.services.text_layout import FontSpec
from tests.conftest import RecordingSurface

renderer = CertificateRenderer()


def test_empty_text_paints_nothing(recording_surface, template_image):
    box = TextBox(id="b1", text="", field_name="name")
    renderer.paint(recording_surface, template_image, [box], {"name": ""})
    assert recording_surface.calls == [("draw_image", 0, 0)]


def test_wrapped_lines_step_by_line_height(recording_surface, template_image):
    box = TextBox(
        id="b1",
        x=10,
        y=50,
        font_size=20,
        width=300,
        field_name="name",
        text="unused",
    )
    record = {"name": "Hello World This Is A Long Certificate Line"}
    renderer.paint(recording_surface, template_image, [box], record)

    fills = recording_surface.fills
    assert [(text, x, y) for _, text, x, y, _ in fills] == [
        ("Hello World This Is A Long ", 10, 50),
        ("Certificate Line ", 10, 74),
    ]
    state = fills[0][4]
    assert state.font.css == "20px Arial"
    assert state.baseline == "top"


def test_paint_state_is_restored_after_each_box(recording_surface, template_image):
    boxes = [
        TextBox(id="a", text="First", color="#ff0000"),
        TextBox(id="b", text="Second", color="#0000ff", alignment=TextAlignment.RIGHT),
    ]
    renderer.paint(recording_surface, template_image, boxes, {})

    kinds = [c[0] for c in recording_surface.calls]
    assert kinds == ["draw_image", "save", "fill_text", "restore", "save", "fill_text", "restore"]
    assert recording_surface.state.fill == "#000000"
    assert recording_surface.state.baseline == "alphabetic"
    assert [c[4].fill for c in recording_surface.fills] == ["#ff0000", "#0000ff"]


@pytest.mark.parametrize("alignment, width, expected", [
    (TextAlignment.LEFT, 200, 100),
    (TextAlignment.CENTER, 200, 200),
    (TextAlignment.RIGHT, 200, 300),
    (TextAlignment.CENTER, None, 100),
    (TextAlignment.RIGHT, None, 100),
])
def test_anchor_x(alignment, width, expected):
    box = TextBox(id="b1", x=100, alignment=alignment, width=width)
    assert CertificateRenderer.anchor_x(box) == expected


def test_wrapping_box_requires_measurement(template_image):
    surface = RecordingSurface()
    surface.measure_text = None
    box = TextBox(id="b1", text="Hello World", width=50)
    with pytest.raises(MeasurementUnavailable):
        renderer.paint(surface, template_image, [box], {})
    # State is restored even when painting fails
    assert surface.state.baseline == "alphabetic"


def test_missing_image_is_an_error():
    with pytest.raises(ImageLoadError):
        renderer.render(None, [], {})


def test_output_has_native_size(template_image):
    boxes = [TextBox(id="b1", text="Certificate", font_size=48, x=50, y=40)]
    result = renderer.render(template_image, boxes, {})
    assert result.size == (800, 600)
    assert result.mode == "RGBA"


def test_render_is_deterministic(template_image):
    boxes = [
        TextBox(id="t", text="Certificate of Completion", font_size=40, x=400, y=60,
                width=600, alignment=TextAlignment.CENTER),
        TextBox(id="n", field_name="name", text="Recipient", font_size=32, x=100, y=200, width=500),
    ]
    record = {"name": "Alice Smith"}
    first = renderer.render(template_image, boxes, record)
    second = renderer.render(template_image, boxes, record)
    assert first.tobytes() == second.tobytes()


def test_later_boxes_paint_over_earlier_ones():
    image = Image.new("RGB", (400, 200), "white")
    boxes = [
        TextBox(id="red", text="HHHH", font_size=80, x=10, y=10, color="#ff0000"),
        TextBox(id="blue", text="HHHH", font_size=80, x=10, y=10, color="#0000ff"),
    ]
    pixels = set(renderer.render(image, boxes, {}).getdata())
    assert (0, 0, 255, 255) in pixels
    assert (255, 0, 0, 255) not in pixels


def test_invalid_color_paints_black():
    image = Image.new("RGB", (400, 200), "white")
    boxes = [TextBox(id="b1", text="HHHH", font_size=80, x=10, y=10, color="not-a-color")]
    pixels = set(renderer.render(image, boxes, {}).getdata())
    assert (0, 0, 0, 255) in pixels


def test_template_image_is_not_modified(template_image):
    before = template_image.tobytes()
    renderer.render(template_image, [TextBox(id="b1", text="Hi")], {})
    assert template_image.tobytes() == before


def test_translucent_text_blends_over_template():
    image = Image.new("RGB", (300, 150), "white")
    boxes = [TextBox(id="b1", text="HHHH", font_size=80, x=10, y=10, color="#ff000080")]
    result = renderer.render(image, boxes, {})

    assert set(result.getchannel("A").getdata()) == {255}
    # Half-strength red over white leaves a pink glyph, not a hole
    assert any(r == 255 and 100 < g < 160 and g == b for r, g, b, _ in result.getdata())


def test_translucent_text_survives_pdf_flattening():
    image = Image.new("RGB", (300, 150), (0, 0, 255))
    boxes = [TextBox(id="b1", text="HHHH", font_size=80, x=10, y=10, color="#ff000080")]
    flat = CertificateExporter.flatten(renderer.render(image, boxes, {}))
    # Red blended with the blue background never picks up green from a white fill
    assert max(g for _, g, _ in flat.getdata()) == 0


def test_line_breaks_in_values_paint_as_spaces(template_image):
    box = TextBox(id="b1", field_name="name", text="", font_size=32, x=20, y=20)
    broken = renderer.render(template_image, [box], {"name": "Alice\nSmith"})
    spaced = renderer.render(template_image, [box], {"name": "Alice Smith"})
    assert broken.tobytes() == spaced.tobytes()


def test_surface_measures_prepared_text():
    surface = PillowSurface(10, 10, renderer.fonts)
    font = FontSpec(24, "Arial")
    assert surface.measure_text("Alice\tSmith", font) == surface.measure_text("Alice Smith", font)
