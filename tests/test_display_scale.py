import pytest

from app.schemas.template import TextBox
from app.services.display_scale import DisplayScale


def test_fit_downscales_wide_images():
    assert DisplayScale.fit(400, 800).factor == 0.5


def test_fit_never_upscales_past_cap():
    assert DisplayScale.fit(2000, 800).factor == 1.0
    assert DisplayScale.fit(2000, 800, max_scale=0.9).factor == 0.9


@pytest.mark.parametrize("display_width, native_width", [(0, 800), (400, 0), (-1, 800)])
def test_fit_rejects_non_positive_widths(display_width, native_width):
    with pytest.raises(ValueError):
        DisplayScale.fit(display_width, native_width)


def test_factor_must_be_positive():
    with pytest.raises(ValueError):
        DisplayScale(0)


def test_drag_converts_display_delta_to_native():
    box = TextBox(id="b1", x=100, y=50)
    moved = DisplayScale(0.5).drag(box, 10, 10)
    assert (moved.x, moved.y) == (120, 70)
    # Original box is untouched
    assert (box.x, box.y) == (100, 50)


def test_display_box_scales_geometry():
    box = TextBox(id="b1", x=200, y=100, font_size=40, width=300)
    shown = DisplayScale(0.5).display_box(box)
    assert (shown.x, shown.y, shown.font_size, shown.width) == (100, 50, 20, 150)
    assert shown.height is None


def test_round_trip_through_display_space():
    scale = DisplayScale(0.25)
    assert scale.to_native(scale.to_display(123.0)) == 123.0
