import pytest

from app.exceptions import MeasurementUnavailable
from app.services.text_layout import FontSpec, layout_lines
from tests.conftest import char_measure

FONT = FontSpec(20, "Arial")


def test_font_spec_css():
    assert FontSpec(24, "Georgia").css == "24px Georgia"


def test_no_width_returns_text_untouched():
    text = "A fairly long line that would otherwise wrap"
    assert layout_lines(text, FONT, None, char_measure) == [text]
    assert layout_lines(text, FONT, 0, char_measure) == [text]


def test_no_width_needs_no_measurement():
    assert layout_lines("Hello", FONT, None, None) == ["Hello"]


def test_wrapping_without_measurement_fails():
    with pytest.raises(MeasurementUnavailable):
        layout_lines("Hello World", FONT, 100, None)


def test_wraps_greedily_and_keeps_trailing_space():
    lines = layout_lines("Hello World This Is A Long Certificate Line", FONT, 300, char_measure)
    assert lines == ["Hello World This Is A Long ", "Certificate Line "]


def test_text_without_spaces_is_one_line():
    lines = layout_lines("Supercalifragilistic", FONT, 50, char_measure)
    assert lines == ["Supercalifragilistic "]


def test_overlong_token_is_not_broken():
    lines = layout_lines("Hi Supercalifragilistic ok", FONT, 60, char_measure)
    assert lines == ["Hi ", "Supercalifragilistic ", "ok "]


def test_last_line_always_emitted():
    assert layout_lines("", FONT, 100, char_measure) == [" "]


def test_line_count_shrinks_as_width_grows():
    text = "one two three four five six seven eight nine ten"
    counts = [len(layout_lines(text, FONT, width, char_measure)) for width in (40, 80, 160, 320, 640)]
    assert counts == sorted(counts, reverse=True)
    assert counts[-1] == 1


def test_lines_fit_width_when_tokens_do():
    text = "alpha beta gamma delta epsilon zeta eta theta"
    for line in layout_lines(text, FONT, 120, char_measure):
        assert char_measure(line, FONT) <= 120
