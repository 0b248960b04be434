from app.schemas.template import TextBox
from app.services.field_resolver import resolve_text


def make_box(**overrides):
    return TextBox(id="b1", text="fallback", **overrides)


def test_bound_value_wins():
    assert resolve_text(make_box(field_name="name"), {"name": "Alice"}) == "Alice"


def test_empty_or_missing_value_falls_back():
    box = make_box(field_name="name")
    assert resolve_text(box, {"name": ""}) == "fallback"
    assert resolve_text(box, {}) == "fallback"
    assert resolve_text(box, {"name": None}) == "fallback"


def test_unbound_box_ignores_record():
    assert resolve_text(make_box(), {"name": "Alice"}) == "fallback"


def test_blank_binding_is_treated_as_unbound():
    box = make_box(field_name="  ")
    assert box.field_name is None
    assert resolve_text(box, {"": "x"}) == "fallback"


def test_non_string_values_are_stringified():
    assert resolve_text(make_box(field_name="year"), {"year": 2026}) == "2026"
