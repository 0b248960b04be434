"""
Field Resolver
Chooses the literal string a text box paints for one record
"""

from typing import Any, Mapping

from app.schemas.template import TextBox


def resolve_text(box: TextBox, record: Mapping[str, Any]) -> str:
    """Bound field value when present and non-empty, else the box's static text"""
    if box.field_name:
        value = record.get(box.field_name)
        if value is not None and value != "":
            return str(value)
    return box.text
