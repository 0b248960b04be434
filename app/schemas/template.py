"""
Certificate Template Request/Response Models
"""

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from enum import Enum
import re


FIELD_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$", re.IGNORECASE)


class TextAlignment(str, Enum):
    """Horizontal alignment of a text box"""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FieldType(str, Enum):
    """Input widget hint for a field; not enforced when rendering"""
    TEXT = "text"
    EMAIL = "email"
    DATE = "date"
    CUSTOM = "custom"


class TextBox(BaseModel):
    """A positioned, styled text element in template-native pixels"""
    id: str = Field(..., min_length=1)
    x: float = Field(default=100, description="Left edge in native pixels")
    y: float = Field(default=100, description="Top edge in native pixels")
    text: str = Field(default="New Text", description="Static fallback text")
    field_name: Optional[str] = Field(default=None, description="Bound field name")
    font_size: int = Field(default=24, gt=0, description="Font size in native pixels")
    font_family: str = Field(default="Arial", min_length=1)
    color: str = Field(default="#000000")
    alignment: TextAlignment = TextAlignment.LEFT
    width: Optional[float] = Field(default=None, ge=0, description="Wrap width; enables word wrap")
    height: Optional[float] = Field(default=None, ge=0, description="Advisory height, never clipped")

    @field_validator("field_name")
    @classmethod
    def blank_binding_is_unbound(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class FieldDefinition(BaseModel):
    """Schema entry describing one member attribute"""
    name: str = Field(..., min_length=1, max_length=64)
    label: str = Field(default="", validate_default=True)
    type: FieldType = FieldType.TEXT
    required: bool = False

    @field_validator("name")
    @classmethod
    def name_is_identifier(cls, value: str) -> str:
        value = value.strip()
        if not FIELD_NAME_PATTERN.match(value):
            raise ValueError(
                "Field name must start with a letter and contain only letters, numbers, and underscores"
            )
        return value

    @field_validator("label")
    @classmethod
    def label_defaults_to_name(cls, value: str, info: ValidationInfo) -> str:
        value = (value or "").strip()
        return value or info.data.get("name", "")

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


def _check_unique_field_names(fields: List[FieldDefinition]) -> List[FieldDefinition]:
    seen = set()
    for field in fields:
        if field.name in seen:
            raise ValueError(f"Duplicate field name: {field.name}")
        seen.add(field.name)
    return fields


class CertificateTemplate(BaseModel):
    """Aggregate root: image reference, ordered text boxes and field schema"""
    id: str
    name: str
    image_url: str = ""
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    text_boxes: List[TextBox] = Field(default_factory=list)
    fields: List[FieldDefinition] = Field(default_factory=list)
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("fields")
    @classmethod
    def field_names_unique(cls, value: List[FieldDefinition]) -> List[FieldDefinition]:
        return _check_unique_field_names(value)

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        return next((f for f in self.fields if f.name == name), None)

    def get_text_box(self, box_id: str) -> Optional[TextBox]:
        return next((b for b in self.text_boxes if b.id == box_id), None)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class CreateTemplateRequest(BaseModel):
    """Request to create a template from JSON"""
    name: str = Field(..., min_length=1, max_length=100, description="Template name")
    image_url: str = Field(default="", description="URL, /uploads path or data: URL of the template image")
    text_boxes: List[TextBox] = Field(default_factory=list)
    fields: List[FieldDefinition] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def field_names_unique(cls, value: List[FieldDefinition]) -> List[FieldDefinition]:
        return _check_unique_field_names(value)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "Workshop Certificate 2026",
                "imageUrl": "https://example.com/images/certificate-template.png",
                "fields": [{"name": "name", "label": "Full Name", "type": "text", "required": True}],
                "textBoxes": [
                    {
                        "id": "title",
                        "x": 400,
                        "y": 350,
                        "fieldName": "name",
                        "text": "Recipient",
                        "fontSize": 48,
                        "fontFamily": "Arial",
                        "color": "#000000",
                        "alignment": "center",
                        "width": 600
                    }
                ]
            }
        }


class AddTextBoxRequest(BaseModel):
    """New text box; omitted style falls back to the defaults"""
    x: float = 100
    y: float = 100
    text: str = "New Text"
    field_name: Optional[str] = None
    font_size: int = Field(default=24, gt=0)
    font_family: str = Field(default="Arial", min_length=1)
    color: str = "#000000"
    alignment: TextAlignment = TextAlignment.LEFT
    width: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UpdateTextBoxRequest(BaseModel):
    """Partial text box update; only fields that are sent change"""
    x: Optional[float] = None
    y: Optional[float] = None
    text: Optional[str] = None
    field_name: Optional[str] = None
    font_size: Optional[int] = Field(default=None, gt=0)
    font_family: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = None
    alignment: Optional[TextAlignment] = None
    width: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DragTextBoxRequest(BaseModel):
    """Pointer delta in display pixels and the display scale it was measured at"""
    dx: float
    dy: float
    scale: float = Field(..., gt=0, description="Display scale factor in effect during the drag")


class DisplayTextBox(BaseModel):
    """Text box geometry in display coordinates"""
    id: str
    x: float
    y: float
    font_size: float
    width: Optional[float] = None
    height: Optional[float] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DisplayLayoutResponse(BaseModel):
    """Template laid out for a container of a given width"""
    template_id: str
    scale: float
    display_width: float
    display_height: float
    text_boxes: List[DisplayTextBox]

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TemplateListResponse(BaseModel):
    """All stored templates"""
    total: int
    templates: List[CertificateTemplate]
