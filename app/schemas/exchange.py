"""
Data Exchange Models
JSON export/import of a template's design and roster
"""

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List

from app.schemas.template import TextBox, FieldDefinition, _check_unique_field_names


class ExchangedTemplate(BaseModel):
    """Template part of the exchange document; the image is never embedded"""
    id: str = ""
    image_url: str = ""
    text_boxes: List[TextBox] = Field(default_factory=list)
    fields: List[FieldDefinition] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def field_names_unique(cls, value: List[FieldDefinition]) -> List[FieldDefinition]:
        return _check_unique_field_names(value)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CertificateData(BaseModel):
    """`{template, members, generatedAt}` document"""
    template: ExchangedTemplate
    members: List[Dict[str, Any]] = Field(default_factory=list)
    generated_at: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ImportResponse(BaseModel):
    """Outcome of importing an exchange document"""
    template_id: str
    text_boxes: int
    fields: int
    members: int
