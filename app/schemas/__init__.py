"""
Pydantic schemas for request/response validation
"""

from app.schemas.template import (
    TextAlignment,
    FieldType,
    TextBox,
    FieldDefinition,
    CertificateTemplate,
)
from app.schemas.member import Member

__all__ = [
    "TextAlignment",
    "FieldType",
    "TextBox",
    "FieldDefinition",
    "CertificateTemplate",
    "Member",
]
