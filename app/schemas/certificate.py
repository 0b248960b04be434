"""
Certificate Output Models
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional
from enum import Enum


class ExportFormat(str, Enum):
    """Container for a rendered certificate"""
    PDF = "pdf"
    PNG = "png"

    @property
    def media_type(self) -> str:
        return "application/pdf" if self is ExportFormat.PDF else "image/png"


class RenderRecordRequest(BaseModel):
    """Render against field values that are not stored as a member"""
    values: Dict[str, Optional[str]] = Field(default_factory=dict)
    format: ExportFormat = ExportFormat.PNG

    class Config:
        json_schema_extra = {
            "example": {"values": {"name": "Test Recipient"}, "format": "png"}
        }
