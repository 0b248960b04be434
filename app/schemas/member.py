"""
Member Request/Response Models
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional


def _stringify_values(values: Dict[str, Any]) -> Dict[str, str]:
    return {str(k): str(v) for k, v in values.items() if v is not None}


class Member(BaseModel):
    """One recipient record: an id plus field name -> value"""
    id: str = Field(..., min_length=1)
    values: Dict[str, str] = Field(default_factory=dict)

    @field_validator("values", mode="before")
    @classmethod
    def coerce_values(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return _stringify_values(value)
        return value

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Member":
        """Build from the flat exchange form `{id, <field>: <value>, ...}`"""
        data = dict(record)
        member_id = data.pop("id", None)
        if member_id is None or str(member_id) == "":
            raise ValueError("Member record is missing an id")
        return cls(id=str(member_id), values=data)

    def to_record(self) -> Dict[str, str]:
        """Flat exchange form with `id` first"""
        return {"id": self.id, **{k: v for k, v in self.values.items() if k != "id"}}

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {"id": "3f1c2d0e-8b7a-4c55-9a62-0d3f0b8e1a11", "values": {"name": "Alice Smith"}}
        }


class MemberRequest(BaseModel):
    """Field values entered for a member"""
    values: Dict[str, Optional[str]] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {"values": {"name": "Alice Smith", "email": "alice@example.com"}}
        }


class MemberListResponse(BaseModel):
    """A template's roster"""
    template_id: str
    total: int
    members: List[Member]


class CSVImportResponse(BaseModel):
    """Result of a roster CSV import"""
    template_id: str
    total_rows_processed: int
    successful_imports: int
    skipped_rows: int
    ignored_columns: List[str] = Field(default_factory=list)
