"""
CSV Parser Service
Parsing member rosters from CSV against a template's field schema
"""

import csv
import io
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from fastapi import HTTPException, status

from app.schemas.template import FieldDefinition


@dataclass
class ParsedRoster:
    """Rows mapped to field names, plus what was dropped on the way"""
    rows: List[Dict[str, str]] = field(default_factory=list)
    total_rows: int = 0
    skipped_rows: int = 0
    ignored_columns: List[str] = field(default_factory=list)


class CSVParser:
    """Utility for parsing member CSV files"""

    @staticmethod
    def _normalize_header(header: str) -> str:
        if not header:
            return ""
        return " ".join(header.strip().lstrip("\ufeff").lower().replace("_", " ").split())

    @classmethod
    def _map_headers(cls, headers: List[str], fields: Sequence[FieldDefinition]) -> Dict[str, str]:
        """CSV header -> field name, matching either the name or the label"""
        aliases = {}
        for f in fields:
            aliases.setdefault(cls._normalize_header(f.name), f.name)
            aliases.setdefault(cls._normalize_header(f.label), f.name)

        mapped = {}
        for h in headers:
            name = aliases.get(cls._normalize_header(h))
            if name and name not in mapped.values():
                mapped[h] = name
        return mapped

    @classmethod
    def parse_member_csv(cls, file_content: bytes, fields: Sequence[FieldDefinition]) -> ParsedRoster:
        if not fields:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Template has no fields to import members into"
            )

        csv_text = file_content.decode("utf-8-sig", errors="ignore")

        reader = csv.DictReader(io.StringIO(csv_text))
        if not reader.fieldnames:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="CSV file is empty or has no headers"
            )

        header_map = cls._map_headers(reader.fieldnames, fields)
        if not header_map:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No CSV column matches a template field"
            )

        parsed = ParsedRoster(
            ignored_columns=[h for h in reader.fieldnames if h not in header_map]
        )
        for row in reader:
            parsed.total_rows += 1
            values = {
                name: (row.get(header) or "").strip()
                for header, name in header_map.items()
            }
            values = {k: v for k, v in values.items() if v}
            if not values:
                parsed.skipped_rows += 1
                continue
            parsed.rows.append(values)

        if not parsed.rows:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No valid rows found in CSV"
            )

        return parsed
