"""
Member Service
Business logic for a template's member roster
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from fastapi import HTTPException, status

from app.database import database, row_to_dict
from app.schemas.member import Member
from app.schemas.template import CertificateTemplate
from app.services.csv_parser import CSVParser, ParsedRoster

logger = logging.getLogger(__name__)


class MemberService:
    """Service for member management operations"""

    @staticmethod
    def _from_row(row) -> Member:
        data = row_to_dict(row)
        try:
            values = json.loads(data.get("data") or "{}")
        except json.JSONDecodeError:
            values = {}
        return Member(id=data["id"], values=values if isinstance(values, dict) else {})

    @staticmethod
    def validate_values(
        template: CertificateTemplate,
        values: Dict[str, Optional[str]]
    ) -> Dict[str, str]:
        """
        Member editor checks: keys must be template fields, required fields non-empty

        Empty values are dropped so a missing value and a blank one render alike.
        """
        field_names = {f.name for f in template.fields}
        unknown = sorted(k for k in values if k not in field_names)
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown field(s): {', '.join(unknown)}"
            )

        cleaned = {k: v for k, v in values.items() if v is not None and v != ""}
        for field in template.fields:
            if field.required and not cleaned.get(field.name, "").strip():
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"{field.label} is required"
                )
        return cleaned

    @staticmethod
    async def list_members(template_id: str) -> List[Member]:
        rows = await database.fetch_all(
            "SELECT * FROM members WHERE template_id = :template_id ORDER BY position, created_at",
            {"template_id": template_id}
        )
        return [MemberService._from_row(row) for row in rows]

    @staticmethod
    async def get_member(template_id: str, member_id: str) -> Member:
        row = await database.fetch_one(
            "SELECT * FROM members WHERE template_id = :template_id AND id = :member_id",
            {"template_id": template_id, "member_id": member_id}
        )
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Member not found"
            )
        return MemberService._from_row(row)

    @staticmethod
    async def _next_position(template_id: str) -> int:
        current = await database.fetch_val(
            "SELECT MAX(position) FROM members WHERE template_id = :template_id",
            {"template_id": template_id}
        )
        return (current if current is not None else -1) + 1

    @staticmethod
    async def _insert(template_id: str, member: Member, position: int) -> None:
        now = datetime.now(timezone.utc).isoformat()
        await database.execute(
            """
            INSERT INTO members (id, template_id, data, position, created_at, updated_at)
            VALUES (:id, :template_id, :data, :position, :now, :now)
            """,
            {
                "id": member.id,
                "template_id": template_id,
                "data": json.dumps(member.values),
                "position": position,
                "now": now,
            }
        )

    @staticmethod
    async def add_member(template: CertificateTemplate, values: Dict[str, Optional[str]]) -> Member:
        member = Member(id=str(uuid.uuid4()), values=MemberService.validate_values(template, values))
        await MemberService._insert(template.id, member, await MemberService._next_position(template.id))
        return member

    @staticmethod
    async def update_member(
        template: CertificateTemplate,
        member_id: str,
        values: Dict[str, Optional[str]]
    ) -> Member:
        """Merge edited values into the member; blank values clear a key"""
        existing = await MemberService.get_member(template.id, member_id)
        field_names = {f.name for f in template.fields}
        # Keys left over from an import are kept untouched, never revalidated
        carried = {k: v for k, v in existing.values.items() if k not in field_names and k not in values}
        merged = {**{k: v for k, v in existing.values.items() if k in field_names}, **values}
        member = Member(
            id=member_id,
            values={**carried, **MemberService.validate_values(template, merged)}
        )
        await database.execute(
            """
            UPDATE members SET data = :data, updated_at = :now
            WHERE template_id = :template_id AND id = :member_id
            """,
            {
                "data": json.dumps(member.values),
                "now": datetime.now(timezone.utc).isoformat(),
                "template_id": template.id,
                "member_id": member_id,
            }
        )
        return member

    @staticmethod
    async def delete_member(template_id: str, member_id: str) -> None:
        await MemberService.get_member(template_id, member_id)
        await database.execute(
            "DELETE FROM members WHERE template_id = :template_id AND id = :member_id",
            {"template_id": template_id, "member_id": member_id}
        )

    @staticmethod
    async def clear_members(template_id: str) -> None:
        await database.execute(
            "DELETE FROM members WHERE template_id = :template_id",
            {"template_id": template_id}
        )

    @staticmethod
    async def replace_members(template_id: str, members: Sequence[Member]) -> int:
        """Bulk replace the roster as-is (import path, no editor validation)"""
        ids = [m.id for m in members]
        if len(ids) != len(set(ids)):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Member ids must be unique"
            )
        async with database.transaction():
            await MemberService.clear_members(template_id)
            for position, member in enumerate(members):
                await MemberService._insert(template_id, member, position)
        return len(members)

    @staticmethod
    async def remove_field(template_id: str, field_name: str) -> int:
        """Drop `field_name` from every member of the template; returns members touched"""
        touched = 0
        for member in await MemberService.list_members(template_id):
            if field_name not in member.values:
                continue
            values = {k: v for k, v in member.values.items() if k != field_name}
            await database.execute(
                "UPDATE members SET data = :data, updated_at = :now WHERE id = :member_id",
                {
                    "data": json.dumps(values),
                    "now": datetime.now(timezone.utc).isoformat(),
                    "member_id": member.id,
                }
            )
            touched += 1
        return touched

    @staticmethod
    async def import_csv(template: CertificateTemplate, content: bytes) -> dict:
        """Append CSV rows as members; rows missing a required field are skipped"""
        parsed: ParsedRoster = CSVParser.parse_member_csv(content, template.fields)
        required = [f.name for f in template.fields if f.required]

        imported = 0
        skipped = parsed.skipped_rows
        position = await MemberService._next_position(template.id)
        async with database.transaction():
            for values in parsed.rows:
                if any(not values.get(name) for name in required):
                    skipped += 1
                    continue
                await MemberService._insert(template.id, Member(id=str(uuid.uuid4()), values=values), position)
                position += 1
                imported += 1

        logger.info("Imported %d member(s) into template %s (%d skipped)", imported, template.id, skipped)
        return {
            "template_id": template.id,
            "total_rows_processed": parsed.total_rows,
            "successful_imports": imported,
            "skipped_rows": skipped,
            "ignored_columns": parsed.ignored_columns,
        }


# Create singleton instance
member_service = MemberService()
