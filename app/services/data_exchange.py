"""
Data Exchange Service
Serializes a template design plus roster to JSON and reads it back
"""

import json
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from pydantic import ValidationError

from app.schemas.exchange import CertificateData, ExchangedTemplate
from app.schemas.member import Member
from app.schemas.template import CertificateTemplate


class DataExchange:
    """JSON export/import of `{template, members, generatedAt}`"""

    @staticmethod
    def build(
        template: CertificateTemplate,
        members: Sequence[Member],
        generated_at: Optional[datetime] = None
    ) -> CertificateData:
        """Exchange document; the image reference is always blanked"""
        moment = generated_at or datetime.now(timezone.utc)
        return CertificateData(
            template=ExchangedTemplate(
                id=template.id,
                image_url="",
                text_boxes=list(template.text_boxes),
                fields=list(template.fields),
            ),
            members=[member.to_record() for member in members],
            generated_at=moment.isoformat().replace("+00:00", "Z"),
        )

    @staticmethod
    def dumps(data: CertificateData) -> str:
        return json.dumps(data.model_dump(mode="json", by_alias=True), indent=2)

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        return f"certificate_data_{(today or date.today()).isoformat()}.json"

    @staticmethod
    def parse(raw: bytes) -> CertificateData:
        """
        Parse an exchange document.

        Raises:
            ValueError: Not JSON, or not shaped like an exchange document
        """
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValueError("Invalid JSON file") from e
        try:
            return CertificateData.model_validate(payload)
        except ValidationError as e:
            raise ValueError(f"Invalid certificate data: {e.error_count()} validation error(s)") from e

    @staticmethod
    def members_of(data: CertificateData) -> List[Member]:
        """Roster of an exchange document; records without an id are rejected"""
        return [Member.from_record(record) for record in data.members]


# Singleton
data_exchange = DataExchange()
