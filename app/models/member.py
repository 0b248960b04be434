"""
Member Model
One recipient record of a template's roster
"""

from sqlalchemy import Column, String, Integer, ForeignKey, Text
import uuid
from app.database import Base


class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    template_id = Column(
        String(36),
        ForeignKey("certificate_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Field name -> value mapping (JSON text)
    data = Column(Text, nullable=False, default="{}")

    # Roster order
    position = Column(Integer, nullable=False, default=0)

    # ISO-8601 UTC timestamps
    created_at = Column(String(40), nullable=False)
    updated_at = Column(String(40), nullable=False)
