"""
Certificate Template Model
Stores the background image reference, text boxes and field schema
"""

from sqlalchemy import Column, String, Integer, Text
import uuid
from app.database import Base


class CertificateTemplate(Base):
    __tablename__ = "certificate_templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Template info
    name = Column(String(100), nullable=False)
    image_url = Column(Text, nullable=False, default="")
    image_width = Column(Integer, nullable=True)
    image_height = Column(Integer, nullable=True)

    # Ordered text boxes and field definitions (JSON text)
    text_boxes = Column(Text, nullable=False, default="[]")
    fields = Column(Text, nullable=False, default="[]")

    # Version
    version = Column(Integer, default=1)

    # ISO-8601 UTC timestamps
    created_at = Column(String(40), nullable=False)
    updated_at = Column(String(40), nullable=False)
