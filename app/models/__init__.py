"""
Database Models
Import all models here so the tables register on the shared metadata
"""

from app.models.template import CertificateTemplate
from app.models.member import Member

__all__ = [
    "CertificateTemplate",
    "Member",
]
