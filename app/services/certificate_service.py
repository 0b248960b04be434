"""
Certificate Service
Business logic for rendering certificates and packaging them for download
"""

import base64
import html
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from fastapi import HTTPException, status
from PIL import Image

from app.config import settings
from app.exceptions import CertificateRenderError
from app.schemas.certificate import ExportFormat
from app.schemas.member import Member
from app.schemas.template import CertificateTemplate
from app.services.certificate_exporter import CertificateExporter
from app.services.certificate_renderer import CertificateRenderer, certificate_renderer
from app.services.data_exchange import DataExchange
from app.services.display_scale import DisplayScale
from app.services.image_loader import image_loader
from app.services.member_service import MemberService
from app.services.template_service import TemplateService

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Encoded certificates in roster order plus the members that failed"""
    certificates: List[Tuple[str, bytes]] = field(default_factory=list)
    failed_member_ids: List[str] = field(default_factory=list)


class CertificateService:
    """Service for certificate rendering operations"""

    @staticmethod
    async def load_template_image(template: CertificateTemplate) -> Image.Image:
        """Fetch and decode the template image once for a request"""
        if not template.image_url:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Template has no image; upload one first"
            )
        return await image_loader.load(template.image_url)

    @staticmethod
    def render_batch(
        template: CertificateTemplate,
        image: Image.Image,
        members: Sequence[Member],
        export_format: ExportFormat,
        renderer: Optional[CertificateRenderer] = None
    ) -> BatchResult:
        """
        Render members one after another with a shared decoded image.

        A member whose render or encoding fails is logged and skipped; the
        rest of the roster still renders.
        """
        renderer = renderer or certificate_renderer
        result = BatchResult()
        for member in members:
            try:
                raster = renderer.render(image, template.text_boxes, member.values)
                content = CertificateExporter.encode(raster, export_format)
            except (CertificateRenderError, OSError, ValueError) as e:
                logger.warning("Failed to generate certificate for member %s: %s", member.id, e)
                result.failed_member_ids.append(member.id)
                continue
            filename = CertificateExporter.certificate_filename(template.fields, member, export_format)
            result.certificates.append((filename, content))
        return result

    @staticmethod
    async def generate_certificate(
        template_id: str,
        member_id: str,
        export_format: ExportFormat
    ) -> Tuple[bytes, str]:
        """Single certificate for a stored member"""
        template = await TemplateService.get_template(template_id)
        member = await MemberService.get_member(template_id, member_id)
        image = await CertificateService.load_template_image(template)

        raster = certificate_renderer.render(image, template.text_boxes, member.values)
        content = CertificateExporter.encode(raster, export_format)
        return content, CertificateExporter.certificate_filename(template.fields, member, export_format)

    @staticmethod
    async def render_record(
        template_id: str,
        values: Dict[str, Optional[str]],
        export_format: ExportFormat
    ) -> Tuple[bytes, str]:
        """Certificate for values that are not stored as a member"""
        template = await TemplateService.get_template(template_id)
        image = await CertificateService.load_template_image(template)
        record = {k: v for k, v in values.items() if v is not None}

        raster = certificate_renderer.render(image, template.text_boxes, record)
        return CertificateExporter.encode(raster, export_format), f"certificate_preview.{export_format.value}"

    @staticmethod
    async def generate_preview(
        template_id: str,
        member_id: str,
        display_width: Optional[float] = None
    ) -> bytes:
        """
        PNG preview of a member's certificate.

        The canonical render is produced first and only then downscaled for
        display, so the preview shows exactly what downloads contain.
        """
        template = await TemplateService.get_template(template_id)
        member = await MemberService.get_member(template_id, member_id)
        image = await CertificateService.load_template_image(template)

        raster = certificate_renderer.render(image, template.text_boxes, member.values)
        if display_width:
            scale = DisplayScale.fit(display_width, raster.width, settings.PREVIEW_MAX_SCALE)
            size = (
                max(1, round(scale.to_display(raster.width))),
                max(1, round(scale.to_display(raster.height))),
            )
            if size != raster.size:
                raster = raster.resize(size, Image.Resampling.LANCZOS)
        return CertificateExporter.encode_png(raster)

    @staticmethod
    async def print_page(template_id: str, member_id: str) -> str:
        """Standalone HTML page that prints a member's certificate"""
        content, filename = await CertificateService.generate_certificate(template_id, member_id, ExportFormat.PNG)
        data_url = "data:image/png;base64," + base64.b64encode(content).decode("ascii")
        return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8">
    <title>Certificate - {html.escape(filename)}</title>
    <style>
      body {{ margin: 0; padding: 20px; }}
      img {{ max-width: 100%; height: auto; }}
    </style>
  </head>
  <body onload="window.print()">
    <img src="{data_url}" alt="Certificate" />
  </body>
</html>"""

    @staticmethod
    async def generate_bulk(template_id: str, export_format: ExportFormat) -> Tuple[bytes, str, List[str]]:
        """ZIP of every member's certificate plus the JSON data export"""
        template = await TemplateService.get_template(template_id)
        members = await MemberService.list_members(template_id)
        if not members:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please add at least one member before generating certificates."
            )

        image = await CertificateService.load_template_image(template)
        result = CertificateService.render_batch(template, image, members, export_format)
        if result.failed_member_ids:
            logger.warning(
                "Bulk export for template %s: %d of %d member(s) failed",
                template_id, len(result.failed_member_ids), len(members)
            )

        data_json = DataExchange.dumps(DataExchange.build(template, members))
        archive = CertificateExporter.build_zip(result.certificates, data_json)
        return archive, CertificateExporter.zip_filename(), result.failed_member_ids


# Create singleton instance
certificate_service = CertificateService()
