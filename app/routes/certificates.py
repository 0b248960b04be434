"""
Certificate Routes
Single download, ad-hoc render, preview, print page and bulk ZIP
"""

from io import BytesIO
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse, Response, StreamingResponse

from app.schemas.certificate import ExportFormat, RenderRecordRequest
from app.services.certificate_service import certificate_service

router = APIRouter()


def _attachment(content: bytes, media_type: str, filename: str, headers: Optional[dict] = None) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}", **(headers or {})}
    )


def failed_members_header(member_ids: List[str]) -> str:
    """Comma-separated, percent-encoded member ids (header values must be Latin-1)"""
    return ",".join(quote(member_id, safe="") for member_id in member_ids)


@router.get("/{template_id}/members/{member_id}/certificate")
async def download_certificate(
    template_id: str,
    member_id: str,
    format: ExportFormat = Query(default=ExportFormat.PDF, description="pdf or png")
):
    """Generate and download one member's certificate"""
    content, filename = await certificate_service.generate_certificate(template_id, member_id, format)
    return _attachment(content, format.media_type, filename)


@router.get("/{template_id}/members/{member_id}/preview")
async def preview_certificate(
    template_id: str,
    member_id: str,
    display_width: Optional[float] = Query(default=None, gt=0, description="Preview container width in pixels")
):
    """PNG preview, downscaled to fit the container when a width is given"""
    content = await certificate_service.generate_preview(template_id, member_id, display_width)
    return Response(content=content, media_type="image/png")


@router.get("/{template_id}/members/{member_id}/print", response_class=HTMLResponse)
async def print_certificate(template_id: str, member_id: str):
    """HTML page that opens the print dialog for one certificate"""
    return HTMLResponse(content=await certificate_service.print_page(template_id, member_id))


@router.post("/{template_id}/render")
async def render_record(template_id: str, request: RenderRecordRequest):
    """Render values that are not stored as a member (e.g. a test certificate)"""
    content, filename = await certificate_service.render_record(template_id, request.values, request.format)
    return _attachment(content, request.format.media_type, filename)


@router.post("/{template_id}/certificates/bulk")
async def bulk_download(
    template_id: str,
    format: ExportFormat = Query(default=ExportFormat.PDF, description="pdf or png")
):
    """
    ZIP with every member's certificate and `certificate_data.json`

    Members whose certificate fails to render are left out and listed in
    the `X-Failed-Members` header.
    """
    archive, filename, failed = await certificate_service.generate_bulk(template_id, format)
    headers = {"X-Failed-Members": failed_members_header(failed)} if failed else None
    return _attachment(archive, "application/zip", filename, headers)
