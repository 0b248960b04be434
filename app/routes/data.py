"""
Data Routes
JSON export and import of a template's design and roster
"""

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from fastapi.responses import Response

from app.database import database
from app.schemas.exchange import ImportResponse
from app.services.data_exchange import data_exchange
from app.services.member_service import member_service
from app.services.template_service import template_service

router = APIRouter()


@router.get("/{template_id}/export")
async def export_data(template_id: str):
    """Template design plus members as JSON; the image itself is not included"""
    template = await template_service.get_template(template_id)
    members = await member_service.list_members(template_id)
    payload = data_exchange.dumps(data_exchange.build(template, members))
    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={data_exchange.export_filename()}"}
    )


@router.post("/{template_id}/import", response_model=ImportResponse)
async def import_data(template_id: str, file: UploadFile = File(...)):
    """
    Replace text boxes, fields and members from an exported JSON file

    The template keeps its current image; exported files never carry one.
    """
    await template_service.get_template(template_id)
    raw = await file.read()
    try:
        data = data_exchange.parse(raw)
        members = data_exchange.members_of(data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    async with database.transaction():
        template = await template_service.replace_design(
            template_id, data.template.text_boxes, data.template.fields
        )
        count = await member_service.replace_members(template_id, members)

    return {
        "template_id": template.id,
        "text_boxes": len(template.text_boxes),
        "fields": len(template.fields),
        "members": count,
    }
