"""
Template Routes
Endpoints for template design: image, text boxes, fields and display layout
"""

from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from pydantic import TypeAdapter, ValidationError

from app.schemas.template import (
    AddTextBoxRequest,
    CertificateTemplate,
    CreateTemplateRequest,
    DisplayLayoutResponse,
    DragTextBoxRequest,
    FieldDefinition,
    TemplateListResponse,
    TextBox,
    UpdateTextBoxRequest,
)
from app.services.template_service import template_service

router = APIRouter()

_text_boxes_adapter = TypeAdapter(List[TextBox])
_fields_adapter = TypeAdapter(List[FieldDefinition])


def _parse_form_json(adapter: TypeAdapter, raw: str, label: str):
    try:
        return adapter.validate_json(raw or "[]")
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label} JSON: {e.errors()[0]['msg']}"
        )


@router.post("", response_model=CertificateTemplate, status_code=status.HTTP_201_CREATED)
async def create_template(request: CreateTemplateRequest):
    """
    Create a template from JSON

    - **name**: Template name (required)
    - **imageUrl**: `/uploads/...`, http(s) or data: URL of the background image
    - **textBoxes**: Ordered text boxes; later boxes paint over earlier ones
    - **fields**: Member field definitions
    """
    return await template_service.create_template(request)


@router.post("/upload", response_model=CertificateTemplate, status_code=status.HTTP_201_CREATED)
async def upload_template(
    name: str = Form(...),
    text_boxes: str = Form("[]"),
    fields: str = Form("[]"),
    image: UploadFile = File(...)
):
    """Create a template together with its background image file"""
    request = CreateTemplateRequest(
        name=name,
        text_boxes=_parse_form_json(_text_boxes_adapter, text_boxes, "text_boxes"),
        fields=_parse_form_json(_fields_adapter, fields, "fields"),
    )
    content = await image.read()
    return await template_service.create_template_with_image(request, content, image.content_type)


@router.get("", response_model=TemplateListResponse)
async def list_templates():
    """List all templates, newest first"""
    return await template_service.list_templates()


@router.get("/{template_id}", response_model=CertificateTemplate)
async def get_template(template_id: str):
    return await template_service.get_template(template_id)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: str):
    """Delete a template, its roster and its stored image"""
    await template_service.delete_template(template_id)


@router.put("/{template_id}/image", response_model=CertificateTemplate)
async def replace_template_image(template_id: str, image: UploadFile = File(...)):
    """
    Replace the background image

    Text box coordinates are kept as-is; they are interpreted against the
    new image's native pixels.
    """
    content = await image.read()
    return await template_service.replace_image(template_id, content, image.content_type)


@router.get("/{template_id}/display", response_model=DisplayLayoutResponse)
async def get_display_layout(
    template_id: str,
    width: float = Query(..., gt=0, description="Width of the editor container in pixels")
):
    """Scale factor and text box geometry for an editor of the given width"""
    return await template_service.display_layout(template_id, width)


@router.post("/{template_id}/text-boxes", response_model=CertificateTemplate, status_code=status.HTTP_201_CREATED)
async def add_text_box(template_id: str, request: Optional[AddTextBoxRequest] = None):
    """Append a text box with the default style unless overridden"""
    return await template_service.add_text_box(template_id, request or AddTextBoxRequest())


@router.patch("/{template_id}/text-boxes/{box_id}", response_model=CertificateTemplate)
async def update_text_box(template_id: str, box_id: str, request: UpdateTextBoxRequest):
    return await template_service.update_text_box(template_id, box_id, request)


@router.post("/{template_id}/text-boxes/{box_id}/drag", response_model=CertificateTemplate)
async def drag_text_box(template_id: str, box_id: str, request: DragTextBoxRequest):
    """
    Move a text box by a pointer delta measured in display pixels

    The delta is divided by the display scale before it is stored, so
    stored coordinates stay in native pixels.
    """
    return await template_service.drag_text_box(template_id, box_id, request)


@router.delete("/{template_id}/text-boxes/{box_id}", response_model=CertificateTemplate)
async def delete_text_box(template_id: str, box_id: str):
    return await template_service.delete_text_box(template_id, box_id)


@router.post("/{template_id}/fields", response_model=CertificateTemplate, status_code=status.HTTP_201_CREATED)
async def add_field(template_id: str, field: FieldDefinition):
    return await template_service.add_field(template_id, field)


@router.delete("/{template_id}/fields/{field_name}", response_model=CertificateTemplate)
async def delete_field(template_id: str, field_name: str):
    """Delete a field; members lose its value and bound text boxes show their static text"""
    return await template_service.delete_field(template_id, field_name)
