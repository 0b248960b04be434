"""
Template Service
Business logic for certificate template management
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException, status

from app.config import settings
from app.database import database, row_to_dict
from app.exceptions import ImageLoadError
from app.schemas.template import (
    AddTextBoxRequest,
    CertificateTemplate,
    CreateTemplateRequest,
    DisplayLayoutResponse,
    DragTextBoxRequest,
    FieldDefinition,
    TextBox,
    UpdateTextBoxRequest,
)
from app.services.display_scale import DisplayScale
from app.services.image_loader import image_loader
from app.services.member_service import MemberService
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TemplateService:
    """Service for template management operations"""

    @staticmethod
    def _parse_json_list(value) -> list:
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                return []
            return parsed if isinstance(parsed, list) else []
        if isinstance(value, list):
            return value
        return []

    @staticmethod
    def _dump_list(items) -> str:
        return json.dumps([item.model_dump(mode="json", by_alias=True) for item in items])

    @staticmethod
    def _from_row(row) -> CertificateTemplate:
        data = row_to_dict(row)
        return CertificateTemplate(
            id=data["id"],
            name=data["name"],
            image_url=data.get("image_url") or "",
            image_width=data.get("image_width"),
            image_height=data.get("image_height"),
            text_boxes=TemplateService._parse_json_list(data.get("text_boxes")),
            fields=TemplateService._parse_json_list(data.get("fields")),
            version=data.get("version") or 1,
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    @staticmethod
    async def _probe_image_size(image_url: str) -> tuple:
        """(width, height) of a referenced image, (None, None) when it cannot be loaded now"""
        if not image_url:
            return None, None
        try:
            image = await image_loader.load(image_url)
        except ImageLoadError as e:
            logger.warning("Template image not reachable at creation time: %s", e)
            return None, None
        return image.width, image.height

    @staticmethod
    def _check_bindings(text_boxes: List[TextBox], fields: List[FieldDefinition]) -> None:
        names = {f.name for f in fields}
        for box in text_boxes:
            if box.field_name and box.field_name not in names:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Text box '{box.id}' is bound to unknown field '{box.field_name}'"
                )

    @staticmethod
    def _check_unique_box_ids(text_boxes: List[TextBox]) -> None:
        ids = [box.id for box in text_boxes]
        if len(ids) != len(set(ids)):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Text box ids must be unique"
            )

    @staticmethod
    async def create_template(
        data: CreateTemplateRequest,
        image_size: Optional[tuple] = None
    ) -> CertificateTemplate:
        """
        Create a new certificate template

        Stores text boxes and fields as JSON. When no image size is given the
        referenced image is probed for its native dimensions.
        """
        TemplateService._check_unique_box_ids(data.text_boxes)
        TemplateService._check_bindings(data.text_boxes, data.fields)

        if image_size is None:
            image_size = await TemplateService._probe_image_size(data.image_url)
        width, height = image_size

        template_id = str(uuid.uuid4())
        now = utc_now()
        await database.execute(
            """
            INSERT INTO certificate_templates
            (id, name, image_url, image_width, image_height, text_boxes, fields, version, created_at, updated_at)
            VALUES (:id, :name, :image_url, :image_width, :image_height, :text_boxes, :fields, 1, :now, :now)
            """,
            {
                "id": template_id,
                "name": data.name,
                "image_url": data.image_url,
                "image_width": width,
                "image_height": height,
                "text_boxes": TemplateService._dump_list(data.text_boxes),
                "fields": TemplateService._dump_list(data.fields),
                "now": now,
            }
        )
        logger.info("Created template %s (%s)", template_id, data.name)
        return await TemplateService.get_template(template_id)

    @staticmethod
    async def create_template_with_image(
        data: CreateTemplateRequest,
        content: bytes,
        content_type: Optional[str]
    ) -> CertificateTemplate:
        image_url, width, height = StorageService.save_template_image(content, content_type)
        data = data.model_copy(update={"image_url": image_url})
        try:
            return await TemplateService.create_template(data, image_size=(width, height))
        except Exception:
            StorageService.delete_by_url(image_url)
            raise

    @staticmethod
    async def get_template(template_id: str) -> CertificateTemplate:
        """Get template by ID"""
        row = await database.fetch_one(
            "SELECT * FROM certificate_templates WHERE id = :template_id",
            {"template_id": template_id}
        )
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Template not found"
            )
        return TemplateService._from_row(row)

    @staticmethod
    async def list_templates() -> dict:
        rows = await database.fetch_all(
            "SELECT * FROM certificate_templates ORDER BY created_at DESC"
        )
        templates = [TemplateService._from_row(row) for row in rows]
        return {"total": len(templates), "templates": templates}

    @staticmethod
    async def delete_template(template_id: str) -> None:
        template = await TemplateService.get_template(template_id)
        async with database.transaction():
            await MemberService.clear_members(template_id)
            await database.execute(
                "DELETE FROM certificate_templates WHERE id = :template_id",
                {"template_id": template_id}
            )
        StorageService.delete_by_url(template.image_url)
        logger.info("Deleted template %s", template_id)

    @staticmethod
    async def save(template: CertificateTemplate) -> CertificateTemplate:
        """Persist a new template value (creates a new version)"""
        TemplateService._check_unique_box_ids(template.text_boxes)
        TemplateService._check_bindings(template.text_boxes, template.fields)
        await database.execute(
            """
            UPDATE certificate_templates
            SET name = :name, image_url = :image_url, image_width = :image_width,
                image_height = :image_height, text_boxes = :text_boxes, fields = :fields,
                version = :version, updated_at = :now
            WHERE id = :template_id
            """,
            {
                "template_id": template.id,
                "name": template.name,
                "image_url": template.image_url,
                "image_width": template.image_width,
                "image_height": template.image_height,
                "text_boxes": TemplateService._dump_list(template.text_boxes),
                "fields": TemplateService._dump_list(template.fields),
                "version": template.version + 1,
                "now": utc_now(),
            }
        )
        return await TemplateService.get_template(template.id)

    @staticmethod
    async def replace_image(template_id: str, content: bytes, content_type: Optional[str]) -> CertificateTemplate:
        template = await TemplateService.get_template(template_id)
        image_url, width, height = StorageService.save_template_image(content, content_type)
        updated = await TemplateService.save(template.model_copy(update={
            "image_url": image_url,
            "image_width": width,
            "image_height": height,
        }))
        StorageService.delete_by_url(template.image_url)
        return updated

    @staticmethod
    def _require_box(template: CertificateTemplate, box_id: str) -> TextBox:
        box = template.get_text_box(box_id)
        if not box:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Text box not found"
            )
        return box

    @staticmethod
    def _replace_box(template: CertificateTemplate, box: TextBox) -> CertificateTemplate:
        boxes = [box if b.id == box.id else b for b in template.text_boxes]
        return template.model_copy(update={"text_boxes": boxes})

    @staticmethod
    async def add_text_box(template_id: str, data: AddTextBoxRequest) -> CertificateTemplate:
        template = await TemplateService.get_template(template_id)
        box = TextBox(id=str(uuid.uuid4()), **data.model_dump())
        return await TemplateService.save(
            template.model_copy(update={"text_boxes": [*template.text_boxes, box]})
        )

    @staticmethod
    async def update_text_box(template_id: str, box_id: str, data: UpdateTextBoxRequest) -> CertificateTemplate:
        template = await TemplateService.get_template(template_id)
        box = TemplateService._require_box(template, box_id)
        changes = data.model_dump(exclude_unset=True)
        # Revalidate through the model so blank bindings collapse to None
        updated = TextBox.model_validate({**box.model_dump(), **changes})
        return await TemplateService.save(TemplateService._replace_box(template, updated))

    @staticmethod
    async def drag_text_box(template_id: str, box_id: str, data: DragTextBoxRequest) -> CertificateTemplate:
        template = await TemplateService.get_template(template_id)
        box = TemplateService._require_box(template, box_id)
        moved = DisplayScale(data.scale).drag(box, data.dx, data.dy)
        return await TemplateService.save(TemplateService._replace_box(template, moved))

    @staticmethod
    async def delete_text_box(template_id: str, box_id: str) -> CertificateTemplate:
        template = await TemplateService.get_template(template_id)
        TemplateService._require_box(template, box_id)
        boxes = [b for b in template.text_boxes if b.id != box_id]
        return await TemplateService.save(template.model_copy(update={"text_boxes": boxes}))

    @staticmethod
    async def add_field(template_id: str, field: FieldDefinition) -> CertificateTemplate:
        template = await TemplateService.get_template(template_id)
        if template.get_field(field.name):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Field name already exists"
            )
        return await TemplateService.save(
            template.model_copy(update={"fields": [*template.fields, field]})
        )

    @staticmethod
    async def delete_field(template_id: str, field_name: str) -> CertificateTemplate:
        """Remove a field; members lose the key and bound boxes fall back to static text"""
        template = await TemplateService.get_template(template_id)
        if not template.get_field(field_name):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Field not found"
            )

        fields = [f for f in template.fields if f.name != field_name]
        boxes = [
            b.model_copy(update={"field_name": None}) if b.field_name == field_name else b
            for b in template.text_boxes
        ]
        async with database.transaction():
            updated = await TemplateService.save(
                template.model_copy(update={"fields": fields, "text_boxes": boxes})
            )
            await MemberService.remove_field(template_id, field_name)
        return updated

    @staticmethod
    async def replace_design(
        template_id: str,
        text_boxes: List[TextBox],
        fields: List[FieldDefinition]
    ) -> CertificateTemplate:
        """Swap text boxes and fields wholesale, keeping the current image"""
        template = await TemplateService.get_template(template_id)
        return await TemplateService.save(
            template.model_copy(update={"text_boxes": list(text_boxes), "fields": list(fields)})
        )

    @staticmethod
    async def native_size(template: CertificateTemplate) -> tuple:
        if template.image_width and template.image_height:
            return template.image_width, template.image_height
        image = await image_loader.load(template.image_url)
        return image.width, image.height

    @staticmethod
    async def display_layout(template_id: str, display_width: float) -> DisplayLayoutResponse:
        """Text boxes scaled for an editor container `display_width` pixels wide"""
        template = await TemplateService.get_template(template_id)
        native_width, native_height = await TemplateService.native_size(template)
        scale = DisplayScale.fit(display_width, native_width, settings.EDITOR_MAX_SCALE)
        return DisplayLayoutResponse(
            template_id=template.id,
            scale=scale.factor,
            display_width=scale.to_display(native_width),
            display_height=scale.to_display(native_height),
            text_boxes=[scale.display_box(box) for box in template.text_boxes],
        )


# Create singleton instance
template_service = TemplateService()
