"""
Member Routes
Endpoints for a template's member roster
"""

from fastapi import APIRouter, File, UploadFile, status

from app.schemas.member import CSVImportResponse, Member, MemberListResponse, MemberRequest
from app.services.member_service import member_service
from app.services.template_service import template_service

router = APIRouter()


@router.get("", response_model=MemberListResponse)
async def list_members(template_id: str):
    """Roster in entry order"""
    await template_service.get_template(template_id)
    members = await member_service.list_members(template_id)
    return {"template_id": template_id, "total": len(members), "members": members}


@router.post("", response_model=Member, status_code=status.HTTP_201_CREATED)
async def add_member(template_id: str, request: MemberRequest):
    """
    Add a member

    Keys must be field names of the template and required fields must be
    filled in.
    """
    template = await template_service.get_template(template_id)
    return await member_service.add_member(template, request.values)


@router.post("/import-csv", response_model=CSVImportResponse, status_code=status.HTTP_201_CREATED)
async def import_members_csv(template_id: str, file: UploadFile = File(...)):
    """Append members from a CSV whose headers match field names or labels"""
    template = await template_service.get_template(template_id)
    content = await file.read()
    return await member_service.import_csv(template, content)


@router.get("/{member_id}", response_model=Member)
async def get_member(template_id: str, member_id: str):
    return await member_service.get_member(template_id, member_id)


@router.put("/{member_id}", response_model=Member)
async def update_member(template_id: str, member_id: str, request: MemberRequest):
    """Merge edited values into a member; empty values clear them"""
    template = await template_service.get_template(template_id)
    return await member_service.update_member(template, member_id, request.values)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(template_id: str, member_id: str):
    await member_service.delete_member(template_id, member_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_members(template_id: str):
    """Remove every member without touching the template"""
    await template_service.get_template(template_id)
    await member_service.clear_members(template_id)
