"""
Template routes - saved label designs and label size presets.
"""

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from labelprint.dependencies import get_template_store
from labelprint.logger import get_logger
from labelprint.models.common import ErrorResponse, PRINTER_PROFILES, PrinterProfile
from labelprint.models.template import Template
from labelprint.storage.template_store import TemplateStore

logger = get_logger(__name__)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Template not found"}}


class TemplateSaved(BaseModel):
    success: bool = True
    message: str
    name: str


class TemplateDeleted(BaseModel):
    success: bool = True
    message: str


@router.get("/templates", summary="List saved templates")
async def list_templates(store: TemplateStore = Depends(get_template_store)) -> list[dict]:
    templates = await run_in_threadpool(store.list_templates)
    return [template.to_wire() for template in templates]


@router.get("/templates/{name}", responses=NOT_FOUND, summary="Get saved template")
async def get_template(name: str, store: TemplateStore = Depends(get_template_store)) -> dict:
    template = await run_in_threadpool(store.get_template, name)
    return template.to_wire()


@router.post(
    "/templates",
    response_model=TemplateSaved,
    status_code=status.HTTP_200_OK,
    summary="Save template",
    description="Save a template under its name, replacing any template with the same name."
)
async def save_template(template: Template, store: TemplateStore = Depends(get_template_store)):
    await run_in_threadpool(store.save_template, template)
    return TemplateSaved(message="Template saved successfully", name=template.name)


@router.delete("/templates/{name}", response_model=TemplateDeleted, responses=NOT_FOUND, summary="Delete template")
async def delete_template(name: str, store: TemplateStore = Depends(get_template_store)):
    await run_in_threadpool(store.delete_template, name)
    return TemplateDeleted(message="Template deleted successfully")


@router.get(
    "/printer-profiles",
    response_model=list[PrinterProfile],
    response_model_by_alias=True,
    summary="Label size presets"
)
async def list_printer_profiles():
    return PRINTER_PROFILES
