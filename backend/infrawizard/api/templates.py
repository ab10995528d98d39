import asyncio

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from infrawizard.api.deps import get_project_or_404
from infrawizard.config import settings
from infrawizard.models.project import Project
from infrawizard.services.templates import generate_templates

router = APIRouter(tags=["templates"])


class TemplateResponse(BaseModel):
    name: str
    provider: str
    code: str
    estimated_cost: float


@router.post(
    "/projects/{project_id}/templates",
    response_model=dict[str, TemplateResponse],
)
async def create_templates(project: Project = Depends(get_project_or_404)):
    """Render the static template for every provider."""
    if settings.template_delay_seconds > 0:
        await asyncio.sleep(settings.template_delay_seconds)
    return generate_templates(project)
