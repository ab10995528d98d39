import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from infrawizard.api.deps import get_project_or_404, get_store
from infrawizard.api.projects import ProjectResponse
from infrawizard.models.project import Project
from infrawizard.services.deployment import plan_steps, simulated_progress
from infrawizard.services.templates import PROVIDERS
from infrawizard.store import ProjectStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["deployments"])


class DeployRequest(BaseModel):
    provider: str = "aws"


class DeployResponse(BaseModel):
    message: str
    project: ProjectResponse


class DeploymentStep(BaseModel):
    id: str
    name: str
    description: str
    status: Literal["pending", "in-progress", "completed"]


class DeploymentStatusResponse(BaseModel):
    status: str
    progress: int
    steps: list[DeploymentStep]


@router.post("/projects/{project_id}/deploy", response_model=DeployResponse)
async def start_deployment(
    body: DeployRequest | None = None,
    project: Project = Depends(get_project_or_404),
    store: ProjectStore = Depends(get_store),
):
    provider = body.provider if body else "aws"
    if provider not in PROVIDERS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported provider. Must be one of: {', '.join(PROVIDERS)}",
        )

    project = store.start_deployment(project.id, provider)
    return {"message": "Deployment started", "project": project}


@router.get(
    "/projects/{project_id}/deployment-status",
    response_model=DeploymentStatusResponse,
)
async def deployment_status(project: Project = Depends(get_project_or_404)):
    progress = simulated_progress(project.deployment_status)
    return {
        "status": project.deployment_status,
        "progress": progress,
        "steps": plan_steps(progress),
    }
