import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from infrawizard.api.deps import get_project_or_404, get_store
from infrawizard.config import settings
from infrawizard.models.project import Project
from infrawizard.store import ProjectStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])


# --- Pydantic models ---


class CreateProjectRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    tech_stack: str | None = None
    expected_users: str = Field(min_length=1)
    uploaded_files: list[str] | None = None
    configuration: dict[str, Any] | None = None
    selected_provider: str | None = None


class ConfigurationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    concurrent_users: str
    response_time: str
    database_type: str
    data_volume: str
    auto_backups: bool
    ssl_certificate: str
    region: str
    ddos_protection: bool
    gdpr_compliance: bool
    monitoring: bool
    auto_scaling: str
    environment_strategy: str


class ProjectResponse(BaseModel):
    id: int
    name: str
    description: str
    tech_stack: str | None
    expected_users: str
    uploaded_files: list[str]
    configuration: dict[str, Any] | None
    selected_provider: str | None
    deployment_status: str
    created_at: datetime


# --- Helpers ---


async def _read_upload(upload: UploadFile) -> bytes:
    """Read one upload, rejecting disallowed types and oversized files."""
    if upload.content_type not in settings.allowed_upload_types:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only PNG, JPG, and PDF files are allowed.",
        )
    data = await upload.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File {upload.filename!r} exceeds the upload size limit",
        )
    return data


def _store_upload(data: bytes) -> str:
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    reference = uuid.uuid4().hex
    (upload_dir / reference).write_bytes(data)
    return reference


# --- Endpoints ---


@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def create_project(
    body: CreateProjectRequest,
    store: ProjectStore = Depends(get_store),
):
    required = (body.name, body.description, body.expected_users)
    if any(not value.strip() for value in required):
        raise HTTPException(status_code=400, detail="Invalid project data")
    return store.create(**body.model_dump())


@router.get("/projects", response_model=list[ProjectResponse])
async def list_projects(store: ProjectStore = Depends(get_store)):
    return store.all()


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(project: Project = Depends(get_project_or_404)):
    return project


@router.post("/projects/{project_id}/upload", response_model=ProjectResponse)
async def upload_files(
    files: list[UploadFile] = File(...),
    project: Project = Depends(get_project_or_404),
    store: ProjectStore = Depends(get_store),
):
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")
    if len(files) > settings.max_upload_files:
        raise HTTPException(
            status_code=400,
            detail=f"At most {settings.max_upload_files} files may be uploaded at once",
        )

    # Validate everything before writing anything
    contents = [await _read_upload(upload) for upload in files]
    references = [_store_upload(data) for data in contents]

    logger.info(f"Stored {len(references)} file(s) for project {project.id}")
    return store.append_files(project.id, references)


@router.put(
    "/projects/{project_id}/configuration", response_model=ProjectResponse
)
async def update_configuration(
    body: ConfigurationRequest,
    project: Project = Depends(get_project_or_404),
    store: ProjectStore = Depends(get_store),
):
    return store.set_configuration(project.id, body.model_dump())
