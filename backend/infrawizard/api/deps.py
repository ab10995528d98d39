from fastapi import Depends, HTTPException
from sqlmodel import Session

from infrawizard.database import get_session
from infrawizard.models.project import Project
from infrawizard.store import ProjectStore


def get_store(session: Session = Depends(get_session)) -> ProjectStore:
    return ProjectStore(session)


def get_project_or_404(
    project_id: int, store: ProjectStore = Depends(get_store)
) -> Project:
    project = store.get(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project
