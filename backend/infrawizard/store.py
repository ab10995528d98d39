"""Storage for projects, the single record type the wizard persists.

A ``ProjectStore`` wraps one SQLModel session and is built per request by
the ``get_store`` dependency. Projects are never deleted.
"""

import logging
from typing import Any

from sqlmodel import Session, select

from infrawizard.models.project import DEPLOYING, PENDING, Project

logger = logging.getLogger(__name__)

# Fields a partial update may touch. ``id`` and ``created_at`` are fixed
# at creation time.
UPDATABLE_FIELDS = {
    "name",
    "description",
    "tech_stack",
    "expected_users",
    "uploaded_files",
    "configuration",
    "selected_provider",
    "deployment_status",
}


class ProjectStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self, project_id: int) -> Project | None:
        return self.session.get(Project, project_id)

    def all(self) -> list[Project]:
        return list(self.session.exec(select(Project).order_by(Project.id)).all())

    def create(
        self,
        name: str,
        description: str,
        expected_users: str,
        tech_stack: str | None = None,
        uploaded_files: list[str] | None = None,
        configuration: dict[str, Any] | None = None,
        selected_provider: str | None = None,
    ) -> Project:
        project = Project(
            name=name,
            description=description,
            expected_users=expected_users,
            tech_stack=tech_stack or None,
            uploaded_files=list(uploaded_files or []),
            configuration=configuration,
            selected_provider=selected_provider or None,
            deployment_status=PENDING,
        )
        self.session.add(project)
        self.session.commit()
        self.session.refresh(project)
        logger.info(f"Created project {project.id} ({project.name!r})")
        return project

    def update(self, project_id: int, **changes: Any) -> Project | None:
        """Apply a partial update. Returns None if the project does not exist."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        project = self.get(project_id)
        if not project:
            return None

        for key, value in changes.items():
            setattr(project, key, value)
        self.session.add(project)
        self.session.commit()
        self.session.refresh(project)
        return project

    def append_files(self, project_id: int, references: list[str]) -> Project | None:
        project = self.get(project_id)
        if not project:
            return None
        # Assign a new list so the JSON column is flagged as changed.
        files = [*(project.uploaded_files or []), *references]
        return self.update(project_id, uploaded_files=files)

    def set_configuration(
        self, project_id: int, configuration: dict[str, Any]
    ) -> Project | None:
        return self.update(project_id, configuration=dict(configuration))

    def start_deployment(self, project_id: int, provider: str) -> Project | None:
        project = self.update(
            project_id, selected_provider=provider, deployment_status=DEPLOYING
        )
        if project:
            logger.info(f"Deployment of project {project_id} started on {provider}")
        return project
