from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

PENDING = "pending"
DEPLOYING = "deploying"
COMPLETE = "complete"


class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    description: str
    tech_stack: str | None = Field(default=None)
    expected_users: str
    uploaded_files: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    configuration: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON)
    )
    selected_provider: str | None = Field(default=None)  # "aws" | "gcp" | "azure"
    deployment_status: str = Field(default=PENDING)  # "pending" | "deploying" | "complete"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
