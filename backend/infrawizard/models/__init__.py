from infrawizard.models.project import Project

__all__ = [
    "Project",
]
