import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from infrawizard.config import settings
from infrawizard.database import get_session
from infrawizard.main import app


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fast_settings(tmp_path):
    """Keep uploads in tmp_path and skip the simulated template delay."""
    original = (settings.upload_dir, settings.template_delay_seconds)
    settings.upload_dir = str(tmp_path / "uploads")
    settings.template_delay_seconds = 0
    yield tmp_path / "uploads"
    settings.upload_dir, settings.template_delay_seconds = original


@pytest.fixture
def project(client: TestClient) -> dict:
    resp = client.post(
        "/api/projects",
        json={
            "name": "Pet Store",
            "description": "An online shop for pet supplies",
            "tech_stack": "React + FastAPI",
            "expected_users": "100-1000",
        },
    )
    return resp.json()


@pytest.fixture
def configuration() -> dict:
    return {
        "concurrent_users": "100-500",
        "response_time": "under-500ms",
        "database_type": "postgresql",
        "data_volume": "1-10gb",
        "auto_backups": True,
        "ssl_certificate": "auto-managed",
        "region": "eu-west-1",
        "ddos_protection": True,
        "gdpr_compliance": True,
        "monitoring": True,
        "auto_scaling": "balanced",
        "environment_strategy": "staging-production",
    }
