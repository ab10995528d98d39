import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from infrawizard.api.ai import router as ai_router
from infrawizard.api.deployments import router as deployments_router
from infrawizard.api.projects import router as projects_router
from infrawizard.api.templates import router as templates_router
from infrawizard.config import settings
from infrawizard.database import init_db
from infrawizard.errors import register_exception_handlers


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(title="InfraWizard", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(projects_router, prefix="/api")
app.include_router(templates_router, prefix="/api")
app.include_router(deployments_router, prefix="/api")
app.include_router(ai_router, prefix="/api")


@app.get("/health")
async def health():
    return {"status": "ok"}
