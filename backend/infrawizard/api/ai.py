"""Completion-backed templates and analysis endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from infrawizard.api.deps import get_project_or_404
from infrawizard.models.project import Project
from infrawizard.services.ai_analysis import (
    generate_ai_templates,
    generate_all_ai_analysis,
    generate_architecture_analysis,
    generate_recommendations,
)
from infrawizard.services.llm_client import LLMError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ai"])


# --- Pydantic models ---


class AITemplateResponse(BaseModel):
    provider: str
    name: str
    template_code: str
    estimated_cost: float
    reasoning: str
    optimizations: list[str]
    security_considerations: list[str]
    scalability_features: list[str]


class ArchitectureResponse(BaseModel):
    components: list[dict]
    data_flow: list[dict]
    scaling_strategy: str
    bottlenecks: list[str]
    recommendations: list[str]


class RecommendationsResponse(BaseModel):
    performance: list[dict]
    security: list[dict]
    cost: list[dict]


class AIAnalysisResponse(BaseModel):
    templates: dict[str, AITemplateResponse]
    architecture: ArchitectureResponse
    recommendations: RecommendationsResponse


def _ai_unavailable(project_id: int, exc: LLMError) -> HTTPException:
    logger.warning(f"AI request for project {project_id} failed: {exc}")
    return HTTPException(status_code=502, detail="AI service unavailable")


# --- Endpoints ---


@router.post(
    "/projects/{project_id}/ai-templates",
    response_model=dict[str, AITemplateResponse],
)
async def ai_templates(project: Project = Depends(get_project_or_404)):
    try:
        return await generate_ai_templates(project)
    except LLMError as exc:
        raise _ai_unavailable(project.id, exc)


@router.post(
    "/projects/{project_id}/architecture", response_model=ArchitectureResponse
)
async def architecture(project: Project = Depends(get_project_or_404)):
    try:
        return await generate_architecture_analysis(project)
    except LLMError as exc:
        raise _ai_unavailable(project.id, exc)


@router.post(
    "/projects/{project_id}/recommendations",
    response_model=RecommendationsResponse,
)
async def recommendations(project: Project = Depends(get_project_or_404)):
    try:
        return await generate_recommendations(project)
    except LLMError as exc:
        raise _ai_unavailable(project.id, exc)


@router.post(
    "/projects/{project_id}/ai-analysis", response_model=AIAnalysisResponse
)
async def ai_analysis(project: Project = Depends(get_project_or_404)):
    try:
        return await generate_all_ai_analysis(project)
    except LLMError as exc:
        raise _ai_unavailable(project.id, exc)
