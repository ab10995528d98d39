import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from infrawizard.models.project import Project
from infrawizard.services.ai_analysis import (
    build_project_context,
    generate_all_ai_analysis,
    generate_architecture_analysis,
    generate_recommendations,
    generate_template_ai,
    parse_json_reply,
)
from infrawizard.services.llm_client import LLMError


def _project(**overrides) -> Project:
    fields = {
        "id": 7,
        "name": "Fleet Tracker",
        "description": "Tracks delivery vans",
        "expected_users": "1000-10000",
    }
    fields.update(overrides)
    return Project(**fields)


@pytest.fixture
def mock_llm():
    """Mock call_llm so no request leaves the test."""
    with patch(
        "infrawizard.services.ai_analysis.call_llm", new_callable=AsyncMock
    ) as mock:
        yield mock


# --- Context and parsing tests ---


def test_build_project_context_basic():
    context = build_project_context(_project())
    assert "Project: Fleet Tracker" in context
    assert "Expected Users: 1000-10000" in context
    assert "Technology Stack" not in context
    assert "Configuration Details" not in context


def test_build_project_context_with_configuration():
    project = _project(
        tech_stack="Rails",
        configuration={"region": "eu-west-1", "gdpr_compliance": True},
    )
    context = build_project_context(project)
    assert "Technology Stack: Rails" in context
    assert "- Region: eu-west-1" in context
    assert "- GDPR Compliance: True" in context


def test_parse_json_reply_strips_code_fence():
    reply = '```json\n{"a": 1}\n```'
    assert parse_json_reply(reply) == {"a": 1}


def test_parse_json_reply_rejects_non_objects():
    assert parse_json_reply("not json") is None
    assert parse_json_reply("[1, 2]") is None


# --- Generator tests ---


@pytest.mark.asyncio
async def test_generate_template_ai_parses_reply(mock_llm: AsyncMock):
    mock_llm.return_value = json.dumps(
        {
            "templateCode": "Resources: {}",
            "estimatedCost": 310,
            "reasoning": "Two t3.medium instances",
            "optimizations": ["Spot instances"],
            "securityConsiderations": ["Private subnets"],
            "scalabilityFeatures": ["ASG"],
        }
    )

    template = await generate_template_ai("aws", _project())

    assert template["provider"] == "aws"
    assert template["name"] == "AWS CloudFormation"
    assert template["template_code"] == "Resources: {}"
    assert template["estimated_cost"] == 310
    assert template["security_considerations"] == ["Private subnets"]
    prompt = mock_llm.call_args[0][0]
    assert "AWS CloudFormation" in prompt
    assert "Fleet Tracker" in prompt


@pytest.mark.asyncio
async def test_generate_template_ai_fallback(mock_llm: AsyncMock):
    mock_llm.return_value = "resources:\n- name: vpc"

    template = await generate_template_ai("gcp", _project())

    assert template["provider"] == "gcp"
    assert template["template_code"] == "resources:\n- name: vpc"
    assert template["estimated_cost"] == 200
    assert template["optimizations"]


@pytest.mark.asyncio
async def test_generate_template_ai_unknown_provider(mock_llm: AsyncMock):
    with pytest.raises(ValueError):
        await generate_template_ai("heroku", _project())
    mock_llm.assert_not_called()


@pytest.mark.asyncio
async def test_generate_architecture_fallback(mock_llm: AsyncMock):
    mock_llm.return_value = "I think you need a load balancer."
    analysis = await generate_architecture_analysis(_project())
    assert analysis["components"][0]["name"] == "Load Balancer"
    assert analysis["bottlenecks"]


@pytest.mark.asyncio
@pytest.mark.parametrize("cost", ["NaN", "Infinity", "1e999", "-Infinity"])
async def test_generate_template_ai_non_finite_cost(mock_llm: AsyncMock, cost: str):
    mock_llm.return_value = f'{{"template_code": "Resources: {{}}", "estimated_cost": {cost}}}'

    template = await generate_template_ai("azure", _project())

    assert template["template_code"] == "Resources: {}"
    assert template["estimated_cost"] == 290


@pytest.mark.asyncio
async def test_fallbacks_are_independent_copies(mock_llm: AsyncMock):
    mock_llm.return_value = "not json"

    first = await generate_architecture_analysis(_project())
    first["components"][0]["name"] = "Mutated"
    first["bottlenecks"].append("Mutated")
    recommendations = await generate_recommendations(_project())
    recommendations["security"].clear()
    template = await generate_template_ai("aws", _project())
    template["optimizations"].append("Mutated")

    second = await generate_architecture_analysis(_project())
    assert second["components"][0]["name"] == "Load Balancer"
    assert "Mutated" not in second["bottlenecks"]
    assert (await generate_recommendations(_project()))["security"]
    assert "Mutated" not in (await generate_template_ai("aws", _project()))[
        "optimizations"
    ]


@pytest.mark.asyncio
async def test_generate_architecture_parses_reply(mock_llm: AsyncMock):
    mock_llm.return_value = json.dumps(
        {
            "components": [{"name": "API", "type": "Compute"}, "junk"],
            "dataFlow": [],
            "scalingStrategy": "Vertical first",
            "bottlenecks": ["Disk I/O"],
            "recommendations": ["Add a queue"],
        }
    )
    analysis = await generate_architecture_analysis(_project())
    assert analysis["components"] == [{"name": "API", "type": "Compute"}]
    assert analysis["scaling_strategy"] == "Vertical first"
    assert analysis["recommendations"] == ["Add a queue"]


@pytest.mark.asyncio
async def test_generate_recommendations_partial_reply(mock_llm: AsyncMock):
    mock_llm.return_value = json.dumps(
        {"performance": [{"title": "Use a CDN", "impact": "high"}]}
    )
    recommendations = await generate_recommendations(_project())
    assert recommendations["performance"][0]["title"] == "Use a CDN"
    assert recommendations["security"] == []
    assert recommendations["cost"] == []


@pytest.mark.asyncio
async def test_generate_all_ai_analysis(mock_llm: AsyncMock):
    mock_llm.return_value = "no structure here"
    result = await generate_all_ai_analysis(_project())
    assert set(result["templates"]) == {"aws", "gcp", "azure"}
    assert result["architecture"]["scaling_strategy"]
    assert result["recommendations"]["cost"]
    assert mock_llm.await_count == 5


@pytest.mark.asyncio
async def test_generate_all_ai_analysis_propagates_llm_error(mock_llm: AsyncMock):
    mock_llm.side_effect = LLMError("down")
    with pytest.raises(LLMError):
        await generate_all_ai_analysis(_project())


# --- Endpoint tests ---


def test_ai_templates_endpoint(client: TestClient, project: dict, mock_llm: AsyncMock):
    mock_llm.return_value = json.dumps(
        {"template_code": "code", "estimated_cost": 99}
    )
    resp = client.post(f"/api/projects/{project['id']}/ai-templates")
    assert resp.status_code == 200
    data = resp.json()
    assert set(data) == {"aws", "gcp", "azure"}
    assert data["azure"]["template_code"] == "code"
    assert data["azure"]["estimated_cost"] == 99


def test_architecture_endpoint(client: TestClient, project: dict, mock_llm: AsyncMock):
    mock_llm.return_value = "unparseable"
    resp = client.post(f"/api/projects/{project['id']}/architecture")
    assert resp.status_code == 200
    assert resp.json()["data_flow"][0]["from"] == "Load Balancer"


def test_recommendations_endpoint(
    client: TestClient, project: dict, mock_llm: AsyncMock
):
    mock_llm.return_value = "unparseable"
    resp = client.post(f"/api/projects/{project['id']}/recommendations")
    assert resp.status_code == 200
    assert resp.json()["security"][0]["title"] == "Enable WAF"


def test_ai_analysis_endpoint(client: TestClient, project: dict, mock_llm: AsyncMock):
    mock_llm.return_value = "unparseable"
    resp = client.post(f"/api/projects/{project['id']}/ai-analysis")
    assert resp.status_code == 200
    assert set(resp.json()) == {"templates", "architecture", "recommendations"}


def test_ai_endpoint_service_unavailable(
    client: TestClient, project: dict, mock_llm: AsyncMock
):
    mock_llm.side_effect = LLMError("connection refused")
    resp = client.post(f"/api/projects/{project['id']}/architecture")
    assert resp.status_code == 502
    assert resp.json()["detail"] == "AI service unavailable"


def test_ai_endpoint_not_found(client: TestClient, mock_llm: AsyncMock):
    resp = client.post("/api/projects/9999/recommendations")
    assert resp.status_code == 404
    mock_llm.assert_not_called()
