"""AI-assisted templates, architecture analysis and recommendations.

Every generator asks the completion endpoint for a JSON object and parses the
reply best-effort. A reply that is not valid JSON is replaced by a static
fallback; a failing endpoint (``LLMError``) is left to the caller.
"""

import asyncio
import copy
import json
import logging
import math
import re
from typing import Any

from infrawizard.models.project import Project
from infrawizard.services.llm_client import call_llm
from infrawizard.services.templates import PROVIDERS

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)

CONFIG_LABELS = [
    ("concurrent_users", "Concurrent Users"),
    ("response_time", "Response Time Requirement"),
    ("database_type", "Database Type"),
    ("data_volume", "Data Volume"),
    ("auto_backups", "Auto Backups"),
    ("ssl_certificate", "SSL Certificate"),
    ("region", "Region"),
    ("ddos_protection", "DDoS Protection"),
    ("gdpr_compliance", "GDPR Compliance"),
    ("monitoring", "Monitoring"),
    ("auto_scaling", "Auto Scaling"),
    ("environment_strategy", "Environment Strategy"),
]

TEMPLATE_REQUIREMENTS = {
    "aws": (
        "AWS CloudFormation",
        "YAML",
        "VPC, subnets, security groups, load balancer, auto-scaling group, RDS database",
        "CloudWatch monitoring and logging",
    ),
    "gcp": (
        "Google Cloud Deployment Manager",
        "YAML",
        "VPC, subnets, firewall rules, load balancer, managed instance group, Cloud SQL",
        "Cloud Monitoring and Cloud Logging",
    ),
    "azure": (
        "Azure Resource Manager (ARM)",
        "JSON",
        "Virtual Network, subnets, NSGs, Application Gateway, VM Scale Sets, Azure Database",
        "Azure Monitor and Log Analytics",
    ),
}

TEMPLATE_FALLBACKS = {
    "aws": {
        "estimated_cost": 250,
        "reasoning": "AI-generated template with optimized resource allocation",
        "optimizations": ["Auto-scaling configuration", "Multi-AZ deployment"],
        "security_considerations": ["VPC isolation", "Security groups"],
        "scalability_features": ["Load balancer", "Auto-scaling group"],
    },
    "gcp": {
        "estimated_cost": 200,
        "reasoning": "AI-generated template with GCP-specific optimizations",
        "optimizations": ["Managed instance groups", "Cloud SQL High Availability"],
        "security_considerations": ["VPC firewall rules", "IAM policies"],
        "scalability_features": ["Load balancing", "Auto-scaling"],
    },
    "azure": {
        "estimated_cost": 290,
        "reasoning": "AI-generated template with Azure-specific optimizations",
        "optimizations": ["VM Scale Sets", "Azure Database High Availability"],
        "security_considerations": ["Network Security Groups", "Azure AD integration"],
        "scalability_features": ["Application Gateway", "Scale Sets"],
    },
}

ARCHITECTURE_FALLBACK = {
    "components": [
        {
            "name": "Load Balancer",
            "type": "Network",
            "purpose": "Distribute incoming traffic",
            "connections": ["Application Servers"],
        }
    ],
    "data_flow": [
        {
            "from": "Load Balancer",
            "to": "Application Servers",
            "type": "HTTP/HTTPS",
            "description": "Routes user requests to healthy instances",
        }
    ],
    "scaling_strategy": "Horizontal scaling with load balancing",
    "bottlenecks": ["Database connections", "Network bandwidth"],
    "recommendations": ["Implement caching", "Database read replicas"],
}

RECOMMENDATIONS_FALLBACK = {
    "performance": [
        {
            "title": "Implement Caching",
            "description": "Add Redis caching layer for frequently accessed data",
            "impact": "high",
            "effort": "medium",
        }
    ],
    "security": [
        {
            "title": "Enable WAF",
            "description": "Web Application Firewall to protect against common attacks",
            "severity": "high",
            "implementation": "Configure managed WAF rules in front of the load balancer",
        }
    ],
    "cost": [
        {
            "title": "Reserved Instances",
            "description": "Use reserved instances for predictable workloads",
            "savings": "30-50% on compute costs",
            "tradeoffs": "Upfront commitment required",
        }
    ],
}


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def _pick(parsed: dict, key: str, default: Any = None) -> Any:
    """Read ``key`` from an LLM reply, accepting snake_case or camelCase."""
    for candidate in (key, _camel(key)):
        if parsed.get(candidate) is not None:
            return parsed[candidate]
    return default


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def _objects(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def parse_json_reply(text: str) -> dict | None:
    """Parse a JSON object out of an LLM reply, or return None."""
    text = text.strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1).strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def build_project_context(
    project: Project, configuration: dict[str, Any] | None = None
) -> str:
    lines = [
        f"Project: {project.name}",
        f"Description: {project.description}",
        f"Expected Users: {project.expected_users}",
    ]
    if project.tech_stack:
        lines.append(f"Technology Stack: {project.tech_stack}")

    config = configuration if configuration is not None else project.configuration
    if config:
        lines.append("Configuration Details:")
        for key, label in CONFIG_LABELS:
            if key in config:
                lines.append(f"- {label}: {config[key]}")
    return "\n".join(lines)


def _template_prompt(provider: str, context: str) -> str:
    title, fmt, resources, observability = TEMPLATE_REQUIREMENTS[provider]
    return f"""Generate a comprehensive {title} template for the following project:

{context}

Requirements:
1. Create a production-ready {fmt} template
2. Include {resources}
3. Implement best practices for security, scalability, and high availability
4. Include proper tagging and resource naming conventions
5. Add {observability} configurations
6. Provide detailed comments explaining each resource

Also provide:
- Cost estimation reasoning
- Key optimizations implemented
- Security considerations
- Scalability features

Format the response as JSON with these fields:
{{
  "template_code": "{fmt} template content",
  "estimated_cost": numerical_value,
  "reasoning": "cost breakdown explanation",
  "optimizations": ["optimization1", "optimization2"],
  "security_considerations": ["security1", "security2"],
  "scalability_features": ["feature1", "feature2"]
}}"""


async def generate_template_ai(
    provider: str, project: Project, configuration: dict[str, Any] | None = None
) -> dict:
    """Ask the LLM for one provider's template.

    Returns a dict with ``provider``, ``name``, ``template_code``,
    ``estimated_cost``, ``reasoning`` and the three feature lists.
    """
    if provider not in TEMPLATE_REQUIREMENTS:
        raise ValueError(f"Unknown provider: {provider}")

    context = build_project_context(project, configuration)
    response = await call_llm(_template_prompt(provider, context), 2000, 0.3)

    base = {"provider": provider, "name": PROVIDERS[provider]["name"]}
    parsed = parse_json_reply(response)
    if parsed is None or not _pick(parsed, "template_code"):
        logger.info(f"Unstructured {provider} template reply, using fallback")
        fallback = copy.deepcopy(TEMPLATE_FALLBACKS[provider])
        return {**base, "template_code": response, **fallback}

    fallback = TEMPLATE_FALLBACKS[provider]
    cost = _pick(parsed, "estimated_cost", fallback["estimated_cost"])
    try:
        cost = float(cost)
    except (TypeError, ValueError):
        cost = fallback["estimated_cost"]
    # json.loads accepts NaN and Infinity, which cannot be serialized back out
    if not math.isfinite(cost):
        cost = fallback["estimated_cost"]
    return {
        **base,
        "template_code": str(_pick(parsed, "template_code")),
        "estimated_cost": cost,
        "reasoning": str(_pick(parsed, "reasoning", fallback["reasoning"])),
        "optimizations": _strings(_pick(parsed, "optimizations")),
        "security_considerations": _strings(_pick(parsed, "security_considerations")),
        "scalability_features": _strings(_pick(parsed, "scalability_features")),
    }


async def generate_architecture_analysis(
    project: Project, configuration: dict[str, Any] | None = None
) -> dict:
    context = build_project_context(project, configuration)
    prompt = f"""Analyze the architecture for the following project and provide a comprehensive breakdown:

{context}

Provide a detailed architecture analysis including:
1. List all major components (load balancer, application servers, database, cache, etc.)
2. Describe data flow between components
3. Identify scaling strategy
4. Point out potential bottlenecks
5. Provide architectural recommendations

Format the response as JSON:
{{
  "components": [
    {{"name": "component_name", "type": "component_type", "purpose": "what_it_does", "connections": ["connected_to1"]}}
  ],
  "data_flow": [
    {{"from": "source_component", "to": "destination_component", "type": "data_type", "description": "flow_description"}}
  ],
  "scaling_strategy": "overall_scaling_approach",
  "bottlenecks": ["potential_bottleneck1"],
  "recommendations": ["recommendation1"]
}}"""

    response = await call_llm(prompt, 1500, 0.4)
    parsed = parse_json_reply(response)
    if parsed is None:
        logger.info("Unstructured architecture reply, using fallback")
        return copy.deepcopy(ARCHITECTURE_FALLBACK)

    return {
        "components": _objects(_pick(parsed, "components")),
        "data_flow": _objects(_pick(parsed, "data_flow")),
        "scaling_strategy": str(
            _pick(parsed, "scaling_strategy", ARCHITECTURE_FALLBACK["scaling_strategy"])
        ),
        "bottlenecks": _strings(_pick(parsed, "bottlenecks")),
        "recommendations": _strings(_pick(parsed, "recommendations")),
    }


async def generate_recommendations(
    project: Project, configuration: dict[str, Any] | None = None
) -> dict:
    context = build_project_context(project, configuration)
    prompt = f"""Generate comprehensive optimization recommendations for the following project:

{context}

Provide detailed recommendations in three categories:
1. Performance optimizations (with impact and effort levels)
2. Security improvements (with severity levels and implementation details)
3. Cost optimization opportunities (with savings estimates and tradeoffs)

Format the response as JSON:
{{
  "performance": [
    {{"title": "recommendation_title", "description": "detailed_description", "impact": "high|medium|low", "effort": "high|medium|low"}}
  ],
  "security": [
    {{"title": "security_improvement", "description": "why_its_important", "severity": "critical|high|medium|low", "implementation": "how_to_implement"}}
  ],
  "cost": [
    {{"title": "cost_optimization", "description": "what_it_saves", "savings": "estimated_savings", "tradeoffs": "what_you_give_up"}}
  ]
}}"""

    response = await call_llm(prompt, 1500, 0.5)
    parsed = parse_json_reply(response)
    if parsed is None:
        logger.info("Unstructured recommendations reply, using fallback")
        return copy.deepcopy(RECOMMENDATIONS_FALLBACK)

    return {
        "performance": _objects(_pick(parsed, "performance")),
        "security": _objects(_pick(parsed, "security")),
        "cost": _objects(_pick(parsed, "cost")),
    }


async def generate_ai_templates(
    project: Project, configuration: dict[str, Any] | None = None
) -> dict[str, dict]:
    providers = list(TEMPLATE_REQUIREMENTS)
    results = await asyncio.gather(
        *(generate_template_ai(p, project, configuration) for p in providers)
    )
    return dict(zip(providers, results))


async def generate_all_ai_analysis(
    project: Project, configuration: dict[str, Any] | None = None
) -> dict:
    """Run every AI request for a project concurrently."""
    templates, architecture, recommendations = await asyncio.gather(
        generate_ai_templates(project, configuration),
        generate_architecture_analysis(project, configuration),
        generate_recommendations(project, configuration),
    )
    return {
        "templates": templates,
        "architecture": architecture,
        "recommendations": recommendations,
    }
