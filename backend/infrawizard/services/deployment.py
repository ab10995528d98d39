import random

from infrawizard.models.project import DEPLOYING

DEPLOYMENT_STEPS = [
    {
        "id": "validate",
        "name": "Validating Configuration",
        "description": "Template syntax and dependencies verified",
    },
    {
        "id": "provision",
        "name": "Provisioning Resources",
        "description": "Creating VPC, subnets, and security groups",
    },
    {
        "id": "database",
        "name": "Setting up Database",
        "description": "Configuring PostgreSQL with Multi-AZ deployment",
    },
    {
        "id": "compute",
        "name": "Launching Compute Instances",
        "description": "Starting instances and configuring auto-scaling",
    },
    {
        "id": "deploy-app",
        "name": "Deploying Application",
        "description": "Building and deploying your application code",
    },
    {
        "id": "finalize",
        "name": "Final Configuration",
        "description": "Setting up monitoring, SSL, and DNS",
    },
]


def simulated_progress(status: str) -> int:
    """Random progress while deploying; anything else counts as done."""
    if status == DEPLOYING:
        return random.randrange(100)
    return 100


def plan_steps(progress: int) -> list[dict]:
    """Mark each deployment step according to how far progress has got."""
    progress = max(0, min(progress, 100))
    total = len(DEPLOYMENT_STEPS)
    done = progress * total // 100

    steps = []
    for index, step in enumerate(DEPLOYMENT_STEPS):
        if index < done:
            status = "completed"
        elif index == done:
            status = "in-progress"
        else:
            status = "pending"
        steps.append({**step, "status": status})
    return steps
