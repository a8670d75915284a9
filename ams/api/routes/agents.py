"""Agent instance endpoints: create and upgrade."""

from typing import Annotated

from fastapi import APIRouter, Depends

from ams.api.dependencies import BillingEndpointDep, InstanceServiceDep, UserIdDep
from ams.api.exceptions import raise_for_failure
from ams.api.middleware.auth import get_idempotency_key
from ams.api.models.agents import (
    CreateAgentRequest,
    CreateAgentResponse,
    UpgradeAgentRequest,
    UpgradeAgentResponse,
)
from ams.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/agents")

IdempotencyKeyDep = Annotated[str | None, Depends(get_idempotency_key)]


@router.post("/create", response_model=CreateAgentResponse)
async def create_agent(
    body: CreateAgentRequest,
    service: InstanceServiceDep,
    user_id: UserIdDep,
    endpoint: BillingEndpointDep,
    idempotency_key: IdempotencyKeyDep,
) -> CreateAgentResponse:
    """Create a live agent from a template version."""
    created = raise_for_failure(
        await service.create_instance(body, user_id, endpoint, idempotency_key)
    )
    return CreateAgentResponse(**created.model_dump())


@router.post("/{agent_id}/upgrade", response_model=UpgradeAgentResponse)
async def upgrade_agent(
    agent_id: str,
    body: UpgradeAgentRequest,
    service: InstanceServiceDep,
    user_id: UserIdDep,
    endpoint: BillingEndpointDep,
    idempotency_key: IdempotencyKeyDep,
) -> UpgradeAgentResponse:
    """Plan, simulate and (unless dry-run) apply or enqueue an upgrade."""
    outcome = raise_for_failure(
        await service.upgrade_instance(agent_id, body, user_id, endpoint, idempotency_key)
    )
    return UpgradeAgentResponse.from_outcome(outcome)
