"""API request and response models."""

from ams.api.models.agents import (
    CreateAgentRequest,
    CreateAgentResponse,
    ProfileResponse,
    UpgradeAgentRequest,
    UpgradeAgentResponse,
)
from ams.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from ams.api.models.health import HealthResponse
from ams.api.models.templates import PublishResponse, ValidateResponse

__all__ = [
    "CreateAgentRequest",
    "CreateAgentResponse",
    "ErrorBody",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "ProfileResponse",
    "PublishResponse",
    "UpgradeAgentRequest",
    "UpgradeAgentResponse",
    "ValidateResponse",
]
