"""Template validation and publication endpoints.

Both endpoints take the raw Agent File (JSON or YAML) as the request body.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from ams.api.dependencies import TemplateServiceDep
from ams.api.exceptions import InvalidRequestError, raise_for_failure
from ams.api.middleware.auth import get_idempotency_key
from ams.api.models.templates import PublishResponse, ValidateResponse
from ams.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/templates")


async def _read_body(request: Request) -> str:
    body = await request.body()
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidRequestError("Request body must be UTF-8 text") from e


@router.post("/validate", response_model=ValidateResponse)
async def validate_template(
    request: Request,
    service: TemplateServiceDep,
) -> ValidateResponse:
    """Parse and validate an Agent File without publishing it."""
    raw = await _read_body(request)
    result = raise_for_failure(await service.validate(raw))
    return ValidateResponse(format=result.format, validation=result.validation)


@router.post("/publish", response_model=PublishResponse)
async def publish_template(
    request: Request,
    service: TemplateServiceDep,
    idempotency_key: Annotated[str | None, Depends(get_idempotency_key)],
) -> PublishResponse:
    """Publish an Agent File as a new immutable template version."""
    raw = await _read_body(request)
    published = raise_for_failure(await service.publish(raw, idempotency_key=idempotency_key))
    return PublishResponse(**published.model_dump())
