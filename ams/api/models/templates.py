"""Template endpoint response models."""

from pydantic import BaseModel

from ams.agentfile.models import ValidationReport
from ams.templates.models import PublishResult


class ValidateResponse(BaseModel):
    format: str
    validation: ValidationReport


class PublishResponse(PublishResult):
    """Published version, with the source format of the Agent File."""
