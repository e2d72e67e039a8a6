# =============================================================================
# core/models/base.py - Shared Model Configuration
# =============================================================================
# The web client speaks camelCase JSON ("availableUntil", "totalCarbonSaved")
# while database rows use snake_case columns. CamelModel accepts either on
# input and serializes camelCase on output (FastAPI dumps by alias).
# =============================================================================

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model for API contracts: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
