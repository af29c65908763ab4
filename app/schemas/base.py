"""
Base schemas with common functionality.
"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common functionality for all schemas"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True
    )


class WebhookSchema(BaseSchema):
    """
    Base for inbound payload shapes.
    Senders add fields freely and sometimes send ids as numbers, so unknown
    keys are dropped and numbers are accepted where strings are expected.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True
    )
