"""Base schema configuration."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class WireSchema(BaseModel):
    """
    Base for records received from the API.

    Unknown keys are ignored and strings are kept exactly as sent.
    """

    model_config = ConfigDict(extra="ignore", from_attributes=True)


class FrozenSchema(BaseModel):
    """Base for immutable client-side records; update with model_copy()."""

    model_config = ConfigDict(frozen=True)
