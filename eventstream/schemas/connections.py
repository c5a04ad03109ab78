"""Schemas for closed-connection administration."""

from pydantic import BaseModel, ConfigDict, Field


class ConnectionStateResponse(BaseModel):
    """Closed state of a connection id."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Connection id as sent in the 'id:' field", examples=["V1StGXR8_Z5"])
    closed: bool = Field(
        description="Whether the next stream opened with this id is answered with 204",
        examples=[True, False],
    )
