"""Common response schemas for consistent API structure."""

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetailsSchema(BaseModel):
    """Error details object."""

    model_config = ConfigDict(from_attributes=True)

    message: str = Field(..., description="Additional error context")
    field: str | None = Field(None, description="Field name for validation errors")


class ErrorResponseSchema(BaseModel):
    """Standard error response format."""

    model_config = ConfigDict(from_attributes=True)

    error: str = Field(..., description="Error message", json_schema_extra={"example": "Validation failed"})
    details: ErrorDetailsSchema | list[ErrorDetailsSchema] | dict = Field(..., description="Additional error details")
    code: str | None = Field(None, description="Machine readable error code")
    correlationId: str | None = Field(None, description="Request correlation id")
