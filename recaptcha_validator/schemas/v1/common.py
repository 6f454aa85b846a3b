"""Common schemas: the response envelope shared by every endpoint."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiEnvelope(BaseModel):
    success: bool
    data: Any = None
    error_message: str | None = Field(default=None, alias="errorMessage")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def ok(cls, data: Any = None) -> "ApiEnvelope":
        return cls(success=True, data=data, error_message=None)

    @classmethod
    def error(cls, message: str, data: Any = None) -> "ApiEnvelope":
        return cls(success=False, data=data, error_message=message)

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
