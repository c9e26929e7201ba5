"""Pydantic DTOs (Data Transfer Objects) for the Client feature."""

from datetime import datetime

from pydantic import BaseModel, Field


class ClientCreate(BaseModel):
    """Schema for creating a new client."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Jan Kowalski"])
    phone: str = Field(..., min_length=1, max_length=50, examples=["+48 123 456 789"])
    email: str | None = Field(None, max_length=255)


class ClientUpdate(BaseModel):
    """Schema for updating an existing client — all fields optional."""

    name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, min_length=1, max_length=50)
    email: str | None = Field(None, max_length=255)


class ClientResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    phone: str
    email: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}
