"""Pydantic DTOs for the Service feature."""

from decimal import Decimal

from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    """Schema for creating a new service."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Strzyżenie damskie"])
    duration: int = Field(30, gt=0, description="Duration in minutes")
    price: Decimal = Field(Decimal("0"), ge=0, examples=["120.00"])


class ServiceUpdate(BaseModel):
    """Schema for updating an existing service — all fields optional."""

    name: str | None = Field(None, min_length=1, max_length=200)
    duration: int | None = Field(None, gt=0)
    price: Decimal | None = Field(None, ge=0)


class ServiceResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    duration: int
    price: Decimal

    model_config = {"from_attributes": True}
