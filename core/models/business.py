# =============================================================================
# core/models/business.py - Business Schemas
# =============================================================================
# A business is a street-food vendor location owned by exactly one user.
# =============================================================================

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator

from .common import Latitude, Longitude, Name

Description = Annotated[str, Field(max_length=1000)]


class BusinessCreateRequest(BaseModel):
    """
    Schema for POST /business.

    Example:
        {
            "name": "Taco Cart",
            "description": "Al pastor every night",
            "longitude": -122.4194,
            "latitude": 37.7749
        }
    """

    name: Name
    description: Description | None = None
    image: AnyHttpUrl | None = None
    longitude: Longitude
    latitude: Latitude

    def to_row(self, owner_id: UUID | str) -> dict[str, Any]:
        row = self.model_dump(mode="json")
        row["user_id"] = str(owner_id)
        return row


class BusinessUpdateRequest(BaseModel):
    """
    Schema for PUT /business/{id}.

    Only fields present in the request body are written; an explicit null
    clears description/image.
    """

    name: Name | None = None
    description: Description | None = None
    image: AnyHttpUrl | None = None
    longitude: Longitude | None = None
    latitude: Latitude | None = None

    @field_validator("name", "longitude", "latitude")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # Runs only for values the client sent; omitted fields keep None
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, JSON-ready."""
        return self.model_dump(mode="json", exclude_unset=True)


class Business(BaseModel):
    """A row of the business table."""

    model_config = ConfigDict(extra="ignore")

    id: UUID
    user_id: UUID
    name: str
    description: str | None = None
    image: str | None = None
    longitude: float
    latitude: float
    created_at: datetime | None = None
    updated_at: datetime | None = None
