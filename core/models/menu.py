# =============================================================================
# core/models/menu.py - Menu Schemas
# =============================================================================
# A menu belongs to a business and carries free text plus up to three image
# URLs. Menu writes arrive as multipart forms, so the text fields are
# validated through core.validation.validate_input rather than as a JSON body.
# =============================================================================

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

MAX_MENU_IMAGES = 3

MenuText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MenuCreateForm(BaseModel):
    """Text fields of POST /business/{business_id}/menu."""
    menu: MenuText


class MenuUpdateForm(BaseModel):
    """Text fields of POST /business/{business_id}/menu/{menu_id}."""
    menu: MenuText | None = None


class Menu(BaseModel):
    """A row of the menu table."""

    model_config = ConfigDict(extra="ignore")

    id: UUID
    business_id: UUID
    menu: str
    images: list[str] = Field(default_factory=list, max_length=MAX_MENU_IMAGES)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ImageUpload:
    """One uploaded image file, fully read into memory."""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)
