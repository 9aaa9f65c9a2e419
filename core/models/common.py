# =============================================================================
# core/models/common.py - Shared Field Types and Pagination
# =============================================================================
# Reusable annotated field types so every schema spells a constraint the
# same way, plus the pagination query model.
# =============================================================================

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# -----------------------------------------------------------------------------
# Field Types
# -----------------------------------------------------------------------------

Longitude = Annotated[
    float,
    Field(ge=-180, le=180, description="Longitude in degrees, between -180 and 180"),
]

Latitude = Annotated[
    float,
    Field(ge=-90, le=90, description="Latitude in degrees, between -90 and 90"),
]

Name = Annotated[str, Field(min_length=1, max_length=255)]

ProviderUserId = Annotated[
    str,
    Field(min_length=1, description="User id assigned by the identity provider"),
]

# -----------------------------------------------------------------------------
# Pagination
# -----------------------------------------------------------------------------

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


class PaginationParams(BaseModel):
    """
    `limit` / `offset` query parameters.

    Query strings are coerced to integers; omitted values take the defaults.
    """

    model_config = ConfigDict(extra="ignore")

    limit: int = Field(
        default=DEFAULT_LIMIT,
        ge=1,
        le=MAX_LIMIT,
        description="Page size, between 1 and 200",
    )
    offset: int = Field(
        default=0,
        ge=0,
        description="Number of rows to skip",
    )
