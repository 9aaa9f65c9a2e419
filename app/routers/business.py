# =============================================================================
# app/routers/business.py - Business CRUD Endpoints
# =============================================================================
# All endpoints require authentication and only ever see the caller's
# businesses. Another user's business answers 404, exactly like a missing one.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, get_current_user
from app.dependencies import BusinessServiceDep
from app.responses import created, no_content, success
from core.models.business import BusinessCreateRequest, BusinessUpdateRequest

router = APIRouter()

BusinessIdPath = Annotated[UUID, Path(description="Business UUID")]


@router.post("")
async def create_business(
    request: BusinessCreateRequest,
    businesses: BusinessServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    business = businesses.create_business(user.id, request)
    return created(business.model_dump(mode="json"))


@router.get("")
async def list_businesses(
    businesses: BusinessServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """The caller's businesses, newest first."""
    items = businesses.list_businesses(user.id)
    return success([b.model_dump(mode="json") for b in items])


@router.get("/{business_id}")
async def get_business(
    business_id: BusinessIdPath,
    businesses: BusinessServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    business = businesses.get_business(business_id, user.id)
    return success(business.model_dump(mode="json"))


@router.put("/{business_id}")
@router.post("/{business_id}", include_in_schema=False)
async def update_business(
    business_id: BusinessIdPath,
    request: BusinessUpdateRequest,
    businesses: BusinessServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update the fields present in the body.

    POST is accepted as well for older clients.
    """
    business = businesses.update_business(business_id, user.id, request)
    return success(business.model_dump(mode="json"))


@router.delete("/{business_id}")
async def delete_business(
    business_id: BusinessIdPath,
    businesses: BusinessServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a business; its menus cascade and their images are removed."""
    businesses.delete_business(business_id, user.id)
    return no_content()
