# =============================================================================
# core/services/business_service.py - Business Business Logic
# =============================================================================
# Owner-scoped CRUD for vendor businesses.
#
# Every single-row access filters on both the business id and the owner id in
# the same query. A business that exists but belongs to someone else is
# reported exactly like one that does not exist.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import UUID

from supabase import Client

from app.exceptions import BadRequestError, InternalError, NotFoundError
from core.models.business import Business, BusinessCreateRequest, BusinessUpdateRequest
from lib.supabase_client import (
    BUSINESS_TABLE,
    MENU_TABLE,
    USERS_TABLE,
    translate_store_error,
)

if TYPE_CHECKING:
    from core.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)

BUSINESS_NOT_FOUND = "Business not found"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class BusinessService:
    """
    Service for business management operations.

    Provides a clean interface between API routes and database.
    """

    def __init__(self, client: Client, images: "ImageStorage | None" = None):
        self.client = client
        self.images = images

    def create_business(
        self,
        owner_id: UUID | str,
        data: BusinessCreateRequest,
    ) -> Business:
        """
        Create a business owned by `owner_id`.

        Raises:
            NotFoundError: If the owner has no user row
            InternalError: If the insert fails
        """
        owner_id_str = str(owner_id)

        try:
            (
                self.client.table(USERS_TABLE)
                .select("id")
                .eq("id", owner_id_str)
                .single()
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to verify user", not_found="User not found") from e

        try:
            response = self.client.table(BUSINESS_TABLE).insert(data.to_row(owner_id_str)).execute()
        except Exception as e:
            raise translate_store_error(e, "Failed to create business") from e

        if not response.data:
            raise InternalError("Failed to create business")

        business = Business.model_validate(response.data[0])
        logger.info(f"Created business: {business.id} for user: {owner_id_str}")
        return business

    def list_businesses(self, owner_id: UUID | str) -> list[Business]:
        """All businesses of the owner, newest first."""
        try:
            response = (
                self.client.table(BUSINESS_TABLE)
                .select("*")
                .eq("user_id", str(owner_id))
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to fetch businesses") from e

        return [Business.model_validate(row) for row in response.data or []]

    def get_business(self, business_id: UUID | str, owner_id: UUID | str) -> Business:
        """
        Get a business by ID, scoped to its owner.

        Raises:
            NotFoundError: If the business doesn't exist or the owner doesn't own it
        """
        try:
            response = (
                self.client.table(BUSINESS_TABLE)
                .select("*")
                .eq("id", str(business_id))
                .eq("user_id", str(owner_id))
                .single()
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to fetch business", not_found=BUSINESS_NOT_FOUND) from e

        if not response.data:
            raise NotFoundError(BUSINESS_NOT_FOUND)

        return Business.model_validate(response.data)

    def update_business(
        self,
        business_id: UUID | str,
        owner_id: UUID | str,
        updates: BusinessUpdateRequest,
    ) -> Business:
        """
        Update the fields the client sent.

        Raises:
            NotFoundError: If the business doesn't exist or the owner doesn't own it
            BadRequestError: If no field was sent
        """
        self.get_business(business_id, owner_id)

        changes = updates.changes()
        if not changes:
            raise BadRequestError("No updates provided")
        changes["updated_at"] = utc_now_iso()

        try:
            response = (
                self.client.table(BUSINESS_TABLE)
                .update(changes)
                .eq("id", str(business_id))
                .eq("user_id", str(owner_id))
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to update business", not_found=BUSINESS_NOT_FOUND) from e

        if not response.data:
            # Row vanished between the scoped read and the write
            raise NotFoundError(BUSINESS_NOT_FOUND)

        logger.info(f"Updated business: {business_id}")
        return Business.model_validate(response.data[0])

    def delete_business(self, business_id: UUID | str, owner_id: UUID | str) -> None:
        """
        Delete a business and, best-effort, the stored images of its menus.

        Menu rows go with the business through the store's cascade; the image
        objects do not, so their URLs are collected before the delete.
        """
        self.get_business(business_id, owner_id)

        image_urls = self.collect_menu_images([business_id])

        try:
            (
                self.client.table(BUSINESS_TABLE)
                .delete()
                .eq("id", str(business_id))
                .eq("user_id", str(owner_id))
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to delete business", not_found=BUSINESS_NOT_FOUND) from e

        logger.info(f"Deleted business: {business_id}")

        if self.images is not None:
            self.images.delete_all(image_urls)

    def collect_menu_images(self, business_ids: list[UUID | str]) -> list[str]:
        """
        Image URLs of every menu of the given businesses.

        Lookup failures are logged and yield an empty list; image cleanup is
        never a reason to fail a delete.
        """
        if not business_ids or self.images is None:
            return []

        try:
            response = (
                self.client.table(MENU_TABLE)
                .select("images")
                .in_("business_id", [str(b) for b in business_ids])
                .execute()
            )
        except Exception as e:
            logger.warning(f"Could not collect menu images for cleanup: {e}")
            return []

        urls: list[str] = []
        for row in response.data or []:
            urls.extend(row.get("images") or [])
        return urls
