# =============================================================================
# core/services/menu_service.py - Menu Business Logic
# =============================================================================
# Menus hang off a business, so every operation first resolves the business
# scoped to the caller (a foreign business is NOT_FOUND), then scopes the menu
# query by that business id.
#
# Writes that carry images follow one rule: new images are uploaded first, and
# if the row write then fails every new upload is deleted before the original
# error propagates. Old images are only removed after the row points at the
# new ones.
# =============================================================================

import logging
from typing import Sequence
from uuid import UUID

from supabase import Client

from app.exceptions import BadRequestError, InternalError, NotFoundError
from core.models.menu import ImageUpload, Menu, MenuCreateForm, MenuUpdateForm
from core.services.business_service import BusinessService, utc_now_iso
from core.services.image_storage import ImageStorage
from lib.supabase_client import MENU_TABLE, translate_store_error

logger = logging.getLogger(__name__)

MENU_NOT_FOUND = "Menu not found"


class MenuService:
    """
    Service for menu operations, including image upload orchestration.
    """

    def __init__(
        self,
        client: Client,
        businesses: BusinessService,
        images: ImageStorage,
    ):
        self.client = client
        self.businesses = businesses
        self.images = images

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_menu(
        self,
        business_id: UUID | str,
        owner_id: UUID | str,
        form: MenuCreateForm,
        images: Sequence[ImageUpload],
    ) -> Menu:
        """
        Upload the images, then insert the menu row.

        Raises:
            NotFoundError: If the caller doesn't own the business
            BadRequestError: No images, too many images, or a non-image file
            InternalError: If an upload or the insert fails (uploads are rolled back)
        """
        self.businesses.get_business(business_id, owner_id)

        if not images:
            raise BadRequestError("At least one image is required")
        self.images.validate(images)

        image_urls = self.images.upload_all(images)

        try:
            response = (
                self.client.table(MENU_TABLE)
                .insert({
                    "business_id": str(business_id),
                    "menu": form.menu,
                    "images": image_urls,
                })
                .execute()
            )
            if not response.data:
                raise InternalError("Failed to create menu")
        except Exception as e:
            logger.warning(f"Menu insert failed, removing {len(image_urls)} uploaded images")
            self.images.delete_all(image_urls)
            raise translate_store_error(e, "Failed to create menu") from e

        menu = Menu.model_validate(response.data[0])
        logger.info(f"Created menu: {menu.id} for business: {business_id}")
        return menu

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def list_menus(self, business_id: UUID | str, owner_id: UUID | str) -> list[Menu]:
        """Menus of a caller-owned business, newest first."""
        self.businesses.get_business(business_id, owner_id)

        try:
            response = (
                self.client.table(MENU_TABLE)
                .select("*")
                .eq("business_id", str(business_id))
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to fetch menus") from e

        return [Menu.model_validate(row) for row in response.data or []]

    def get_menu(
        self,
        menu_id: UUID | str,
        business_id: UUID | str,
        owner_id: UUID | str,
    ) -> Menu:
        """
        Get a menu scoped to a caller-owned business.

        Raises:
            NotFoundError: If the business or the menu is not the caller's
        """
        self.businesses.get_business(business_id, owner_id)
        return self._get_scoped(menu_id, business_id)

    def _get_scoped(self, menu_id: UUID | str, business_id: UUID | str) -> Menu:
        try:
            response = (
                self.client.table(MENU_TABLE)
                .select("*")
                .eq("id", str(menu_id))
                .eq("business_id", str(business_id))
                .single()
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to fetch menu", not_found=MENU_NOT_FOUND) from e

        if not response.data:
            raise NotFoundError(MENU_NOT_FOUND)
        return Menu.model_validate(response.data)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def update_menu(
        self,
        menu_id: UUID | str,
        business_id: UUID | str,
        owner_id: UUID | str,
        form: MenuUpdateForm,
        images: Sequence[ImageUpload] = (),
        purge_old_images: bool = False,
    ) -> Menu:
        """
        Update menu text and/or replace its images.

        Args:
            purge_old_images: Delete the previous images once the row points at
                the new ones. Ignored when no new images are supplied.

        Raises:
            NotFoundError: If the business or the menu is not the caller's
            BadRequestError: Nothing to update, or the images are rejected
        """
        existing = self.get_menu(menu_id, business_id, owner_id)

        if images:
            self.images.validate(images)

        changes: dict = {}
        if form.menu is not None:
            changes["menu"] = form.menu
        if not changes and not images:
            raise BadRequestError("No updates provided")

        new_urls: list[str] = []
        if images:
            new_urls = self.images.upload_all(images)
            changes["images"] = new_urls
        changes["updated_at"] = utc_now_iso()

        try:
            response = (
                self.client.table(MENU_TABLE)
                .update(changes)
                .eq("id", str(menu_id))
                .eq("business_id", str(business_id))
                .execute()
            )
            if not response.data:
                raise NotFoundError(MENU_NOT_FOUND)
        except Exception as e:
            if new_urls:
                logger.warning(f"Menu update failed, removing {len(new_urls)} uploaded images")
                self.images.delete_all(new_urls)
            raise translate_store_error(e, "Failed to update menu", not_found=MENU_NOT_FOUND) from e

        if purge_old_images and new_urls:
            self.images.delete_all(url for url in existing.images if url not in new_urls)

        logger.info(f"Updated menu: {menu_id}")
        return Menu.model_validate(response.data[0])

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete_menu(
        self,
        menu_id: UUID | str,
        business_id: UUID | str,
        owner_id: UUID | str,
    ) -> None:
        """Delete the menu row, then its stored images (best-effort)."""
        menu = self.get_menu(menu_id, business_id, owner_id)

        try:
            (
                self.client.table(MENU_TABLE)
                .delete()
                .eq("id", str(menu_id))
                .eq("business_id", str(business_id))
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to delete menu", not_found=MENU_NOT_FOUND) from e

        self.images.delete_all(menu.images)
        logger.info(f"Deleted menu: {menu_id}")
