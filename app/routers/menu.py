# =============================================================================
# app/routers/menu.py - Menu Endpoints (multipart)
# =============================================================================
# Menus are written as multipart forms: a `menu` text field plus up to three
# `images` file parts. The part count, content types and declared sizes are
# checked before any part is read into memory; MenuService validates the read
# batch again before anything is uploaded.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile

from app.auth import AuthUser, get_current_user
from app.dependencies import ImageStorageDep, MenuServiceDep
from app.responses import created, no_content, success
from core.models.menu import ImageUpload, MenuCreateForm, MenuUpdateForm
from core.services.image_storage import ImageStorage
from core.validation import validate_input

logger = logging.getLogger(__name__)

router = APIRouter()

BusinessIdPath = Annotated[UUID, Path(description="Business UUID")]
MenuIdPath = Annotated[UUID, Path(description="Menu UUID")]
ImagesField = Annotated[list[UploadFile] | None, File(description="Up to 3 image files")]
MenuField = Annotated[str | None, Form(description="Menu text")]


async def _read_images(
    files: list[UploadFile] | None,
    storage: ImageStorage,
) -> list[ImageUpload]:
    """
    Read the image parts into memory.

    Count, content type and declared size are checked before any part is read.
    """
    files = files or []
    storage.check_count(len(files))
    for upload in files:
        storage.check_file(upload.filename or "image", upload.content_type, upload.size)

    images = []
    for upload in files:
        images.append(ImageUpload(
            filename=upload.filename or "image",
            content_type=upload.content_type or "",
            content=await upload.read(),
        ))
    return images


@router.post("/{business_id}/menu")
async def create_menu(
    business_id: BusinessIdPath,
    menus: MenuServiceDep,
    storage: ImageStorageDep,
    user: AuthUser = Depends(get_current_user),
    menu: MenuField = None,
    images: ImagesField = None,
):
    """
    Create a menu with its images.

    Images are uploaded first; if the menu row can't be written they are
    deleted again.
    """
    form = validate_input(MenuCreateForm, {"menu": menu}, "body")
    uploads = await _read_images(images, storage)

    result = menus.create_menu(business_id, user.id, form, uploads)
    return created(result.model_dump(mode="json"))


@router.get("/{business_id}/menu")
async def list_menus(
    business_id: BusinessIdPath,
    menus: MenuServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    items = menus.list_menus(business_id, user.id)
    return success([m.model_dump(mode="json") for m in items])


@router.get("/{business_id}/menu/{menu_id}")
async def get_menu(
    business_id: BusinessIdPath,
    menu_id: MenuIdPath,
    menus: MenuServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    result = menus.get_menu(menu_id, business_id, user.id)
    return success(result.model_dump(mode="json"))


@router.post("/{business_id}/menu/{menu_id}")
async def update_menu(
    business_id: BusinessIdPath,
    menu_id: MenuIdPath,
    menus: MenuServiceDep,
    storage: ImageStorageDep,
    user: AuthUser = Depends(get_current_user),
    menu: MenuField = None,
    images: ImagesField = None,
):
    """
    Update menu text and/or replace the images.

    Sending images replaces the whole set; the old files are deleted once the
    menu points at the new ones.
    """
    form = validate_input(MenuUpdateForm, {"menu": menu or None}, "body")
    uploads = await _read_images(images, storage)

    result = menus.update_menu(
        menu_id,
        business_id,
        user.id,
        form,
        uploads,
        purge_old_images=bool(uploads),
    )
    return success(result.model_dump(mode="json"))


@router.delete("/{business_id}/menu/{menu_id}")
async def delete_menu(
    business_id: BusinessIdPath,
    menu_id: MenuIdPath,
    menus: MenuServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    menus.delete_menu(menu_id, business_id, user.id)
    return no_content()
