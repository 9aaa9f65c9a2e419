# =============================================================================
# core/services/image_storage.py - Menu Image Storage (Supabase Storage)
# =============================================================================
# Uploads and deletes menu images in the menu-images bucket.
#
# Uploads run one file at a time so the list of already-uploaded URLs is always
# exact; if anything fails part-way, that list is what gets cleaned up.
# Deletion is best-effort everywhere: failures are logged, never raised, so
# cleanup can never mask the error that triggered it.
# =============================================================================

import logging
import time
import uuid
from typing import Iterable, Sequence
from urllib.parse import unquote, urlparse

from supabase import Client

from app.exceptions import BadRequestError, InternalError
from core.models.menu import MAX_MENU_IMAGES, ImageUpload

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024


class ImageStorage:
    """
    Service for menu image uploads.

    Public URLs returned by upload_image() are what the menu rows store;
    delete_image() maps them back to object paths.
    """

    def __init__(
        self,
        client: Client,
        bucket: str,
        max_images: int = MAX_MENU_IMAGES,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    ):
        self.client = client
        self.bucket = bucket
        self.max_images = max_images
        self.max_image_bytes = max_image_bytes

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, images: Sequence[ImageUpload]) -> None:
        """
        Reject the whole batch before anything is uploaded.

        Raises:
            BadRequestError: Too many files, a non-image file, or a file over the size limit
        """
        self.check_count(len(images))
        for image in images:
            self.check_file(image.filename, image.content_type, image.size)

    def check_count(self, count: int) -> None:
        if count > self.max_images:
            raise BadRequestError(f"Maximum {self.max_images} images allowed")

    def check_file(self, filename: str, content_type: str | None, size: int | None) -> None:
        """
        Per-file rules. `size` may be None when it isn't known yet
        (a multipart part not read into memory); the size rule is then skipped.
        """
        if not (content_type or "").lower().startswith("image/"):
            raise BadRequestError(
                "Only image files are allowed",
                details={"filename": filename, "content_type": content_type},
            )
        if size is not None and size > self.max_image_bytes:
            raise BadRequestError(
                f"Image too large: {filename}",
                details={"filename": filename, "max_bytes": self.max_image_bytes},
            )

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    @staticmethod
    def build_path(folder: str, filename: str) -> str:
        """
        {folder}/{epoch_millis}-{suffix}-{filename}

        The random suffix keeps keys unique when one batch carries several
        files with the same name.
        """
        timestamp = int(time.time() * 1000)
        suffix = uuid.uuid4().hex[:8]
        return f"{folder}/{timestamp}-{suffix}-{filename}"

    def upload_image(self, image: ImageUpload, folder: str = "menu") -> str:
        """
        Upload one image and return its public URL.

        Raises:
            InternalError: If the storage upload fails
        """
        path = self.build_path(folder, image.filename)
        bucket = self.client.storage.from_(self.bucket)

        try:
            bucket.upload(
                path=path,
                file=image.content,
                file_options={"content-type": image.content_type, "upsert": "false"},
            )
            public_url = bucket.get_public_url(path)
        except Exception as e:
            logger.error(f"Storage upload failed for {path}: {e}")
            raise InternalError("Failed to upload image", details={"path": path, "error": str(e)}) from e

        logger.info(f"Uploaded image to storage: {path}")
        return public_url

    def upload_all(self, images: Iterable[ImageUpload], folder: str = "menu") -> list[str]:
        """
        Upload images sequentially, in order.

        If one upload fails, the ones before it are deleted and the
        failure is re-raised.
        """
        urls: list[str] = []
        try:
            for image in images:
                urls.append(self.upload_image(image, folder))
        except Exception:
            self.delete_all(urls)
            raise
        return urls

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def object_path(self, image_url: str) -> str | None:
        """
        Object path of a public URL inside our bucket.

        `.../storage/v1/object/public/menu-images/menu/1700-a.png` -> `menu/1700-a.png`.
        Returns None when the bucket segment is absent.
        """
        segments = unquote(urlparse(image_url).path).split("/")
        try:
            index = segments.index(self.bucket)
        except ValueError:
            return None

        path = "/".join(segments[index + 1:])
        return path or None

    def delete_image(self, image_url: str) -> None:
        """Best-effort delete; never raises."""
        try:
            path = self.object_path(image_url)
            if path is None:
                return
            self.client.storage.from_(self.bucket).remove([path])
            logger.info(f"Deleted image from storage: {path}")
        except Exception as e:
            logger.error(f"Failed to delete image {image_url}: {e}")

    def delete_all(self, image_urls: Iterable[str]) -> None:
        for url in image_urls:
            self.delete_image(url)
