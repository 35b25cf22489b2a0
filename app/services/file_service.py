"""File handling service for menu image uploads."""
import logging
from io import BytesIO

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.config import settings


logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp"]

# Pillow format name -> MIME type sent to the vision model
_FORMAT_MEDIA_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}


class FileService:
    """Service for validating and preparing uploaded images."""

    def __init__(self, max_width: int = settings.menu_image_max_width):
        self.max_width = max_width

    async def prepare_menu_image(self, file: UploadFile) -> tuple[bytes, str]:
        """
        Read an uploaded menu image and shrink it for the vision model.

        Args:
            file: Uploaded file from FastAPI

        Returns:
            (image bytes, media type)

        Raises:
            ValueError: If file type is invalid or the file is empty
        """
        if file.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValueError(
                f"Invalid file type: {file.content_type}. Allowed: {ALLOWED_IMAGE_TYPES}"
            )

        contents = await file.read()
        if not contents:
            raise ValueError("Menu image is required")

        media_type = "image/jpeg" if file.content_type == "image/jpg" else file.content_type
        return self._optimize_image(contents, media_type)

    def _optimize_image(self, contents: bytes, media_type: str) -> tuple[bytes, str]:
        """
        Downscale images wider than max_width, keeping the source format.

        Images that Pillow cannot read are passed through unchanged.
        """
        try:
            with Image.open(BytesIO(contents)) as img:
                if img.width <= self.max_width:
                    return contents, media_type

                image_format = img.format or "JPEG"

                # JPEG has no alpha channel
                if image_format == "JPEG" and img.mode in ("RGBA", "P"):
                    img = img.convert("RGB")

                ratio = self.max_width / img.width
                new_height = max(1, int(img.height * ratio))
                resized = img.resize((self.max_width, new_height), Image.Resampling.LANCZOS)

                output = BytesIO()
                if image_format == "JPEG":
                    resized.save(output, format=image_format, optimize=True, quality=85)
                else:
                    resized.save(output, format=image_format)

                return output.getvalue(), _FORMAT_MEDIA_TYPES.get(image_format, media_type)

        except (UnidentifiedImageError, OSError) as e:
            logger.warning("Could not optimize menu image: %s", e)
            return contents, media_type


# Singleton instance
file_service = FileService()
