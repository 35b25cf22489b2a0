"""API endpoints for menu image extraction and classification."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import AppUser
from app.services.auth.dependencies import get_optional_user
from app.services.file_service import file_service
from app.services.preference_schemas import (
    ClassificationPreferences,
    PreferenceDocument,
)
from app.services.recommendation_service import recommendation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menu", tags=["menu"])


# =============================================================================
# Request Models
# =============================================================================

class ClassifyRequest(BaseModel):
    menu: Optional[dict | str] = None
    preferences: Optional[ClassificationPreferences] = None


def _parse_guest_preferences(raw: Optional[str]) -> Optional[PreferenceDocument]:
    """Parse the JSON-encoded preferences form field sent with an upload."""
    if not raw:
        return None
    try:
        return PreferenceDocument.model_validate_json(raw)
    except ValidationError:
        raise ValueError("Invalid preferences")


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/upload")
async def upload_menu(
    file: UploadFile = File(...),
    user: Optional[AppUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Extract menu items and prices from a menu photo.

    Extraction failures come back as {"menuItems": {"error": "..."}}
    with status 200.
    """
    try:
        image_bytes, media_type = await file_service.prepare_menu_image(file)
        return await recommendation_service.extract_menu(db, image_bytes, media_type, user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to process menu upload")
        raise HTTPException(status_code=500, detail=f"Failed to process menu: {e}")


@router.post("/upload-and-recommend")
async def upload_and_recommend(
    file: UploadFile = File(...),
    preferences: Optional[str] = Form(None),
    user: Optional[AppUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Extract a menu from a photo and classify it against the caller's preferences.

    Guests may send a JSON preference document in the "preferences" form field.
    """
    try:
        guest_preferences = None if user else _parse_guest_preferences(preferences)
        image_bytes, media_type = await file_service.prepare_menu_image(file)
        return await recommendation_service.process_menu_image_and_recommend(
            db,
            image_bytes,
            media_type,
            user=user,
            guest_preferences=guest_preferences,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to process menu upload")
        raise HTTPException(status_code=500, detail=f"Failed to process menu: {e}")


@router.post("/classify")
async def classify_menu(request: ClassifyRequest):
    """
    Classify an already-extracted menu into green/orange/red tiers.

    Returns: {"<category>": {"green": [...], "orange": [...], "red": [...]}}
    or {"error": "..."}
    """
    if not request.menu:
        raise HTTPException(status_code=400, detail="Menu is required")

    try:
        return await recommendation_service.ai_service.classify_dishes(
            request.menu, request.preferences
        )
    except Exception as e:
        logger.exception("Failed to classify menu")
        raise HTTPException(status_code=500, detail=f"Failed to classify menu: {e}")
