"""API endpoints for profile preferences."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import AppUser
from app.services.auth.dependencies import get_current_user
from app.services.exceptions import NotFoundError
from app.services.preference_schemas import PreferenceDocument
from app.services.preference_service import preference_service
from app.services.profile_service import profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


# =============================================================================
# Request Models
# =============================================================================

class FlavorPreferenceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    preference_level: Optional[int] = Field(None, alias="preferenceLevel")


# =============================================================================
# Endpoints
# =============================================================================

@router.get("")
async def get_profile(user: AppUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current user's identity and profile id (None until preferences are first saved)."""
    profile = profile_service.get_profile_by_email(db, user.email)
    return {
        "email": user.email,
        "name": user.name,
        "profileId": profile.id if profile else None,
    }


@router.get("/preferences")
async def get_preferences(user: AppUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Get the user's aggregated preferences.

    Returns: {"allergies": [...], "dietaryConstraints": [...],
              "flavorPreferences": {...}, "specificDishes": [],
              "specialPreferences": [...]}
    """
    try:
        return preference_service.get_user_preferences(db, user.email).to_response()
    except Exception as e:
        logger.exception("Failed to get preferences for %s", user.email)
        raise HTTPException(status_code=500, detail=f"Failed to get preferences: {e}")


@router.post("/preferences")
async def set_preferences(
    document: PreferenceDocument,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Replace each preference category present in the body.

    Categories left out of the body are not touched; an empty list clears one.
    """
    try:
        preference_service.set_user_preferences(db, user.email, document)
        preferences = preference_service.get_user_preferences(db, user.email)
        return {
            "success": True,
            "message": "Preferences updated successfully",
            "preferences": preferences.to_response(),
        }
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to set preferences for %s", user.email)
        raise HTTPException(status_code=500, detail=f"Failed to set preferences: {e}")


@router.put("/preferences/flavors/{flavor_id}")
async def set_flavor_preference(
    flavor_id: int,
    request: FlavorPreferenceRequest,
    user: AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set a single flavor preference (1-10). Out-of-range levels are rejected."""
    try:
        if request.preference_level is None:
            raise ValueError("Preference level is required")

        profile = profile_service.get_or_create_profile(db, user)
        preference = preference_service.set_flavor_preference(
            db, profile.id, flavor_id, request.preference_level
        )
        return {
            "flavorId": preference.flavor_id,
            "preferenceLevel": preference.preference_level,
        }
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to set flavor preference %d", flavor_id)
        raise HTTPException(status_code=500, detail=f"Failed to set flavor preference: {e}")
