"""API endpoints for recommendations, ratings and reference vocabularies."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import AppUser
from app.services.auth.dependencies import get_current_user, get_optional_user
from app.services.exceptions import AuthenticationRequiredError, NotFoundError
from app.services.preference_schemas import PreferenceDocument
from app.services.recommendation_service import recommendation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


# =============================================================================
# Request Models
# =============================================================================

class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    menu_text: Optional[str] = Field(None, alias="menuText")
    # Only used for guests
    preferences: Optional[PreferenceDocument] = None


class RateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dish_id: Optional[int] = Field(None, alias="dishId")
    rating: Optional[int] = None


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/generate")
async def generate_recommendations(
    request: GenerateRequest,
    user: Optional[AppUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Classify menu text against stored preferences, or the supplied ones for guests.

    Returns: {"classification": {...}, "dishes": [{"id": 1, "name": "..."}]}
    """
    try:
        return await recommendation_service.generate_recommendations(
            db,
            request.menu_text,
            user=user,
            guest_preferences=request.preferences,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to generate recommendations")
        raise HTTPException(status_code=500, detail=f"Failed to generate recommendations: {e}")


@router.post("/rate")
async def rate_dish(
    request: RateRequest,
    user: Optional[AppUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Save the user's 1-5 rating for a recommended dish."""
    try:
        recommendation_service.save_recommendation_rating(
            db, user, request.dish_id, request.rating
        )
        return {"success": True, "message": "Rating saved successfully"}
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to save rating")
        raise HTTPException(status_code=500, detail=f"Failed to save rating: {e}")


@router.get("/history")
async def get_dish_history(user: AppUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Rated dishes for the current user, most recent first."""
    try:
        return recommendation_service.get_user_dish_history(db, user)
    except Exception as e:
        logger.exception("Failed to get dish history")
        raise HTTPException(status_code=500, detail=f"Failed to get dish history: {e}")


@router.get("/allergies")
async def get_common_allergies(db: Session = Depends(get_db)):
    return recommendation_service.get_common_allergies(db)


@router.get("/flavors")
async def get_common_flavors(db: Session = Depends(get_db)):
    return recommendation_service.get_common_flavors(db)


@router.get("/constraints")
async def get_common_dietary_constraints(db: Session = Depends(get_db)):
    """Dietary constraint vocabulary; the default labels are seeded on first call."""
    return recommendation_service.get_common_dietary_constraints(db)
