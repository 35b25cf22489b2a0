"""
Recommendation orchestration.

Ties menu extraction, preference aggregation and dish classification
together for authenticated and guest callers, and records dish ratings.

Guests supply their own preference document; nothing is looked up or
persisted for them.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.user import AppUser
from app.services.ai_service import AIService
from app.services.dish_service import DishService, validate_rating
from app.services.exceptions import AuthenticationRequiredError
from app.services.preference_schemas import (
    ClassificationPreferences,
    PreferenceDocument,
)
from app.services.preference_service import PreferenceService
from app.services.profile_service import ProfileService
from app.services.reference_data_service import ReferenceDataService, is_blank


logger = logging.getLogger(__name__)


class RecommendationService:
    """Service for generating menu recommendations and recording ratings."""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    def _resolve_preferences(
        self,
        db: Session,
        user: Optional[AppUser],
        guest_preferences: Optional[PreferenceDocument],
    ) -> ClassificationPreferences:
        if user is not None:
            document = PreferenceService.get_user_preferences(db, user.email)
        else:
            document = guest_preferences or PreferenceDocument()
        return document.to_classification_preferences()

    async def generate_recommendations(
        self,
        db: Session,
        menu_text: str | dict | None,
        user: Optional[AppUser] = None,
        guest_preferences: Optional[PreferenceDocument] = None,
    ) -> dict:
        """
        Classify a menu against the caller's preferences.

        Args:
            db: Database session
            menu_text: Raw menu text, or an extracted menu document
            user: Authenticated user, or None for a guest
            guest_preferences: Preferences supplied by a guest caller.
                Ignored for authenticated users.

        Returns:
            {"classification": {...}, "dishes": [...]}. The classification
            may be a structured error document. "dishes" lists the menu's
            registered dishes for authenticated users and is empty for guests.

        Raises:
            ValueError: Menu text is missing or blank
        """
        if menu_text is None or (isinstance(menu_text, str) and is_blank(menu_text)):
            raise ValueError("Menu text is required")

        preferences = self._resolve_preferences(db, user, guest_preferences)
        classification = await self.ai_service.classify_dishes(menu_text, preferences)

        dishes = []
        if user is not None:
            registered = DishService.process_dishes_from_menu(db, menu_text)
            dishes = [{"id": dish.id, "name": dish.name} for dish in registered]
        else:
            logger.debug("Guest recommendation request, skipping persistence")

        if "error" in classification:
            logger.warning("Classification returned error: %s", classification["error"])

        return {"classification": classification, "dishes": dishes}

    async def extract_menu(
        self,
        db: Session,
        image_bytes: bytes,
        media_type: str,
        user: Optional[AppUser] = None,
    ) -> dict:
        """
        Extract menu items from an image without classifying them.

        Dishes are registered for authenticated users so they can be rated.
        """
        menu_items = await self.ai_service.extract_menu_items(image_bytes, media_type)

        dishes = []
        if user is not None and "error" not in menu_items:
            registered = DishService.process_dishes_from_menu(db, menu_items)
            dishes = [{"id": dish.id, "name": dish.name} for dish in registered]

        return {"menuItems": menu_items, "dishes": dishes}

    async def process_menu_image_and_recommend(
        self,
        db: Session,
        image_bytes: bytes,
        media_type: str,
        user: Optional[AppUser] = None,
        guest_preferences: Optional[PreferenceDocument] = None,
    ) -> dict:
        """
        Extract a menu from an image, then generate recommendations from it.

        An extraction error document is returned as "menuItems" and
        classification is skipped.
        """
        menu_items = await self.ai_service.extract_menu_items(image_bytes, media_type)
        if "error" in menu_items:
            return {"menuItems": menu_items, "classification": None, "dishes": []}

        recommendations = await self.generate_recommendations(
            db, menu_items, user=user, guest_preferences=guest_preferences
        )
        return {"menuItems": menu_items, **recommendations}

    def save_recommendation_rating(
        self,
        db: Session,
        user: Optional[AppUser],
        dish_id: Optional[int],
        rating: Optional[int],
    ):
        """
        Record the user's 1-5 rating for a dish.

        Validation happens before any database access.

        Raises:
            ValueError: Rating outside [1, 5] or dish_id missing
            AuthenticationRequiredError: No authenticated user
            NotFoundError: Dish does not exist
        """
        validate_rating(rating)
        if dish_id is None:
            raise ValueError("Dish ID is required")
        if user is None:
            raise AuthenticationRequiredError("Authentication required")

        profile = ProfileService.get_or_create_profile(db, user)
        entry = DishService.rate_dish(db, profile, dish_id, rating)
        logger.info(
            "Saved rating %d for dish %d (profile %d)", rating, dish_id, profile.id
        )
        return entry

    def get_user_dish_history(self, db: Session, user: Optional[AppUser]) -> List[dict]:
        """The user's rated dishes, most recent first. Empty without a profile."""
        if user is None:
            raise AuthenticationRequiredError("Authentication required")

        profile = ProfileService.get_profile_by_email(db, user.email)
        if not profile:
            return []

        return [
            {
                "dishId": entry.dish_id,
                "dishName": entry.dish.name,
                "rating": entry.user_rating,
                "createdAt": entry.created_at.isoformat() if entry.created_at else None,
            }
            for entry in DishService.get_dish_history(db, profile)
        ]

    # =========================================================================
    # Reference vocabularies for pickers
    # =========================================================================

    def get_common_allergies(self, db: Session) -> List[dict]:
        return [
            {"id": a.id, "name": a.name, "description": a.description}
            for a in ReferenceDataService.list_allergies(db)
        ]

    def get_common_flavors(self, db: Session) -> List[dict]:
        return [
            {"id": f.id, "name": f.name, "description": f.description}
            for f in ReferenceDataService.list_flavors(db)
        ]

    def get_common_dietary_constraints(self, db: Session) -> List[dict]:
        return [
            {"id": c.id, "name": c.name}
            for c in ReferenceDataService.get_common_dietary_constraints(db)
        ]


# Singleton instance
recommendation_service = RecommendationService(AIService())
