"""
Business logic for profile preferences.

Write path (reconciliation): each process_* method makes a profile's rows
for one category exactly match an incoming collection. Existing rows are
deleted, then one row is inserted per incoming item, creating missing
reference entities by exact name. Delete and reinsert commit together, so
a category is never left half-written. Reference entities are never deleted.

Read path (aggregation): get_user_preferences fans out over the five
categories and assembles one PreferenceDocument.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from app.models.allergy import Allergy, ProfileAllergy
from app.models.constraint_type import ConstraintType, ProfileConstraint
from app.models.dish import Dish, DishHistory
from app.models.flavor import (
    Flavor,
    ProfileFlavorPreference,
    MIN_PREFERENCE_LEVEL,
    MAX_PREFERENCE_LEVEL,
)
from app.models.profile import Profile
from app.models.special_preference import SpecialPreference
from app.services.exceptions import NotFoundError
from app.services.preference_schemas import PreferenceDocument
from app.services.profile_service import ProfileService
from app.services.reference_data_service import (
    check_name_length,
    get_or_create_by_name,
    is_blank,
)


logger = logging.getLogger(__name__)

# Rating given to every dish resubmitted through the specific-dishes list
DEFAULT_SPECIFIC_DISH_RATING = 3


def _is_valid_level(level) -> bool:
    return (
        isinstance(level, int)
        and not isinstance(level, bool)
        and MIN_PREFERENCE_LEVEL <= level <= MAX_PREFERENCE_LEVEL
    )


def _delete_rows(db: Session, query) -> None:
    for row in query.all():
        db.delete(row)
    db.flush()


class PreferenceService:
    """Service for reconciling and aggregating profile preferences."""

    # =========================================================================
    # Reconciliation (write path)
    # =========================================================================

    @staticmethod
    def process_allergies(
        db: Session, profile: Profile, names: Optional[Iterable[str]]
    ) -> None:
        """Replace the profile's allergies with `names`. Blank names are skipped."""
        try:
            _delete_rows(
                db, db.query(ProfileAllergy).filter(ProfileAllergy.profile_id == profile.id)
            )

            linked: set[int] = set()
            for name in names or []:
                if is_blank(name):
                    continue
                allergy = get_or_create_by_name(db, Allergy, name)
                if allergy.id in linked:
                    continue
                db.add(ProfileAllergy(profile_id=profile.id, allergy_id=allergy.id))
                linked.add(allergy.id)

            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def process_constraints(
        db: Session, profile: Profile, names: Optional[Iterable[str]]
    ) -> None:
        """Replace the profile's dietary constraints with `names`. Blank names are skipped."""
        try:
            _delete_rows(
                db,
                db.query(ProfileConstraint).filter(
                    ProfileConstraint.profile_id == profile.id
                ),
            )

            linked: set[int] = set()
            for name in names or []:
                if is_blank(name):
                    continue
                constraint_type = get_or_create_by_name(db, ConstraintType, name)
                if constraint_type.id in linked:
                    continue
                db.add(
                    ProfileConstraint(
                        profile_id=profile.id, constraint_type_id=constraint_type.id
                    )
                )
                linked.add(constraint_type.id)

            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def process_flavor_preferences(
        db: Session, profile: Profile, levels: Optional[Mapping[str, int]]
    ) -> None:
        """
        Replace the profile's flavor preferences with `levels` (name -> 1-10).

        Entries outside [1, 10] are skipped with a warning and the rest are
        still written. set_flavor_preference raises instead.
        """
        try:
            _delete_rows(
                db,
                db.query(ProfileFlavorPreference).filter(
                    ProfileFlavorPreference.profile_id == profile.id
                ),
            )

            linked: set[int] = set()
            for name, level in (levels or {}).items():
                if is_blank(name):
                    continue
                if not _is_valid_level(level):
                    logger.warning(
                        "Invalid flavor rating for %s: %s. Must be between %d and %d.",
                        name,
                        level,
                        MIN_PREFERENCE_LEVEL,
                        MAX_PREFERENCE_LEVEL,
                    )
                    continue

                flavor = get_or_create_by_name(db, Flavor, name)
                if flavor.id in linked:
                    continue
                db.add(
                    ProfileFlavorPreference(
                        profile_id=profile.id,
                        flavor_id=flavor.id,
                        preference_level=level,
                    )
                )
                linked.add(flavor.id)

            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def process_special_preferences(
        db: Session, profile: Profile, descriptions: Optional[Iterable[str]]
    ) -> None:
        """Replace the profile's free-text notes. Blank notes are skipped, duplicates kept."""
        try:
            _delete_rows(
                db,
                db.query(SpecialPreference).filter(
                    SpecialPreference.profile_id == profile.id
                ),
            )

            for description in descriptions or []:
                if is_blank(description):
                    continue
                db.add(SpecialPreference(profile_id=profile.id, description=description))

            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def process_specific_dishes(
        db: Session, profile: Profile, names: Optional[Iterable[str]]
    ) -> None:
        """
        Replace the profile's whole dish history with `names`.

        Every listed dish gets DEFAULT_SPECIFIC_DISH_RATING regardless of any
        earlier rating; unlisted dishes lose their history rows.
        """
        try:
            _delete_rows(
                db, db.query(DishHistory).filter(DishHistory.profile_id == profile.id)
            )

            linked: set[int] = set()
            for name in names or []:
                if is_blank(name):
                    continue
                dish = get_or_create_by_name(db, Dish, name)
                if dish.id in linked:
                    continue
                db.add(
                    DishHistory(
                        profile_id=profile.id,
                        dish_id=dish.id,
                        user_rating=DEFAULT_SPECIFIC_DISH_RATING,
                    )
                )
                linked.add(dish.id)

            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def set_user_preferences(
        db: Session, email: str, document: PreferenceDocument
    ) -> Profile:
        """
        Reconcile every category present in `document` for the user's profile.

        The profile is created on first write. Categories the caller did not
        send are left untouched; an explicitly empty list clears a category.

        Raises:
            ValueError: A name is longer than the reference name column
            NotFoundError: No AppUser with this email
        """
        user = ProfileService.get_app_user_by_email(db, email)
        if not user:
            raise NotFoundError(f"User not found with email: {email}")

        provided = document.model_fields_set

        # Reject overlong names before any category is rewritten
        names = []
        for field in ("allergies", "dietary_constraints", "specific_dishes"):
            if field in provided:
                names.extend(getattr(document, field))
        if "flavor_preferences" in provided:
            names.extend(document.flavor_preferences)
        for name in names:
            if not is_blank(name):
                check_name_length(name)

        profile = ProfileService.get_or_create_profile(db, user)
        db.commit()

        if "allergies" in provided:
            PreferenceService.process_allergies(db, profile, document.allergies)
        if "dietary_constraints" in provided:
            PreferenceService.process_constraints(
                db, profile, document.dietary_constraints
            )
        if "flavor_preferences" in provided:
            PreferenceService.process_flavor_preferences(
                db, profile, document.flavor_preferences
            )
        if "special_preferences" in provided:
            PreferenceService.process_special_preferences(
                db, profile, document.special_preferences
            )
        if "specific_dishes" in provided:
            PreferenceService.process_specific_dishes(
                db, profile, document.specific_dishes
            )

        logger.info(
            "Updated preferences for profile %d: %s", profile.id, sorted(provided)
        )
        return profile

    @staticmethod
    def set_flavor_preference(
        db: Session, profile_id: int, flavor_id: int, preference_level: int
    ) -> ProfileFlavorPreference:
        """
        Set one flavor preference, updating the existing row if any.

        Raises:
            ValueError: Level outside [1, 10] (checked before any query)
            NotFoundError: Profile or flavor does not exist
        """
        if not _is_valid_level(preference_level):
            raise ValueError(
                f"Preference level must be between {MIN_PREFERENCE_LEVEL} and {MAX_PREFERENCE_LEVEL}"
            )

        profile = ProfileService.get_profile(db, profile_id)
        if not profile:
            raise NotFoundError(f"Profile not found with ID: {profile_id}")

        flavor = db.query(Flavor).filter(Flavor.id == flavor_id).first()
        if not flavor:
            raise NotFoundError(f"Flavor not found with ID: {flavor_id}")

        preference = (
            db.query(ProfileFlavorPreference)
            .filter(
                ProfileFlavorPreference.profile_id == profile.id,
                ProfileFlavorPreference.flavor_id == flavor.id,
            )
            .first()
        )
        if preference:
            preference.preference_level = preference_level
        else:
            preference = ProfileFlavorPreference(
                profile_id=profile.id,
                flavor_id=flavor.id,
                preference_level=preference_level,
            )
            db.add(preference)

        db.commit()
        db.refresh(preference)
        return preference

    # =========================================================================
    # Aggregation (read path)
    # =========================================================================

    @staticmethod
    def get_user_preferences(db: Session, email: str) -> PreferenceDocument:
        """
        Collect the user's current preferences into one document.

        Returns an empty document when the user has no profile. specificDishes
        is always empty: dish history is not part of the aggregated document.
        """
        profile = ProfileService.get_profile_by_email(db, email)
        if not profile:
            return PreferenceDocument()

        allergies = [
            name
            for (name,) in db.query(Allergy.name)
            .join(ProfileAllergy, ProfileAllergy.allergy_id == Allergy.id)
            .filter(ProfileAllergy.profile_id == profile.id)
            .order_by(Allergy.name)
        ]
        constraints = [
            name
            for (name,) in db.query(ConstraintType.name)
            .join(
                ProfileConstraint,
                ProfileConstraint.constraint_type_id == ConstraintType.id,
            )
            .filter(ProfileConstraint.profile_id == profile.id)
            .order_by(ConstraintType.name)
        ]
        flavors = {
            name: level
            for name, level in db.query(Flavor.name, ProfileFlavorPreference.preference_level)
            .join(ProfileFlavorPreference, ProfileFlavorPreference.flavor_id == Flavor.id)
            .filter(ProfileFlavorPreference.profile_id == profile.id)
            .order_by(Flavor.name)
        }
        special = [
            description
            for (description,) in db.query(SpecialPreference.description)
            .filter(SpecialPreference.profile_id == profile.id)
            .order_by(SpecialPreference.created_at, SpecialPreference.id)
        ]

        return PreferenceDocument(
            allergies=allergies,
            dietary_constraints=constraints,
            flavor_preferences=flavors,
            specific_dishes=[],
            special_preferences=special,
        )

    @staticmethod
    def get_dish_history_for_recommendation(
        db: Session, profile: Profile
    ) -> Dict[str, int]:
        """Map of dish name -> the profile's 1-5 rating."""
        rows: List[tuple] = (
            db.query(Dish.name, DishHistory.user_rating)
            .join(DishHistory, DishHistory.dish_id == Dish.id)
            .filter(DishHistory.profile_id == profile.id)
            .all()
        )
        return {name: rating for name, rating in rows}


# Singleton instance
preference_service = PreferenceService()
