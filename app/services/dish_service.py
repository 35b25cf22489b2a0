"""Dish registration and per-profile dish ratings."""

import re
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.dish import Dish, DishHistory
from app.models.profile import Profile
from app.services.ai_service import extract_json_payload
from app.services.exceptions import NotFoundError
from app.services.reference_data_service import get_or_create_by_name, is_blank


MIN_RATING = 1
MAX_RATING = 5

_NAME_SEPARATOR_RE = re.compile(r"[-:]")


def validate_rating(rating: Optional[int]) -> None:
    """Raise ValueError unless rating is an int in [1, 5]."""
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


def _parse_menu_line(line: str) -> tuple[str, str]:
    """Split "Dish name - description" (or "name: description") into its parts."""
    name = _NAME_SEPARATOR_RE.split(line, maxsplit=1)[0].strip()
    description = line[len(name):].strip() if len(line) > len(name) else ""
    description = description.lstrip("-: \t").strip()
    return name, description


class DishService:
    """Service for dish-related operations."""

    @staticmethod
    def get_dish(db: Session, dish_id: int) -> Optional[Dish]:
        return db.query(Dish).filter(Dish.id == dish_id).first()

    @staticmethod
    def get_dish_by_name(db: Session, name: str) -> Optional[Dish]:
        return db.query(Dish).filter(Dish.name == name).first()

    @staticmethod
    def create_dish(
        db: Session, name: str, description: Optional[str] = None
    ) -> Dish:
        """
        Create a dish.

        Raises:
            ValueError: Blank name, or a dish with this exact name exists
        """
        if is_blank(name):
            raise ValueError("Dish name is required")
        if DishService.get_dish_by_name(db, name):
            raise ValueError(f"Dish with name '{name}' already exists")

        dish = Dish(name=name, description=description)
        db.add(dish)
        db.commit()
        db.refresh(dish)
        return dish

    @staticmethod
    def get_or_create_dish(
        db: Session, name: str, description: Optional[str] = None
    ) -> Dish:
        """Find a dish by exact name, creating it (not committed) if missing."""
        return get_or_create_by_name(db, Dish, name, description=description or None)

    @staticmethod
    def process_dishes_from_menu(db: Session, menu: dict | str) -> List[Dish]:
        """
        Register every dish named in a menu and return them in menu order.

        A menu document (item -> price) contributes its keys. Free text
        contributes one dish per non-blank line, named by the text before
        the first "-" or ":".
        """
        if isinstance(menu, str):
            try:
                parsed = extract_json_payload(menu)
            except ValueError:
                parsed = None
            if isinstance(parsed, dict):
                menu = parsed

        entries: list[tuple[str, str]] = []
        if isinstance(menu, dict):
            entries = [(str(name), "") for name in menu if name != "error"]
        else:
            entries = [
                _parse_menu_line(line) for line in menu.splitlines() if line.strip()
            ]

        dishes: List[Dish] = []
        seen: set[str] = set()
        for name, description in entries:
            name = name.strip()[:255]
            if not name or name in seen:
                continue
            seen.add(name)
            dishes.append(DishService.get_or_create_dish(db, name, description))

        db.commit()
        return dishes

    @staticmethod
    def rate_dish(
        db: Session, profile: Profile, dish_id: int, rating: int
    ) -> DishHistory:
        """
        Record a 1-5 rating, updating the existing (profile, dish) row if any.

        Raises:
            ValueError: Rating outside [1, 5] (checked before any query)
            NotFoundError: Dish does not exist
        """
        validate_rating(rating)

        dish = DishService.get_dish(db, dish_id)
        if not dish:
            raise NotFoundError(f"Dish not found with ID: {dish_id}")

        entry = (
            db.query(DishHistory)
            .filter(DishHistory.profile_id == profile.id, DishHistory.dish_id == dish.id)
            .first()
        )
        if entry:
            entry.user_rating = rating
        else:
            entry = DishHistory(profile_id=profile.id, dish_id=dish.id, user_rating=rating)
            db.add(entry)

        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def get_dish_history(db: Session, profile: Profile) -> List[DishHistory]:
        """A profile's dish history, most recent first, with dishes loaded."""
        return (
            db.query(DishHistory)
            .options(joinedload(DishHistory.dish))
            .filter(DishHistory.profile_id == profile.id)
            .order_by(DishHistory.created_at.desc(), DishHistory.id.desc())
            .all()
        )


# Singleton instance
dish_service = DishService()
