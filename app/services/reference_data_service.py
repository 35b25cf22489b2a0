"""Allergy, flavor and dietary-constraint reference data."""

from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.models.allergy import Allergy
from app.models.flavor import Flavor
from app.models.constraint_type import ConstraintType
from app.services.preference_schemas import DEFAULT_FLAVOR_PROFILE


DEFAULT_DIETARY_CONSTRAINTS = [
    "Vegetarian",
    "Vegan",
    "Gluten-Free",
    "Dairy-Free",
    "Nut-Free",
    "Kosher",
    "Halal",
    "Low-Carb",
    "Keto",
    "Paleo",
]

DEFAULT_FLAVORS = [name.capitalize() for name in DEFAULT_FLAVOR_PROFILE]

# Width of the name column on every reference table
MAX_NAME_LENGTH = 255


def is_blank(name: Optional[str]) -> bool:
    return name is None or not name.strip()


def check_name_length(name: str) -> None:
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(
            f"Name must be at most {MAX_NAME_LENGTH} characters: '{name[:40]}...'"
        )


def get_or_create_by_name(db: Session, model, name: str, **fields):
    """
    Find a reference row by exact name, inserting it if missing.

    The insert runs in a savepoint so a concurrent insert of the same name
    only discards this row, not the caller's surrounding work.
    """
    check_name_length(name)
    instance = db.query(model).filter(model.name == name).first()
    if instance:
        return instance

    try:
        with db.begin_nested():
            instance = model(name=name, **fields)
            db.add(instance)
    except IntegrityError:
        # Race condition: another request created it, fetch theirs
        instance = db.query(model).filter(model.name == name).first()

    return instance


def _create_unique(db: Session, model, label: str, name: str, **fields):
    if is_blank(name):
        raise ValueError(f"{label} name is required")
    check_name_length(name)
    if db.query(model).filter(model.name == name).first():
        raise ValueError(f"{label} with name '{name}' already exists")

    instance = model(name=name, **fields)
    db.add(instance)
    db.commit()
    db.refresh(instance)
    return instance


class ReferenceDataService:
    """Service for global reference vocabularies shared across profiles."""

    # =========================================================================
    # Allergies
    # =========================================================================

    @staticmethod
    def get_allergy(db: Session, allergy_id: int) -> Optional[Allergy]:
        return db.query(Allergy).filter(Allergy.id == allergy_id).first()

    @staticmethod
    def get_allergy_by_name(db: Session, name: str) -> Optional[Allergy]:
        return db.query(Allergy).filter(Allergy.name == name).first()

    @staticmethod
    def list_allergies(db: Session) -> List[Allergy]:
        return db.query(Allergy).order_by(Allergy.name).all()

    @staticmethod
    def create_allergy(
        db: Session, name: str, description: Optional[str] = None
    ) -> Allergy:
        """
        Create an allergy.

        Raises:
            ValueError: Blank name, or an allergy with this exact name exists
        """
        return _create_unique(db, Allergy, "Allergy", name, description=description)

    @staticmethod
    def get_or_create_allergy(db: Session, name: str) -> Allergy:
        return get_or_create_by_name(db, Allergy, name)

    # =========================================================================
    # Flavors
    # =========================================================================

    @staticmethod
    def get_flavor(db: Session, flavor_id: int) -> Optional[Flavor]:
        return db.query(Flavor).filter(Flavor.id == flavor_id).first()

    @staticmethod
    def get_flavor_by_name(db: Session, name: str) -> Optional[Flavor]:
        return db.query(Flavor).filter(Flavor.name == name).first()

    @staticmethod
    def list_flavors(db: Session) -> List[Flavor]:
        return db.query(Flavor).order_by(Flavor.name).all()

    @staticmethod
    def create_flavor(
        db: Session, name: str, description: Optional[str] = None
    ) -> Flavor:
        """
        Create a flavor.

        Raises:
            ValueError: Blank name, or a flavor with this exact name exists
        """
        return _create_unique(db, Flavor, "Flavor", name, description=description)

    @staticmethod
    def get_or_create_flavor(db: Session, name: str) -> Flavor:
        return get_or_create_by_name(db, Flavor, name)

    # =========================================================================
    # Dietary constraint types
    # =========================================================================

    @staticmethod
    def get_constraint_type(db: Session, constraint_type_id: int) -> Optional[ConstraintType]:
        return (
            db.query(ConstraintType)
            .filter(ConstraintType.id == constraint_type_id)
            .first()
        )

    @staticmethod
    def get_constraint_type_by_name(db: Session, name: str) -> Optional[ConstraintType]:
        return db.query(ConstraintType).filter(ConstraintType.name == name).first()

    @staticmethod
    def list_constraint_types(db: Session) -> List[ConstraintType]:
        return db.query(ConstraintType).order_by(ConstraintType.name).all()

    @staticmethod
    def create_constraint_type(db: Session, name: str) -> ConstraintType:
        """
        Create a dietary constraint type.

        Raises:
            ValueError: Blank name, or a constraint type with this exact name exists
        """
        return _create_unique(db, ConstraintType, "Constraint type", name)

    @staticmethod
    def get_or_create_constraint_type(db: Session, name: str) -> ConstraintType:
        return get_or_create_by_name(db, ConstraintType, name)

    @staticmethod
    def get_common_dietary_constraints(db: Session) -> List[ConstraintType]:
        """Seed the default constraint vocabulary if missing, then list all types."""
        for name in DEFAULT_DIETARY_CONSTRAINTS:
            get_or_create_by_name(db, ConstraintType, name)
        db.commit()
        return ReferenceDataService.list_constraint_types(db)

    @staticmethod
    def seed_default_flavors(db: Session) -> List[Flavor]:
        """Create the default flavors if missing, then list all flavors."""
        for name in DEFAULT_FLAVORS:
            get_or_create_by_name(db, Flavor, name)
        db.commit()
        return ReferenceDataService.list_flavors(db)


# Singleton instance
reference_data_service = ReferenceDataService()
