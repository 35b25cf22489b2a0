"""
Database models for EatsAdvisor.

Import all models here so Alembic can detect them for migrations.
"""

from app.database import Base
from app.models.user import AppUser
from app.models.session import Session
from app.models.profile import Profile
from app.models.allergy import Allergy, ProfileAllergy
from app.models.flavor import Flavor, ProfileFlavorPreference
from app.models.constraint_type import ConstraintType, ProfileConstraint
from app.models.special_preference import SpecialPreference
from app.models.dish import Dish, DishHistory

__all__ = [
    "Base",
    "AppUser",
    "Session",
    "Profile",
    "Allergy",
    "ProfileAllergy",
    "Flavor",
    "ProfileFlavorPreference",
    "ConstraintType",
    "ProfileConstraint",
    "SpecialPreference",
    "Dish",
    "DishHistory",
]
