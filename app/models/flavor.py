from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


MIN_PREFERENCE_LEVEL = 1
MAX_PREFERENCE_LEVEL = 10


class Flavor(Base):
    """Global flavor reference data (e.g. "Sweet", "Umami")."""

    __tablename__ = "flavors"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile_preferences = relationship(
        "ProfileFlavorPreference", back_populates="flavor"
    )


class ProfileFlavorPreference(Base):
    """How much a profile likes a flavor, on a 1-10 scale."""

    __tablename__ = "profile_flavor_preferences"

    profile_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    flavor_id = Column(
        Integer, ForeignKey("flavors.id", ondelete="CASCADE"), primary_key=True
    )
    preference_level = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="flavor_preferences")
    flavor = relationship("Flavor", back_populates="profile_preferences")

    __table_args__ = (
        CheckConstraint(
            "preference_level >= 1 AND preference_level <= 10",
            name="ck_profile_flavor_preferences_level",
        ),
    )
