from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class Profile(Base):
    """Preference-bearing record, one per AppUser. Created lazily on first write."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("app_users.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("AppUser", back_populates="profile")
    allergies = relationship(
        "ProfileAllergy", back_populates="profile", cascade="all, delete-orphan"
    )
    flavor_preferences = relationship(
        "ProfileFlavorPreference", back_populates="profile", cascade="all, delete-orphan"
    )
    constraints = relationship(
        "ProfileConstraint", back_populates="profile", cascade="all, delete-orphan"
    )
    special_preferences = relationship(
        "SpecialPreference", back_populates="profile", cascade="all, delete-orphan"
    )
    dish_history = relationship(
        "DishHistory", back_populates="profile", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_profiles_user_id"),
    )
