from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class Dish(Base):
    """Global dish reference data, matched by exact name."""

    __tablename__ = "dishes"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    history = relationship("DishHistory", back_populates="dish")


class DishHistory(Base):
    """A profile's 1-5 rating of a dish. At most one row per (profile, dish)."""

    __tablename__ = "dish_history"

    id = Column(Integer, primary_key=True)
    profile_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    dish_id = Column(
        Integer, ForeignKey("dishes.id", ondelete="CASCADE"), nullable=False
    )
    user_rating = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="dish_history")
    dish = relationship("Dish", back_populates="history")

    __table_args__ = (
        UniqueConstraint("profile_id", "dish_id", name="uq_dish_history_profile_dish"),
        CheckConstraint(
            "user_rating >= 1 AND user_rating <= 5", name="ck_dish_history_rating"
        ),
    )
