from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class ConstraintType(Base):
    """Dietary label reference data (e.g. "Vegetarian", "Gluten-Free")."""

    __tablename__ = "constraint_types"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile_links = relationship("ProfileConstraint", back_populates="constraint_type")


class ProfileConstraint(Base):
    """Junction table linking profiles to dietary constraint types."""

    __tablename__ = "profile_constraints"

    profile_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    constraint_type_id = Column(
        Integer, ForeignKey("constraint_types.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="constraints")
    constraint_type = relationship("ConstraintType", back_populates="profile_links")
