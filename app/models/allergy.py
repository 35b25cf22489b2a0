from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class Allergy(Base):
    """Global allergy reference data, matched by exact name."""

    __tablename__ = "allergies"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile_links = relationship("ProfileAllergy", back_populates="allergy")


class ProfileAllergy(Base):
    """Junction table linking profiles to allergies."""

    __tablename__ = "profile_allergies"

    profile_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    allergy_id = Column(
        Integer, ForeignKey("allergies.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="allergies")
    allergy = relationship("Allergy", back_populates="profile_links")
