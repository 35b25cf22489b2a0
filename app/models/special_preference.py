from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class SpecialPreference(Base):
    """Free-text preference note. Many per profile, no uniqueness."""

    __tablename__ = "special_preferences"

    id = Column(Integer, primary_key=True)
    profile_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile", back_populates="special_preferences")

    __table_args__ = (
        Index("idx_special_preferences_profile_id", "profile_id"),
    )
