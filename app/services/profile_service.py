"""Lookup and lazy creation of AppUser profiles."""

from typing import Optional

from sqlalchemy.orm import Session

from app.models.user import AppUser
from app.models.profile import Profile


class ProfileService:
    """Service for profile-related operations."""

    @staticmethod
    def get_app_user_by_email(db: Session, email: str) -> Optional[AppUser]:
        """Get an AppUser by exact email."""
        return db.query(AppUser).filter(AppUser.email == email).first()

    @staticmethod
    def get_profile(db: Session, profile_id: int) -> Optional[Profile]:
        """Get a profile by ID."""
        return db.query(Profile).filter(Profile.id == profile_id).first()

    @staticmethod
    def get_profile_by_email(db: Session, email: str) -> Optional[Profile]:
        """Get the profile of the user with this email, or None."""
        return (
            db.query(Profile)
            .join(AppUser, Profile.user_id == AppUser.id)
            .filter(AppUser.email == email)
            .first()
        )

    @staticmethod
    def get_or_create_profile(db: Session, user: AppUser) -> Profile:
        """
        Return the user's profile, creating it on first use.

        Flushes but does not commit; the caller's write decides the transaction.
        """
        profile = db.query(Profile).filter(Profile.user_id == user.id).first()
        if profile:
            return profile

        profile = Profile(user_id=user.id)
        db.add(profile)
        db.flush()
        return profile


# Singleton instance
profile_service = ProfileService()
