"""Repository for User database operations."""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from quiethours.models.user import User
from quiethours.database.models import UserDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        return user_db.to_pydantic() if user_db else None

    def get_email(self, user_id: str) -> Optional[str]:
        """Get a user's email address, or None if the user is unknown or has none."""
        row = self.db.query(UserDB.email).filter(UserDB.id == user_id).first()
        if row is None or not row[0]:
            return None
        return row[0]

    def create_or_update(self, user: User) -> User:
        """Create or update user (upsert)."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user.id).first()
        try:
            if user_db:
                user_db.email = user.email
                user_db.name = user.name
                user_db.updated_at = user.updated_at
                action = "Updated"
            else:
                user_db = UserDB.from_pydantic(user)
                self.db.add(user_db)
                action = "Created"
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"{action} user {user.id}: {user.email}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save user {user.id}: {type(e).__name__}: {str(e)}")
            raise
