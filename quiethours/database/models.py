"""SQLAlchemy database models for Quiet Hours."""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey

from quiethours.database.database import Base
from quiethours.models.study_block import utc_now


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key (JWT subject)
    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from quiethours.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class StudyBlockDB(Base):
    """Database model for StudyBlock."""

    __tablename__ = "study_blocks"

    # Primary key
    block_id = Column(String, primary_key=True)

    # User association
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Block window (naive UTC)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    # Once true, never cleared
    reminder_sent = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utc_now)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from quiethours.models.study_block import StudyBlock
        return StudyBlock(
            block_id=self.block_id,
            user_id=self.user_id,
            start_time=self.start_time,
            end_time=self.end_time,
            reminder_sent=bool(self.reminder_sent),
            created_at=self.created_at,
        )

    @classmethod
    def from_pydantic(cls, block):
        """Create database model from Pydantic model."""
        return cls(
            block_id=block.block_id,
            user_id=block.user_id,
            start_time=block.start_time,
            end_time=block.end_time,
            reminder_sent=block.reminder_sent,
            created_at=block.created_at,
        )
