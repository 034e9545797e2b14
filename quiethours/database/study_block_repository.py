"""Repository for StudyBlock database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from quiethours.models.study_block import StudyBlock, to_utc_naive
from quiethours.database.models import StudyBlockDB

logger = logging.getLogger(__name__)


class StudyBlockRepository:
    """Repository for StudyBlock database operations.

    This is the block store consumed by the reminder sweep (`find_due`,
    `mark_reminder_sent`) and by the block CRUD endpoints.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, block: StudyBlock) -> StudyBlock:
        """Create a new study block."""
        try:
            block_db = StudyBlockDB.from_pydantic(block)
            self.db.add(block_db)
            self.db.commit()
            self.db.refresh(block_db)
            logger.debug(f"Created study block {block.block_id} for user {block.user_id}")
            return block_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create study block {block.block_id}: {type(e).__name__}: {str(e)}")
            raise

    def get_all(self, user_id: str) -> List[StudyBlock]:
        """Get all study blocks for a user sorted by start_time."""
        blocks_db = self.db.query(StudyBlockDB).filter(
            StudyBlockDB.user_id == user_id
        ).order_by(StudyBlockDB.start_time).all()
        return [block_db.to_pydantic() for block_db in blocks_db]

    def get_by_id(self, user_id: str, block_id: str) -> Optional[StudyBlock]:
        """Get a study block by ID (user-scoped)."""
        row = (
            self.db.query(StudyBlockDB)
            .filter(StudyBlockDB.user_id == user_id, StudyBlockDB.block_id == block_id)
            .first()
        )
        return row.to_pydantic() if row else None

    def find_due(self, now: datetime, until: datetime) -> List[StudyBlock]:
        """Get unreminded blocks whose start_time falls in [now, until] (both ends inclusive).

        Not user-scoped: the sweep covers every user's blocks.
        """
        now = to_utc_naive(now)
        until = to_utc_naive(until)
        rows = (
            self.db.query(StudyBlockDB)
            .filter(
                StudyBlockDB.reminder_sent.is_(False),
                StudyBlockDB.start_time >= now,
                StudyBlockDB.start_time <= until,
            )
            .order_by(StudyBlockDB.start_time)
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def mark_reminder_sent(self, block_id: str) -> bool:
        """Set reminder_sent=true for a block.

        Returns:
            True if exactly one row changed; False if the block is gone or was already marked.
        """
        try:
            affected = (
                self.db.query(StudyBlockDB)
                .filter(StudyBlockDB.block_id == block_id, StudyBlockDB.reminder_sent.is_(False))
                .update({StudyBlockDB.reminder_sent: True}, synchronize_session=False)
            )
            self.db.commit()
            if affected != 1:
                logger.debug(f"Reminder flag unchanged for block {block_id} (affected={affected})")
            return affected == 1
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to mark reminder sent for block {block_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, block_id: str) -> bool:
        """Delete one block (user-scoped).

        Returns:
            True if the block existed and was deleted
        """
        try:
            deleted_count = (
                self.db.query(StudyBlockDB)
                .filter(StudyBlockDB.user_id == user_id, StudyBlockDB.block_id == block_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            logger.debug(f"Deleted {deleted_count} study block(s) {block_id} for user {user_id}")
            return deleted_count == 1
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete study block {block_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete_all_for_user(self, user_id: str) -> int:
        """Delete all study blocks for a user.

        Returns:
            Number of blocks deleted
        """
        try:
            deleted_count = self.db.query(StudyBlockDB).filter(
                StudyBlockDB.user_id == user_id
            ).delete(synchronize_session=False)
            self.db.commit()
            logger.debug(f"Deleted {deleted_count} study blocks for user {user_id}")
            return int(deleted_count)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete study blocks for user {user_id}: {type(e).__name__}: {str(e)}")
            raise
