"""Reminder notifier: contact lookup plus email delivery."""

import logging
from typing import Optional

from quiethours.database.user_repository import UserRepository
from quiethours.integrations.email_client import SMTPEmailClient

logger = logging.getLogger(__name__)


class ReminderNotifier:
    """Resolves a block owner's address and delivers the rendered reminder."""

    def __init__(self, users: UserRepository, email_client: SMTPEmailClient):
        self.users = users
        self.email_client = email_client

    def resolve_contact(self, user_id: str) -> Optional[str]:
        """Return the user's email address, or None if the user is unknown or has none."""
        email = self.users.get_email(user_id)
        if not email:
            logger.debug(f"No contact address for user {user_id}")
        return email

    def deliver(self, address: str, subject: str, body: str) -> bool:
        """Send the reminder. Returns False on any transport failure."""
        return self.email_client.send(address, subject, body)
