"""Constants for Quiet Hours.

This module centralizes the default values used by the reminder engine and its hosts.
"""

# Reminder sweep
DEFAULT_LOOKAHEAD_MINUTES = 10

# Scheduler cadence
DEFAULT_CHECK_INTERVAL_MS = 60000

# Email rendering
DEFAULT_DISPLAY_TIMEZONE = "Asia/Kolkata"
REMINDER_SUBJECT_TEMPLATE = "🔕 Study Block Starting Soon - {lead_minutes} Minute Reminder"

# SMTP defaults
DEFAULT_MAIL_HOST = "smtp.gmail.com"
DEFAULT_MAIL_PORT = 587
DEFAULT_MAIL_TIMEOUT_SEC = 10
SMTP_SSL_PORT = 465
