"""Reminder email rendering for study blocks.

Times are stored as naive UTC and formatted in a single display timezone
(`REMINDER_DISPLAY_TIMEZONE`, defaults to Asia/Kolkata).
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from quiethours.models.constants import (
    DEFAULT_DISPLAY_TIMEZONE,
    DEFAULT_LOOKAHEAD_MINUTES,
    REMINDER_SUBJECT_TEMPLATE,
)
from quiethours.models.study_block import duration_minutes, to_utc_naive


_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Study Block Reminder</title>
    <style>
      body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
      .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
      .header {{ background: #4f46e5; color: white; padding: 20px; border-radius: 8px 8px 0 0; }}
      .content {{ background: #f9fafb; padding: 20px; border-radius: 0 0 8px 8px; }}
      .time-block {{ background: white; padding: 15px; border-radius: 6px; margin: 10px 0; }}
      .footer {{ text-align: center; margin-top: 20px; font-size: 14px; color: #666; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header">
        <h1>🔕 Study Block Reminder</h1>
      </div>
      <div class="content">
        <h2>Your quiet study time is starting soon!</h2>
        <div class="time-block">
          <p><strong>📅 Date:</strong> {date}</p>
          <p><strong>⏰ Start Time:</strong> {start}</p>
          <p><strong>⏰ End Time:</strong> {end}</p>
          <p><strong>⏱️ Duration:</strong> {duration} minutes</p>
        </div>
        <p>Your study block will begin in approximately {lead_minutes} minutes. Get ready to focus!</p>
        <p><em>Good luck with your studies! 📚</em></p>
      </div>
      <div class="footer">
        <p>Quiet Hours Scheduler - Helping you stay focused</p>
      </div>
    </div>
  </body>
</html>
"""


@dataclass
class ReminderEmail:
    """A rendered reminder, ready for the transport."""
    subject: str
    html: str
    duration_minutes: int


def display_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(tz_name or os.getenv("REMINDER_DISPLAY_TIMEZONE", DEFAULT_DISPLAY_TIMEZONE))


def _localize(value: datetime, tz: ZoneInfo) -> datetime:
    return to_utc_naive(value).replace(tzinfo=timezone.utc).astimezone(tz)


def format_time(value: datetime, tz: ZoneInfo) -> str:
    """Format as a 12-hour clock time, e.g. '03:30 PM'."""
    return _localize(value, tz).strftime("%I:%M %p")


def format_date(value: datetime, tz: ZoneInfo) -> str:
    """Format as a long date, e.g. 'Monday, 1 January 2024'."""
    local = _localize(value, tz)
    return f"{local:%A}, {local.day} {local:%B %Y}"


def render_reminder_email(
    start_time: datetime,
    end_time: datetime,
    lead_minutes: int = DEFAULT_LOOKAHEAD_MINUTES,
    tz_name: Optional[str] = None,
) -> ReminderEmail:
    """Render the subject and HTML body of a study block reminder.

    Args:
        start_time: Block start (naive UTC or aware)
        end_time: Block end (naive UTC or aware)
        lead_minutes: How far ahead of the start the reminder is sent
        tz_name: IANA timezone for display; defaults to REMINDER_DISPLAY_TIMEZONE

    Returns:
        ReminderEmail with subject, html and the rounded duration in minutes
    """
    tz = display_timezone(tz_name)
    duration = duration_minutes(start_time, end_time)
    html = _HTML_TEMPLATE.format(
        date=format_date(start_time, tz),
        start=format_time(start_time, tz),
        end=format_time(end_time, tz),
        duration=duration,
        lead_minutes=lead_minutes,
    )
    return ReminderEmail(
        subject=REMINDER_SUBJECT_TEMPLATE.format(lead_minutes=lead_minutes),
        html=html,
        duration_minutes=duration,
    )
