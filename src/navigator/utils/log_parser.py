"""Helpers for turning driver log entries into readable log messages."""

import re
from datetime import datetime, timedelta, timezone
from typing import Tuple

# "message text (http://host/app.js 12:34)" -> ("message text", "http://host/app.js 12:34")
MESSAGE_PATTERN = re.compile(r"^(.+)\s\(([^)]*:\w*)\)$", re.DOTALL)


def split_message(message: str) -> Tuple[str, str]:
    """
    Split a log message into its text and trailing code location.

    Args:
        message: Raw message from the driver log

    Returns:
        (text, location); location is empty when none is present
    """
    match = MESSAGE_PATTERN.match(message)
    if match is None:
        return message, ""
    return match.group(1), match.group(2)


def ms_to_datetime(ms: int) -> datetime:
    """Convert a millisecond UNIX timestamp to an aware UTC datetime."""
    seconds, millis = divmod(ms, 1000)
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(milliseconds=millis)
