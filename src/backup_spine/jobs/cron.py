"""Cron helpers for rescheduled backups.

A rescheduled backup keeps its plan's frequency but is shifted so that it
next fires a few minutes from now instead of at the original slot:

    daily,   now=10:00, +10 min  ->  "10 10 * * *"
    hourly,  now=10:00, +10 min  ->  "10 * * * *"
    weekly,  now=Mon 10:00       ->  "10 10 * * 1"
    monthly, now=the 5th 10:00   ->  "10 10 5 * *"
    8 hours, now=10:00           ->  "10 2,10,18 * * *"

Expressions are standard five-field cron, validated and evaluated with
croniter.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from croniter import croniter

from backup_spine.core.errors import InvalidConfigError

_MINUTES_RE = re.compile(r"^\s*(\d+)\s*minutes?\b", re.IGNORECASE)
_HOURS_RE = re.compile(r"^\s*(\d+)\s*hours?\s*$", re.IGNORECASE)


def parse_delay_minutes(delay: str | None) -> int | None:
    """Leading integer of a minutes delay string, or None when not in minutes.

    >>> parse_delay_minutes("10 minutes")
    10
    >>> parse_delay_minutes("2 hours") is None
    True
    """
    if not delay:
        return None
    match = _MINUTES_RE.match(delay)
    if match is None:
        return None
    return int(match.group(1))


def cron_with_interval_after_minutes(
    interval: str,
    after_minutes: int,
    now: datetime | None = None,
) -> str:
    """Cron expression firing at ``interval`` frequency, anchored at now + offset.

    ``N hours`` only accepts N that divides 24, so the hour list stays evenly
    spaced across midnight.

    Raises:
        InvalidConfigError: unknown interval token.
    """
    now = now or datetime.now(UTC)
    fire_at = now + timedelta(minutes=after_minutes)
    minute, hour = fire_at.minute, fire_at.hour
    token = interval.strip().lower()

    if token == "hourly":
        expression = f"{minute} * * * *"
    elif token == "daily":
        expression = f"{minute} {hour} * * *"
    elif token == "weekly":
        # cron counts Sunday as 0
        expression = f"{minute} {hour} * * {fire_at.isoweekday() % 7}"
    elif token == "monthly":
        expression = f"{minute} {hour} {fire_at.day} * *"
    else:
        match = _HOURS_RE.match(token)
        step = int(match.group(1)) if match else 0
        if not 0 < step < 24 or 24 % step:
            raise InvalidConfigError("backup_interval", interval)
        hours = sorted((hour + i * step) % 24 for i in range(24 // step))
        expression = f"{minute} {','.join(str(h) for h in hours)} * * *"

    if not croniter.is_valid(expression):
        raise InvalidConfigError("repeat_interval", expression)
    return expression


def next_fire_time(expression: str, after: datetime | None = None) -> datetime:
    """Next time ``expression`` fires strictly after ``after`` (UTC)."""
    after = after or datetime.now(UTC)
    return croniter(expression, after).get_next(datetime)
