"""Time-of-day brief mode selection."""

from datetime import datetime

from .models import BriefMode, RUSH, STANDARD, LEISURELY, COMMUTE, WEEKEND


def mode_for(hour: int, is_weekend: bool) -> BriefMode:
    """Pick the brief mode for an hour of the day (0-23).

    Weekends always get the long weekend brief. On weekdays the morning
    rush and evening commute get shorter briefs, late evening and night
    get the extended one.
    """
    if is_weekend:
        return WEEKEND
    if 6 <= hour < 9:
        return RUSH
    if 17 <= hour < 19:
        return COMMUTE
    if hour >= 20 or hour < 6:
        return LEISURELY
    return STANDARD


def select_mode(now: datetime) -> BriefMode:
    """Pick the brief mode for a moment in time, in that moment's timezone."""
    return mode_for(now.hour, now.weekday() >= 5)
