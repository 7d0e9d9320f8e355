"""Validation rules for workshops."""
from __future__ import annotations

import re
from datetime import date
from typing import Any, Mapping

from hub.domain.accounts import is_valid_email

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
TIME_PATTERN = re.compile(r"([0-1]?[0-9]|2[0-3]):[0-5][0-9]")
STATUSES = ("draft", "published", "cancelled", "completed")
REQUIRED_FIELDS = (
    ("title", "Title is required"),
    ("description", "Description is required"),
    ("date", "Date is required"),
    ("startTime", "Start time is required"),
    ("endTime", "End time is required"),
)


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def parse_date(value: Any) -> date | None:
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def workshop_errors(data: Mapping[str, Any], *, is_update: bool = False, today: date | None = None) -> list[str]:
    """Return the list of problems found in a workshop payload."""
    errors: list[str] = []
    if not is_update:
        for key, message in REQUIRED_FIELDS:
            value = data.get(key)
            if not value or (isinstance(value, str) and not value.strip()):
                errors.append(message)

    if data.get("date"):
        parsed = parse_date(data["date"])
        if parsed is None:
            errors.append("Invalid date format")
        elif parsed < (today or date.today()):
            errors.append("Workshop date cannot be in the past")

    start, end = data.get("startTime"), data.get("endTime")
    if start and end:
        start_ok = isinstance(start, str) and bool(TIME_PATTERN.fullmatch(start))
        end_ok = isinstance(end, str) and bool(TIME_PATTERN.fullmatch(end))
        if not start_ok:
            errors.append("Invalid start time format (HH:MM required)")
        if not end_ok:
            errors.append("Invalid end time format (HH:MM required)")
        if start_ok and end_ok and time_to_minutes(end) <= time_to_minutes(start):
            errors.append("End time must be after start time")

    if data.get("status") and data["status"] not in STATUSES:
        errors.append("Invalid status. Must be: draft, published, cancelled, or completed")

    if "maxVolunteers" in data and data["maxVolunteers"] is not None:
        value = data["maxVolunteers"]
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            errors.append("Max volunteers must be a positive integer")

    contact = data.get("contactPerson")
    if isinstance(contact, Mapping) and contact.get("email") and not is_valid_email(contact["email"]):
        errors.append("Invalid contact person email format")

    return errors


def location_matches(workshop: Mapping[str, Any], region: str) -> bool:
    location = workshop.get("location")
    if not isinstance(location, Mapping):
        return False
    needle = region.lower()
    return any(
        isinstance(location.get(key), str) and needle in location[key].lower() for key in ("region", "city")
    )
