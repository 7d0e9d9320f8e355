"""Validation rules for volunteer profiles."""
from __future__ import annotations

import re
from typing import Any, Mapping

PHONE_PATTERN = re.compile(r"\+1-\d{3}-\d{3}-\d{4}")
DEFAULT_PHOTO = "/uploads/photos/default-avatar.jpg"
MAX_EXPERIENCE_YEARS = 50


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def profile_errors(data: Mapping[str, Any]) -> list[str]:
    """Return the list of problems found in a profile payload."""
    errors: list[str] = []

    phone = data.get("phone")
    if not phone:
        errors.append("Phone number is required")
    elif not isinstance(phone, str) or not PHONE_PATTERN.fullmatch(phone):
        errors.append("Invalid phone number format. Use format: +1-xxx-xxx-xxxx")

    specializations = data.get("specializations")
    if not isinstance(specializations, list) or not specializations:
        errors.append("At least one specialization is required")

    if "experienceYears" in data and data["experienceYears"] is not None:
        years = data["experienceYears"]
        if not _is_number(years) or years < 0 or years > MAX_EXPERIENCE_YEARS:
            errors.append(f"Experience years must be a number between 0 and {MAX_EXPERIENCE_YEARS}")

    for key, label in (("languages", "Languages"), ("regions", "Regions")):
        if data.get(key) and not isinstance(data[key], list):
            errors.append(f"{label} must be an array")

    for key, label in (("licenseNumber", "License number"), ("barAssociation", "Bar association"), ("bio", "Bio")):
        if data.get(key) and not isinstance(data[key], str):
            errors.append(f"{label} must be a string")

    prefs = data.get("availabilityPreferences")
    if prefs:
        if not isinstance(prefs, Mapping):
            errors.append("Availability preferences must be an object")
        else:
            if prefs.get("daysOfWeek") and not isinstance(prefs["daysOfWeek"], list):
                errors.append("Availability days must be an array")
            if prefs.get("timeSlots") and not isinstance(prefs["timeSlots"], list):
                errors.append("Time slots must be an array")
            max_month = prefs.get("maxWorkshopsPerMonth")
            if max_month is not None and (not _is_number(max_month) or max_month < 1):
                errors.append("Max workshops per month must be a positive number")

    return errors


def matches_any(values: Any, needle: str) -> bool:
    """Case-insensitive substring match against any element of a list."""
    if not isinstance(values, list):
        return False
    target = needle.lower()
    return any(isinstance(v, str) and target in v.lower() for v in values)
