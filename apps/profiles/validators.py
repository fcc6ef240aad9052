"""Field validation shared by profile and contact forms."""
import re
from datetime import date, datetime, time
from typing import Dict, Optional, Union

from apps.core.errors import ValidationFailed

NAME_PATTERN = re.compile(r"^[a-zA-ZÀ-ÿ\s'-]+$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50

# Moroccan mobile/landline numbers, local or international form
PHONE_PATTERNS = (
    re.compile(r"^0[5-7]\d{8,9}$"),
    re.compile(r"^\+212[5-7]\d{8,9}$"),
    re.compile(r"^212[5-7]\d{8,9}$"),
)
_PHONE_SEPARATORS = re.compile(r"[\s\-()]")

MIN_AGE = 18
MAX_AGE = 120

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def validate_name(value: str, field: str) -> str:
    value = (value or "").strip()
    if not (NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH) or not NAME_PATTERN.match(value):
        raise ValidationFailed("profile.invalidName", field=field)
    return value


def normalize_phone(value: str) -> str:
    """Strip separators and check the number is Moroccan."""
    phone = _PHONE_SEPARATORS.sub("", value or "")
    if not any(p.match(phone) for p in PHONE_PATTERNS):
        raise ValidationFailed("profile.invalidPhone")
    return phone


def age_on(birth_date: date, today: date) -> int:
    return today.year - birth_date.year - ((today.month, today.day) < (birth_date.month, birth_date.day))


def validate_date_of_birth(value: Union[str, date], today: Optional[date] = None) -> date:
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value)
        except ValueError:
            raise ValidationFailed("profile.invalidDateOfBirth")

    today = today or date.today()
    if value > today:
        raise ValidationFailed("profile.futureDate")
    age = age_on(value, today)
    if age < MIN_AGE:
        raise ValidationFailed("profile.tooYoung")
    if age > MAX_AGE:
        raise ValidationFailed("profile.tooOld")
    return value


def min_length(value: str, field: str, minimum: int) -> str:
    value = (value or "").strip()
    if len(value) < minimum:
        raise ValidationFailed("profile.fieldTooShort", field=field, min=minimum)
    return value


def _parse_time(value: str, day: str) -> time:
    try:
        return datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError):
        raise ValidationFailed("profile.invalidHours", day=day)


def validate_operation_hours(hours: Dict[str, dict]) -> Dict[str, dict]:
    """
    Check a weekday -> {enabled, start_time, end_time} map.
    At least one day must be enabled and start must precede end on enabled days.
    """
    cleaned = {}
    for day, slot in (hours or {}).items():
        day = day.lower()
        if day not in WEEKDAYS:
            raise ValidationFailed("profile.invalidDay", day=day)
        enabled = bool(slot.get("enabled"))
        start = slot.get("start_time") or "09:00"
        end = slot.get("end_time") or "17:00"
        if enabled and _parse_time(start, day) >= _parse_time(end, day):
            raise ValidationFailed("profile.invalidHours", day=day)
        cleaned[day] = {"enabled": enabled, "start_time": start, "end_time": end}

    if not any(slot["enabled"] for slot in cleaned.values()):
        raise ValidationFailed("profile.noAvailability")
    return cleaned
