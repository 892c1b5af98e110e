"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to digits with an optional leading '+'.

    Raises:
        ValueError: If fewer than 7 or more than 15 digits remain
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)
    if not 7 <= len(digits) <= 15:
        raise ValueError("Invalid phone number")
    return f"+{digits}" if phone.strip().startswith("+") else digits


def validate_tour_time(value: str) -> str:
    """24-hour HH:MM"""
    if not TIME_PATTERN.match(value or ""):
        raise ValueError("Time must be in HH:MM format")
    return value


def parse_iso_date(value: Optional[str]) -> date:
    """
    Parse YYYY-MM-DD.

    Raises:
        ValueError: If the value is missing or not a valid date
    """
    if not value:
        raise ValueError("Date is required")
    return date.fromisoformat(value)
