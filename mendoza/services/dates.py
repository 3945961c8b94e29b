"""Date and count formatting shared by e-mail templates and chat links."""

from datetime import date


def format_long_date(value: date) -> str:
    """``date(2024, 6, 1)`` -> ``"Saturday, June 1, 2024"``."""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def pluralize(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"
