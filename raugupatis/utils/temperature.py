"""
Temperature unit helpers.

Temperatures are persisted in Fahrenheit. Users pick a display unit and
every API boundary converts on the way in and out.
"""
from raugupatis.infra.db.models import TemperatureUnit


def fahrenheit_to_celsius(value: float) -> float:
    return (value - 32.0) * 5.0 / 9.0


def celsius_to_fahrenheit(value: float) -> float:
    return value * 9.0 / 5.0 + 32.0


def to_storage(value: float, unit: str) -> float:
    """Convert a reading in ``unit`` to Fahrenheit for storage."""
    if TemperatureUnit(unit) == TemperatureUnit.CELSIUS:
        return celsius_to_fahrenheit(value)
    return value


def from_storage(value: float, unit: str) -> float:
    """Convert a stored Fahrenheit value to ``unit``, rounded to one decimal."""
    if TemperatureUnit(unit) == TemperatureUnit.CELSIUS:
        value = fahrenheit_to_celsius(value)
    return round(value, 1)


def unit_symbol(unit: str) -> str:
    return "°C" if TemperatureUnit(unit) == TemperatureUnit.CELSIUS else "°F"


def format_temperature(value: float, unit: str) -> str:
    """Human-readable stored value in the user's unit, e.g. ``21.1°C``."""
    return f"{from_storage(value, unit):.1f}{unit_symbol(unit)}"
