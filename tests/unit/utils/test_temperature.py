import pytest

from raugupatis.utils.temperature import (
    celsius_to_fahrenheit,
    fahrenheit_to_celsius,
    format_temperature,
    from_storage,
    to_storage,
    unit_symbol,
)


def test_known_conversion_points():
    assert fahrenheit_to_celsius(32) == pytest.approx(0.0)
    assert fahrenheit_to_celsius(212) == pytest.approx(100.0)
    assert celsius_to_fahrenheit(-40) == pytest.approx(-40.0)
    assert celsius_to_fahrenheit(20) == pytest.approx(68.0)


def test_storage_is_fahrenheit():
    assert to_storage(20.0, "celsius") == pytest.approx(68.0)
    assert to_storage(68.0, "fahrenheit") == pytest.approx(68.0)


def test_from_storage_rounds_to_one_decimal():
    assert from_storage(70.0, "celsius") == 21.1
    assert from_storage(70.04, "fahrenheit") == 70.0


def test_symbols_and_formatting():
    assert unit_symbol("celsius") == "°C"
    assert unit_symbol("fahrenheit") == "°F"
    assert format_temperature(75.0, "fahrenheit") == "75.0°F"
    assert format_temperature(75.0, "celsius") == "23.9°C"


def test_unknown_unit_rejected():
    with pytest.raises(ValueError):
        to_storage(10.0, "kelvin")
