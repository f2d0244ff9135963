import logging

import pytest

from units import COUNT_UNITS, UNIT_CONVERSIONS, convert_unit, normalize_unit


@pytest.mark.parametrize("raw", ["Kilogram", " kg ", "KG", "kilogram"])
def test_kilogram_spellings_normalize_to_kg(raw):
    assert normalize_unit(raw) == "kg"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Liter", "l"),
        ("litre", "l"),
        ("Milliliter", "ml"),
        ("millilitre", "ml"),
        ("piece", "pcs"),
        ("Pieces", "pcs"),
        ("gram", "g"),
    ],
)
def test_long_forms_map_to_short_codes(raw, expected):
    assert normalize_unit(raw) == expected


def test_unknown_units_pass_through_lowercased():
    assert normalize_unit("  Butir ") == "butir"
    assert normalize_unit("Sendok") == "sendok"
    assert normalize_unit("") == ""


@pytest.mark.parametrize("unit", ["kg", "g", "l", "ml", *COUNT_UNITS, "sendok"])
def test_same_unit_is_identity(unit):
    assert convert_unit(3.7, unit, unit) == 3.7


def test_kg_to_g_and_back():
    assert convert_unit(2.5, "kg", "g") == 2500
    assert convert_unit(convert_unit(0.3, "kg", "g"), "g", "kg") == pytest.approx(0.3)


def test_volume_pairs():
    assert convert_unit(1.5, "l", "ml") == 1500
    assert convert_unit(250, "ml", "l") == pytest.approx(0.25)
    assert convert_unit(2, "Liter", "milliliter") == 2000


def test_raw_spellings_are_normalized_before_lookup():
    assert convert_unit(1, "Kilogram", " G ") == 1000


def test_count_units_do_not_convert_to_each_other(caplog):
    caplog.set_level(logging.DEBUG)
    assert convert_unit(4, "buah", "pcs") is None
    # the caller logs with item context; the lookup itself stays quiet
    assert caplog.records == []


def test_weight_and_volume_are_incompatible():
    assert convert_unit(1, "kg", "l") is None
    assert convert_unit(1, "ml", "g") is None


def test_table_has_no_transitive_entries():
    # kg and ml are both connected to something, but never to each other
    assert "ml" not in UNIT_CONVERSIONS["kg"]
    assert convert_unit(1, "kg", "ml") is None
