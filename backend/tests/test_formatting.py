"""Tests for the monastery result formatter."""
from datetime import date, datetime

from app.models import MonasteryRegion
from app.schemas.monastery import FormattedMonastery, format_monastery


def raw_record(**overrides) -> dict:
    record = {
        "id": 7,
        "name": "Mănăstirea Putna",
        "slug": "putna",
        "description": "Ctitoria lui Ștefan cel Mare.",
        "region": "bucovina",
        "type": "monastery",
        "patron_saint": "Adormirea Maicii Domnului",
        "patron_saint_date": "1990-08-15T00:00:00",
        "images": None,
        "relics": None,
        "icon_descriptions": None,
        "verification": True,
    }
    record.update(overrides)
    return record


def test_format_parses_stored_date_and_defaults_lists():
    """Test that string dates are parsed and null arrays become empty lists."""
    formatted = format_monastery(raw_record())
    assert formatted.patron_saint_date == date(1990, 8, 15)
    assert formatted.images == []
    assert formatted.relics == []
    assert formatted.icon_descriptions == []
    assert formatted.region == MonasteryRegion.BUCOVINA


def test_format_converts_datetime_to_date():
    """Test that a datetime feast is reduced to its date."""
    formatted = format_monastery(raw_record(patron_saint_date=datetime(2001, 5, 21, 10, 30)))
    assert formatted.patron_saint_date == date(2001, 5, 21)


def test_format_missing_or_unparseable_date_is_none():
    """Test that absent and garbage dates both become None."""
    assert format_monastery(raw_record(patron_saint_date=None)).patron_saint_date is None
    assert format_monastery(raw_record(patron_saint_date="")).patron_saint_date is None
    assert format_monastery(raw_record(patron_saint_date="hram necunoscut")).patron_saint_date is None


def test_format_tolerates_missing_region():
    """Test that a record without a region still formats."""
    assert format_monastery(raw_record(region=None)).region is None


def test_format_is_idempotent():
    """Test that formatting an already formatted record changes nothing."""
    once = format_monastery(raw_record(images=["a.jpg"], relics=["Sf. Ioan"]))
    assert format_monastery(once) == once
    assert format_monastery(once.model_dump()) == once


def test_format_orm_row(catalog):
    """Test that ORM rows are formatted, including rows with null arrays."""
    formatted = format_monastery(catalog["sihastria"])
    assert isinstance(formatted, FormattedMonastery)
    assert formatted.slug == "sihastria"
    assert formatted.images == []
    assert formatted.relics == []
    assert formatted.patron_saint_date is None

    putna = format_monastery(catalog["putna"])
    assert putna.patron_saint_date == date(1990, 8, 15)
    assert putna.images == ["putna.jpg"]
    assert format_monastery(putna) == putna
