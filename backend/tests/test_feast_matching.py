"""Tests for the saint-name matcher used to join feasts to patron saints."""
from datetime import date

import pytest

from app.models import Monastery
from app.services.feast_matching import SaintNameMatcher
from app.services.orthodox_calendar import FeastCategory, FeastDescriptor


def feast(localized_name: str, category=FeastCategory.SAINT, name: str = "Feast") -> FeastDescriptor:
    return FeastDescriptor(name=name, localized_name=localized_name, category=category, date=date(2025, 1, 1))


@pytest.fixture
def matcher() -> SaintNameMatcher:
    return SaintNameMatcher()


@pytest.mark.parametrize("text, expected", [
    ("Sfântul Apostol Andrei", "apostol andrei"),
    ("  Sfânta Cuvioasă Parascheva ", "cuvioasă parascheva"),
    ("Sfinții Trei Ierarhi", "trei ierarhi"),
    ("Saint Nicholas", "nicholas"),
    ("Holy Saints Peter and Paul", "peter and paul"),
    ("Buna Vestire", "buna vestire"),
    ("", ""),
    (None, ""),
])
def test_normalize_strips_honorifics_and_lowercases(matcher, text, expected):
    """Test that normalization drops leading honorifics, lowercases and trims."""
    assert matcher.normalize(text) == expected


def test_qualifies_for_saints_and_saint_titles(matcher):
    """Test that saint feasts and titles naming a saint qualify, other feasts do not."""
    assert matcher.qualifies(feast("Sfântul Ierarh Nicolae"))
    assert matcher.qualifies(feast("Înălțarea Sfintei Cruci", category=FeastCategory.MAJOR))
    assert not matcher.qualifies(feast("Buna Vestire", category=FeastCategory.MAJOR, name="Annunciation"))


def test_candidate_names_are_distinct_and_non_empty(matcher):
    """Test that candidate names skip non-qualifying, empty and duplicate entries."""
    feasts = [
        feast("Sfântul Apostol Andrei"),
        feast("Buna Vestire", category=FeastCategory.MAJOR, name="Annunciation"),
        feast(""),
        feast("Sfântul Apostol Andrei"),
        feast("Sfântul Ierarh Nicolae"),
    ]
    assert matcher.candidate_names(feasts) == ["apostol andrei", "ierarh nicolae"]


def test_candidate_names_empty_for_no_qualifying_feasts(matcher):
    """Test that a list of non-saint feasts yields no candidates."""
    assert matcher.candidate_names([feast("Buna Vestire", category=FeastCategory.MAJOR, name="Annunciation")]) == []


def test_matches_patron_saint_or_name_case_insensitively(matcher):
    """Test that a feast matches via the patron saint or the monastery name."""
    by_patron = Monastery(name="Mănăstirea Curtea de Argeș", patron_saint="SFÂNTUL IERARH NICOLAE")
    by_name = Monastery(name="Mănăstirea Peștera Sfântului Apostol Andrei", patron_saint=None)

    assert matcher.matches(by_patron, feast("Sfântul Ierarh Nicolae"))
    assert matcher.matches(by_name, feast("Sfântul Apostol Andrei"))
    assert not matcher.matches(by_patron, feast("Sfântul Apostol Andrei"))


def test_find_feast_returns_first_match(matcher):
    """Test that find_feast returns the first qualifying feast that matches."""
    monastery = Monastery(name="Schitul Sfântul Ilie", patron_saint="Sfântul Prooroc Ilie Tesviteanul")
    feasts = [feast("Sfântul Apostol Andrei"), feast("Sfântul Prooroc Ilie Tesviteanul")]
    assert matcher.find_feast(monastery, feasts) is feasts[1]
    assert matcher.find_feast(monastery, feasts[:1]) is None
