"""
Editorial rules for the monastery recommendation strategies.

These are curated choices (which regions count as under-visited, which keywords
signal a good spring visit, ...) kept as data so they can be tuned without
touching the selection code.
"""
import enum
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from app.models import MonasteryRegion


# Patron saints used by the feast strategy when no feast date is requested
MAJOR_FEAST_PATRONS: Tuple[str, ...] = (
    "Sfânta Maria",
    "Sfântul Nicolae",
    "Sfântul Gheorghe",
    "Sfântul Dumitru",
)

# Stripped (repeatedly) from the start of feast names before matching.
# Longer forms first so "Sfinții " is not cut down to "ții ".
HONORIFIC_PREFIXES: Tuple[str, ...] = (
    "Sfântul ",
    "Sfânta ",
    "Sfinții ",
    "Sfintele ",
    "Sf. ",
    "Saints ",
    "Saint ",
    "Holy ",
    "St. ",
)

# A feast whose name contains one of these is treated as a saint's feast
SAINT_MARKERS: Tuple[str, ...] = ("Sfânt", "Sfint", "Saint", "Holy")

# Hidden gems: verified, from a less-visited region, with a rich description
HIDDEN_GEM_REGIONS: FrozenSet[MonasteryRegion] = frozenset({
    MonasteryRegion.DOBROGEA,
    MonasteryRegion.MARAMURES,
    MonasteryRegion.CRISANA,
    MonasteryRegion.BANAT,
})
HIDDEN_GEM_MIN_DESCRIPTION_LENGTH = 300


class Season(str, enum.Enum):
    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"


SEASON_BY_MONTH = {
    12: Season.WINTER, 1: Season.WINTER, 2: Season.WINTER,
    3: Season.SPRING, 4: Season.SPRING, 5: Season.SPRING,
    6: Season.SUMMER, 7: Season.SUMMER, 8: Season.SUMMER,
    9: Season.AUTUMN, 10: Season.AUTUMN, 11: Season.AUTUMN,
}


def season_for_month(month: Optional[int]) -> Optional[Season]:
    """Meteorological season for a month number, None when out of range."""
    if month is None:
        return None
    return SEASON_BY_MONTH.get(month)


@dataclass(frozen=True)
class SeasonRule:
    """A record qualifies if its region is listed or a keyword appears in its text."""
    regions: FrozenSet[MonasteryRegion] = field(default_factory=frozenset)
    keywords: Tuple[str, ...] = ()


SEASONAL_RULES = {
    # Mountain regions with good winter access
    Season.WINTER: SeasonRule(regions=frozenset({MonasteryRegion.BUCOVINA, MonasteryRegion.TRANSILVANIA})),
    # Gardens and parks
    Season.SPRING: SeasonRule(keywords=("grădin", "parc", "garden", "park")),
    # Activities and tourism
    Season.SUMMER: SeasonRule(keywords=("activit", "turis", "tourism")),
    # Autumn foliage
    Season.AUTUMN: SeasonRule(regions=frozenset({MonasteryRegion.MOLDOVA, MonasteryRegion.MARAMURES})),
}
