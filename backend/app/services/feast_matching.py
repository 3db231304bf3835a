"""
Fuzzy join between feast titles and monastery patron saints.

Feast names and patron-saint fields are free text, so the only usable key is a
normalized saint name (honorifics stripped, lowercased, trimmed) searched for
as a substring.
"""
from typing import Iterable, List, Optional, Sequence

from app.models import Monastery
from app.services.orthodox_calendar import FeastCategory, FeastDescriptor
from app.services.recommendation_rules import HONORIFIC_PREFIXES, SAINT_MARKERS


class SaintNameMatcher:
    def __init__(
        self,
        honorifics: Sequence[str] = HONORIFIC_PREFIXES,
        saint_markers: Sequence[str] = SAINT_MARKERS,
    ):
        self.honorifics = tuple(h.lower() for h in honorifics)
        self.saint_markers = tuple(m.lower() for m in saint_markers)

    def normalize(self, text: Optional[str]) -> str:
        """Lowercase and trim text, dropping any leading honorifics ("Sfântul ", "Saint ", ...)."""
        if not text:
            return ""
        name = text.strip().lower()
        stripped = True
        while stripped:
            stripped = False
            for prefix in self.honorifics:
                if name.startswith(prefix):
                    name = name[len(prefix):].lstrip()
                    stripped = True
                    break
        return name.strip()

    def qualifies(self, feast: FeastDescriptor) -> bool:
        """True for saints' feasts and feasts whose title names a saint."""
        if feast.category == FeastCategory.SAINT:
            return True
        titles = f"{feast.name} {feast.localized_name}".lower()
        return any(marker in titles for marker in self.saint_markers)

    def candidate_name(self, feast: FeastDescriptor) -> str:
        return self.normalize(feast.localized_name)

    def candidate_names(self, feasts: Iterable[FeastDescriptor]) -> List[str]:
        """Distinct non-empty saint names for the qualifying feasts, in feast order."""
        names: List[str] = []
        for feast in feasts:
            if not self.qualifies(feast):
                continue
            name = self.candidate_name(feast)
            if name and name not in names:
                names.append(name)
        return names

    def matches(self, monastery: Monastery, feast: FeastDescriptor) -> bool:
        name = self.candidate_name(feast)
        if not name:
            return False
        haystacks = (monastery.patron_saint, monastery.name)
        return any(name in text.lower() for text in haystacks if text)

    def find_feast(self, monastery: Monastery, feasts: Iterable[FeastDescriptor]) -> Optional[FeastDescriptor]:
        """First feast that qualifies and matches the monastery by name."""
        for feast in feasts:
            if self.qualifies(feast) and self.matches(monastery, feast):
                return feast
        return None
