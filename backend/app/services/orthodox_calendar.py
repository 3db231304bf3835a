"""
Orthodox liturgical calendar provider.

Supplies the feast lookups the recommendation engine consumes:
- upcoming_feasts(from_date, window_days)
- feasts_in_month(month)

Fixed feasts recur every year on the same month/day (revised Julian calendar,
so civil dates match Gregorian). Movable feasts hang off Orthodox Pascha.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional, Tuple

from dateutil.easter import EASTER_ORTHODOX, easter

logger = logging.getLogger(__name__)


class FeastCategory(str, enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    SAINT = "saint"


@dataclass(frozen=True)
class FeastDescriptor:
    """A feast day as seen by the recommendation engine (read-only)."""
    name: str
    localized_name: str
    category: FeastCategory
    date: date
    description: Optional[str] = None


# (month, day, name, localized name, category, description)
FIXED_FEASTS: Tuple[Tuple[int, int, str, str, FeastCategory, Optional[str]], ...] = (
    (1, 1, "Circumcision of Christ", "Tăierea împrejur cea după trup a Domnului", FeastCategory.MAJOR,
     "The Circumcision of Christ is celebrated on the eighth day after the Nativity."),
    (1, 6, "Epiphany (Theophany)", "Botezul Domnului (Boboteaza)", FeastCategory.MAJOR,
     "The Baptism of Christ in the Jordan River by St. John the Baptist."),
    (1, 7, "Synaxis of St. John the Baptist", "Soborul Sf. Prooroc Ioan Botezătorul", FeastCategory.MAJOR, None),
    (1, 30, "Three Holy Hierarchs", "Sfinții Trei Ierarhi", FeastCategory.MAJOR,
     "Feast of the Three Holy Hierarchs: Basil the Great, Gregory the Theologian, and John Chrysostom."),
    (2, 2, "Presentation of Christ in the Temple", "Întâmpinarea Domnului", FeastCategory.MAJOR,
     "When Christ was presented in the Temple 40 days after his birth."),
    (3, 25, "Annunciation", "Buna Vestire", FeastCategory.MAJOR,
     "The announcement by the angel Gabriel to the Virgin Mary that she would conceive and bear a son."),
    (4, 23, "Saint George", "Sfântul Mare Mucenic Gheorghe", FeastCategory.SAINT,
     "Great Martyr George, patron of soldiers and of many Romanian churches."),
    (5, 21, "Saints Constantine and Helen", "Sfinții Împărați Constantin și Elena", FeastCategory.SAINT,
     "The holy emperors equal to the apostles."),
    (6, 29, "Saints Peter and Paul", "Sfinții Apostoli Petru și Pavel", FeastCategory.SAINT, None),
    (7, 2, "Saint Stephen the Great", "Sfântul Voievod Ștefan cel Mare", FeastCategory.SAINT,
     "Ruler of Moldova who built many churches and monasteries and defended Christianity."),
    (7, 20, "Saint Elijah", "Sfântul Prooroc Ilie Tesviteanul", FeastCategory.SAINT, None),
    (8, 6, "Transfiguration of Christ", "Schimbarea la Față a Domnului", FeastCategory.MAJOR,
     "Commemorates the transfiguration of Christ on Mount Tabor."),
    (8, 15, "Dormition of the Theotokos", "Adormirea Maicii Domnului", FeastCategory.MAJOR,
     "Commemorates the death, resurrection, and glorification of the Mother of God."),
    (9, 8, "Nativity of the Theotokos", "Nașterea Maicii Domnului", FeastCategory.MAJOR, None),
    (9, 14, "Elevation of the Holy Cross", "Înălțarea Sfintei Cruci", FeastCategory.MAJOR,
     "Commemorates the finding of the True Cross by Saint Helena."),
    (10, 14, "Saint Paraskeva of Iași", "Sfânta Cuvioasă Parascheva", FeastCategory.SAINT,
     "Patron saint of Moldova, her relics are in the Metropolitan Cathedral in Iași."),
    (10, 26, "Saint Demetrius", "Sfântul Mare Mucenic Dimitrie", FeastCategory.SAINT, None),
    (11, 8, "Synaxis of the Archangels", "Sfinții Arhangheli Mihail și Gavriil", FeastCategory.SAINT, None),
    (11, 21, "Entry of the Theotokos into the Temple", "Intrarea Maicii Domnului în Biserică", FeastCategory.MAJOR, None),
    (11, 30, "Saint Andrew the Apostle", "Sfântul Apostol Andrei", FeastCategory.SAINT,
     "Patron saint of Romania, who brought Christianity to the region."),
    (12, 6, "Saint Nicholas", "Sfântul Ierarh Nicolae", FeastCategory.SAINT, None),
    (12, 25, "Nativity of Christ (Christmas)", "Nașterea Domnului (Crăciunul)", FeastCategory.MAJOR,
     "The birth of Jesus Christ in Bethlehem."),
    (12, 26, "Synaxis of the Theotokos", "Soborul Maicii Domnului", FeastCategory.MAJOR, None),
)

# (days after Pascha, name, localized name, description)
MOVABLE_FEASTS: Tuple[Tuple[int, str, str, Optional[str]], ...] = (
    (-7, "Palm Sunday", "Duminica Floriilor", "Commemorates Christ's entry into Jerusalem."),
    (0, "Pascha (Easter)", "Învierea Domnului (Paștele)", "The feast of Christ's Resurrection."),
    (39, "Ascension of Christ", "Înălțarea Domnului", "Commemorates Christ's ascension into heaven."),
    (49, "Pentecost", "Pogorârea Sfântului Duh (Rusaliile)", "The descent of the Holy Spirit upon the Apostles."),
)


class OrthodoxCalendar:
    """Read-only calendar of Orthodox feasts, computed per year."""

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today

    def feasts_for_year(self, year: int) -> List[FeastDescriptor]:
        feasts = [
            FeastDescriptor(
                name=name,
                localized_name=localized_name,
                category=category,
                date=date(year, month, day),
                description=description,
            )
            for month, day, name, localized_name, category, description in FIXED_FEASTS
        ]

        pascha = easter(year, EASTER_ORTHODOX)
        feasts.extend(
            FeastDescriptor(
                name=name,
                localized_name=localized_name,
                category=FeastCategory.MAJOR,
                date=pascha + timedelta(days=offset),
                description=description,
            )
            for offset, name, localized_name, description in MOVABLE_FEASTS
        )

        feasts.sort(key=lambda feast: (feast.date, feast.name))
        return feasts

    def upcoming_feasts(self, from_date: Optional[date] = None, window_days: int = 30) -> List[FeastDescriptor]:
        """Feasts falling on from_date or within window_days after it, in date order."""
        start = from_date or self._today()
        end = start + timedelta(days=max(window_days, 0))

        feasts: List[FeastDescriptor] = []
        for year in range(start.year, end.year + 1):
            feasts.extend(f for f in self.feasts_for_year(year) if start <= f.date <= end)

        logger.debug("Found %d feasts between %s and %s", len(feasts), start, end)
        return feasts

    def feasts_in_month(self, month: int, year: Optional[int] = None) -> List[FeastDescriptor]:
        if not 1 <= month <= 12:
            return []
        year = year or self._today().year
        return [f for f in self.feasts_for_year(year) if f.date.month == month]

    def feasts_on(self, month: int, day: int, year: Optional[int] = None) -> List[FeastDescriptor]:
        return [f for f in self.feasts_in_month(month, year) if f.date.day == day]
