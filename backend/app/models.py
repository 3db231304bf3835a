from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Float, JSON, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from datetime import datetime
import enum
from app.database import Base


class MonasteryRegion(str, enum.Enum):
    MOLDOVA = "moldova"
    BUCOVINA = "bucovina"
    MUNTENIA = "muntenia"
    OLTENIA = "oltenia"
    TRANSILVANIA = "transilvania"
    MARAMURES = "maramures"
    BANAT = "banat"
    DOBROGEA = "dobrogea"
    CRISANA = "crisana"


class MonasteryType(str, enum.Enum):
    MONASTERY = "monastery"
    HERMITAGE = "hermitage"
    CHURCH = "church"


# Postgres arrays/JSONB in production, plain JSON on SQLite (tests)
TextArray = ARRAY(Text).with_variant(JSON(), "sqlite")
JSONDocument = JSONB().with_variant(JSON(), "sqlite")


class Monastery(Base):
    __tablename__ = "monasteries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)
    short_description = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    region = Column(
        SQLEnum(
            MonasteryRegion,
            name="monastery_region",
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
        index=True,
    )
    city = Column(Text, nullable=False)
    county = Column(Text, nullable=False)
    access = Column(Text, nullable=True)
    patron_saint = Column(Text, nullable=True)
    # Only month and day are meaningful; the year is whatever was entered.
    patron_saint_date = Column(DateTime, nullable=True)
    founded_year = Column(Integer, nullable=True)
    history = Column(Text, nullable=True)
    special_features = Column(Text, nullable=True)
    relics = Column(TextArray, nullable=True)
    type = Column(
        SQLEnum(
            MonasteryType,
            name="monastery_type",
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
    )
    images = Column(TextArray, nullable=True)
    cover_image = Column(Text, nullable=True)
    icon_descriptions = Column(JSONDocument, nullable=True)
    contact_email = Column(Text, nullable=True)
    contact_phone = Column(Text, nullable=True)
    website = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    verification = Column(Boolean, nullable=False, default=False)
    administrator_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None
