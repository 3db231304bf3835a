"""Pytest configuration for backend tests."""
import sys
import os
import random
from datetime import date, datetime
from pathlib import Path
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings refuse to load without a DATABASE_URL; tests run on in-memory SQLite.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from app.database import Base, register_sqlite_functions

# Import the entire models module to ensure all models are registered with Base.metadata
import app.models  # noqa: F401
from app.models import Monastery, MonasteryRegion, MonasteryType
from app.services.recommendation_engine import MonasteryRecommender

TODAY = date(2025, 11, 25)
LONG_TEXT = "Ansamblu monahal cu ziduri de piatra si chilii vechi. " * 8  # > 300 characters


@pytest.fixture(scope="session")
def engine():
    """
    In-memory SQLite engine shared by the whole test session.

    StaticPool keeps a single connection so every session sees the same database.
    """
    test_engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )
    register_sqlite_functions(test_engine)

    if not Base.metadata.tables:
        raise RuntimeError(
            "No tables registered in Base.metadata. "
            "Did you import app.models? All model classes must be imported before create_all()."
        )
    Base.metadata.create_all(bind=test_engine)

    yield test_engine

    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    """
    Create a database session for each test.

    Uses a transaction that is rolled back after each test for isolation.
    """
    connection = engine.connect()
    transaction = connection.begin()

    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
    )
    session = SessionLocal()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


def make_monastery(**overrides) -> Monastery:
    """Monastery with sensible defaults; override only what a test cares about."""
    slug = overrides.pop("slug")
    fields = {
        "name": f"Mănăstirea {slug.replace('-', ' ').title()}",
        "slug": slug,
        "description": "Mănăstire ortodoxă.",
        "region": MonasteryRegion.MOLDOVA,
        "city": "Oraș",
        "county": "Județ",
        "type": MonasteryType.MONASTERY,
        "verification": True,
    }
    fields.update(overrides)
    return Monastery(**fields)


@pytest.fixture
def catalog(db: Session) -> dict:
    """A small catalog covering every strategy's matching and non-matching cases, keyed by slug."""
    monasteries = [
        make_monastery(
            slug="putna",
            region=MonasteryRegion.BUCOVINA,
            patron_saint="Adormirea Maicii Domnului",
            patron_saint_date=datetime(1990, 8, 15),
            latitude=47.8686, longitude=25.6103,
            images=["putna.jpg"], relics=["Sfântul Ștefan cel Mare"],
        ),
        make_monastery(
            slug="voronet",
            region=MonasteryRegion.BUCOVINA,
            patron_saint="Sfântul Gheorghe",
            patron_saint_date=datetime(1488, 4, 23),
            latitude=47.5172, longitude=25.8636,
        ),
        make_monastery(
            slug="sambata-de-sus",
            region=MonasteryRegion.TRANSILVANIA,
            patron_saint="Sfinții Împărați Constantin și Elena",
            patron_saint_date=datetime(2001, 5, 21),
            special_features="Grădina și livada mănăstirii",
            latitude=45.7597, longitude=24.8106,
        ),
        make_monastery(
            slug="horezu",
            region=MonasteryRegion.OLTENIA,
            patron_saint="Sfinții Împărați Constantin și Elena",
            patron_saint_date=datetime(1993, 5, 21),
            description="Ctitorie brâncovenească înconjurată de un parc dendrologic.",
            latitude=45.1718, longitude=24.0077,
        ),
        make_monastery(
            slug="neamt",
            region=MonasteryRegion.MOLDOVA,
            patron_saint="Înălțarea Domnului",
            patron_saint_date=datetime(2000, 5, 20),
            latitude=47.2603, longitude=26.2009,
        ),
        make_monastery(
            slug="barsana",
            region=MonasteryRegion.MARAMURES,
            patron_saint="Soborul celor 12 Apostoli",
            patron_saint_date=datetime(1999, 6, 21),
            description=LONG_TEXT,
            latitude=47.8133, longitude=24.0631,
        ),
        make_monastery(
            slug="celic-dere",
            region=MonasteryRegion.DOBROGEA,
            type=MonasteryType.HERMITAGE,
            patron_saint="Adormirea Maicii Domnului",
            description=LONG_TEXT,
        ),
        make_monastery(
            slug="partos",
            region=MonasteryRegion.BANAT,
            description=LONG_TEXT,
            verification=False,
        ),
        make_monastery(
            slug="izbuc",
            region=MonasteryRegion.CRISANA,
            type=MonasteryType.CHURCH,
            description="Schit mic.",
        ),
        make_monastery(
            slug="curtea-de-arges",
            region=MonasteryRegion.MUNTENIA,
            type=MonasteryType.CHURCH,
            patron_saint="Sfântul Ierarh Nicolae",
            patron_saint_date=datetime(1517, 12, 6),
            description="Loc de turism cu multe activități pentru pelerini.",
        ),
        make_monastery(
            slug="pestera-sfantului-andrei",
            name="Mănăstirea Peștera Sfântului Apostol Andrei",
            region=MonasteryRegion.DOBROGEA,
            type=MonasteryType.HERMITAGE,
            patron_saint="Sfântul Apostol Andrei",
            patron_saint_date=datetime(1943, 11, 30),
            verification=False,
        ),
        make_monastery(
            slug="sihastria",
            region=MonasteryRegion.MOLDOVA,
            type=MonasteryType.HERMITAGE,
            images=None,
            relics=None,
        ),
    ]
    db.add_all(monasteries)
    db.flush()
    return {m.slug: m for m in monasteries}


@pytest.fixture
def recommender(db: Session) -> MonasteryRecommender:
    """Engine with a seeded random source and a fixed clock."""
    return MonasteryRecommender(db=db, rng=random.Random(42), today=lambda: TODAY)
