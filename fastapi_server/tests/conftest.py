"""
Shared fixtures: an in-memory SQLite store, a seeded bracket, and a fixed clock.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import showdown.models  # noqa: F401
from showdown import config
from showdown.models import Match
from showdown.services.activation import activate_match
from showdown.services.admin import create_season
from showdown.services.bracket import EntrantSeed, seed_bracket

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

SEEDS = [
    EntrantSeed(name="a16z", color_hex="#ff6600", conference="left"),
    EntrantSeed(name="Sequoia", color_hex="#00a651", conference="left"),
    EntrantSeed(name="Benchmark", color_hex="#1f3c88", conference="left"),
    EntrantSeed(name="Accel", color_hex="#e4002b", conference="left"),
    EntrantSeed(name="Founders Fund", color_hex="#111111", conference="right"),
    EntrantSeed(name="Greylock", color_hex="#7a7a7a", conference="right"),
    EntrantSeed(name="Lightspeed", color_hex="#ffc20e", conference="right"),
    EntrantSeed(name="Index", color_hex="#0071ce", conference="right"),
]


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Pin tournament constants regardless of the developer's .env."""
    monkeypatch.setattr(config, "CP_START", 1000)
    monkeypatch.setattr(config, "CP_PER_VOTE", 1)
    monkeypatch.setattr(config, "MATCH_DURATION_HOURS", 72)
    monkeypatch.setattr(config, "EVENT_CUTOFF_SECONDS", 30)
    monkeypatch.setattr(config, "VOTER_KEY_SALT", "test-salt")
    monkeypatch.setattr(config, "ADMIN_TOKEN", "test-admin-token")


@pytest.fixture
def engine():
    """Fresh in-memory DB for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite so concurrent sessions get their own connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'showdown.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def season(session):
    return create_season(session, "Season 1")


@pytest.fixture
def bracket(session, season) -> dict[int, Match]:
    """Seeded bracket keyed by match number; nothing active yet."""
    matches = seed_bracket(session, season.id, SEEDS)
    return {m.match_number: m for m in matches}


def activate(session: Session, match: Match, now: datetime = T0) -> Match:
    """Open a match's window directly, bypassing the one-live-match checks."""
    assert activate_match(session, match, now, exclusive=False)
    session.commit()
    session.refresh(match)
    return match


def seed_into(engine) -> tuple[int, dict[int, int]]:
    """Seed a bracket through its own session; returns (season_id, {match_number: id})."""
    with Session(engine) as session:
        season = create_season(session, "Concurrent")
        matches = seed_bracket(session, season.id, SEEDS)
        return season.id, {m.match_number: m.id for m in matches}
