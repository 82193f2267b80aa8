"""
tests/test_admin.py - Admin events, forced resolution and season control.
"""
from datetime import timedelta

import pytest
from sqlmodel import select

from conftest import T0, activate
from showdown.errors import (
    ActiveMatchExists,
    InvalidEntrant,
    InvalidInput,
    MatchNotActive,
    MatchNotFound,
    MatchNotReady,
    NoActiveMatch,
    SeasonNotFound,
    WindowClosed,
)
from showdown.models import AdminEvent, Match, Season
from showdown.services import admin

ENDS = T0 + timedelta(hours=72)


@pytest.fixture
def live(session, bracket):
    return activate(session, bracket[1])


class TestApplyEvent:
    def test_negative_delta_inside_window(self, session, live):
        new_score = admin.apply_event(
            session, live.id, live.entrant_a_id, -500, "Fund returned capital", now=T0 + timedelta(hours=1)
        )

        assert new_score == 500
        session.refresh(live)
        assert live.current_score_a == 500
        assert live.current_score_b == 1000

    def test_audit_row(self, session, live):
        admin.apply_event(session, live.id, live.entrant_b_id, 25, "  Big exit  ", now=T0)

        event = session.exec(select(AdminEvent)).one()
        assert event.match_id == live.id
        assert event.entrant_id == live.entrant_b_id
        assert event.delta == 25
        assert event.reason == "Big exit"
        assert event.score_after == 1025
        assert event.created_at == T0

    def test_scores_may_go_negative(self, session, live):
        assert admin.apply_event(session, live.id, live.entrant_a_id, -1500, "Scandal", now=T0) == -500

    def test_inside_cutoff_window(self, session, live):
        with pytest.raises(WindowClosed):
            admin.apply_event(
                session, live.id, live.entrant_a_id, -500, "Too late", now=ENDS - timedelta(seconds=10)
            )

        session.refresh(live)
        assert live.current_score_a == 1000
        assert session.exec(select(AdminEvent)).all() == []

    def test_cutoff_boundary_is_closed(self, session, live):
        with pytest.raises(WindowClosed):
            admin.apply_event(session, live.id, live.entrant_a_id, 1, "Edge", now=ENDS - timedelta(seconds=30))

    def test_just_before_cutoff_is_open(self, session, live):
        now = ENDS - timedelta(seconds=31)
        assert admin.apply_event(session, live.id, live.entrant_a_id, 1, "Edge", now=now) == 1001

    def test_blank_reason(self, session, live):
        with pytest.raises(InvalidInput):
            admin.apply_event(session, live.id, live.entrant_a_id, 10, "   ", now=T0)

    def test_idle_match(self, session, bracket):
        with pytest.raises(MatchNotActive):
            admin.apply_event(session, bracket[2].id, bracket[2].entrant_a_id, 10, "Nope", now=T0)

    def test_entrant_not_in_match(self, session, live, bracket):
        with pytest.raises(InvalidEntrant):
            admin.apply_event(session, live.id, bracket[3].entrant_a_id, 10, "Nope", now=T0)

    def test_unknown_match(self, session, live):
        with pytest.raises(MatchNotFound):
            admin.apply_event(session, 999, live.entrant_a_id, 10, "Nope", now=T0)


class TestForceEnd:
    def test_resolves_before_end(self, session, live):
        admin.apply_event(session, live.id, live.entrant_b_id, 10, "Boost", now=T0)

        outcome = admin.force_end(session, live.id, now=T0 + timedelta(minutes=5))

        assert outcome.winner_id == live.entrant_b_id
        session.refresh(live)
        assert live.finished

    def test_idempotent(self, session, live):
        first = admin.force_end(session, live.id, now=T0)
        second = admin.force_end(session, live.id, now=T0)
        assert second.already_finished
        assert second.winner_id == first.winner_id

    def test_force_start_next(self, session, season, live):
        admin.force_end(session, live.id, now=T0)
        match = admin.force_start_next(session, season.id, now=T0)
        assert match.match_number == 2


class TestSeasons:
    def test_create_season(self, session):
        season = admin.create_season(session, " Season 2 ")
        assert season.id is not None
        assert season.name == "Season 2"
        assert not season.active

    def test_create_season_needs_name(self, session):
        with pytest.raises(InvalidInput):
            admin.create_season(session, "")

    def test_start_season(self, session, season, bracket):
        other = admin.create_season(session, "Old season")
        other.active = True
        session.add(other)
        session.commit()

        match = admin.start_season(session, season.id, now=T0)

        assert match.match_number == 1
        assert match.active
        assert match.ends_at == T0 + timedelta(hours=72)
        assert session.get(Season, season.id).active
        session.refresh(other)
        assert not other.active

    def test_start_season_twice(self, session, season, bracket):
        admin.start_season(session, season.id, now=T0)
        with pytest.raises(ActiveMatchExists):
            admin.start_season(session, season.id, now=T0)

    def test_start_unknown_season(self, session):
        with pytest.raises(SeasonNotFound):
            admin.start_season(session, 999, now=T0)

    def test_start_unseeded_season(self, session, season):
        with pytest.raises(MatchNotFound):
            admin.start_season(session, season.id, now=T0)

    def test_start_season_after_first_match(self, session, season, live):
        admin.force_end(session, live.id, now=T0)
        with pytest.raises(MatchNotReady):
            admin.start_season(session, season.id, now=T0)


class TestEndMatchSoon:
    def test_moves_end_time(self, session, live):
        match = admin.end_match_soon(session, seconds=60, now=T0 + timedelta(hours=1))
        assert match.id == live.id
        assert match.ends_at == T0 + timedelta(hours=1, minutes=1)

    def test_no_live_match(self, session, bracket):
        with pytest.raises(NoActiveMatch):
            admin.end_match_soon(session, now=T0)

    def test_negative_seconds(self, session, live):
        with pytest.raises(InvalidInput):
            admin.end_match_soon(session, seconds=-1, now=T0)
