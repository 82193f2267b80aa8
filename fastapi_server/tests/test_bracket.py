"""
tests/test_bracket.py - Bracket seeding tests.
"""
import pytest
from sqlmodel import select

from conftest import SEEDS
from showdown.errors import InvalidInput, SeasonNotFound
from showdown.models import Entrant, Match
from showdown.services.bracket import EntrantSeed, seed_bracket
from showdown.services.queries import entrants_by_id, get_bracket


class TestSeedBracket:
    def test_creates_seven_matches(self, session, bracket):
        assert sorted(bracket) == [1, 2, 3, 4, 5, 6, 7]
        assert [m.round for m in get_bracket(session, bracket[1].season_id)] == [1, 1, 1, 1, 2, 2, 3]

    def test_quarterfinals_pair_entrants_by_conference(self, session, season, bracket):
        entrants = entrants_by_id(session, season.id)
        names = {
            n: (entrants[bracket[n].entrant_a_id].name, entrants[bracket[n].entrant_b_id].name)
            for n in (1, 2, 3, 4)
        }
        assert names == {
            1: ("a16z", "Sequoia"),
            2: ("Benchmark", "Accel"),
            3: ("Founders Fund", "Greylock"),
            4: ("Lightspeed", "Index"),
        }

    def test_later_rounds_start_empty(self, bracket):
        for n in (5, 6, 7):
            assert bracket[n].entrant_a_id is None
            assert bracket[n].entrant_b_id is None

    def test_progression_links(self, bracket):
        next_numbers = {
            n: next((k for k, m in bracket.items() if m.id == bracket[n].next_match_id), None)
            for n in bracket
        }
        assert next_numbers == {1: 5, 2: 5, 3: 6, 4: 6, 5: 7, 6: 7, 7: None}

    def test_scores_start_at_constant_and_nothing_live(self, bracket):
        for match in bracket.values():
            assert match.current_score_a == 1000
            assert match.current_score_b == 1000
            assert not match.active
            assert not match.finished
            assert match.started_at is None

    def test_entrants_not_eliminated(self, session, season, bracket):
        entrants = entrants_by_id(session, season.id)
        assert len(entrants) == 8
        assert not any(e.eliminated for e in entrants.values())

    def test_starting_score_is_configurable(self, session, season, monkeypatch):
        from showdown import config

        monkeypatch.setattr(config, "CP_START", 250)
        matches = seed_bracket(session, season.id, SEEDS)
        assert {m.current_score_a for m in matches} == {250}


class TestSeedValidation:
    def test_rejects_seven_entrants(self, session, season):
        with pytest.raises(InvalidInput):
            seed_bracket(session, season.id, SEEDS[:7])

    def test_rejects_nine_entrants(self, session, season):
        with pytest.raises(InvalidInput):
            seed_bracket(session, season.id, SEEDS + [SEEDS[0]])

    def test_rejects_unbalanced_conferences(self, session, season):
        seeds = list(SEEDS)
        seeds[4] = EntrantSeed(name="Turncoat", color_hex="#000000", conference="left")
        with pytest.raises(InvalidInput, match="4 left and 4 right"):
            seed_bracket(session, season.id, seeds)

    def test_rejects_unknown_conference(self, session, season):
        seeds = list(SEEDS)
        seeds[0] = EntrantSeed(name="Nowhere", color_hex="#000000", conference="middle")
        with pytest.raises(InvalidInput):
            seed_bracket(session, season.id, seeds)

    def test_rejects_blank_name(self, session, season):
        seeds = list(SEEDS)
        seeds[0] = EntrantSeed(name="   ", color_hex="#000000", conference="left")
        with pytest.raises(InvalidInput):
            seed_bracket(session, season.id, seeds)

    def test_unknown_season(self, session):
        with pytest.raises(SeasonNotFound):
            seed_bracket(session, 999, SEEDS)

    def test_rejection_writes_nothing(self, session, season):
        with pytest.raises(InvalidInput):
            seed_bracket(session, season.id, SEEDS[:7])
        assert session.exec(select(Entrant)).all() == []
        assert session.exec(select(Match)).all() == []
