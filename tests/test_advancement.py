"""
Tests for Bracket Advancement Service
"""
import logging

import pytest
from sqlmodel import Session

from mar10.models.bracket import EMPTY, MATCH_COMPLETE, Occupied
from mar10.services.advancement_service import (
    advance_winner,
    match_slots,
    next_position,
    resolve_all_advancements,
    total_rounds,
    winner_of,
)
from mar10.services.errors import NotFoundError


def _players(session: Session, match) -> list:
    return [s.player_id for s in match_slots(session, match.id)]


def _finish(session: Session, match, players, winner):
    """Fill a match's slots and mark `winner` advanced, without advancing."""
    for slot, player in zip(match_slots(session, match.id), players):
        slot.player_id = player.id if player else None
        slot.advanced = player is winner
        session.add(slot)
    match.status = MATCH_COMPLETE
    session.add(match)
    session.commit()


@pytest.mark.parametrize(
    "match_number,expected",
    [(1, (1, 0)), (2, (1, 1)), (3, (2, 0)), (4, (2, 1)), (5, (3, 0)), (8, (4, 1))],
)
def test_next_position(match_number, expected):
    assert next_position(match_number) == expected


def test_total_rounds(session, tournament, make_skeleton):
    assert total_rounds(session, tournament.id) == 0
    make_skeleton(8)
    assert total_rounds(session, tournament.id) == 3


def test_winner_of_requires_single_advanced_slot(session, make_skeleton, make_players):
    a, b = make_players(2)
    matches = make_skeleton(2)
    slots = match_slots(session, matches[(1, 1)].id)
    assert winner_of(slots) == EMPTY

    slots[0].player_id, slots[1].player_id = a.id, b.id
    slots[1].advanced = True
    assert winner_of(slots) == Occupied(b.id)

    slots[0].advanced = True
    assert winner_of(slots) == EMPTY


def test_round_one_match_three_feeds_round_two_match_two_slot_zero(session, make_skeleton, make_players):
    a, b = make_players(2)
    matches = make_skeleton(8)
    _finish(session, matches[(1, 3)], [a, b], winner=b)

    successor = advance_winner(session, matches[(1, 3)].id)

    assert successor.id == matches[(2, 2)].id
    assert _players(session, matches[(2, 2)]) == [b.id, None]


def test_even_match_feeds_slot_one_and_leaves_sibling(session, make_skeleton, make_players):
    a, b, c, d = make_players(4)
    matches = make_skeleton(4)
    _finish(session, matches[(1, 1)], [a, b], winner=a)
    _finish(session, matches[(1, 2)], [c, d], winner=d)

    advance_winner(session, matches[(1, 2)].id)
    assert _players(session, matches[(2, 1)]) == [None, d.id]

    advance_winner(session, matches[(1, 1)].id)
    assert _players(session, matches[(2, 1)]) == [a.id, d.id]


def test_advance_is_idempotent(session, make_skeleton, make_players):
    a, b = make_players(2)
    matches = make_skeleton(4)
    _finish(session, matches[(1, 1)], [a, b], winner=a)

    first = advance_winner(session, matches[(1, 1)].id)
    second = advance_winner(session, matches[(1, 1)].id)

    assert first.id == second.id
    assert _players(session, matches[(2, 1)]) == [a.id, None]


def test_final_is_noop(session, make_skeleton, make_players):
    a, b = make_players(2)
    matches = make_skeleton(2)
    _finish(session, matches[(1, 1)], [a, b], winner=a)

    assert advance_winner(session, matches[(1, 1)].id) is None
    assert _players(session, matches[(1, 1)]) == [a.id, b.id]


def test_pending_match_is_noop(session, make_skeleton, make_players):
    a, b = make_players(2)
    matches = make_skeleton(4)
    for slot, player in zip(match_slots(session, matches[(1, 1)].id), [a, b]):
        slot.player_id = player.id
        session.add(slot)
    session.commit()

    assert advance_winner(session, matches[(1, 1)].id) is None
    assert _players(session, matches[(2, 1)]) == [None, None]


def test_complete_without_winner_is_noop(session, make_skeleton, make_players):
    a, b = make_players(2)
    matches = make_skeleton(4)
    _finish(session, matches[(1, 1)], [a, b], winner=None)

    assert advance_winner(session, matches[(1, 1)].id) is None
    assert _players(session, matches[(2, 1)]) == [None, None]


def test_missing_match_raises(session):
    with pytest.raises(NotFoundError):
        advance_winner(session, 999)


def test_missing_successor_logs_warning(session, make_skeleton, make_players, caplog):
    a, b = make_players(2)
    matches = make_skeleton(8)
    _finish(session, matches[(1, 1)], [a, b], winner=a)
    for slot in match_slots(session, matches[(2, 1)].id):
        session.delete(slot)
    session.delete(matches[(2, 1)])
    session.commit()

    with caplog.at_level(logging.WARNING, logger="mar10.services.advancement_service"):
        assert advance_winner(session, matches[(1, 1)].id) is None
    assert "regenerate the bracket" in caplog.text


class TestResolveAllAdvancements:
    def test_repairs_half_advanced_bracket(self, session, tournament, make_skeleton, make_players):
        a, b, c, d = make_players(4)
        matches = make_skeleton(4)
        _finish(session, matches[(1, 1)], [a, b], winner=b)
        _finish(session, matches[(1, 2)], [c, d], winner=c)

        result = resolve_all_advancements(session, tournament.id)

        assert result == {"matches_processed": 2, "empty_before": 2, "empty_after": 0}
        assert _players(session, matches[(2, 1)]) == [b.id, c.id]

    def test_no_bracket(self, session, tournament):
        assert resolve_all_advancements(session, tournament.id) == {
            "matches_processed": 0,
            "empty_before": 0,
            "empty_after": 0,
        }

    def test_second_pass_changes_nothing(self, session, tournament, make_skeleton, make_players):
        a, b = make_players(2)
        matches = make_skeleton(4)
        _finish(session, matches[(1, 1)], [a, b], winner=a)

        resolve_all_advancements(session, tournament.id)
        again = resolve_all_advancements(session, tournament.id)

        assert again["empty_before"] == again["empty_after"] == 3
        assert _players(session, matches[(2, 1)]) == [a.id, None]

    def test_missing_tournament_raises(self, session):
        with pytest.raises(NotFoundError):
            resolve_all_advancements(session, 4040)
