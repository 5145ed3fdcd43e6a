import random

import pytest
from sqlmodel import Session, select

from mar10.models import Group, GroupMember, Race
from mar10.services.errors import NotFoundError, ValidationError
from mar10.services.group_draw import _group_name, auto_draw_groups, calc_group_sizes


@pytest.mark.parametrize(
    "n,expected",
    [
        (2, [2]),
        (3, [3]),
        (4, [4]),
        (5, [5]),
        (6, [3, 3]),
        (7, [4, 3]),
        (8, [4, 4]),
        (9, [3, 3, 3]),
        (10, [4, 3, 3]),
        (12, [4, 4, 4]),
        (13, [4, 3, 3, 3]),
    ],
)
def test_calc_group_sizes(n, expected):
    assert calc_group_sizes(n) == expected


def test_calc_group_sizes_covers_everyone():
    for n in range(2, 60):
        sizes = calc_group_sizes(n)
        assert sum(sizes) == n
        assert max(sizes) - min(sizes) <= 1


def test_calc_group_sizes_rejects_single_player():
    with pytest.raises(ValidationError):
        calc_group_sizes(1)


def test_group_names():
    assert [_group_name(i) for i in (0, 1, 25, 26, 27)] == ["A", "B", "Z", "AA", "AB"]


def _groups(session: Session, tournament_id: int):
    groups = session.exec(select(Group).where(Group.tournament_id == tournament_id).order_by(Group.id)).all()
    return {
        g.name: [m.player_id for m in session.exec(select(GroupMember).where(GroupMember.group_id == g.id)).all()]
        for g in groups
    }


def test_auto_draw_places_every_player_once(session, tournament, make_players):
    players = make_players(10)

    result = auto_draw_groups(session, tournament.id, rng=random.Random(7))

    assert result == {"groups": 3, "players": 10}
    drawn = _groups(session, tournament.id)
    assert sorted(drawn) == ["A", "B", "C"]
    assert sorted(len(members) for members in drawn.values()) == [3, 3, 4]
    assert sorted(pid for members in drawn.values() for pid in members) == sorted(p.id for p in players)


def test_auto_draw_is_reproducible_with_seeded_rng(session, tournament, make_players):
    make_players(8)
    auto_draw_groups(session, tournament.id, rng=random.Random(3))
    first = _groups(session, tournament.id)

    auto_draw_groups(session, tournament.id, rng=random.Random(3))

    assert _groups(session, tournament.id) == first


def test_auto_draw_keeps_groups_with_races(session, tournament, make_players, make_group):
    a, b = make_players(2)
    played = make_group("A", [a, b])
    make_group("B", [])
    session.add(Race(group_id=played.id, player1_id=a.id, player2_id=b.id))
    session.commit()
    make_players(4, prefix="Q")

    result = auto_draw_groups(session, tournament.id, rng=random.Random(1))

    drawn = _groups(session, tournament.id)
    assert result == {"groups": 2, "players": 6}
    # Played group kept as-is; the empty one replaced; new names continue after it
    assert drawn["A"] == [a.id, b.id]
    assert sorted(drawn) == ["A", "B", "C"]


def test_auto_draw_needs_two_players(session, tournament, make_players):
    make_players(1)
    with pytest.raises(ValidationError):
        auto_draw_groups(session, tournament.id)
    assert _groups(session, tournament.id) == {}


def test_auto_draw_missing_tournament(session):
    with pytest.raises(NotFoundError):
        auto_draw_groups(session, 77)


def test_auto_draw_skips_names_of_kept_groups(session, tournament, make_players, make_group):
    a, b, c = make_players(3)
    make_group("A", [])
    played = make_group("B", [a, b])
    session.add(Race(group_id=played.id, player1_id=a.id, player2_id=b.id))
    session.commit()

    auto_draw_groups(session, tournament.id, rng=random.Random(5))

    drawn = _groups(session, tournament.id)
    assert sorted(drawn) == ["B", "C"]
    assert sorted(drawn["C"]) == sorted([a.id, b.id, c.id])
