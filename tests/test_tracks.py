import random

import pytest
from sqlmodel import select

from mar10.models import Race
from mar10.models.race import RACE_COMPLETE
from mar10.services.errors import NotFoundError
from mar10.services.tracks import TRACKS, assign_tracks, assign_tracks_to_group



def test_catalogue():
    assert len(TRACKS) == 30
    assert len({t.name for t in TRACKS}) == 30
    assert len({t.cup for t in TRACKS}) == 8


def test_assign_tracks_distinct_within_catalogue():
    picked = assign_tracks(12, rng=random.Random(0))
    assert len(picked) == 12
    assert len(set(picked)) == 12


def test_assign_tracks_cycles_past_catalogue():
    picked = assign_tracks(len(TRACKS) + 5, rng=random.Random(0))
    assert set(picked) == set(TRACKS)
    assert picked[len(TRACKS):] == picked[:5]


def test_assign_tracks_zero():
    assert assign_tracks(0) == []


def test_assign_tracks_to_group_fills_pending_only(session, make_players, make_group):
    a, b, c = make_players(3)
    group = make_group("A", [a, b, c])
    open_race = Race(group_id=group.id, player1_id=a.id, player2_id=b.id)
    chosen = Race(group_id=group.id, player1_id=a.id, player2_id=c.id, track="Rainbow Road", cup="Special Cup")
    played = Race(group_id=group.id, player1_id=b.id, player2_id=c.id, status=RACE_COMPLETE)
    session.add_all([open_race, chosen, played])
    session.commit()

    assert assign_tracks_to_group(session, group.id, rng=random.Random(2)) == 1

    races = {r.id: r for r in session.exec(select(Race)).all()}
    assert races[open_race.id].track in {t.name for t in TRACKS}
    assert races[open_race.id].cup is not None
    assert races[chosen.id].track == "Rainbow Road"
    assert races[played.id].track is None


def test_assign_tracks_to_missing_group(session):
    with pytest.raises(NotFoundError):
        assign_tracks_to_group(session, 12)
