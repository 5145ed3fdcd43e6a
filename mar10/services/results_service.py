"""
Result entry for group races and bracket matches.

Submissions arrive as typed ResultEntry values; loose payloads are validated by
pydantic at the boundary. Points are looked up here so stored results always
agree with the points table in force when they were entered.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field
from sqlmodel import Session, select

from mar10.models.bracket import MATCH_COMPLETE, BracketMatch
from mar10.models.race import RACE_COMPLETE, Race, RaceResult
from mar10.services.advancement_service import advance_winner, match_slots, slot_unreachable
from mar10.services.errors import NotFoundError, ValidationError
from mar10.services.points import MAX_POSITION, get_points

logger = logging.getLogger(__name__)


class ResultEntry(BaseModel):
    player_id: int
    position: int = Field(ge=1, le=MAX_POSITION)


def _check_unique(entries: Sequence[ResultEntry]) -> None:
    if not entries:
        raise ValidationError("At least one result is required")
    positions = [e.position for e in entries]
    if len(set(positions)) != len(positions):
        raise ValidationError("Duplicate positions not allowed")
    if sorted(positions) != list(range(1, len(entries) + 1)):
        raise ValidationError(f"Positions must run 1..{len(entries)} without gaps, got {sorted(positions)}")
    players = [e.player_id for e in entries]
    if len(set(players)) != len(players):
        raise ValidationError("Each player may only have one result")


def record_race_results(session: Session, race_id: int, entries: Sequence[ResultEntry]) -> List[RaceResult]:
    """
    Replace a race's results and mark it COMPLETE.

    For a 1v1 race exactly the two assigned players must be submitted.
    Returns the stored results ordered by position.
    """
    race = session.get(Race, race_id)
    if not race:
        raise NotFoundError(f"Race {race_id} not found")

    _check_unique(entries)
    if race.player1_id is not None and race.player2_id is not None:
        expected = {race.player1_id, race.player2_id}
        submitted = [e.player_id for e in entries]
        if len(submitted) != 2 or set(submitted) != expected:
            raise ValidationError("Submitted players do not match this matchup")

    for existing in session.exec(select(RaceResult).where(RaceResult.race_id == race_id)).all():
        session.delete(existing)
    session.flush()

    for entry in entries:
        session.add(
            RaceResult(
                race_id=race_id,
                player_id=entry.player_id,
                position=entry.position,
                points=get_points(entry.position),
            )
        )

    race.status = RACE_COMPLETE
    race.completed_at = datetime.utcnow()
    session.add(race)
    session.commit()

    return list(
        session.exec(select(RaceResult).where(RaceResult.race_id == race_id).order_by(RaceResult.position)).all()
    )


def record_bracket_results(session: Session, match_id: int, entries: Sequence[ResultEntry]) -> BracketMatch:
    """
    Record a bracket match, mark it COMPLETE and advance the winner (position 1).

    A COMPLETE match is terminal; correcting it requires regenerating the bracket.
    """
    match = session.get(BracketMatch, match_id)
    if not match:
        raise NotFoundError(f"Bracket match {match_id} not found")
    if match.status == MATCH_COMPLETE:
        raise ValidationError(f"Bracket match {match_id} is already complete")

    _check_unique(entries)
    all_slots = match_slots(session, match.id)
    waiting = [
        s.slot_index
        for s in all_slots
        if s.player_id is None and not slot_unreachable(session, match, s.slot_index)
    ]
    if waiting:
        raise ValidationError(f"Bracket match {match_id} is still waiting for an opponent")

    slots = {s.player_id: s for s in all_slots if s.player_id is not None}
    unknown = [e.player_id for e in entries if e.player_id not in slots]
    if unknown:
        raise ValidationError(f"Players {unknown} are not in bracket match {match_id}")
    missing = sorted(set(slots) - {e.player_id for e in entries})
    if missing:
        raise ValidationError(f"Missing results for players {missing} in bracket match {match_id}")

    for entry in entries:
        slot = slots[entry.player_id]
        slot.position = entry.position
        slot.points = get_points(entry.position)
        if entry.position == 1:
            slot.advanced = True
        session.add(slot)

    match.status = MATCH_COMPLETE
    session.add(match)
    session.commit()

    winner = next(e.player_id for e in entries if e.position == 1)
    logger.info("Bracket match %d (R%d M%d) won by player %d", match_id, match.round, match.match_number, winner)
    advance_winner(session, match_id)

    session.refresh(match)
    return match


def update_race_track(
    session: Session, race_id: int, track: Optional[str] = None, cup: Optional[str] = None
) -> Race:
    race = session.get(Race, race_id)
    if not race:
        raise NotFoundError(f"Race {race_id} not found")
    if track is not None:
        race.track = track
    if cup is not None:
        race.cup = cup
    session.add(race)
    session.commit()
    session.refresh(race)
    return race
