"""
Tournament lifecycle: SETUP -> GROUP_STAGE -> FINALS -> COMPLETE.

Each step forward is guarded by a readiness check; steps cannot be skipped or undone.
"""
from typing import Dict

from sqlmodel import Session, func, select

from mar10.models.bracket import MATCH_PENDING, BracketMatch
from mar10.models.group import Group, GroupMember
from mar10.models.race import RACE_PENDING, Race
from mar10.models.tournament import (
    TOURNAMENT_COMPLETE,
    TOURNAMENT_FINALS,
    TOURNAMENT_GROUP_STAGE,
    TOURNAMENT_SETUP,
    Tournament,
)
from mar10.services.errors import NotFoundError, ValidationError
from mar10.utils.sql import scalar_int

VALID_TRANSITIONS: Dict[str, str] = {
    TOURNAMENT_SETUP: TOURNAMENT_GROUP_STAGE,
    TOURNAMENT_GROUP_STAGE: TOURNAMENT_FINALS,
    TOURNAMENT_FINALS: TOURNAMENT_COMPLETE,
}


def _plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{suffix if count != 1 else ''}"


def transition_tournament(session: Session, tournament_id: int, new_status: str) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError(f"Tournament {tournament_id} not found")

    if VALID_TRANSITIONS.get(tournament.status) != new_status:
        raise ValidationError(f"Cannot transition from {tournament.status} to {new_status}")

    if new_status == TOURNAMENT_GROUP_STAGE:
        member_counts = session.exec(
            select(Group.id, func.count(GroupMember.id))
            .join(GroupMember, GroupMember.group_id == Group.id)
            .where(Group.tournament_id == tournament_id)
            .group_by(Group.id)
        ).all()
        if not any(count >= 2 for _, count in member_counts):
            raise ValidationError(
                "Need at least one group with 2 or more players before starting the group stage"
            )

    elif new_status == TOURNAMENT_FINALS:
        pending = scalar_int(
            session.exec(
                select(func.count(Race.id))
                .join(Group, Race.group_id == Group.id)
                .where(Group.tournament_id == tournament_id, Race.status == RACE_PENDING)
            ).one()
        )
        if pending > 0:
            raise ValidationError(
                f"{_plural(pending, 'race')} still pending; complete all group races before starting finals"
            )

    elif new_status == TOURNAMENT_COMPLETE:
        pending = scalar_int(
            session.exec(
                select(func.count(BracketMatch.id)).where(
                    BracketMatch.tournament_id == tournament_id,
                    BracketMatch.status == MATCH_PENDING,
                )
            ).one()
        )
        if pending > 0:
            raise ValidationError(
                f"{_plural(pending, 'bracket match', 'es')} still pending; "
                "complete the bracket before marking the tournament complete"
            )

    tournament.status = new_status
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament
