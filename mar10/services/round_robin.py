"""
Round Robin Scheduling

Every member of a group meets every other member exactly once. Pairings come
from the circle method: the first entrant stays fixed while the rest rotate one
position per round. Odd groups get a BYE placeholder whose pairings are dropped.

Regeneration replaces PENDING races only; COMPLETE races (and their results)
are never touched.
"""
import logging
from typing import Any, List, Sequence, Tuple

from sqlmodel import Session, select

from mar10.models.group import Group, GroupMember
from mar10.models.race import RACE_PENDING, Race, RaceResult
from mar10.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

BYE = object()


def round_robin_pairings(entrants: Sequence[Any]) -> List[Tuple[int, int, Any, Any]]:
    """
    Circle-method pairings. Returns list of (round_index, sequence_in_round, a, b).

    n entrants yield n*(n-1)/2 pairings, each unordered pair exactly once.
    Round grouping: round r pairs position i with position (m-1-i) of the
    rotated list, where m is n rounded up to even.
    """
    positions: List[Any] = list(entrants)
    if len(positions) % 2 == 1:
        positions.append(BYE)

    m = len(positions)
    half = m // 2

    result: List[Tuple[int, int, Any, Any]] = []
    for round_num in range(1, m):
        seq = 0
        for i in range(half):
            a, b = positions[i], positions[m - 1 - i]
            if a is BYE or b is BYE:
                continue
            seq += 1
            result.append((round_num, seq, a, b))
        # Rotate: keep anchor, move last to second, shift others
        positions = [positions[0]] + [positions[-1]] + positions[1:-1]

    return result


def generate_round_robin(session: Session, group_id: int) -> int:
    """
    Replace the group's PENDING races with a fresh round robin.

    Returns the number of matchups created. New races start PENDING with no
    track/cup assigned.
    """
    group = session.get(Group, group_id)
    if not group:
        raise NotFoundError(f"Group {group_id} not found")

    member_ids = session.exec(
        select(GroupMember.player_id).where(GroupMember.group_id == group_id).order_by(GroupMember.id)
    ).all()
    if len(member_ids) < 2:
        raise ValidationError(
            f"Group {group.name} has insufficient players for a round robin "
            f"(need at least 2, have {len(member_ids)})"
        )

    pairings = round_robin_pairings(member_ids)

    pending = session.exec(
        select(Race).where(Race.group_id == group_id, Race.status == RACE_PENDING)
    ).all()
    for race in pending:
        for stale in session.exec(select(RaceResult).where(RaceResult.race_id == race.id)).all():
            session.delete(stale)
        session.delete(race)

    for _, _, player1_id, player2_id in pairings:
        session.add(Race(group_id=group_id, player1_id=player1_id, player2_id=player2_id))

    session.commit()
    logger.info(
        "Round robin for group %d: replaced %d pending races with %d matchups",
        group_id,
        len(pending),
        len(pairings),
    )
    return len(pairings)
