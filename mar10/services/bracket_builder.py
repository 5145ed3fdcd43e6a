"""
Single-elimination bracket generation from group standings.

1. Take the top `advance_count` of every group's standings.
2. Interleave rank-major across groups (all group winners, then all runners-up, ...)
   so players from the same group land far apart.
3. Size the bracket to the next power of two and rebuild it from scratch.
4. Seed round 1 from the seed line; the top seeds absorb the bye gaps.
5. Resolve byes with a worklist until no unopposed match is left.
"""
import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from sqlmodel import Session, select

from mar10.models.bracket import (
    EMPTY,
    MATCH_COMPLETE,
    BracketMatch,
    BracketSlot,
    Occupied,
    SlotOccupant,
)
from mar10.models.group import Group
from mar10.models.tournament import Tournament
from mar10.services.advancement_service import advance_winner, match_slots, slot_unreachable
from mar10.services.errors import NotFoundError, ValidationError
from mar10.services.standings import get_group_standings

logger = logging.getLogger(__name__)


@dataclass
class BracketSummary:
    bracket_size: int
    total_rounds: int
    advancer_count: int
    byes_resolved: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "bracket_size": self.bracket_size,
            "total_rounds": self.total_rounds,
            "advancer_count": self.advancer_count,
        }


def next_power_of_two(n: int) -> int:
    size = 1
    while size < n:
        size *= 2
    return size


def interleave_advancers(ranked_groups: Sequence[Sequence[int]]) -> List[int]:
    """Rank-major order: rank 0 of every group (in group order), then rank 1, ..."""
    depth = max((len(g) for g in ranked_groups), default=0)
    return [group[rank] for rank in range(depth) for group in ranked_groups if rank < len(group)]


def seed_line(advancers: Sequence[int], bracket_size: int) -> List[SlotOccupant]:
    """
    Round-1 slot contents in bracket order: entries 2i and 2i+1 fill match i+1.

    The bracket_size - len(advancers) bye gaps go one per match to the first
    (highest) seeds; the remaining seeds pair off in sequence.
    """
    byes = bracket_size - len(advancers)
    remaining = iter(advancers)

    def take() -> SlotOccupant:
        player_id = next(remaining, None)
        return EMPTY if player_id is None else Occupied(player_id)

    line: List[SlotOccupant] = []
    for i in range(bracket_size // 2):
        top = take()
        bottom = EMPTY if i < byes else take()
        line.extend([top, bottom])
    return line


def generate_bracket(session: Session, tournament_id: int, advance_count: int) -> BracketSummary:
    """
    Rebuild the tournament's bracket from current group standings.

    Destructive: any existing bracket (including played matches) is deleted.
    """
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError(f"Tournament {tournament_id} not found")
    if advance_count < 1:
        raise ValidationError(f"advance_count must be at least 1, got {advance_count}")

    groups = session.exec(
        select(Group).where(Group.tournament_id == tournament_id).order_by(Group.id)
    ).all()
    ranked_groups = [
        [s.player_id for s in get_group_standings(session, group.id)[:advance_count]] for group in groups
    ]
    advancers = interleave_advancers(ranked_groups)
    if len(advancers) < 2:
        raise ValidationError(
            f"Tournament {tournament_id} has insufficient advancers for a bracket "
            f"(need at least 2, have {len(advancers)})"
        )

    bracket_size = next_power_of_two(len(advancers))
    rounds = bracket_size.bit_length() - 1

    deleted = _delete_bracket(session, tournament_id)
    round_one = _build_skeleton(session, tournament_id, bracket_size, rounds)

    line = seed_line(advancers, bracket_size)
    for i, (match, slots) in enumerate(round_one):
        for slot in slots:
            slot.place(line[2 * i + slot.slot_index])
            session.add(slot)
    session.flush()

    byes = resolve_byes(session, [match.id for match, _ in round_one])
    session.commit()

    logger.info(
        "Bracket for tournament %d: %d advancers, size %d, %d rounds, %d byes (replaced %d matches)",
        tournament_id,
        len(advancers),
        bracket_size,
        rounds,
        byes,
        deleted,
    )
    return BracketSummary(
        bracket_size=bracket_size,
        total_rounds=rounds,
        advancer_count=len(advancers),
        byes_resolved=byes,
    )


def resolve_byes(session: Session, match_ids: Iterable[int]) -> int:
    """
    Drain a worklist of matches pending a bye check. Returns the number of byes resolved.

    A PENDING match is a bye when exactly one slot is occupied and the other slot
    can never be filled. The lone occupant is marked advanced, the match COMPLETE,
    and the winner moves on; the successor joins the worklist because it may now
    be a bye itself.
    """
    worklist = deque(match_ids)
    resolved = 0

    while worklist:
        match = session.get(BracketMatch, worklist.popleft())
        if match is None or match.status == MATCH_COMPLETE:
            continue

        slots = match_slots(session, match.id)
        occupied = [s for s in slots if isinstance(s.occupant, Occupied)]
        open_slots = [s for s in slots if not isinstance(s.occupant, Occupied)]
        if len(occupied) != 1:
            continue
        if not all(slot_unreachable(session, match, s.slot_index) for s in open_slots):
            continue

        occupied[0].advanced = True
        match.status = MATCH_COMPLETE
        session.add(occupied[0])
        session.add(match)
        session.flush()
        resolved += 1
        logger.debug("Bye: player %d advances from R%d M%d", occupied[0].player_id, match.round, match.match_number)

        successor = advance_winner(session, match.id, commit=False)
        if successor is not None:
            worklist.append(successor.id)

    return resolved


def _delete_bracket(session: Session, tournament_id: int) -> int:
    matches = session.exec(select(BracketMatch).where(BracketMatch.tournament_id == tournament_id)).all()
    for match in matches:
        for slot in session.exec(select(BracketSlot).where(BracketSlot.match_id == match.id)).all():
            session.delete(slot)
        session.delete(match)
    # Deletes must hit the DB before re-inserting the same (round, match_number) keys
    session.flush()
    return len(matches)


def _build_skeleton(
    session: Session, tournament_id: int, bracket_size: int, rounds: int
) -> List[Tuple[BracketMatch, List[BracketSlot]]]:
    """Create every match of every round with two empty slots. Returns round 1 in match order."""
    round_one: List[Tuple[BracketMatch, List[BracketSlot]]] = []
    for round_number in range(1, rounds + 1):
        for match_number in range(1, bracket_size // (2**round_number) + 1):
            match = BracketMatch(tournament_id=tournament_id, round=round_number, match_number=match_number)
            session.add(match)
            session.flush()
            slots = [BracketSlot(match_id=match.id, slot_index=i) for i in (0, 1)]
            session.add_all(slots)
            if round_number == 1:
                round_one.append((match, slots))
    session.flush()
    return round_one
