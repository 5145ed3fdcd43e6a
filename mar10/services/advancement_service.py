"""
Bracket Advancement: when a bracket match is complete, move its winner into the next round.

Indexing is positional: match m of round r feeds match ceil(m/2) of round r+1,
odd m into slot 0 and even m into slot 1. Only the target slot is written; the
sibling slot is left for its own feeder match.
"""
import logging
from typing import Dict, List, Optional, Tuple

from sqlmodel import Session, func, select

from mar10.models.bracket import (
    EMPTY,
    MATCH_COMPLETE,
    BracketMatch,
    BracketSlot,
    Occupied,
    SlotOccupant,
)
from mar10.models.tournament import Tournament
from mar10.services.errors import NotFoundError
from mar10.utils.sql import scalar_int_or_none

logger = logging.getLogger(__name__)


def next_position(match_number: int) -> Tuple[int, int]:
    """Return (next_match_number, next_slot_index) for a match in any round."""
    return (match_number + 1) // 2, (match_number - 1) % 2


def match_slots(session: Session, match_id: int) -> List[BracketSlot]:
    return list(
        session.exec(
            select(BracketSlot).where(BracketSlot.match_id == match_id).order_by(BracketSlot.slot_index)
        ).all()
    )


def total_rounds(session: Session, tournament_id: int) -> int:
    """Number of rounds in the tournament's bracket (0 if no bracket exists)."""
    value = session.exec(
        select(func.max(BracketMatch.round)).where(BracketMatch.tournament_id == tournament_id)
    ).one()
    return scalar_int_or_none(value) or 0


def winner_of(slots: List[BracketSlot]) -> SlotOccupant:
    """The occupant of the single advanced slot, or EMPTY if there is no clear winner."""
    advanced = [s for s in slots if s.advanced and isinstance(s.occupant, Occupied)]
    if len(advanced) != 1:
        return EMPTY
    return advanced[0].occupant


def slot_unreachable(session: Session, match: BracketMatch, slot_index: int) -> bool:
    """True if no player can ever arrive in this slot."""
    if match.round == 1:
        return True
    feeder_number = 2 * match.match_number - 1 + slot_index
    return _subtree_empty(session, match.tournament_id, match.round - 1, feeder_number)


def _subtree_empty(session: Session, tournament_id: int, round_number: int, match_number: int) -> bool:
    """True if the match and every match feeding it hold no players."""
    pending: List[Tuple[int, int]] = [(round_number, match_number)]
    while pending:
        rnd, number = pending.pop()
        feeder = find_match(session, tournament_id, rnd, number)
        if feeder is None:
            continue
        if any(s.player_id is not None for s in match_slots(session, feeder.id)):
            return False
        if rnd > 1:
            pending.append((rnd - 1, 2 * number - 1))
            pending.append((rnd - 1, 2 * number))
    return True


def find_match(session: Session, tournament_id: int, round_number: int, match_number: int) -> Optional[BracketMatch]:
    return session.exec(
        select(BracketMatch).where(
            BracketMatch.tournament_id == tournament_id,
            BracketMatch.round == round_number,
            BracketMatch.match_number == match_number,
        )
    ).first()


def advance_winner(session: Session, match_id: int, commit: bool = True) -> Optional[BracketMatch]:
    """
    Write a completed match's winner into its successor match.

    Returns the successor match when a slot was targeted, None otherwise.
    No-op (None) when the match is not COMPLETE, has no recorded winner, or is
    the final. Idempotent: re-advancing writes the same player to the same slot.
    """
    match = session.get(BracketMatch, match_id)
    if not match:
        raise NotFoundError(f"Bracket match {match_id} not found")

    if match.status != MATCH_COMPLETE:
        logger.debug("Match %d is not complete; nothing to advance", match_id)
        return None

    winner = winner_of(match_slots(session, match.id))
    if not isinstance(winner, Occupied):
        logger.debug("Match %d has no recorded winner; nothing to advance", match_id)
        return None

    if match.round >= total_rounds(session, match.tournament_id):
        # Final: the tournament result stands
        return None

    next_match_number, next_slot_index = next_position(match.match_number)
    next_match = find_match(session, match.tournament_id, match.round + 1, next_match_number)
    if not next_match:
        logger.warning(
            "Bracket for tournament %d has no round %d match %d; regenerate the bracket",
            match.tournament_id,
            match.round + 1,
            next_match_number,
        )
        return None

    target = session.exec(
        select(BracketSlot).where(
            BracketSlot.match_id == next_match.id,
            BracketSlot.slot_index == next_slot_index,
        )
    ).first()
    if target is None:
        logger.warning("Bracket match %d is missing slot %d", next_match.id, next_slot_index)
        return None

    if target.occupant != winner:
        target.place(winner)
        session.add(target)
        if commit:
            session.commit()
        logger.debug(
            "Advanced player %d from R%d M%d to R%d M%d slot %d",
            winner.player_id,
            match.round,
            match.match_number,
            next_match.round,
            next_match.match_number,
            next_slot_index,
        )

    return next_match


def resolve_all_advancements(session: Session, tournament_id: int) -> Dict:
    """
    Re-apply advancement for every COMPLETE match of a tournament's bracket.

    Repairs a bracket left half-advanced by an interrupted write. Processes
    matches in (round, match_number) order so earlier rounds land first.

    Returns:
        Dict with:
        - matches_processed: number of complete matches visited
        - empty_before: empty slots in the bracket before the pass
        - empty_after: empty slots in the bracket after the pass
    """
    if not session.get(Tournament, tournament_id):
        raise NotFoundError(f"Tournament {tournament_id} not found")

    empty_before = _count_empty_slots(session, tournament_id)

    completed = session.exec(
        select(BracketMatch)
        .where(
            BracketMatch.tournament_id == tournament_id,
            BracketMatch.status == MATCH_COMPLETE,
        )
        .order_by(BracketMatch.round, BracketMatch.match_number)
    ).all()

    for match in completed:
        advance_winner(session, match.id, commit=False)
    session.commit()

    return {
        "matches_processed": len(completed),
        "empty_before": empty_before,
        "empty_after": _count_empty_slots(session, tournament_id),
    }


def _count_empty_slots(session: Session, tournament_id: int) -> int:
    slots = session.exec(
        select(BracketSlot)
        .join(BracketMatch, BracketSlot.match_id == BracketMatch.id)
        .where(BracketMatch.tournament_id == tournament_id)
    ).all()
    return sum(1 for s in slots if s.player_id is None)
