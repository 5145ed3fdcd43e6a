"""
Random group draw.

Players are shuffled into groups of ideally 3-4. Groups that already have races
are kept; empty ones are replaced by the new draw.
"""
import itertools
import logging
import random
import string
from typing import Dict, List, Optional

from sqlmodel import Session, select

from mar10.models.group import Group, GroupMember
from mar10.models.player import Player
from mar10.models.race import Race
from mar10.models.tournament import Tournament
from mar10.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def calc_group_sizes(n: int) -> List[int]:
    """
    Split n players into group sizes of ideally 3-4.

    Starts from groups of 4 and merges groups while any would drop below 3;
    the remainder goes one each to the first groups.
    """
    if n < 2:
        raise ValidationError("Need at least 2 players to draw groups")

    num_groups = -(-n // 4)
    while num_groups > 1 and n // num_groups < 3:
        num_groups -= 1

    base, extra = divmod(n, num_groups)
    return [base + 1 if i < extra else base for i in range(num_groups)]


def _group_name(index: int) -> str:
    letters = string.ascii_uppercase
    if index < len(letters):
        return letters[index]
    return f"{letters[index // len(letters) - 1]}{letters[index % len(letters)]}"


def auto_draw_groups(session: Session, tournament_id: int, rng: Optional[random.Random] = None) -> Dict[str, int]:
    """Draw all players into fresh groups. Returns {"groups": created, "players": drawn}."""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError(f"Tournament {tournament_id} not found")

    player_ids = list(session.exec(select(Player.id).order_by(Player.id)).all())
    if len(player_ids) < 2:
        raise ValidationError("Need at least 2 players to draw groups")
    sizes = calc_group_sizes(len(player_ids))

    existing = session.exec(select(Group).where(Group.tournament_id == tournament_id).order_by(Group.id)).all()
    kept_names = set()
    for group in existing:
        has_races = session.exec(select(Race.id).where(Race.group_id == group.id)).first() is not None
        if has_races:
            kept_names.add(group.name)
            continue
        for member in session.exec(select(GroupMember).where(GroupMember.group_id == group.id)).all():
            session.delete(member)
        session.delete(group)
    session.flush()
    kept = len(kept_names)

    rng = rng or random.Random()
    rng.shuffle(player_ids)

    # New names continue after the kept groups, skipping any already taken
    names = (name for name in map(_group_name, itertools.count(kept)) if name not in kept_names)

    offset = 0
    for size in sizes:
        group = Group(tournament_id=tournament_id, name=next(names))
        session.add(group)
        session.flush()
        for player_id in player_ids[offset:offset + size]:
            session.add(GroupMember(group_id=group.id, player_id=player_id))
        offset += size
    session.commit()

    logger.info(
        "Drew %d players into %d groups for tournament %d (kept %d groups with races)",
        len(player_ids),
        len(sizes),
        tournament_id,
        kept,
    )
    return {"groups": len(sizes), "players": len(player_ids)}
