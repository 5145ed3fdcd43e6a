"""
Group standings.

Aggregates results of COMPLETE races per group member. Sorted by total points
(descending); equal totals keep member enumeration order.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from sqlmodel import Session, select

from mar10.models.group import Group, GroupMember
from mar10.models.player import Player
from mar10.models.race import RACE_COMPLETE, Race, RaceResult
from mar10.services.errors import NotFoundError


@dataclass
class Standing:
    player_id: int
    name: str
    total_points: int = 0
    races_played: int = 0
    wins: int = 0
    losses: int = 0
    positions: List[int] = field(default_factory=list)  # in race completion order

    def to_dict(self) -> Dict:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "total_points": self.total_points,
            "races_played": self.races_played,
            "wins": self.wins,
            "losses": self.losses,
            "positions": list(self.positions),
        }


def get_group_standings(session: Session, group_id: int) -> List[Standing]:
    group = session.get(Group, group_id)
    if not group:
        raise NotFoundError(f"Group {group_id} not found")

    members = session.exec(
        select(GroupMember, Player)
        .join(Player, GroupMember.player_id == Player.id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.id)
    ).all()
    if not members:
        return []

    rows = session.exec(
        select(RaceResult)
        .join(Race, RaceResult.race_id == Race.id)
        .where(Race.group_id == group_id, Race.status == RACE_COMPLETE)
        .order_by(Race.completed_at, Race.id)
    ).all()

    by_player: Dict[int, List[RaceResult]] = {}
    for result in rows:
        by_player.setdefault(result.player_id, []).append(result)

    standings: List[Standing] = []
    for member, player in members:
        results = by_player.get(member.player_id, [])
        wins = sum(1 for r in results if r.position == 1)
        standings.append(
            Standing(
                player_id=member.player_id,
                name=player.name,
                total_points=sum(r.points for r in results),
                races_played=len(results),
                wins=wins,
                losses=len(results) - wins,
                positions=[r.position for r in results],
            )
        )

    # sorted() is stable: ties stay in member order
    return sorted(standings, key=lambda s: s.total_points, reverse=True)
