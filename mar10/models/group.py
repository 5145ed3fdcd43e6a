from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from mar10.models.player import Player
    from mar10.models.race import Race
    from mar10.models.tournament import Tournament


class Group(SQLModel, table=True):
    __tablename__ = "tournamentgroup"
    __table_args__ = (SAUniqueConstraint("tournament_id", "name", name="uq_tournament_group_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str  # "A", "B", ... when drawn automatically

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="groups")
    members: List["GroupMember"] = Relationship(back_populates="group")
    races: List["Race"] = Relationship(back_populates="group")


class GroupMember(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("group_id", "player_id", name="uq_group_member"),)

    # Insertion order (id) is the enumeration order used for standings ties
    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: int = Field(foreign_key="tournamentgroup.id", index=True)
    player_id: int = Field(foreign_key="player.id", index=True)

    # Relationships
    group: "Group" = Relationship(back_populates="members")
    player: "Player" = Relationship(back_populates="memberships")
