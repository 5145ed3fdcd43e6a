from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Union

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from mar10.models.tournament import Tournament

MATCH_PENDING = "PENDING"
MATCH_COMPLETE = "COMPLETE"


@dataclass(frozen=True)
class Empty:
    """Slot not yet decided (awaiting a feeder match, or a bye gap)."""


@dataclass(frozen=True)
class Occupied:
    player_id: int


SlotOccupant = Union[Empty, Occupied]

EMPTY = Empty()


class BracketMatch(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("tournament_id", "round", "match_number", name="uq_bracket_round_match"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    round: int  # 1..total_rounds
    match_number: int  # 1..matches in round
    status: str = Field(default=MATCH_PENDING)  # PENDING | COMPLETE

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="bracket_matches")
    slots: List["BracketSlot"] = Relationship(
        back_populates="match", sa_relationship_kwargs={"order_by": "BracketSlot.slot_index"}
    )


class BracketSlot(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("match_id", "slot_index", name="uq_bracket_slot_index"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="bracketmatch.id", index=True)
    slot_index: int  # 0 = fed by odd match_number, 1 = fed by even match_number
    player_id: Optional[int] = Field(default=None, foreign_key="player.id")
    position: Optional[int] = Field(default=None)
    points: Optional[int] = Field(default=None)
    advanced: bool = Field(default=False)  # set once, never cleared

    # Relationships
    match: "BracketMatch" = Relationship(back_populates="slots")

    @property
    def occupant(self) -> SlotOccupant:
        if self.player_id is None:
            return EMPTY
        return Occupied(self.player_id)

    def place(self, occupant: SlotOccupant) -> None:
        self.player_id = occupant.player_id if isinstance(occupant, Occupied) else None
