from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from mar10.models.group import Group

RACE_PENDING = "PENDING"
RACE_COMPLETE = "COMPLETE"


class Race(SQLModel, table=True):
    """A group-stage matchup. Round-robin races always carry two players."""

    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: int = Field(foreign_key="tournamentgroup.id", index=True)

    # Nullable so free-for-all races can be recorded without a fixed pairing
    player1_id: Optional[int] = Field(default=None, foreign_key="player.id")
    player2_id: Optional[int] = Field(default=None, foreign_key="player.id")

    status: str = Field(default=RACE_PENDING)  # PENDING | COMPLETE
    track: Optional[str] = Field(default=None)
    cup: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = Field(default=None)

    # Relationships
    group: "Group" = Relationship(back_populates="races")
    results: List["RaceResult"] = Relationship(back_populates="race")


class RaceResult(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("race_id", "player_id", name="uq_race_result_player"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    race_id: int = Field(foreign_key="race.id", index=True)
    player_id: int = Field(foreign_key="player.id")
    position: int  # 1-based finishing position
    points: int  # precomputed from the points table at entry time

    # Relationships
    race: "Race" = Relationship(back_populates="results")
