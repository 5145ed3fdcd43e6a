from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from mar10.models.bracket import BracketMatch
    from mar10.models.group import Group

# Lifecycle: SETUP -> GROUP_STAGE -> FINALS -> COMPLETE
TOURNAMENT_SETUP = "SETUP"
TOURNAMENT_GROUP_STAGE = "GROUP_STAGE"
TOURNAMENT_FINALS = "FINALS"
TOURNAMENT_COMPLETE = "COMPLETE"


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    status: str = Field(default=TOURNAMENT_SETUP)  # SETUP | GROUP_STAGE | FINALS | COMPLETE
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    groups: List["Group"] = Relationship(back_populates="tournament")
    bracket_matches: List["BracketMatch"] = Relationship(back_populates="tournament")
