from mar10.models.bracket import EMPTY, BracketMatch, BracketSlot, Empty, Occupied
from mar10.models.group import Group, GroupMember
from mar10.models.player import Player
from mar10.models.race import Race, RaceResult
from mar10.models.tournament import Tournament

__all__ = [
    "Player",
    "Tournament",
    "Group",
    "GroupMember",
    "Race",
    "RaceResult",
    "BracketMatch",
    "BracketSlot",
    "Empty",
    "Occupied",
    "EMPTY",
]
