# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from mar10.models.bracket import BracketMatch, BracketSlot  # noqa: F401
from mar10.models.group import Group, GroupMember  # noqa: F401
from mar10.models.player import Player  # noqa: F401
from mar10.models.race import Race, RaceResult  # noqa: F401
from mar10.models.tournament import Tournament  # noqa: F401
