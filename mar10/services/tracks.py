"""Track catalogue and random track assignment for group races."""
import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from sqlmodel import Session, select

from mar10.models.group import Group
from mar10.models.race import RACE_PENDING, Race
from mar10.services.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackInfo:
    name: str
    cup: str


TRACKS: List[TrackInfo] = [
    # Mushroom Cup
    TrackInfo("Mario Bros. Circuit", "Mushroom Cup"),
    TrackInfo("Crown City", "Mushroom Cup"),
    TrackInfo("Whistlestop Summit", "Mushroom Cup"),
    TrackInfo("DK Spaceport", "Mushroom Cup"),
    # Flower Cup
    TrackInfo("Desert Hills", "Flower Cup"),
    TrackInfo("Shy Guy Bazaar", "Flower Cup"),
    TrackInfo("Wario Stadium", "Flower Cup"),
    TrackInfo("Airship Fortress", "Flower Cup"),
    # Star Cup
    TrackInfo("DK Pass", "Star Cup"),
    TrackInfo("Starview Peak", "Star Cup"),
    TrackInfo("Sky-High Sundae", "Star Cup"),
    TrackInfo("Wario's Galleon", "Star Cup"),
    # Shell Cup
    TrackInfo("Koopa Troopa Beach", "Shell Cup"),
    TrackInfo("Faraway Oasis", "Shell Cup"),
    TrackInfo("Peach Stadium", "Shell Cup"),
    # Banana Cup
    TrackInfo("Peach Beach", "Banana Cup"),
    TrackInfo("Salty Salty Speedway", "Banana Cup"),
    TrackInfo("Dino Dino Jungle", "Banana Cup"),
    TrackInfo("Great ? Block Ruins", "Banana Cup"),
    # Leaf Cup
    TrackInfo("Cheep Cheep Falls", "Leaf Cup"),
    TrackInfo("Dandelion Depths", "Leaf Cup"),
    TrackInfo("Boo Cinema", "Leaf Cup"),
    TrackInfo("Dry Bones Burnout", "Leaf Cup"),
    # Lightning Cup
    TrackInfo("Moo Moo Meadows", "Lightning Cup"),
    TrackInfo("Choco Mountain", "Lightning Cup"),
    TrackInfo("Toad's Factory", "Lightning Cup"),
    TrackInfo("Bowser's Castle", "Lightning Cup"),
    # Special Cup
    TrackInfo("Acorn Heights", "Special Cup"),
    TrackInfo("Mario Circuit", "Special Cup"),
    TrackInfo("Rainbow Road", "Special Cup"),
]


def assign_tracks(n: int, rng: Optional[random.Random] = None) -> List[TrackInfo]:
    """n tracks from a shuffled catalogue; cycles when n exceeds the catalogue."""
    rng = rng or random.Random()
    pool = list(TRACKS)
    rng.shuffle(pool)
    return [pool[i % len(pool)] for i in range(n)]


def assign_tracks_to_group(session: Session, group_id: int, rng: Optional[random.Random] = None) -> int:
    """Give every PENDING race in the group without a track a random one. Returns count."""
    group = session.get(Group, group_id)
    if not group:
        raise NotFoundError(f"Group {group_id} not found")

    races = session.exec(
        select(Race)
        .where(Race.group_id == group_id, Race.status == RACE_PENDING, Race.track.is_(None))
        .order_by(Race.id)
    ).all()

    for race, info in zip(races, assign_tracks(len(races), rng)):
        race.track = info.name
        race.cup = info.cup
        session.add(race)
    session.commit()

    logger.info("Assigned tracks to %d pending races in group %d", len(races), group_id)
    return len(races)
