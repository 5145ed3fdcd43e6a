import os

# Keep the app's module-level engine off the filesystem during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from typing import Callable, Dict, List, Tuple  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from mar10.database import get_session  # noqa: E402
from mar10.main import app  # noqa: E402
from mar10.models import BracketMatch, BracketSlot, Group, GroupMember, Player, Tournament  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"


# ============================================================================
# Test Database Setup
# ============================================================================
# 1. Fresh sqlite:///:memory: engine per test with StaticPool so every
#    connection of that test shares one database
# 2. check_same_thread=False required for TestClient/threaded access
# 3. Models are imported (via mar10.models) before create_all()
# 4. App dependency overridden to hand out the test session (see client_fixture)


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide an isolated test database session"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        yield session

    engine.dispose()


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() so the app never uses its own engine.
    """

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="tournament")
def tournament_fixture(session: Session) -> Tournament:
    tournament = Tournament(name="Test Cup")
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@pytest.fixture(name="make_players")
def make_players_fixture(session: Session) -> Callable[..., List[Player]]:
    """Factory: create players named <prefix>1..<prefix>n"""

    def _make(n: int, prefix: str = "P") -> List[Player]:
        players = [Player(name=f"{prefix}{i}") for i in range(1, n + 1)]
        session.add_all(players)
        session.commit()
        for p in players:
            session.refresh(p)
        return players

    return _make


@pytest.fixture(name="make_group")
def make_group_fixture(session: Session, tournament: Tournament) -> Callable[..., Group]:
    """Factory: create a group in the test tournament with the given players as members (in order)"""

    def _make(name: str, players: List[Player]) -> Group:
        group = Group(tournament_id=tournament.id, name=name)
        session.add(group)
        session.commit()
        session.refresh(group)
        for p in players:
            session.add(GroupMember(group_id=group.id, player_id=p.id))
        session.commit()
        return group

    return _make


@pytest.fixture(name="make_skeleton")
def make_skeleton_fixture(session: Session, tournament: Tournament) -> Callable[..., Dict[Tuple[int, int], BracketMatch]]:
    """Factory: empty bracket of the given size for the test tournament, keyed by (round, match_number)"""

    def _make(bracket_size: int) -> Dict[Tuple[int, int], BracketMatch]:
        matches: Dict[Tuple[int, int], BracketMatch] = {}
        round_number = 1
        while bracket_size // (2**round_number) >= 1:
            for match_number in range(1, bracket_size // (2**round_number) + 1):
                match = BracketMatch(tournament_id=tournament.id, round=round_number, match_number=match_number)
                session.add(match)
                session.commit()
                session.refresh(match)
                session.add_all([BracketSlot(match_id=match.id, slot_index=i) for i in (0, 1)])
                matches[(round_number, match_number)] = match
            round_number += 1
        session.commit()
        return matches

    return _make
