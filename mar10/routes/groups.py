from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from mar10.database import get_session
from mar10.services.errors import TournamentError
from mar10.services.round_robin import generate_round_robin
from mar10.services.standings import get_group_standings
from mar10.services.tracks import assign_tracks_to_group
from mar10.utils.http_errors import to_http_exception

router = APIRouter()


class StandingResponse(BaseModel):
    player_id: int
    name: str
    total_points: int
    races_played: int
    wins: int
    losses: int
    positions: List[int]


class RoundRobinResponse(BaseModel):
    matchups: int


class TrackAssignmentResponse(BaseModel):
    assigned: int


@router.get("/groups/{group_id}/standings", response_model=List[StandingResponse])
def group_standings(group_id: int, session: Session = Depends(get_session)):
    try:
        standings = get_group_standings(session, group_id)
    except TournamentError as e:
        raise to_http_exception(e)
    return [StandingResponse(**s.to_dict()) for s in standings]


@router.post("/groups/{group_id}/round-robin", response_model=RoundRobinResponse, status_code=201)
def create_round_robin(group_id: int, session: Session = Depends(get_session)):
    """Regenerate the group's pending matchups. Completed races are kept."""
    try:
        count = generate_round_robin(session, group_id)
    except TournamentError as e:
        raise to_http_exception(e)
    return RoundRobinResponse(matchups=count)


@router.post("/groups/{group_id}/tracks", response_model=TrackAssignmentResponse)
def assign_group_tracks(group_id: int, session: Session = Depends(get_session)):
    try:
        assigned = assign_tracks_to_group(session, group_id)
    except TournamentError as e:
        raise to_http_exception(e)
    return TrackAssignmentResponse(assigned=assigned)
