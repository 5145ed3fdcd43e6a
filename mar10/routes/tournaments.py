from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session

from mar10.database import get_session
from mar10.services.errors import TournamentError
from mar10.services.group_draw import auto_draw_groups
from mar10.services.tournament_status import transition_tournament
from mar10.utils.http_errors import to_http_exception

router = APIRouter()


class StatusUpdate(BaseModel):
    status: str


class TournamentResponse(BaseModel):
    id: int
    name: str
    status: str

    model_config = ConfigDict(from_attributes=True)


class AutoDrawResponse(BaseModel):
    groups: int
    players: int


@router.patch("/tournaments/{tournament_id}/status", response_model=TournamentResponse)
def update_tournament_status(tournament_id: int, payload: StatusUpdate, session: Session = Depends(get_session)):
    try:
        tournament = transition_tournament(session, tournament_id, payload.status)
    except TournamentError as e:
        raise to_http_exception(e)
    return TournamentResponse.model_validate(tournament)


@router.post("/tournaments/{tournament_id}/auto-draw", response_model=AutoDrawResponse, status_code=201)
def auto_draw(tournament_id: int, session: Session = Depends(get_session)):
    """Shuffle every player into new groups; groups that already have races are kept."""
    try:
        result = auto_draw_groups(session, tournament_id)
    except TournamentError as e:
        raise to_http_exception(e)
    return AutoDrawResponse(**result)
