from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session

from mar10.database import get_session
from mar10.services.errors import TournamentError
from mar10.services.results_service import ResultEntry, record_race_results, update_race_track
from mar10.utils.http_errors import to_http_exception

router = APIRouter()


class ResultsSubmission(BaseModel):
    results: List[ResultEntry]


class RaceResultResponse(BaseModel):
    player_id: int
    position: int
    points: int

    model_config = ConfigDict(from_attributes=True)


class RaceUpdate(BaseModel):
    track: Optional[str] = None
    cup: Optional[str] = None


class RaceResponse(BaseModel):
    id: int
    group_id: int
    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    status: str
    track: Optional[str] = None
    cup: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


@router.post("/races/{race_id}/results", response_model=List[RaceResultResponse])
def submit_race_results(race_id: int, payload: ResultsSubmission, session: Session = Depends(get_session)):
    """Replace a race's results and mark it complete."""
    try:
        results = record_race_results(session, race_id, payload.results)
    except TournamentError as e:
        raise to_http_exception(e)
    return [RaceResultResponse.model_validate(r) for r in results]


@router.patch("/races/{race_id}", response_model=RaceResponse)
def update_race(race_id: int, payload: RaceUpdate, session: Session = Depends(get_session)):
    try:
        race = update_race_track(session, race_id, track=payload.track, cup=payload.cup)
    except TournamentError as e:
        raise to_http_exception(e)
    return RaceResponse.model_validate(race)
