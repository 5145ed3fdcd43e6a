from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from mar10.database import get_session
from mar10.models.bracket import BracketMatch
from mar10.services.advancement_service import match_slots, resolve_all_advancements
from mar10.services.bracket_builder import generate_bracket
from mar10.services.errors import TournamentError
from mar10.services.results_service import ResultEntry, record_bracket_results
from mar10.utils.http_errors import to_http_exception

router = APIRouter()


class BracketCreate(BaseModel):
    advance_count: int = Field(ge=1, le=8)


class BracketSummaryResponse(BaseModel):
    bracket_size: int
    total_rounds: int
    advancer_count: int


class BracketResultsSubmission(BaseModel):
    results: List[ResultEntry]


class BracketSlotResponse(BaseModel):
    slot_index: int
    player_id: Optional[int] = None
    position: Optional[int] = None
    points: Optional[int] = None
    advanced: bool

    model_config = ConfigDict(from_attributes=True)


class BracketMatchResponse(BaseModel):
    id: int
    tournament_id: int
    round: int
    match_number: int
    status: str
    slots: List[BracketSlotResponse]


class AdvancementRepairResponse(BaseModel):
    matches_processed: int
    empty_before: int
    empty_after: int


def _match_to_response(session: Session, match: BracketMatch) -> BracketMatchResponse:
    return BracketMatchResponse(
        id=match.id,
        tournament_id=match.tournament_id,
        round=match.round,
        match_number=match.match_number,
        status=match.status,
        slots=[BracketSlotResponse.model_validate(s) for s in match_slots(session, match.id)],
    )


@router.post("/tournaments/{tournament_id}/bracket", response_model=BracketSummaryResponse, status_code=201)
def create_bracket(tournament_id: int, payload: BracketCreate, session: Session = Depends(get_session)):
    """Rebuild the elimination bracket from current group standings (destructive)."""
    try:
        summary = generate_bracket(session, tournament_id, payload.advance_count)
    except TournamentError as e:
        raise to_http_exception(e)
    return BracketSummaryResponse(**summary.to_dict())


@router.post("/tournaments/{tournament_id}/bracket/resolve", response_model=AdvancementRepairResponse)
def resolve_bracket(tournament_id: int, session: Session = Depends(get_session)):
    """Re-apply advancement for every completed match (repairs interrupted writes)."""
    try:
        result = resolve_all_advancements(session, tournament_id)
    except TournamentError as e:
        raise to_http_exception(e)
    return AdvancementRepairResponse(**result)


@router.post("/bracket/matches/{match_id}/results", response_model=BracketMatchResponse)
def submit_bracket_results(
    match_id: int, payload: BracketResultsSubmission, session: Session = Depends(get_session)
):
    try:
        match = record_bracket_results(session, match_id, payload.results)
    except TournamentError as e:
        raise to_http_exception(e)
    return _match_to_response(session, match)
