"""
Map service errors onto HTTP responses.

ValidationError -> 400, NotFoundError -> 404.
"""
from fastapi import HTTPException

from mar10.services.errors import NotFoundError, TournamentError


def to_http_exception(exc: TournamentError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
