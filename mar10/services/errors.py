"""Errors raised by the tournament-progression services.

Every error is raised before the failing operation writes anything.
"""


class TournamentError(Exception):
    """Base exception for tournament-progression errors"""

    pass


class ValidationError(TournamentError):
    """Input rejected (e.g. too few players to schedule or seed a bracket)"""

    pass


class NotFoundError(TournamentError):
    """Referenced group, tournament, race or bracket match does not exist"""

    pass
