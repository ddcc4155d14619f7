"""
Tournament error taxonomy.

Engine helpers raise these; TournamentEngine converts them into failed
OperationResults at the operation boundary so callers never see a raise
for an expected rejection.
"""


class TournamentError(Exception):
    """Base class for rejected tournament operations"""

    level = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TournamentValidationError(TournamentError):
    """Bad or missing ids, self-match, unavailable team"""

    pass


class NotFoundError(TournamentValidationError):
    """Referenced team, round or match does not exist"""

    pass


class TournamentPreconditionError(TournamentError):
    """Operation is not allowed in the current bracket state"""

    pass


class AdvancementWarning(TournamentPreconditionError):
    """Round cannot advance because too few teams are moving on"""

    level = "warning"


class CorruptSnapshotError(TournamentError):
    """Persisted snapshot could not be decoded"""

    pass
