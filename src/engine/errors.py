"""
Ludo Arena - Engine Errors

Every rejection the engine can produce. All of them are recoverable: the
request is refused, nothing is mutated, and the game carries on. Each error
has a stable ``code`` that is reported back to the requester.
"""


class EngineError(ValueError):
    """Base class for rejected requests."""

    code = "ENGINE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class OutOfTurn(EngineError):
    """Request from a player who does not hold the active turn."""

    code = "NOT_YOUR_TURN"


class IllegalAction(EngineError):
    """The pawn/roll combination has no legal transition."""

    code = "MOVE_NOT_VALID"


class GameFinished(IllegalAction):
    """Any request made after the game has terminated."""

    code = "GAME_NOT_ACTIVE"


class StaleRoll(EngineError):
    """Action references a roll that was already consumed or superseded."""

    code = "STALE_ROLL"


class UnknownPawn(EngineError):
    """Malformed or non-existent pawn reference."""

    code = "INVALID_TOKEN"


class UnknownPlayer(EngineError):
    """Malformed color or a color not seated in this game."""

    code = "UNKNOWN_PLAYER"
