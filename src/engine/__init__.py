"""
Ludo Arena Game Engine.

Pure Python game logic with zero transport/database dependencies.
Handles dice rolling, pawn movement, captures, bonus turns and finish order.
"""

from src.engine.base import (
    BonusReason,
    Color,
    GameConfig,
    GameResult,
    MoveType,
    Pawn,
    PawnState,
    Player,
    Square,
    TurnPhase,
    TurnState,
)
from src.engine.board import STANDARD_BOARD, Board
from src.engine.dice import DiceRoller, RollOutcome
from src.engine.effects import Transition
from src.engine.errors import (
    EngineError,
    GameFinished,
    IllegalAction,
    OutOfTurn,
    StaleRoll,
    UnknownPawn,
    UnknownPlayer,
)
from src.engine.game import LudoEngine
from src.engine.moves import MovePlan, MoveResolver
from src.engine.positions import PositionIndex
from src.engine.results import WinOrderTracker
from src.engine.state import GameState
from src.engine.turns import TurnScheduler

__all__ = [
    # Data Classes
    "Board",
    "GameConfig",
    "GameResult",
    "GameState",
    "MovePlan",
    "Pawn",
    "Player",
    "PositionIndex",
    "RollOutcome",
    "Square",
    "Transition",
    "TurnState",
    "STANDARD_BOARD",
    # Enums
    "BonusReason",
    "Color",
    "MoveType",
    "PawnState",
    "TurnPhase",
    # Errors
    "EngineError",
    "GameFinished",
    "IllegalAction",
    "OutOfTurn",
    "StaleRoll",
    "UnknownPawn",
    "UnknownPlayer",
    # Engines
    "DiceRoller",
    "LudoEngine",
    "MoveResolver",
    "TurnScheduler",
    "WinOrderTracker",
]
