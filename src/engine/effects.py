"""
Ludo Arena - Transition Effects

What a committed transition did, in order. The engine returns these next to
the new state; the sync layer turns them into outward events.
"""

from dataclasses import dataclass, field
from typing import Union

from src.engine.base import BonusReason, Color, MoveType, Square, TurnState
from src.engine.state import GameState


@dataclass(frozen=True)
class DiceRolled:
    player: Color
    value: int
    six_streak: int
    roll_serial: int
    legal_pawns: tuple[str, ...]
    turn: TurnState


@dataclass(frozen=True)
class SixStreakForfeited:
    player: Color


@dataclass(frozen=True)
class PawnOpened:
    player: Color
    pawn_id: str
    square: Square


@dataclass(frozen=True)
class PawnMoved:
    player: Color
    pawn_id: str
    from_square: Square
    to_square: Square
    move_type: MoveType
    steps: tuple[Square, ...]


@dataclass(frozen=True)
class PawnCaptured:
    pawn_id: str
    at_square: Square


@dataclass(frozen=True)
class PawnFinished:
    player: Color
    pawn_id: str


@dataclass(frozen=True)
class BonusGranted:
    player: Color
    reason: BonusReason
    turn: TurnState


@dataclass(frozen=True)
class TurnChanged:
    player: Color
    turn: TurnState


@dataclass(frozen=True)
class GameOver:
    order: tuple[Color, ...]
    standings: tuple[Color, ...]
    turn: TurnState


Effect = Union[
    DiceRolled,
    SixStreakForfeited,
    PawnOpened,
    PawnMoved,
    PawnCaptured,
    PawnFinished,
    BonusGranted,
    TurnChanged,
    GameOver,
]


@dataclass(frozen=True)
class Transition:
    """
    A committed transition.

    Attributes:
        state: GameState after the transition
        effects: What happened, in order
    """
    state: GameState
    effects: tuple[Effect, ...] = field(default_factory=tuple)

    def of_type(self, kind: type) -> tuple:
        return tuple(e for e in self.effects if isinstance(e, kind))
