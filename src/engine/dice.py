"""
Ludo Arena - Dice Roller

Single-D6 rolling plus the consecutive-six bookkeeping. All methods are
stateless class methods: the streak lives in TurnState, which is passed in
and returned, never stored.
"""

import random
from dataclasses import dataclass, replace

from src.engine.base import (
    DIE_FACES,
    MAX_CONSECUTIVE_SIXES,
    TurnPhase,
    TurnState,
)
from src.engine.validators import validate_roll_value

_system_rng = random.SystemRandom()


@dataclass(frozen=True)
class RollOutcome:
    """
    Result of one roll.

    Attributes:
        value: Face rolled (1-6)
        turn: TurnState after the roll was recorded
        forfeited: Third six in a row; no pawn action is allowed
    """
    value: int
    turn: TurnState
    forfeited: bool = False

    @property
    def six_streak(self) -> int:
        return self.turn.six_streak


class DiceRoller:
    """
    Stateless dice roller.

    All methods are class methods operating on immutable data.
    """

    FACES = DIE_FACES
    SIX = DIE_FACES

    @classmethod
    def roll_die(cls, rng: random.Random | None = None) -> int:
        """Roll a single D6 using ``rng`` or the system RNG."""
        return (rng or _system_rng).randint(1, cls.FACES)

    @classmethod
    def next_streak(cls, streak: int, value: int) -> int:
        """A six extends the run, anything else ends it."""
        if value == cls.SIX:
            return streak + 1
        return 0

    @classmethod
    def roll(
        cls,
        turn: TurnState,
        value: int | None = None,
        rng: random.Random | None = None,
    ) -> RollOutcome:
        """Roll for the active player and update the six streak.

        Args:
            turn: Current TurnState (must be awaiting a roll)
            value: Optional pre-determined face (for testing and replays)
            rng: Optional random source for seeded simulations

        Returns:
            RollOutcome with the new TurnState; ``forfeited`` is set on the
            third consecutive six.
        """
        if value is None:
            value = cls.roll_die(rng)
        value = validate_roll_value(value)

        streak = cls.next_streak(turn.six_streak, value)
        new_turn = replace(
            turn,
            phase=TurnPhase.AWAITING_ACTION,
            last_roll=value,
            six_streak=streak,
            must_reroll=False,
            bonus_pending=False,
            roll_serial=turn.roll_serial + 1,
        )
        return RollOutcome(
            value=value,
            turn=new_turn,
            forfeited=streak >= MAX_CONSECUTIVE_SIXES,
        )
