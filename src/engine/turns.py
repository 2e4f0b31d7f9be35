"""
Ludo Arena - Turn Scheduler

State machine deciding who acts next:

    AWAITING_ROLL(player) -> AWAITING_ACTION(player, roll)
        -> resolved(player, bonus) -> AWAITING_ROLL(same or next player)

plus the terminal GAME_OVER phase. Also owns the request guards (whose turn
it is, which phase accepts which request, stale roll detection).
"""

from dataclasses import dataclass, replace

from src.engine.base import (
    MAX_CONSECUTIVE_SIXES,
    OPEN_ROLL,
    BonusReason,
    Color,
    TurnPhase,
    TurnState,
)
from src.engine.errors import GameFinished, IllegalAction, OutOfTurn, StaleRoll
from src.engine.moves import MovePlan


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving a turn.

    Attributes:
        turn: TurnState after the resolution
        bonus: The same player rolls again
        reason: Why the bonus was granted (None on a pass)
    """
    turn: TurnState
    bonus: bool
    reason: BonusReason | None = None


class TurnScheduler:
    """
    Stateless turn state machine.

    All methods are class methods operating on immutable data.
    """

    # -- Guards ----------------------------------------------------------

    @classmethod
    def ensure_active(cls, turn: TurnState, color: Color) -> None:
        """Reject requests once the game is over or from the wrong player."""
        if turn.is_over:
            raise GameFinished("The game is over.")
        if color != turn.current:
            raise OutOfTurn(f"It is {turn.current.value}'s turn, not {color.value}'s.")

    @classmethod
    def ensure_can_roll(cls, turn: TurnState, color: Color) -> None:
        cls.ensure_active(turn, color)
        if not turn.awaiting_roll:
            raise IllegalAction(
                f"{color.value} already rolled {turn.last_roll}; choose a pawn first."
            )

    @classmethod
    def ensure_can_act(cls, turn: TurnState, color: Color, roll_serial: int | None = None) -> None:
        """Only the active player may act, only on the pending roll."""
        cls.ensure_active(turn, color)
        if roll_serial is not None and (not turn.awaiting_action or roll_serial != turn.roll_serial):
            raise StaleRoll(
                f"Roll #{roll_serial} is no longer current"
                + (f" (pending roll is #{turn.roll_serial})." if turn.awaiting_action else ".")
            )
        if not turn.awaiting_action:
            raise IllegalAction(f"{color.value} must roll before moving a pawn.")

    # -- Transitions -----------------------------------------------------

    @classmethod
    def bonus_reason(cls, roll: int | None, plan: MovePlan | None, six_streak: int) -> BonusReason | None:
        """Capture and finish beat a plain six; a forfeited six grants nothing."""
        if plan is not None and plan.is_capture:
            return BonusReason.CAPTURE
        if plan is not None and plan.finishes:
            return BonusReason.FINISH
        if roll == OPEN_ROLL and six_streak < MAX_CONSECUTIVE_SIXES:
            return BonusReason.SIX
        return None

    @classmethod
    def next_player(
        cls,
        rotation: tuple[Color, ...],
        current: Color,
        completed: frozenset[Color],
    ) -> Color:
        """Next color in rotation that still has pawns to bring home.

        Walks the rotation once starting after ``current``. If every other
        player has completed, the current player keeps the turn.
        """
        position = rotation.index(current)
        for offset in range(1, len(rotation) + 1):
            candidate = rotation[(position + offset) % len(rotation)]
            if candidate not in completed:
                return candidate
        return current

    @classmethod
    def grant_bonus(cls, turn: TurnState, reason: BonusReason) -> TurnState:
        """Same player rolls again; the six streak is preserved."""
        return replace(
            turn,
            phase=TurnPhase.AWAITING_ROLL,
            last_roll=None,
            bonus_pending=reason in (BonusReason.CAPTURE, BonusReason.FINISH),
            must_reroll=True,
        )

    @classmethod
    def pass_turn(cls, turn: TurnState, next_color: Color) -> TurnState:
        """Hand the turn over with a clean streak and no pending roll."""
        return TurnState(
            current=next_color,
            phase=TurnPhase.AWAITING_ROLL,
            roll_serial=turn.roll_serial,
        )

    @classmethod
    def end_game(cls, turn: TurnState) -> TurnState:
        return replace(
            turn,
            phase=TurnPhase.GAME_OVER,
            last_roll=None,
            bonus_pending=False,
            must_reroll=False,
        )

    @classmethod
    def resolve(
        cls,
        turn: TurnState,
        rotation: tuple[Color, ...],
        completed: frozenset[Color],
        plan: MovePlan | None = None,
    ) -> Resolution:
        """Decide between bonus and pass once the action phase has ended.

        Args:
            turn: TurnState holding the roll that was just used (or forfeited)
            rotation: Fixed turn order
            completed: Colors that have brought all pawns home
            plan: The committed move, or None for no action

        Returns:
            Resolution with the TurnState awaiting the next roll
        """
        reason = cls.bonus_reason(turn.last_roll, plan, turn.six_streak)
        if reason is not None and turn.current not in completed:
            return Resolution(turn=cls.grant_bonus(turn, reason), bonus=True, reason=reason)
        next_color = cls.next_player(rotation, turn.current, completed)
        return Resolution(turn=cls.pass_turn(turn, next_color), bonus=False)
