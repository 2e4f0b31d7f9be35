"""
Ludo Arena - Engine Facade

Pure transitions from (GameState, request) to (GameState, effects). Ties the
Dice Roller, Move Resolver, Turn Scheduler and Win/Order Tracker together.

Every public method either returns a Transition or raises an EngineError
without touching the state it was given.
"""

import logging
import random

from src.engine.base import Color, GameConfig
from src.engine.board import STANDARD_BOARD, Board
from src.engine.dice import DiceRoller
from src.engine.effects import (
    BonusGranted,
    DiceRolled,
    Effect,
    GameOver,
    PawnCaptured,
    PawnFinished,
    PawnMoved,
    PawnOpened,
    SixStreakForfeited,
    Transition,
    TurnChanged,
)
from src.engine.errors import IllegalAction
from src.engine.moves import MovePlan, MoveResolver
from src.engine.results import WinOrderTracker
from src.engine.state import GameState
from src.engine.turns import TurnScheduler

logger = logging.getLogger(__name__)


class LudoEngine:
    """
    Stateless Ludo rules engine.

    All methods are class methods operating on immutable data.
    State is passed in and returned, never stored.
    """

    @classmethod
    def new_game(cls, config: GameConfig | None = None, board: Board = STANDARD_BOARD) -> GameState:
        """Fresh game: every pawn home, first color in the rotation to roll."""
        return GameState.initial(config, board)

    @classmethod
    def legal_moves(cls, state: GameState) -> tuple[MovePlan, ...]:
        """Legal moves for the active player and the pending roll."""
        if not state.turn.awaiting_action:
            return ()
        return MoveResolver.legal_moves(
            state.board, state.occupancy, state.active_player, state.turn.last_roll
        )

    @classmethod
    def roll(
        cls,
        state: GameState,
        player: Color | str,
        *,
        value: int | None = None,
        rng: random.Random | None = None,
    ) -> Transition:
        """Roll for ``player`` and run everything that needs no further input.

        After the roll the engine forfeits a third six, resolves a roll with
        no legal move, and plays the move itself when the choice is
        unambiguous (``config.auto_move``). Otherwise it stops in
        AWAITING_ACTION.

        Args:
            state: Current state
            player: Requesting color
            value: Optional pre-determined face (for testing and replays)
            rng: Optional random source for seeded simulations

        Raises:
            UnknownPlayer, OutOfTurn, GameFinished, IllegalAction
        """
        color = state.player(player).color
        TurnScheduler.ensure_can_roll(state.turn, color)

        outcome = DiceRoller.roll(state.turn, value=value, rng=rng)
        state = state.with_turn(outcome.turn)
        logger.debug("%s rolled %d (streak %d)", color.value, outcome.value, outcome.six_streak)

        if outcome.forfeited:
            effects: list[Effect] = [
                DiceRolled(color, outcome.value, outcome.six_streak, outcome.turn.roll_serial, (), outcome.turn),
                SixStreakForfeited(color),
            ]
            state, tail = cls._resolve(state, None)
            logger.info("%s forfeited the turn after three sixes", color.value)
            return Transition(state=state, effects=tuple(effects + tail))

        plans = cls.legal_moves(state)
        effects = [
            DiceRolled(
                color,
                outcome.value,
                outcome.six_streak,
                outcome.turn.roll_serial,
                tuple(plan.pawn_id for plan in plans),
                outcome.turn,
            )
        ]

        if not plans:
            state, tail = cls._resolve(state, None)
            return Transition(state=state, effects=tuple(effects + tail))

        choice = MoveResolver.automatic_choice(plans) if state.config.auto_move else None
        if choice is not None:
            state, tail = cls._commit(state, choice)
            return Transition(state=state, effects=tuple(effects + tail))

        return Transition(state=state, effects=tuple(effects))

    @classmethod
    def act(
        cls,
        state: GameState,
        player: Color | str,
        pawn_id: str | None = None,
        *,
        roll_serial: int | None = None,
    ) -> Transition:
        """Use the pending roll on a pawn.

        Args:
            state: Current state
            player: Requesting color
            pawn_id: Pawn to move; None asks the engine to pick the only
                sensible move, or declares that no legal move exists
            roll_serial: Roll the client believes is pending

        Raises:
            UnknownPlayer, UnknownPawn, OutOfTurn, StaleRoll, GameFinished,
            IllegalAction
        """
        color = state.player(player).color
        TurnScheduler.ensure_can_act(state.turn, color, roll_serial)
        plans = cls.legal_moves(state)

        if pawn_id is None:
            if not plans:
                state, tail = cls._resolve(state, None)
                return Transition(state=state, effects=tuple(tail))
            choice = MoveResolver.automatic_choice(plans)
            if choice is None:
                options = ", ".join(plan.pawn_id for plan in plans)
                raise IllegalAction(f"Several pawns can move ({options}); choose one.")
        else:
            pawn = state.find_pawn(pawn_id)
            if pawn.color != color:
                raise IllegalAction(f"{pawn.pawn_id} does not belong to {color.value}.")
            choice = next((plan for plan in plans if plan.pawn_id == pawn.pawn_id), None)
            if choice is None:
                raise IllegalAction(MoveResolver.describe_illegal(state.board, pawn, state.turn.last_roll))

        state, tail = cls._commit(state, choice)
        return Transition(state=state, effects=tuple(tail))

    @classmethod
    def skip(cls, state: GameState, player: Color | str) -> Transition:
        """Force the turn to pass, whatever phase it is in.

        Used by the host application for inactivity timeouts.
        """
        color = state.player(player).color
        TurnScheduler.ensure_active(state.turn, color)
        next_color = TurnScheduler.next_player(state.rotation, color, state.completed_colors)
        turn = TurnScheduler.pass_turn(state.turn, next_color)
        logger.info("%s skipped; %s to roll", color.value, next_color.value)
        return Transition(state=state.with_turn(turn), effects=(TurnChanged(next_color, turn),))

    # -- Internals -------------------------------------------------------

    @classmethod
    def _commit(cls, state: GameState, plan: MovePlan) -> tuple[GameState, list[Effect]]:
        """Apply a move, record finishes, then resolve the turn."""
        state = MoveResolver.apply(state, plan)

        effects: list[Effect] = []
        if plan.is_open:
            effects.append(PawnOpened(plan.color, plan.pawn_id, plan.destination))
        else:
            effects.append(
                PawnMoved(plan.color, plan.pawn_id, plan.origin, plan.destination, plan.move_type, plan.steps)
            )
        effects.extend(PawnCaptured(captured, plan.destination) for captured in plan.captures)

        if plan.finishes:
            effects.append(PawnFinished(plan.color, plan.pawn_id))
            result = WinOrderTracker.record_finish(state.result, state.player(plan.color))
            if result != state.result:
                state = state.with_result(result)
                logger.info("%s completed in place %d", plan.color.value, len(result))
                if WinOrderTracker.is_game_over(result, state.config.num_players):
                    turn = TurnScheduler.end_game(state.turn)
                    state = state.with_turn(turn)
                    standings = WinOrderTracker.standings(result, state.rotation)
                    effects.append(GameOver(result.order, standings, turn))
                    logger.info("Game over: %s", ", ".join(c.value for c in standings))
                    return state, effects

        state, tail = cls._resolve(state, plan)
        return state, effects + tail

    @classmethod
    def _resolve(cls, state: GameState, plan: MovePlan | None) -> tuple[GameState, list[Effect]]:
        resolution = TurnScheduler.resolve(state.turn, state.rotation, state.completed_colors, plan)
        state = state.with_turn(resolution.turn)
        if resolution.bonus:
            return state, [BonusGranted(resolution.turn.current, resolution.reason, resolution.turn)]
        return state, [TurnChanged(resolution.turn.current, resolution.turn)]
