"""
Ludo Arena - Move Resolver

Computes the effect of advancing one pawn by the rolled count: opening from
the yard, track traversal with wrap-around, the turn into the private lane,
capture detection and finish detection.

Planning and applying are separate. ``plan`` returns a MovePlan carrying the
full step sequence (for presentation pacing only) and every consequence of
the move; ``apply`` commits that plan to a GameState in one go.
"""

import logging
from dataclasses import dataclass, field

from src.engine.base import (
    OPEN_ROLL,
    Color,
    MoveType,
    Pawn,
    PawnState,
    Player,
    Square,
)
from src.engine.board import Board
from src.engine.positions import PositionIndex
from src.engine.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovePlan:
    """
    A validated pawn move, not yet committed.

    Attributes:
        pawn_id: Moving pawn
        color: Owner of the moving pawn
        move_type: OPEN, BOARD or STRETCH (where the pawn lands)
        origin: Square before the move; None when leaving the yard
        destination: Landing square (the final lane cell for a finishing move)
        steps: Every square visited, in order; the last one is ``destination``
        captures: Opposing pawn ids sent home by this move
        finishes: The pawn reaches the final lane cell
    """
    pawn_id: str
    color: Color
    move_type: MoveType
    origin: Square | None
    destination: Square
    steps: tuple[Square, ...]
    captures: tuple[str, ...] = field(default_factory=tuple)
    finishes: bool = False

    @property
    def is_open(self) -> bool:
        return self.move_type == MoveType.OPEN

    @property
    def is_capture(self) -> bool:
        return bool(self.captures)

    @property
    def grants_bonus(self) -> bool:
        """A capture or a finish keeps the turn regardless of the face."""
        return self.is_capture or self.finishes

    @property
    def final_state(self) -> PawnState:
        if self.finishes:
            return PawnState.FINISHED
        if self.destination.is_stretch:
            return PawnState.IN_STRETCH
        return PawnState.ON_BOARD

    @property
    def origin_key(self) -> Square | None:
        """Moves with the same origin are interchangeable."""
        return self.origin


class MoveResolver:
    """
    Stateless move computation.

    All methods are class methods operating on immutable data.
    State is passed in and returned, never stored.
    """

    @classmethod
    def plan(
        cls,
        board: Board,
        occupancy: PositionIndex,
        pawn: Pawn,
        roll: int,
    ) -> MovePlan | None:
        """Work out what moving ``pawn`` by ``roll`` would do.

        Returns:
            The MovePlan, or None when the move is illegal.
        """
        if pawn.state == PawnState.FINISHED:
            return None

        if pawn.state == PawnState.AT_HOME:
            if roll != OPEN_ROLL:
                return None
            start = board.start_square(pawn.color)
            return MovePlan(
                pawn_id=pawn.pawn_id,
                color=pawn.color,
                move_type=MoveType.OPEN,
                origin=None,
                destination=start,
                steps=(start,),
                captures=cls._captures_at(board, occupancy, start, pawn.color),
            )

        steps = board.path(pawn.color, pawn.square, roll)
        if steps is None:
            return None
        destination = steps[-1]
        return MovePlan(
            pawn_id=pawn.pawn_id,
            color=pawn.color,
            move_type=MoveType.STRETCH if destination.is_stretch else MoveType.BOARD,
            origin=pawn.square,
            destination=destination,
            steps=steps,
            captures=cls._captures_at(board, occupancy, destination, pawn.color),
            finishes=board.is_final(destination),
        )

    @classmethod
    def _captures_at(
        cls,
        board: Board,
        occupancy: PositionIndex,
        square: Square,
        color: Color,
    ) -> tuple[str, ...]:
        if board.is_safe(square):
            return ()
        return occupancy.opponents(square, color)

    @classmethod
    def legal_moves(
        cls,
        board: Board,
        occupancy: PositionIndex,
        player: Player,
        roll: int,
    ) -> tuple[MovePlan, ...]:
        """Every legal move for ``player`` with ``roll``, in pawn order."""
        plans = []
        for pawn in player.pawns:
            plan = cls.plan(board, occupancy, pawn, roll)
            if plan is not None:
                plans.append(plan)
        return tuple(plans)

    @classmethod
    def automatic_choice(cls, plans: tuple[MovePlan, ...]) -> MovePlan | None:
        """Pick a move without asking the player, if that is unambiguous.

        When all legal moves start from the same place (one pawn, a stack of
        pawns, or several pawns in the yard with none out) they lead to the
        same position, so the lowest-indexed pawn is used. Otherwise the
        caller must select and None is returned.
        """
        if not plans:
            return None
        if len({plan.origin_key for plan in plans}) == 1:
            return plans[0]
        return None

    @classmethod
    def describe_illegal(cls, board: Board, pawn: Pawn, roll: int) -> str:
        """Human-readable reason why ``pawn`` cannot move ``roll``."""
        if pawn.state == PawnState.FINISHED:
            return f"{pawn.pawn_id} has already finished."
        if pawn.state == PawnState.AT_HOME:
            return f"{pawn.pawn_id} needs a {OPEN_ROLL} to leave the yard, rolled {roll}."
        remaining = board.finish_progress - board.progress_of(pawn.color, pawn.square)
        return f"{pawn.pawn_id} is {remaining} from home; {roll} would overshoot."

    @classmethod
    def apply(cls, state: GameState, plan: MovePlan) -> GameState:
        """Commit a planned move, including its captures, atomically."""
        pawn = state.find_pawn(plan.pawn_id)
        if pawn.square != plan.origin:
            raise ValueError(f"Plan for {plan.pawn_id} expects {plan.origin}, pawn is on {pawn.square}")

        final_state = plan.final_state
        square = None if final_state == PawnState.FINISHED else plan.destination
        state = state.with_pawn(pawn.moved_to(final_state, square))

        for captured_id in plan.captures:
            captured = state.find_pawn(captured_id)
            if captured.square != plan.destination:
                raise ValueError(f"{captured_id} is not on {plan.destination} to be captured")
            state = state.with_pawn(captured.moved_to(PawnState.AT_HOME))
            logger.debug("%s captured %s on %s", plan.pawn_id, captured_id, plan.destination)

        logger.debug(
            "%s %s %s -> %s (%d steps)",
            plan.pawn_id, plan.move_type.value, plan.origin, plan.destination, len(plan.steps),
        )
        return state
