"""
Ludo Arena - Game State

The single value an authority owns: config, board, players, turn and result.
Every transition produces a new GameState; nothing else holds game data.
"""

from dataclasses import dataclass, field, replace
from functools import cached_property

from src.engine.base import (
    Color,
    GameConfig,
    GameResult,
    Pawn,
    Player,
    TurnState,
    parse_pawn_id,
)
from src.engine.board import STANDARD_BOARD, Board
from src.engine.errors import UnknownPawn, UnknownPlayer
from src.engine.positions import PositionIndex


@dataclass(frozen=True)
class GameState:
    """
    Complete, self-contained state of one game.

    Attributes:
        config: Player count, rotation and auto-move setting
        board: Static geometry
        players: One record per seat, indexed by rotation ordinal
        turn: Turn Scheduler state
        result: Finish order so far
    """
    config: GameConfig
    players: tuple[Player, ...]
    turn: TurnState
    board: Board = STANDARD_BOARD
    result: GameResult = field(default_factory=GameResult)

    @classmethod
    def initial(cls, config: GameConfig | None = None, board: Board = STANDARD_BOARD) -> "GameState":
        """All pawns home, first color in the rotation to roll."""
        config = config or GameConfig()
        for color in config.rotation:
            board.start_cell(color)
        players = tuple(Player.seated(color, i) for i, color in enumerate(config.rotation))
        return cls(config=config, players=players, turn=TurnState(current=config.rotation[0]), board=board)

    @cached_property
    def occupancy(self) -> PositionIndex:
        return PositionIndex.from_players(self.players)

    @property
    def rotation(self) -> tuple[Color, ...]:
        return tuple(p.color for p in self.players)

    @property
    def is_over(self) -> bool:
        return self.turn.is_over

    @property
    def active_player(self) -> Player:
        return self.player(self.turn.current)

    @property
    def completed_colors(self) -> frozenset[Color]:
        return frozenset(p.color for p in self.players if p.has_completed)

    def player(self, color: Color | str) -> Player:
        """Look up a seated player; raises UnknownPlayer."""
        color = Color.parse(color)
        for player in self.players:
            if player.color == color:
                return player
        raise UnknownPlayer(f"{color.value} is not seated in this game.")

    def find_pawn(self, pawn_id: str) -> Pawn:
        """Look up a pawn by id; raises UnknownPawn."""
        color, index = parse_pawn_id(pawn_id)
        try:
            player = self.player(color)
        except UnknownPlayer:
            raise UnknownPawn(f"Pawn {pawn_id} belongs to no seated player.") from None
        return player.pawn(index)

    def pawns(self) -> tuple[Pawn, ...]:
        return tuple(pawn for player in self.players for pawn in player.pawns)

    def with_pawn(self, pawn: Pawn) -> "GameState":
        players = tuple(
            p.with_pawn(pawn) if p.color == pawn.color else p
            for p in self.players
        )
        return replace(self, players=players)

    def with_turn(self, turn: TurnState) -> "GameState":
        return replace(self, turn=turn)

    def with_result(self, result: GameResult) -> "GameState":
        return replace(self, result=result)
