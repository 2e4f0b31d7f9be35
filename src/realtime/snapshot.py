"""
Ludo Arena - State Snapshots

Pydantic models for the full-state snapshot sent to a reconnecting
participant. A snapshot holds the board, every pawn, the TurnState and the
result; restoring it yields exactly the authority's GameState.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from src.engine.base import (
    PAWNS_PER_PLAYER,
    Color,
    GameConfig,
    GameResult,
    Pawn,
    Player,
    TurnState,
)
from src.engine.board import Board
from src.engine.state import GameState


class SquareModel(BaseModel):
    kind: Literal["track", "stretch"]
    index: int = Field(ge=1)
    color: str | None = None


class PawnModel(BaseModel):
    pawn_id: str
    color: str
    index: int = Field(ge=1, le=PAWNS_PER_PLAYER)
    state: str
    square: SquareModel | None = None


class TurnStateModel(BaseModel):
    current: str
    phase: str
    last_roll: int | None = Field(default=None, ge=1, le=6)
    six_streak: int = Field(default=0, ge=0)
    bonus_pending: bool = False
    must_reroll: bool = False
    roll_serial: int = Field(default=0, ge=0)


class BoardModel(BaseModel):
    track_length: int
    stretch_length: int
    yard_capacity: int
    start_cells: dict[str, int]
    entry_cells: dict[str, int] = Field(default_factory=dict)
    safe_squares: list[int]


class ConfigModel(BaseModel):
    num_players: int = Field(ge=2, le=4)
    colors: list[str] | None = None
    auto_move: bool = True


class GameSnapshot(BaseModel):
    """Everything needed to resume a game without replaying events."""

    game_id: str
    sequence: int = Field(ge=0)
    config: ConfigModel
    board: BoardModel
    rotation: list[str]
    pawns: list[PawnModel]
    turn_state: TurnStateModel
    result: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _four_pawns_per_seat(self) -> "GameSnapshot":
        for color in self.rotation:
            owned = sum(1 for p in self.pawns if p.color == color)
            if owned != PAWNS_PER_PLAYER:
                raise ValueError(f"{color} has {owned} pawns in the snapshot")
        return self

    @classmethod
    def from_state(cls, game_id: str, sequence: int, state: GameState) -> "GameSnapshot":
        config = state.config
        return cls(
            game_id=game_id,
            sequence=sequence,
            config=ConfigModel(
                num_players=config.num_players,
                colors=[c.value for c in config.colors] if config.colors is not None else None,
                auto_move=config.auto_move,
            ),
            board=BoardModel(**state.board.to_dict()),
            rotation=[c.value for c in state.rotation],
            pawns=[PawnModel(**pawn.to_dict()) for pawn in state.pawns()],
            turn_state=TurnStateModel(**state.turn.to_dict()),
            result=state.result.to_list(),
        )

    def to_state(self) -> GameState:
        """Rebuild the GameState this snapshot was taken from."""
        config = GameConfig(
            num_players=self.config.num_players,
            colors=tuple(Color.parse(c) for c in self.config.colors) if self.config.colors is not None else None,
            auto_move=self.config.auto_move,
        )
        pawns = [Pawn.from_dict(p.model_dump()) for p in self.pawns]
        players = []
        for ordinal, name in enumerate(self.rotation):
            color = Color.parse(name)
            owned = sorted((p for p in pawns if p.color == color), key=lambda p: p.index)
            players.append(Player(color=color, ordinal=ordinal, pawns=tuple(owned)))
        return GameState(
            config=config,
            players=tuple(players),
            turn=TurnState.from_dict(self.turn_state.model_dump()),
            board=Board.from_dict(self.board.model_dump()),
            result=GameResult(order=tuple(Color.parse(c) for c in self.result)),
        )
