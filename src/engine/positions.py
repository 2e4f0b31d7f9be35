"""
Ludo Arena - Position Index

Per-square occupancy. The index is derived from the players' pawns and never
stored on its own, so it can always be rebuilt from a snapshot.
"""

from dataclasses import dataclass, field
from typing import Iterable

from src.engine.base import Color, Player, Square, parse_pawn_id


@dataclass(frozen=True)
class PositionIndex:
    """
    Immutable map of square -> ordered pawn ids standing there.

    Attributes:
        cells: Only occupied squares appear; arrival order is preserved
    """
    cells: dict[Square, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_players(cls, players: Iterable[Player]) -> "PositionIndex":
        """Build the index from the pawns' current squares."""
        cells: dict[Square, tuple[str, ...]] = {}
        for player in players:
            for pawn in player.pawns:
                if pawn.square is not None:
                    cells[pawn.square] = cells.get(pawn.square, ()) + (pawn.pawn_id,)
        return cls(cells=cells)

    def occupants(self, square: Square) -> tuple[str, ...]:
        return self.cells.get(square, ())

    def opponents(self, square: Square, color: Color) -> tuple[str, ...]:
        """Pawn ids on ``square`` that do not belong to ``color``."""
        return tuple(
            pawn_id for pawn_id in self.occupants(square)
            if parse_pawn_id(pawn_id)[0] != color
        )

    def colors_at(self, square: Square) -> set[Color]:
        return {parse_pawn_id(pawn_id)[0] for pawn_id in self.occupants(square)}
