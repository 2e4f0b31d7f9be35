"""
Ludo Arena - Win/Order Tracker

Records the order in which players bring all four pawns home and decides when
the game is over.
"""

from src.engine.base import Color, GameResult, Player


class WinOrderTracker:
    """Stateless finish-order bookkeeping."""

    @classmethod
    def record_finish(cls, result: GameResult, player: Player) -> GameResult:
        """Append ``player`` once all its pawns are finished.

        Calling it again for a player already ranked is a no-op.
        """
        if not player.has_completed or player.color in result:
            return result
        return GameResult(order=result.order + (player.color,))

    @classmethod
    def is_game_over(cls, result: GameResult, player_count: int) -> bool:
        return len(result) >= player_count - 1

    @classmethod
    def standings(cls, result: GameResult, rotation: tuple[Color, ...]) -> tuple[Color, ...]:
        """Full ranking: finishers in order, then everyone else in rotation order."""
        remaining = tuple(c for c in rotation if c not in result)
        return result.order + remaining
