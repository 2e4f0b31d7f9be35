"""
Ludo Arena - Board Topology

The static layout: a 52-cell common track, one private 5-cell home-stretch
lane per color, each color's start cell and stretch-entry cell, and the safe
squares where no capture can happen.

Distances are measured as *progress*: the number of steps a pawn has taken
since entering at its start cell. Progress 0 is the start cell, progress
``entry_progress`` is the last track cell the pawn visits, and the lane
follows immediately after it.
"""

from dataclasses import dataclass, field

from src.engine.base import (
    PAWNS_PER_PLAYER,
    STRETCH_LENGTH,
    TRACK_LENGTH,
    Color,
    Square,
)

STANDARD_START_CELLS: dict[Color, int] = {
    Color.RED: 1,
    Color.GREEN: 14,
    Color.YELLOW: 27,
    Color.BLUE: 40,
}

# Start cells plus the star cell eight steps after each of them.
STANDARD_SAFE_SQUARES = frozenset({1, 9, 14, 22, 27, 35, 40, 48})


@dataclass(frozen=True)
class Board:
    """
    Immutable board geometry.

    Attributes:
        start_cells: Track cell where each color's pawns enter
        safe_squares: Track cells exempt from capture
        track_length: Cells on the common loop
        stretch_length: Cells in each private lane; the last one finishes
        yard_capacity: Pawn slots in each home yard
    """
    start_cells: dict[Color, int] = field(default_factory=lambda: dict(STANDARD_START_CELLS))
    safe_squares: frozenset[int] = STANDARD_SAFE_SQUARES
    track_length: int = TRACK_LENGTH
    stretch_length: int = STRETCH_LENGTH
    yard_capacity: int = PAWNS_PER_PLAYER

    def __post_init__(self) -> None:
        if self.track_length != TRACK_LENGTH or self.stretch_length != STRETCH_LENGTH:
            raise ValueError(
                f"Only the standard {TRACK_LENGTH}-cell track with "
                f"{STRETCH_LENGTH}-cell lanes is supported."
            )
        for color, cell in self.start_cells.items():
            if not (1 <= cell <= self.track_length):
                raise ValueError(f"Start cell {cell} for {color.value} is off the track")
        for cell in self.safe_squares:
            if not (1 <= cell <= self.track_length):
                raise ValueError(f"Safe square {cell} is off the track")

    @classmethod
    def standard(cls) -> "Board":
        return cls()

    # -- Cells -----------------------------------------------------------

    @property
    def track_cells(self) -> tuple[int, ...]:
        """Common-track cell ids in travel order."""
        return tuple(range(1, self.track_length + 1))

    def lane(self, color: Color) -> tuple[Square, ...]:
        """The private home-stretch lane of a color, entry first."""
        return tuple(Square.stretch(color, i) for i in range(1, self.stretch_length + 1))

    def start_cell(self, color: Color) -> int:
        try:
            return self.start_cells[color]
        except KeyError:
            raise ValueError(f"Board has no start cell for {color.value}") from None

    def start_square(self, color: Color) -> Square:
        return Square.track(self.start_cell(color))

    def entry_cell(self, color: Color) -> int:
        """Last common-track cell before the color turns into its lane."""
        return self.advance_cell(self.start_cell(color), self.track_length - 2)

    def advance_cell(self, cell: int, steps: int) -> int:
        """Move along the loop, wrapping from the last cell back to cell 1."""
        return (cell - 1 + steps) % self.track_length + 1

    def is_safe(self, square: Square) -> bool:
        """Lane cells and the fixed safe cells never see a capture."""
        return square.is_stretch or square.index in self.safe_squares

    # -- Progress --------------------------------------------------------

    @property
    def entry_progress(self) -> int:
        """Progress value of the stretch-entry cell."""
        return self.track_length - 2

    @property
    def finish_progress(self) -> int:
        """Progress value of the final lane cell."""
        return self.entry_progress + self.stretch_length

    def progress_of(self, color: Color, square: Square) -> int:
        """Steps taken by a ``color`` pawn standing on ``square``."""
        if square.is_stretch:
            if square.lane != color:
                raise ValueError(f"{color.value} pawn cannot stand on {square}")
            return self.entry_progress + square.index
        return (square.index - self.start_cell(color)) % self.track_length

    def square_at(self, color: Color, progress: int) -> Square:
        """Inverse of progress_of."""
        if not (0 <= progress <= self.finish_progress):
            raise ValueError(f"Progress {progress} is outside 0-{self.finish_progress}")
        if progress <= self.entry_progress:
            return Square.track(self.advance_cell(self.start_cell(color), progress))
        return Square.stretch(color, progress - self.entry_progress)

    def path(self, color: Color, square: Square, steps: int) -> tuple[Square, ...] | None:
        """
        Cells visited when a ``color`` pawn on ``square`` moves ``steps``.

        Returns:
            One square per step, the last one being the landing cell, or
            None when the move would overshoot the final lane cell.
        """
        start = self.progress_of(color, square)
        if start + steps > self.finish_progress:
            return None
        return tuple(self.square_at(color, start + i) for i in range(1, steps + 1))

    def is_final(self, square: Square) -> bool:
        """True for the last lane cell, where a pawn finishes."""
        return square.is_stretch and square.index == self.stretch_length

    # -- Serialization ---------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "track_length": self.track_length,
            "stretch_length": self.stretch_length,
            "yard_capacity": self.yard_capacity,
            "start_cells": {c.value: cell for c, cell in self.start_cells.items()},
            "entry_cells": {c.value: self.entry_cell(c) for c in self.start_cells},
            "safe_squares": sorted(self.safe_squares),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Board":
        return cls(
            start_cells={Color.parse(k): int(v) for k, v in data["start_cells"].items()},
            safe_squares=frozenset(int(c) for c in data["safe_squares"]),
            track_length=int(data.get("track_length", TRACK_LENGTH)),
            stretch_length=int(data.get("stretch_length", STRETCH_LENGTH)),
            yard_capacity=int(data.get("yard_capacity", PAWNS_PER_PLAYER)),
        )


STANDARD_BOARD = Board.standard()
