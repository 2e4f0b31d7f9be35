"""
Ludo Arena - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the game engine. All classes are immutable (frozen dataclasses) so a game
state can be shared between the authority, the sync layer and tests without
anyone mutating it behind another's back.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from src.engine.errors import UnknownPawn, UnknownPlayer

TRACK_LENGTH = 52
STRETCH_LENGTH = 5
PAWNS_PER_PLAYER = 4
DIE_FACES = 6
OPEN_ROLL = 6
MAX_CONSECUTIVE_SIXES = 3


class Color(Enum):
    """Player colors, in clockwise seating order around the board."""
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"

    @classmethod
    def parse(cls, value: "Color | str") -> "Color":
        """Accept a Color or its wire name; raise UnknownPlayer otherwise."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnknownPlayer(f"Unknown player color {value!r}.") from None


class PawnState(Enum):
    """Lifecycle of a pawn. Transitions only move forward, except capture."""
    AT_HOME = "at_home"
    ON_BOARD = "on_board"
    IN_STRETCH = "in_stretch"
    FINISHED = "finished"


class TurnPhase(Enum):
    """Turn Scheduler states that wait on external input."""
    AWAITING_ROLL = "awaiting_roll"
    AWAITING_ACTION = "awaiting_action"
    GAME_OVER = "game_over"


class MoveType(Enum):
    """Kind of pawn transition."""
    OPEN = "open"        # AT_HOME -> start cell
    BOARD = "board"      # lands on the common track
    STRETCH = "stretch"  # lands inside the private lane


class BonusReason(Enum):
    """Why the active player keeps the turn."""
    SIX = "six"
    CAPTURE = "capture"
    FINISH = "finish"


# Rotation used when a config does not name its colors explicitly.
DEFAULT_ROTATIONS: dict[int, tuple[Color, ...]] = {
    2: (Color.RED, Color.YELLOW),
    3: (Color.RED, Color.GREEN, Color.YELLOW),
    4: (Color.RED, Color.GREEN, Color.YELLOW, Color.BLUE),
}


@dataclass(frozen=True)
class Square:
    """
    A cell a pawn can stand on.

    Attributes:
        index: 1-52 on the common track, 1-5 inside a home-stretch lane
        lane: Owner of the lane, or None for a common-track cell
    """
    index: int
    lane: Color | None = None

    def __post_init__(self) -> None:
        limit = TRACK_LENGTH if self.lane is None else STRETCH_LENGTH
        if not (1 <= self.index <= limit):
            where = "track" if self.lane is None else f"{self.lane.value} lane"
            raise ValueError(f"Invalid {where} index {self.index}. Must be between 1 and {limit}.")

    @classmethod
    def track(cls, index: int) -> "Square":
        return cls(index=index)

    @classmethod
    def stretch(cls, color: Color, index: int) -> "Square":
        return cls(index=index, lane=color)

    @property
    def is_track(self) -> bool:
        return self.lane is None

    @property
    def is_stretch(self) -> bool:
        return self.lane is not None

    def to_dict(self) -> dict:
        """Wire format: ``{"kind": "track", "index": 10}``."""
        if self.lane is None:
            return {"kind": "track", "index": self.index}
        return {"kind": "stretch", "color": self.lane.value, "index": self.index}

    @classmethod
    def from_dict(cls, data: dict) -> "Square":
        if data.get("kind", "track") == "track":
            return cls.track(int(data["index"]))
        return cls.stretch(Color.parse(data["color"]), int(data["index"]))

    def __str__(self) -> str:
        if self.lane is None:
            return f"T{self.index}"
        return f"{self.lane.value}:{self.index}"


def pawn_key(color: Color, index: int) -> str:
    """Text id of a pawn, e.g. ``red-2``."""
    return f"{color.value}-{index}"


def parse_pawn_id(pawn_id: str) -> tuple[Color, int]:
    """Split ``red-2`` into (Color.RED, 2). Raises UnknownPawn on bad input."""
    color_name, _, index_text = str(pawn_id).partition("-")
    try:
        color = Color(color_name.lower())
        index = int(index_text)
    except ValueError:
        raise UnknownPawn(f"Malformed pawn id {pawn_id!r}.") from None
    if not (1 <= index <= PAWNS_PER_PLAYER):
        raise UnknownPawn(f"Pawn index in {pawn_id!r} must be 1-{PAWNS_PER_PLAYER}.")
    return color, index


@dataclass(frozen=True)
class Pawn:
    """
    A single pawn.

    Attributes:
        color: Owning player's color
        index: 1-4 within that player
        state: Current lifecycle state
        square: Where the pawn stands; None while AT_HOME or FINISHED
    """
    color: Color
    index: int
    state: PawnState = PawnState.AT_HOME
    square: Square | None = None

    def __post_init__(self) -> None:
        if not (1 <= self.index <= PAWNS_PER_PLAYER):
            raise ValueError(f"Pawn index must be 1-{PAWNS_PER_PLAYER}, got {self.index}")
        placed = self.state in (PawnState.ON_BOARD, PawnState.IN_STRETCH)
        if placed and self.square is None:
            raise ValueError(f"{self.pawn_id} is {self.state.value} but has no square")
        if not placed and self.square is not None:
            raise ValueError(f"{self.pawn_id} is {self.state.value} but sits on {self.square}")
        if self.state == PawnState.ON_BOARD and not self.square.is_track:
            raise ValueError(f"{self.pawn_id} is on the board but sits on {self.square}")
        if self.state == PawnState.IN_STRETCH and self.square.lane != self.color:
            raise ValueError(f"{self.pawn_id} is in its stretch but sits on {self.square}")

    @property
    def pawn_id(self) -> str:
        return pawn_key(self.color, self.index)

    def moved_to(self, state: PawnState, square: Square | None = None) -> "Pawn":
        """Copy of this pawn in a new lifecycle state."""
        return replace(self, state=state, square=square)

    def to_dict(self) -> dict:
        return {
            "pawn_id": self.pawn_id,
            "color": self.color.value,
            "index": self.index,
            "state": self.state.value,
            "square": self.square.to_dict() if self.square else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Pawn":
        square = data.get("square")
        return cls(
            color=Color.parse(data["color"]),
            index=int(data["index"]),
            state=PawnState(data["state"]),
            square=Square.from_dict(square) if square else None,
        )


@dataclass(frozen=True)
class Player:
    """
    A seated player and its four pawns.

    Attributes:
        color: Seat color, also the player's identity
        ordinal: Position in the turn rotation (0-based)
        pawns: Exactly four pawns, ordered by index
    """
    color: Color
    ordinal: int
    pawns: tuple[Pawn, ...]

    def __post_init__(self) -> None:
        if len(self.pawns) != PAWNS_PER_PLAYER:
            raise ValueError(f"{self.color.value} must own {PAWNS_PER_PLAYER} pawns, got {len(self.pawns)}")
        for position, pawn in enumerate(self.pawns, start=1):
            if pawn.color != self.color or pawn.index != position:
                raise ValueError(f"Pawn {pawn.pawn_id} is out of place in {self.color.value}'s pawns")

    @classmethod
    def seated(cls, color: Color, ordinal: int) -> "Player":
        """A fresh player with every pawn in the home yard."""
        pawns = tuple(Pawn(color=color, index=i) for i in range(1, PAWNS_PER_PLAYER + 1))
        return cls(color=color, ordinal=ordinal, pawns=pawns)

    def pawn(self, index: int) -> Pawn:
        return self.pawns[index - 1]

    def with_pawn(self, pawn: Pawn) -> "Player":
        pawns = list(self.pawns)
        pawns[pawn.index - 1] = pawn
        return replace(self, pawns=tuple(pawns))

    def count(self, state: PawnState) -> int:
        return sum(1 for p in self.pawns if p.state == state)

    @property
    def has_completed(self) -> bool:
        """True once all four pawns are finished."""
        return self.count(PawnState.FINISHED) == PAWNS_PER_PLAYER

    @property
    def pawns_out(self) -> int:
        """Pawns on the track or in the stretch."""
        return self.count(PawnState.ON_BOARD) + self.count(PawnState.IN_STRETCH)


@dataclass(frozen=True)
class TurnState:
    """
    Complete state of the turn in progress.

    Attributes:
        current: Color holding the active turn
        phase: What the scheduler is waiting for
        last_roll: Pending roll value, None when no roll is pending
        six_streak: Consecutive sixes in the current player's unbroken run
        bonus_pending: A capture or finish just granted a bonus roll
        must_reroll: The current player rolls again (six or bonus)
        roll_serial: Id of the most recent roll; actions must quote it
    """
    current: Color
    phase: TurnPhase = TurnPhase.AWAITING_ROLL
    last_roll: int | None = None
    six_streak: int = 0
    bonus_pending: bool = False
    must_reroll: bool = False
    roll_serial: int = 0

    @property
    def awaiting_roll(self) -> bool:
        return self.phase == TurnPhase.AWAITING_ROLL

    @property
    def awaiting_action(self) -> bool:
        return self.phase == TurnPhase.AWAITING_ACTION

    @property
    def is_over(self) -> bool:
        return self.phase == TurnPhase.GAME_OVER

    def to_dict(self) -> dict:
        return {
            "current": self.current.value,
            "phase": self.phase.value,
            "last_roll": self.last_roll,
            "six_streak": self.six_streak,
            "bonus_pending": self.bonus_pending,
            "must_reroll": self.must_reroll,
            "roll_serial": self.roll_serial,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TurnState":
        return cls(
            current=Color.parse(data["current"]),
            phase=TurnPhase(data.get("phase", TurnPhase.AWAITING_ROLL.value)),
            last_roll=data.get("last_roll"),
            six_streak=int(data.get("six_streak", 0)),
            bonus_pending=bool(data.get("bonus_pending", False)),
            must_reroll=bool(data.get("must_reroll", False)),
            roll_serial=int(data.get("roll_serial", 0)),
        )


@dataclass(frozen=True)
class GameResult:
    """
    Finish order of the players who brought all four pawns home.

    Attributes:
        order: Colors in the order they completed
    """
    order: tuple[Color, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(set(self.order)) != len(self.order):
            raise ValueError(f"Duplicate color in result order {self.order}")

    def __len__(self) -> int:
        return len(self.order)

    def __contains__(self, color: object) -> bool:
        return color in self.order

    def to_list(self) -> list[str]:
        return [c.value for c in self.order]


@dataclass(frozen=True)
class GameConfig:
    """
    Configuration for a game session.

    Attributes:
        num_players: Number of players (2-4)
        colors: Explicit rotation; defaults to DEFAULT_ROTATIONS[num_players]
        auto_move: Let the engine pick the pawn when the choice is unambiguous
    """
    num_players: int = 4
    colors: tuple[Color, ...] | None = None
    auto_move: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        # validators imports this module
        from src.engine.validators import validate_player_count, validate_rotation

        validate_player_count(self.num_players)
        if self.colors is not None:
            object.__setattr__(self, "colors", validate_rotation(self.colors))
            if len(self.colors) != self.num_players:
                raise ValueError(
                    f"Expected {self.num_players} colors, got {len(self.colors)}."
                )

    @property
    def rotation(self) -> tuple[Color, ...]:
        """Fixed turn order for this game."""
        if self.colors is not None:
            return self.colors
        return DEFAULT_ROTATIONS[self.num_players]

    @property
    def places_to_award(self) -> int:
        """The game ends once this many players have completed."""
        return self.num_players - 1
