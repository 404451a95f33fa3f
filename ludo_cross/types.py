from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional

from .config import config


@dataclass(frozen=True, slots=True)
class Coord:
    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


class TurnPhase(Enum):
    AWAITING_ROLL = "awaiting_roll"
    ROLLED_FORFEITED = "rolled_forfeited"
    ROLLED_NO_MOVES = "rolled_no_moves"
    ROLLED_AWAITING_SELECTION = "rolled_awaiting_selection"


class CellKind(IntEnum):
    EMPTY = 0
    QUADRANT = 1
    YARD_SLOT = 2
    CROSS = 3
    TRACK = 4
    START = 5
    SAFE = 6
    HOME_RUN = 7
    CENTER = 8


def home_run_base(player: int) -> int:
    return config.HOME_RUN_BASE + player * config.HOME_RUN_STRIDE


def is_valid_position(position: int, player: int) -> bool:
    """Check that ``position`` is one of the four encodings for ``player``."""
    if position in (config.HOME_POSITION, config.FINISHED_POSITION):
        return True
    if 0 <= position < config.TRACK_LENGTH:
        return True
    base = home_run_base(player)
    return base <= position < base + config.HOME_RUN_LENGTH


@dataclass(frozen=True, slots=True)
class Token:
    """A single token. ``player`` never changes; ``position`` is encoded.

    -1 home yard, 0..51 track index, 100 + player*10 + k home run cell k,
    999 finished.
    """

    player: int
    position: int = config.HOME_POSITION

    def is_home(self) -> bool:
        return self.position == config.HOME_POSITION

    def is_on_track(self) -> bool:
        return 0 <= self.position < config.TRACK_LENGTH

    def is_in_home_run(self) -> bool:
        base = home_run_base(self.player)
        return base <= self.position < base + config.HOME_RUN_LENGTH

    def is_finished(self) -> bool:
        return self.position == config.FINISHED_POSITION

    def home_run_step(self) -> int:
        """Cell index k inside the home run, or -1 if not in the home run."""
        if not self.is_in_home_run():
            return -1
        return self.position - home_run_base(self.player)

    def to_dict(self) -> dict:
        return {
            "player": self.player,
            "color": config.COLORS[self.player],
            "position": self.position,
            "is_home": self.is_home(),
            "is_on_track": self.is_on_track(),
            "is_in_home_run": self.is_in_home_run(),
            "is_finished": self.is_finished(),
        }


def initial_tokens() -> tuple[Token, ...]:
    return tuple(
        Token(player=p)
        for p in range(config.NUM_PLAYERS)
        for _ in range(config.TOKENS_PER_PLAYER)
    )


@dataclass(frozen=True, slots=True)
class Rejected:
    """Returned for out-of-turn or ineligible requests; state is unchanged."""

    reason: str

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class RollResult:
    value: int
    movable_token_indices: frozenset[int]
    can_move: bool
    forfeited: bool
    player: int
    next_player: int
    epoch: int


@dataclass(frozen=True, slots=True)
class SelectResult:
    tokens: tuple[Token, ...]
    token_index: int
    old_position: int
    new_position: int
    next_player: int
    grants_extra_roll: bool
    token_finished: bool
    player_won: bool
    epoch: int


@dataclass(frozen=True, slots=True)
class GameState:
    tokens: tuple[Token, ...]
    current_player: int
    last_dice_value: Optional[int]
    consecutive_sixes: int
    movable_token_indices: frozenset[int] = field(default_factory=frozenset)
    can_move: bool = False
    phase: TurnPhase = TurnPhase.AWAITING_ROLL
    epoch: int = 0
