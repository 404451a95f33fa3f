import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


@dataclass(slots=True)
class Config:
    # --- Board ---
    GRID_SIZE: int = 15
    TRACK_LENGTH: int = 52
    HOME_RUN_LENGTH: int = 5  # cells before the center; landing on 5 finishes
    NUM_PLAYERS: int = 4
    TOKENS_PER_PLAYER: int = 4

    # --- Position encodings ---
    HOME_POSITION: int = -1
    HOME_RUN_BASE: int = 100
    HOME_RUN_STRIDE: int = 10
    FINISHED_POSITION: int = 999

    # --- Dice ---
    DICE_MIN: int = 1
    DICE_MAX: int = 6
    EXIT_ROLL: int = 6
    MAX_CONSECUTIVE_SIXES: int = 3

    # Bound on the outer-loop walk
    MAX_WALK_STEPS: int = int(os.getenv("MAX_WALK_STEPS", 200))
    # Display-only safe cells sit this many steps past each start cell
    SAFE_OFFSET: int = 8

    COLORS: list[str] = field(
        default_factory=lambda: ["red", "blue", "green", "yellow"]
    )
    CENTER: tuple[int, int] = (7, 7)

    # (x, y) entry cell on the track for each player
    ENTRY_COORDS: list[tuple[int, int]] = field(
        default_factory=lambda: [(1, 6), (8, 1), (13, 8), (6, 13)]
    )
    # Inclusive (x0, x1, y0, y1) yard quadrant per player
    YARD_REGIONS: list[tuple[int, int, int, int]] = field(
        default_factory=lambda: [
            (0, 5, 0, 5),
            (9, 14, 0, 5),
            (9, 14, 9, 14),
            (0, 5, 9, 14),
        ]
    )
    HOME_RUNS: list[list[tuple[int, int]]] = field(
        default_factory=lambda: [
            [(1, 7), (2, 7), (3, 7), (4, 7), (5, 7)],
            [(7, 1), (7, 2), (7, 3), (7, 4), (7, 5)],
            [(13, 7), (12, 7), (11, 7), (10, 7), (9, 7)],
            [(7, 13), (7, 12), (7, 11), (7, 10), (7, 9)],
        ]
    )
    HOME_YARDS: list[list[tuple[int, int]]] = field(
        default_factory=lambda: [
            [(1, 1), (2, 1), (1, 2), (2, 2)],
            [(10, 1), (11, 1), (10, 2), (11, 2)],
            [(10, 10), (11, 10), (10, 11), (11, 11)],
            [(1, 10), (2, 10), (1, 11), (2, 11)],
        ]
    )

    # Derived (populated in __post_init__ due to slots)
    TOTAL_TOKENS: int = 0
    LAST_HOME_RUN_BASE: int = 0

    def __post_init__(self):
        self.TOTAL_TOKENS = self.NUM_PLAYERS * self.TOKENS_PER_PLAYER
        self.LAST_HOME_RUN_BASE = (
            self.HOME_RUN_BASE + (self.NUM_PLAYERS - 1) * self.HOME_RUN_STRIDE
        )

        if self.HOME_RUN_LENGTH >= self.HOME_RUN_STRIDE:
            raise ValueError("HOME_RUN_LENGTH must be smaller than HOME_RUN_STRIDE")
        if self.HOME_RUN_BASE <= self.TRACK_LENGTH:
            raise ValueError("HOME_RUN_BASE must not overlap track indices")
        if self.FINISHED_POSITION < self.LAST_HOME_RUN_BASE + self.HOME_RUN_LENGTH:
            raise ValueError("FINISHED_POSITION overlaps a home-run encoding")
        if self.MAX_WALK_STEPS < self.TRACK_LENGTH:
            raise ValueError("MAX_WALK_STEPS must be at least TRACK_LENGTH")
        for name in ("COLORS", "ENTRY_COORDS", "YARD_REGIONS", "HOME_RUNS", "HOME_YARDS"):
            if len(getattr(self, name)) != self.NUM_PLAYERS:
                raise ValueError(f"{name} must have one entry per player")


@dataclass(slots=True)
class UIConfig:
    # Presentation-side delays (seconds) before the displayed dice is cleared
    DICE_CLEAR_DELAY: float = float(os.getenv("DICE_CLEAR_DELAY", 1.0))
    FORFEIT_CLEAR_DELAY: float = float(os.getenv("FORFEIT_CLEAR_DELAY", 2.0))
    CELL_SIZE: int = int(os.getenv("CELL_SIZE", 40))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


config = Config()
ui_config = UIConfig()
