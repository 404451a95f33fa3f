from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from loguru import logger

from .config import config
from .path_builder import build_track, yard_mask
from .types import CellKind, Coord, Token


@dataclass(frozen=True, slots=True)
class TopologyTables:
    """Static board tables, derived once and shared read-only."""

    track: tuple[Coord, ...]
    home_runs: tuple[tuple[Coord, ...], ...]
    home_yards: tuple[tuple[Coord, ...], ...]
    start_indices: tuple[int, ...]
    safe_indices: frozenset[int]
    center: Coord
    _grid: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        grid = self._build_grid()
        grid.flags.writeable = False
        object.__setattr__(self, "_grid", grid)

    def _check_player(self, player: int) -> None:
        if not 0 <= player < config.NUM_PLAYERS:
            raise IndexError(f"Player {player} out of range")

    # --- Coordinate lookups ---
    def track_coordinate(self, index: int) -> Coord:
        if not 0 <= index < len(self.track):
            raise IndexError(f"Track index {index} out of range")
        return self.track[index]

    def home_run_coordinate(self, player: int, k: int) -> Coord:
        self._check_player(player)
        if not 0 <= k < config.HOME_RUN_LENGTH:
            raise IndexError(f"Home-run step {k} out of range")
        return self.home_runs[player][k]

    def home_yard_coordinate(self, player: int, slot: int) -> Coord:
        self._check_player(player)
        if not 0 <= slot < config.TOKENS_PER_PLAYER:
            raise IndexError(f"Home-yard slot {slot} out of range")
        return self.home_yards[player][slot]

    def token_coordinate(self, token: Token, slot: int = 0) -> Coord:
        """Cell for any position encoding; ``slot`` picks the yard cell."""
        if token.is_home():
            return self.home_yard_coordinate(token.player, slot)
        if token.is_finished():
            return self.center
        if token.is_on_track():
            return self.track[token.position]
        if token.is_in_home_run():
            return self.home_runs[token.player][token.home_run_step()]
        raise ValueError(
            f"Position {token.position} is not a valid encoding for player {token.player}"
        )

    def track_direction(self, index: int) -> tuple[int, int]:
        """Unit step (dx, dy) from track cell ``index`` to the next one."""
        cur = self.track_coordinate(index)
        nxt = self.track[(index + 1) % len(self.track)]
        return (int(np.sign(nxt.x - cur.x)), int(np.sign(nxt.y - cur.y)))

    # --- Cell classification for renderers ---
    def _build_grid(self) -> np.ndarray:
        size = config.GRID_SIZE
        mid = size // 2
        grid = np.full((size, size), CellKind.EMPTY, dtype=np.int8)
        grid[yard_mask()] = CellKind.QUADRANT
        grid[mid - 1 : mid + 2, :] = CellKind.CROSS
        grid[:, mid - 1 : mid + 2] = CellKind.CROSS
        for lane in self.home_yards:
            for c in lane:
                grid[c.y, c.x] = CellKind.YARD_SLOT
        for lane in self.home_runs:
            for c in lane:
                grid[c.y, c.x] = CellKind.HOME_RUN
        for c in self.track:
            grid[c.y, c.x] = CellKind.TRACK
        for index in self.safe_indices:
            c = self.track[index]
            grid[c.y, c.x] = CellKind.SAFE
        for index in self.start_indices:
            c = self.track[index]
            grid[c.y, c.x] = CellKind.START
        grid[self.center.y, self.center.x] = CellKind.CENTER
        return grid

    def cell_grid(self) -> np.ndarray:
        """Read-only (GRID_SIZE, GRID_SIZE) int8 array of ``CellKind`` indexed [y, x]."""
        return self._grid

    def cell_kind(self, x: int, y: int) -> CellKind:
        if not (0 <= x < config.GRID_SIZE and 0 <= y < config.GRID_SIZE):
            raise IndexError(f"Cell ({x},{y}) is off the grid")
        return CellKind(int(self._grid[y, x]))

    def start_player_at(self, index: int) -> int | None:
        """Player whose tokens enter at track ``index``, if any."""
        for player, start in enumerate(self.start_indices):
            if start == index:
                return player
        return None


def build_topology() -> TopologyTables:
    """Build all board tables. Raises ``BoardIntegrityError`` on a bad board."""
    track, start_indices = build_track()
    home_runs = tuple(
        tuple(Coord(x, y) for x, y in lane) for lane in config.HOME_RUNS
    )
    home_yards = tuple(
        tuple(Coord(x, y) for x, y in slots) for slots in config.HOME_YARDS
    )
    safe: set[int] = set()
    for start in start_indices:
        safe.add(start)
        safe.add((start + config.SAFE_OFFSET) % len(track))
    topology = TopologyTables(
        track=track,
        home_runs=home_runs,
        home_yards=home_yards,
        start_indices=start_indices,
        safe_indices=frozenset(safe),
        center=Coord(*config.CENTER),
    )
    logger.info(
        f"Board topology ready: {len(track)} track cells, starts {start_indices}"
    )
    return topology
