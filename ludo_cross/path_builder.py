"""
Procedural construction of the 52-cell outer track.

The track is derived from geometric rules instead of being listed by hand:
cells on the neutral lanes plus the four edge connectors are walked from
player 0's entry cell, deduplicated, rotated and validated. Any defect is a
``BoardIntegrityError``; no degraded board is ever returned.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from .config import config
from .exceptions import BoardIntegrityError
from .types import Coord

# Direction cursor, clockwise: right, down, left, up (x right, y down)
RIGHT, DOWN, LEFT, UP = range(4)
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))

CellPredicate = Callable[[int, int], bool]


def is_track_cell(x: int, y: int) -> bool:
    """True for cells of the outer loop.

    Lane cells sit on rows/columns 6 and 8 outside the central 3x3 block;
    the four connectors close each arm at the board edge. The center is
    never a track cell.
    """
    size = config.GRID_SIZE
    mid = size // 2
    if not (0 <= x < size and 0 <= y < size):
        return False
    if (x, y) == config.CENTER:
        return False
    lanes = (mid - 1, mid + 1)
    on_lane = (y in lanes and abs(x - mid) > 1) or (x in lanes and abs(y - mid) > 1)
    connector = (x == mid and y in (0, size - 1)) or (y == mid and x in (0, size - 1))
    return on_lane or connector


def _next_step(
    cur: Coord, heading: int, is_cell: CellPredicate
) -> Optional[Tuple[Coord, int]]:
    # Clockwise scan starting one step counter-clockwise of the heading:
    # left turn, straight, right turn. A U-turn is never taken.
    for offset in (3, 0, 1):
        d = (heading + offset) % 4
        dx, dy = DIRECTIONS[d]
        if is_cell(cur.x + dx, cur.y + dy):
            return Coord(cur.x + dx, cur.y + dy), d
    # Corner cut linking an arm to the perpendicular arm
    left = (heading + 3) % 4
    dx = DIRECTIONS[heading][0] + DIRECTIONS[left][0]
    dy = DIRECTIONS[heading][1] + DIRECTIONS[left][1]
    if is_cell(cur.x + dx, cur.y + dy):
        return Coord(cur.x + dx, cur.y + dy), left
    return None


def walk_outer_loop(
    start: Optional[Coord] = None,
    is_cell: CellPredicate = is_track_cell,
    max_steps: Optional[int] = None,
    heading: int = RIGHT,
) -> list[Coord]:
    """Walk the loop from ``start`` until it closes.

    Raises:
        BoardIntegrityError: if the start is not a track cell, the walk dead
            ends, or it does not close within ``max_steps`` steps.
    """
    if start is None:
        start = Coord(*config.ENTRY_COORDS[0])
    if max_steps is None:
        max_steps = config.MAX_WALK_STEPS

    if not is_cell(start.x, start.y):
        raise BoardIntegrityError(f"Walk start {start} is not a track cell")

    path = [start]
    cur = start
    for _ in range(max_steps):
        step = _next_step(cur, heading, is_cell)
        if step is None:
            logger.error(f"Outer loop walk dead-ended at {cur}")
            raise BoardIntegrityError(f"Outer loop walk dead-ended at {cur}")
        cur, heading = step
        if cur == start:
            return path
        path.append(cur)

    logger.error(f"Outer loop walk did not close within {max_steps} steps")
    raise BoardIntegrityError(
        f"Outer loop walk did not close within {max_steps} steps"
    )


def deduplicate(path: Sequence[Coord]) -> list[Coord]:
    """Keep first occurrences; any dropped cell means the walk is defective."""
    unique = list(dict.fromkeys(path))
    if len(unique) != len(path):
        logger.warning(f"Deduped path: {len(path)} -> {len(unique)}")
        raise BoardIntegrityError(
            f"Outer loop revisits cells ({len(path)} -> {len(unique)} after dedupe)"
        )
    return unique


def rotate_to(path: Sequence[Coord], coord: Coord) -> list[Coord]:
    try:
        idx = list(path).index(coord)
    except ValueError:
        raise BoardIntegrityError(f"Cannot rotate path: {coord} is not on it") from None
    return list(path[idx:]) + list(path[:idx])


def yard_mask(
    regions: Iterable[Tuple[int, int, int, int]] | None = None,
) -> np.ndarray:
    """Boolean (GRID_SIZE, GRID_SIZE) mask indexed [y, x] of all yard cells."""
    if regions is None:
        regions = config.YARD_REGIONS
    mask = np.zeros((config.GRID_SIZE, config.GRID_SIZE), dtype=np.bool_)
    for x0, x1, y0, y1 in regions:
        mask[y0 : y1 + 1, x0 : x1 + 1] = True
    return mask


def validate_track(
    track: Sequence[Coord],
    yard_regions: Iterable[Tuple[int, int, int, int]] | None = None,
    entry_coords: Sequence[Tuple[int, int]] | None = None,
) -> tuple[int, ...]:
    """Check the finished track and return the per-player start indices.

    Raises:
        BoardIntegrityError: listing every violation found.
    """
    if entry_coords is None:
        entry_coords = config.ENTRY_COORDS
    violations: list[str] = []

    if len(track) != config.TRACK_LENGTH:
        violations.append(
            f"Path length is {len(track)}, expected {config.TRACK_LENGTH}"
        )
    if len(set(track)) != len(track):
        violations.append("Path contains duplicate cells")

    mask = yard_mask(yard_regions)
    size = config.GRID_SIZE
    for index, coord in enumerate(track):
        if not (0 <= coord.x < size and 0 <= coord.y < size):
            violations.append(f"Path cell {index} at {coord} is off the grid")
        elif mask[coord.y, coord.x]:
            violations.append(f"Path cell {index} at {coord} is in a colored yard")

    start_indices: list[int] = []
    positions = {coord: i for i, coord in enumerate(track)}
    for player, (x, y) in enumerate(entry_coords):
        idx = positions.get(Coord(x, y))
        if idx is None:
            violations.append(
                f"Start index for player {player} not found in path for coord ({x},{y})"
            )
        else:
            start_indices.append(idx)

    if violations:
        for v in violations:
            logger.error(v)
        raise BoardIntegrityError("; ".join(violations))
    return tuple(start_indices)


def build_track() -> tuple[tuple[Coord, ...], tuple[int, ...]]:
    """Derive the outer loop and its start indices."""
    path = walk_outer_loop()
    path = deduplicate(path)
    track = rotate_to(path, Coord(*config.ENTRY_COORDS[0]))
    start_indices = validate_track(track)
    logger.debug(
        f"Built outer loop with {len(track)} cells, start indices {start_indices}"
    )
    return tuple(track), start_indices
