from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ludo_cross.config import config, ui_config
from ludo_cross.topology import TopologyTables
from ludo_cross.types import CellKind, Coord, Token

# Color styling, indexed by player
COLOR_MAP = {
    "red": (230, 60, 60),
    "blue": (65, 100, 210),
    "green": (60, 170, 90),
    "yellow": (245, 205, 55),
}
PLAYER_RGB = [COLOR_MAP[c] for c in config.COLORS]
BG_COLOR = (245, 245, 245)
GRID_LINE = (200, 200, 200)
PATH_COLOR = (255, 255, 255)
CROSS_COLOR = (250, 250, 250)
SAFE_COLOR = (255, 255, 200)
HOME_SHADE = (235, 235, 235)
CENTER_COLOR = (255, 255, 255)
ARROW_COLOR = (170, 170, 170)
MOVABLE_OUTLINE = (20, 20, 20)

FONT = None
try:  # Best-effort font
    FONT = ImageFont.truetype("DejaVuSans.ttf", 12)
except OSError:
    pass


def _tint(rgb: Tuple[int, int, int], factor: float) -> Tuple[int, int, int]:
    return tuple(int(255 - (255 - c) * factor) for c in rgb)


def _cell_bbox(col: int, row: int, cell: int):
    x0 = col * cell
    y0 = row * cell
    return (x0, y0, x0 + cell, y0 + cell)


def _quadrant_owner(x: int, y: int) -> int:
    for player, (x0, x1, y0, y1) in enumerate(config.YARD_REGIONS):
        if x0 <= x <= x1 and y0 <= y <= y1:
            return player
    return -1


def _cell_fill(topology: TopologyTables, kind: CellKind, x: int, y: int):
    if kind == CellKind.QUADRANT:
        return _tint(PLAYER_RGB[_quadrant_owner(x, y)], 0.85)
    if kind == CellKind.YARD_SLOT:
        return HOME_SHADE
    if kind == CellKind.CROSS:
        return CROSS_COLOR
    if kind == CellKind.SAFE:
        return SAFE_COLOR
    if kind == CellKind.START:
        index = topology.track.index(Coord(x, y))
        return _tint(PLAYER_RGB[topology.start_player_at(index)], 0.5)
    if kind == CellKind.HOME_RUN:
        for player, lane in enumerate(topology.home_runs):
            if Coord(x, y) in lane:
                return _tint(PLAYER_RGB[player], 0.6)
    if kind == CellKind.CENTER:
        return CENTER_COLOR
    if kind == CellKind.TRACK:
        return PATH_COLOR
    return BG_COLOR


def _draw_arrow(d: ImageDraw.ImageDraw, bbox, direction: Tuple[int, int], cell: int):
    x0, y0, x1, y1 = bbox
    cx, cy = (x0 + x1) / 2, (y0 + y1) / 2
    dx, dy = direction
    r = cell * 0.15
    tip = (cx + dx * r, cy + dy * r)
    # Perpendicular base of a small triangle
    px, py = -dy, dx
    base = (cx - dx * r, cy - dy * r)
    d.polygon(
        [
            tip,
            (base[0] + px * r, base[1] + py * r),
            (base[0] - px * r, base[1] - py * r),
        ],
        fill=ARROW_COLOR,
    )


def _token_cells(
    topology: TopologyTables, tokens: Sequence[Token]
) -> Dict[Coord, List[int]]:
    cells: Dict[Coord, List[int]] = defaultdict(list)
    for idx, token in enumerate(tokens):
        coord = topology.token_coordinate(token, idx % config.TOKENS_PER_PLAYER)
        cells[coord].append(idx)
    return cells


def draw_board(
    topology: TopologyTables,
    tokens: Sequence[Token],
    movable: Iterable[int] = (),
    show_ids: bool = True,
    cell: int = None,
) -> Image.Image:
    """Render the board and tokens; movable tokens get a heavy outline."""
    cell = cell or ui_config.CELL_SIZE
    size = config.GRID_SIZE * cell
    movable = set(movable)
    img = Image.new("RGB", (size, size), BG_COLOR)
    d = ImageDraw.Draw(img)

    grid = topology.cell_grid()
    for y in range(config.GRID_SIZE):
        for x in range(config.GRID_SIZE):
            kind = CellKind(int(grid[y, x]))
            bbox = _cell_bbox(x, y, cell)
            outline = GRID_LINE if kind >= CellKind.CROSS else None
            d.rectangle(bbox, fill=_cell_fill(topology, kind, x, y), outline=outline)

    for index, coord in enumerate(topology.track):
        _draw_arrow(
            d, _cell_bbox(coord.x, coord.y, cell), topology.track_direction(index), cell
        )

    center_bbox = _cell_bbox(topology.center.x, topology.center.y, cell)
    d.rectangle(center_bbox, fill=CENTER_COLOR, outline=(80, 80, 80), width=3)

    # Stacked tokens share a cell in a 2x2 arrangement
    for coord, indices in _token_cells(topology, tokens).items():
        x0, y0, x1, y1 = _cell_bbox(coord.x, coord.y, cell)
        stacked = len(indices) > 1
        part = cell // 2 if stacked else cell
        for n, idx in enumerate(indices[:4] if stacked else indices):
            ox = x0 + (n % 2) * part if stacked else x0
            oy = y0 + (n // 2) * part if stacked else y0
            inset = max(2, part // 8)
            box = (ox + inset, oy + inset, ox + part - inset, oy + part - inset)
            token = tokens[idx]
            highlighted = idx in movable
            d.ellipse(
                box,
                fill=PLAYER_RGB[token.player],
                outline=MOVABLE_OUTLINE if highlighted else (0, 0, 0),
                width=3 if highlighted else 1,
            )
            if show_ids and FONT:
                label = str(idx % config.TOKENS_PER_PLAYER)
                d.text(
                    (ox + part // 2 - 3, oy + part // 2 - 7),
                    label,
                    fill=(0, 0, 0),
                    font=FONT,
                )
        if len(indices) > 4 and FONT:
            d.text((x0 + 2, y0 + 2), f"x{len(indices)}", fill=(0, 0, 0), font=FONT)

    return img
