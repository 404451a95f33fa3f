from enum import Enum

from ludo_cross.config import config


class PlayerColor(Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"


ALL_COLORS = [PlayerColor(c) for c in config.COLORS]
PTOPlayerColor = {i: color for i, color in enumerate(ALL_COLORS)}
