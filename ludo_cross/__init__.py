"""
Ludo cross-track rule engine.
Track construction, move legality/application and the turn state machine.
"""

from .config import config, ui_config
from .exceptions import BoardIntegrityError, IllegalMoveError, LudoError
from .game import Game, ScriptedDice
from .moves import apply_move, destination, resolve_moves
from .path_builder import build_track, is_track_cell, walk_outer_loop
from .topology import TopologyTables, build_topology
from .types import (
    CellKind,
    Coord,
    GameState,
    Rejected,
    RollResult,
    SelectResult,
    Token,
    TurnPhase,
)

__all__ = [
    "config",
    "ui_config",
    "LudoError",
    "BoardIntegrityError",
    "IllegalMoveError",
    "Game",
    "ScriptedDice",
    "apply_move",
    "destination",
    "resolve_moves",
    "build_track",
    "is_track_cell",
    "walk_outer_loop",
    "TopologyTables",
    "build_topology",
    "CellKind",
    "Coord",
    "GameState",
    "Rejected",
    "RollResult",
    "SelectResult",
    "Token",
    "TurnPhase",
]
