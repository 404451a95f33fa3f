"""
Move legality and application.

Both the resolver and the applier go through ``destination`` so that a move
is applied with exactly the arithmetic used to declare it legal.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from loguru import logger

from .config import config
from .exceptions import IllegalMoveError
from .types import Token, home_run_base


def check_dice(dice: int) -> None:
    if not config.DICE_MIN <= dice <= config.DICE_MAX:
        raise ValueError(
            f"Dice value {dice} outside {config.DICE_MIN}..{config.DICE_MAX}"
        )


def destination(
    position: int, player: int, dice: int, start_index: int
) -> Optional[int]:
    """Encoded position after moving ``dice`` steps, or None if not allowed.

    Home tokens need the exit roll. On the track, distance is counted from the
    player's start index; once 52 steps are covered the token turns into its
    home run. Landing exactly on step 5 of the home run finishes the token;
    overshooting is never allowed.
    """
    if position == config.FINISHED_POSITION:
        return None
    if position == config.HOME_POSITION:
        return start_index if dice == config.EXIT_ROLL else None

    track_len = config.TRACK_LENGTH
    run_len = config.HOME_RUN_LENGTH
    base = home_run_base(player)

    if base <= position < base + run_len:
        nxt = position - base + dice
    elif 0 <= position < track_len:
        traveled = (position - start_index + track_len) % track_len
        nxt = traveled + dice
        if nxt < track_len:
            return (start_index + nxt) % track_len
        nxt -= track_len
    else:
        # Another player's home-run encoding
        return None

    if nxt < run_len:
        return base + nxt
    if nxt == run_len:
        return config.FINISHED_POSITION
    return None


def resolve_moves(
    tokens: Sequence[Token],
    player: int,
    dice: int,
    start_indices: Sequence[int],
) -> tuple[frozenset[int], bool]:
    """Indices of ``player``'s tokens that can move with ``dice``.

    Pure: ``tokens`` is not modified. Stacking on the entry cell is allowed.
    """
    check_dice(dice)
    start = start_indices[player]
    movable = frozenset(
        idx
        for idx, token in enumerate(tokens)
        if token.player == player
        and destination(token.position, player, dice, start) is not None
    )
    return movable, bool(movable)


def apply_move(
    tokens: Sequence[Token],
    token_index: int,
    player: int,
    dice: int,
    start_indices: Sequence[int],
) -> tuple[Token, ...]:
    """Return a new token tuple with ``token_index`` moved.

    Raises:
        IllegalMoveError: if the token is not movable for ``(player, dice)``.
    """
    check_dice(dice)
    if not 0 <= token_index < len(tokens):
        raise IllegalMoveError(f"Token index {token_index} out of range")
    token = tokens[token_index]
    if token.player != player:
        raise IllegalMoveError(
            f"Token {token_index} belongs to player {token.player}, not {player}"
        )
    new_pos = destination(token.position, player, dice, start_indices[player])
    if new_pos is None:
        raise IllegalMoveError(
            f"Token {token_index} at {token.position} cannot move {dice}"
        )

    updated = list(tokens)
    updated[token_index] = replace(token, position=new_pos)
    logger.debug(
        f"Player {player} token {token_index}: {token.position} -> {new_pos} (dice {dice})"
    )
    return tuple(updated)


def move_type(old_position: int, new_position: int) -> str:
    """Short label for a committed move, used in move history."""
    if new_position == config.FINISHED_POSITION:
        return "finish"
    if old_position == config.HOME_POSITION:
        return "exit_home"
    if new_position >= config.HOME_RUN_BASE:
        if old_position < config.HOME_RUN_BASE:
            return "enter_home_run"
        return "advance_home_run"
    return "advance_track"
