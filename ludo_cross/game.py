from __future__ import annotations

import random
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Sequence

from loguru import logger

from .config import config
from .moves import apply_move, check_dice, resolve_moves
from .topology import TopologyTables, build_topology
from .types import (
    Coord,
    GameState,
    Rejected,
    RollResult,
    SelectResult,
    Token,
    TurnPhase,
    initial_tokens,
)

DiceSource = Callable[[], int]


@dataclass(slots=True)
class ScriptedDice:
    """Dice source replaying a fixed sequence of values."""

    values: Sequence[int]
    _it: Iterator[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._it = iter(self.values)

    def __call__(self) -> int:
        try:
            return next(self._it)
        except StopIteration:
            raise RuntimeError("ScriptedDice ran out of values") from None


@dataclass(slots=True)
class Game:
    """Turn state machine; the single owner of mutable game state.

    Roll -> legality -> (forfeit | no moves | await selection) -> apply ->
    rotation. Delays are the caller's business: after a roll or move the
    caller may invoke ``clear_dice(epoch)`` whenever its animation ends, and a
    clear carrying an outdated epoch is ignored.
    """

    topology: TopologyTables = field(default_factory=build_topology)
    dice: Optional[DiceSource] = None
    rng: random.Random = field(default_factory=random.Random)

    tokens: tuple[Token, ...] = field(default=(), init=False)
    current_player: int = field(default=0, init=False)
    last_dice_value: Optional[int] = field(default=None, init=False)
    consecutive_sixes: int = field(default=0, init=False)
    movable_token_indices: frozenset[int] = field(default=frozenset(), init=False)
    can_move: bool = field(default=False, init=False)
    phase: TurnPhase = field(default=TurnPhase.AWAITING_ROLL, init=False)
    epoch: int = field(default=0, init=False)
    _finish_order: list[int] = field(default_factory=list, init=False, repr=False)
    # Held by every public transition
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.reset_game()

    # --- Dice ---
    def _draw(self) -> int:
        value = self.dice() if self.dice is not None else self.rng.randint(
            config.DICE_MIN, config.DICE_MAX
        )
        check_dice(value)
        return value

    def _rotate(self) -> None:
        self.current_player = (self.current_player + 1) % config.NUM_PLAYERS
        self.consecutive_sixes = 0

    # --- Transitions (callers hold the lock) ---
    def _reset_game(self) -> GameState:
        self.tokens = initial_tokens()
        self.current_player = 0
        self.last_dice_value = None
        self.consecutive_sixes = 0
        self.movable_token_indices = frozenset()
        self.can_move = False
        self.phase = TurnPhase.AWAITING_ROLL
        self.epoch += 1
        self._finish_order = []
        logger.info("New game: player 0 to roll")
        return self.state()

    def _roll_dice(self) -> RollResult | Rejected:
        if self.phase is TurnPhase.ROLLED_AWAITING_SELECTION:
            logger.warning(
                f"Roll ignored: player {self.current_player} must select a token first"
            )
            return Rejected("select a token before rolling again")
        if self.is_game_over():
            logger.warning("Roll ignored: game is over")
            return Rejected("game is over")

        player = self.current_player
        value = self._draw()
        self.last_dice_value = value
        self.epoch += 1

        forfeited = False
        if value == config.EXIT_ROLL:
            self.consecutive_sixes += 1
            forfeited = self.consecutive_sixes >= config.MAX_CONSECUTIVE_SIXES
        else:
            self.consecutive_sixes = 0

        if forfeited:
            self.movable_token_indices = frozenset()
            self.can_move = False
            self.phase = TurnPhase.ROLLED_FORFEITED
            self._rotate()
            logger.info(
                f"Player {player} rolled a third six in a row: turn forfeited"
            )
        else:
            movable, can_move = resolve_moves(
                self.tokens, player, value, self.topology.start_indices
            )
            self.movable_token_indices = movable
            self.can_move = can_move
            if can_move:
                self.phase = TurnPhase.ROLLED_AWAITING_SELECTION
                logger.debug(
                    f"Player {player} rolled {value}; movable tokens {sorted(movable)}"
                )
            else:
                # A blocked six does not earn a re-roll
                self.phase = TurnPhase.ROLLED_NO_MOVES
                self._rotate()
                logger.info(f"Player {player} rolled {value}: no valid moves")

        return RollResult(
            value=value,
            movable_token_indices=self.movable_token_indices,
            can_move=self.can_move,
            forfeited=forfeited,
            player=player,
            next_player=self.current_player,
            epoch=self.epoch,
        )

    def _select_token(self, token_index: int) -> SelectResult | Rejected:
        if self.phase is not TurnPhase.ROLLED_AWAITING_SELECTION:
            logger.warning(f"Selection of token {token_index} ignored: no pending roll")
            return Rejected("no roll is awaiting a selection")
        if token_index not in self.movable_token_indices:
            logger.warning(
                f"Selection ignored: token {token_index} is not movable for player "
                f"{self.current_player} with {self.last_dice_value}"
            )
            return Rejected(f"token {token_index} cannot move")

        player = self.current_player
        dice = self.last_dice_value
        old_position = self.tokens[token_index].position
        self.tokens = apply_move(
            self.tokens, token_index, player, dice, self.topology.start_indices
        )
        new_position = self.tokens[token_index].position
        self.movable_token_indices = frozenset()
        self.can_move = False
        self.epoch += 1

        token_finished = new_position == config.FINISHED_POSITION
        player_won = token_finished and self.has_won(player)
        if player_won and player not in self._finish_order:
            self._finish_order.append(player)
            logger.info(f"Player {player} ({config.COLORS[player]}) has finished")

        extra_roll = dice == config.EXIT_ROLL
        if not extra_roll:
            self._rotate()
        self.phase = TurnPhase.AWAITING_ROLL

        return SelectResult(
            tokens=self.tokens,
            token_index=token_index,
            old_position=old_position,
            new_position=new_position,
            next_player=self.current_player,
            grants_extra_roll=extra_roll,
            token_finished=token_finished,
            player_won=player_won,
            epoch=self.epoch,
        )

    def _clear_dice(self, epoch: Optional[int]) -> bool:
        if epoch is not None and epoch != self.epoch:
            logger.debug(f"Stale dice clear ignored (epoch {epoch} != {self.epoch})")
            return False
        if self.phase is TurnPhase.ROLLED_AWAITING_SELECTION:
            return False
        self.last_dice_value = None
        self.phase = TurnPhase.AWAITING_ROLL
        return True

    # --- Mutators ---
    def reset_game(self) -> GameState:
        with self._lock:
            return self._reset_game()

    def roll_dice(self) -> RollResult | Rejected:
        with self._lock:
            return self._roll_dice()

    def select_token(self, token_index: int) -> SelectResult | Rejected:
        with self._lock:
            return self._select_token(token_index)

    def clear_dice(self, epoch: Optional[int] = None) -> bool:
        """Clear the displayed dice once the caller's delay has elapsed.

        Returns False when the request is stale (older epoch) or a selection
        is still pending.
        """
        with self._lock:
            return self._clear_dice(epoch)

    # --- Queries ---
    def state(self) -> GameState:
        return GameState(
            tokens=self.tokens,
            current_player=self.current_player,
            last_dice_value=self.last_dice_value,
            consecutive_sixes=self.consecutive_sixes,
            movable_token_indices=self.movable_token_indices,
            can_move=self.can_move,
            phase=self.phase,
            epoch=self.epoch,
        )

    def player_tokens(self, player: int) -> list[int]:
        return [i for i, t in enumerate(self.tokens) if t.player == player]

    def has_won(self, player: int) -> bool:
        return all(self.tokens[i].is_finished() for i in self.player_tokens(player))

    def is_game_over(self) -> bool:
        return all(t.is_finished() for t in self.tokens)

    def winners(self) -> list[int]:
        """Players with all four tokens finished, in finishing order."""
        return list(self._finish_order)

    def player_status(self, player: int) -> dict:
        tokens = [self.tokens[i] for i in self.player_tokens(player)]
        return {
            "player": player,
            "color": config.COLORS[player],
            "home": sum(1 for t in tokens if t.is_home()),
            "track": sum(1 for t in tokens if t.is_on_track()),
            "home_run": sum(1 for t in tokens if t.is_in_home_run()),
            "finished": sum(1 for t in tokens if t.is_finished()),
        }

    # --- Coordinate lookups for renderers ---
    def track_coordinate(self, index: int) -> Coord:
        return self.topology.track_coordinate(index)

    def home_run_coordinate(self, player: int, k: int) -> Coord:
        return self.topology.home_run_coordinate(player, k)

    def home_yard_coordinate(self, player: int, slot: int) -> Coord:
        return self.topology.home_yard_coordinate(player, slot)

    def token_coordinates(self) -> list[Coord]:
        """Cell of every token; home tokens keep a fixed yard slot."""
        return [
            self.topology.token_coordinate(t, i % config.TOKENS_PER_PLAYER)
            for i, t in enumerate(self.tokens)
        ]
