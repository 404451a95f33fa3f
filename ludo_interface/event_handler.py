import time
from typing import List, Optional, Tuple

import gradio as gr

from ludo_cross import Game, Rejected
from ludo_cross.config import config

from .game_manager import GameManager

HISTORY_LIMIT = 50


class EventHandler:
    """Handles UI event callbacks. All game mutation goes through ``Game``."""

    def __init__(self, game_manager: GameManager, show_token_ids: bool):
        self.game_manager = game_manager
        self.show_token_ids = show_token_ids

    def _button_updates(self, game: Game) -> list:
        options = {o["slot"]: o for o in self.game_manager.move_options(game)}
        return [
            gr.update(
                visible=slot in options,
                value=f"Move Token {slot}",
            )
            for slot in range(config.TOKENS_PER_PLAYER)
        ]

    def _outputs(
        self,
        game: Game,
        desc: str,
        history: List[str],
        show: bool,
        pending: Optional[Tuple[int, float]],
    ):
        return (
            game,
            self.game_manager.board_html(game, show),
            desc,
            history,
            "\n".join(reversed(history)),
            self.game_manager.status_html(game),
            *self._button_updates(game),
            pending,
        )

    def _record(self, history: List[str], desc: str) -> List[str]:
        history = list(history or [])
        history.append(desc)
        if len(history) > HISTORY_LIMIT:
            history = history[-HISTORY_LIMIT:]
        return history

    def _ui_init(self, game: Optional[Game], show: bool):
        game = self.game_manager.init_game(game)
        return self._outputs(
            game, "🎮 New game! RED rolls first.", [], show, None
        )

    def _ui_roll(self, game: Optional[Game], history: List[str], show: bool):
        if game is None:
            game = self.game_manager.init_game()
        result = game.roll_dice()
        desc = self.game_manager.serialize_roll(result)
        history = self._record(history, desc)
        pending = None
        if not isinstance(result, Rejected):
            delay = self.game_manager.clear_delay(result)
            if delay is not None:
                pending = (result.epoch, delay)
        return self._outputs(game, desc, history, show, pending)

    def _ui_select(self, slot: int, game: Optional[Game], history: List[str], show: bool):
        if game is None:
            return self._ui_init(None, show)
        player = game.current_player
        token_index = player * config.TOKENS_PER_PLAYER + int(slot)
        result = game.select_token(token_index)
        desc = self.game_manager.serialize_move(player, result)
        history = self._record(history, desc)
        pending = None
        if not isinstance(result, Rejected):
            pending = (result.epoch, self.game_manager.clear_delay(result))
        return self._outputs(game, desc, history, show, pending)

    def _ui_delayed_clear(self, game: Optional[Game], pending, show: bool):
        """Runs after a roll/move; a reset in between makes the clear a no-op."""
        if game is None or not pending:
            return gr.update(), gr.update(), None
        epoch, delay = pending
        time.sleep(float(delay))
        if not game.clear_dice(epoch):
            return gr.update(), gr.update(), None
        return (
            self.game_manager.board_html(game, show),
            self.game_manager.status_html(game),
            None,
        )

    def _ui_export(self, game: Optional[Game]) -> dict:
        if game is None:
            return {}
        state = game.state()
        return {
            "current_player": state.current_player,
            "phase": state.phase.value,
            "last_dice_value": state.last_dice_value,
            "consecutive_sixes": state.consecutive_sixes,
            "movable_token_indices": sorted(state.movable_token_indices),
            "tokens": [t.to_dict() for t in state.tokens],
            "winners": game.winners(),
        }
