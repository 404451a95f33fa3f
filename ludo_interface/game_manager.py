from typing import List, Optional

from ludo_cross import Game, Rejected, RollResult, SelectResult
from ludo_cross.config import config, ui_config
from ludo_cross.moves import move_type
from ludo_cross.topology import TopologyTables, build_topology

from .board_viz import draw_board
from .models import PTOPlayerColor
from .utils import Utils


class GameManager:
    """Owns the shared board tables and turns engine results into UI text."""

    def __init__(self, show_token_ids: bool, topology: Optional[TopologyTables] = None):
        self.show_token_ids = show_token_ids
        # Built once; every game shares the same immutable tables
        self.topology = topology if topology is not None else build_topology()
        self.utils = Utils()

    def init_game(self, game: Optional[Game] = None) -> Game:
        """Reset ``game`` in place (invalidating pending clears) or create one."""
        if game is None:
            return Game(topology=self.topology)
        game.reset_game()
        return game

    def board_html(self, game: Game, show_ids: Optional[bool] = None) -> str:
        show = self.show_token_ids if show_ids is None else show_ids
        img = draw_board(
            self.topology, game.tokens, game.movable_token_indices, show_ids=show
        )
        return self.utils.img_to_data_uri(img)

    def status_html(self, game: Game) -> str:
        if game.is_game_over():
            order = ", ".join(PTOPlayerColor[p].value for p in game.winners())
            return f"<h3>🏆 Game over! Finishing order: {order}</h3>"
        color = PTOPlayerColor[game.current_player].value
        lines = [f"<h3 style='color: {color};'>🎯 Current Player: {color.upper()}</h3>"]
        if game.last_dice_value is not None:
            lines.append(f"<p>🎲 Dice: {game.last_dice_value}</p>")
        if game.consecutive_sixes > 0:
            lines.append(
                f"<p>🎲 Consecutive 6s: {game.consecutive_sixes}/"
                f"{config.MAX_CONSECUTIVE_SIXES}</p>"
            )
            if game.consecutive_sixes == config.MAX_CONSECUTIVE_SIXES - 1:
                lines.append("<p>⚠️ One more 6 ends your turn!</p>")
        lines.append("<ul>")
        for player in range(config.NUM_PLAYERS):
            st = game.player_status(player)
            lines.append(
                f"<li><b style='color: {st['color']}'>{st['color']}</b>: "
                f"🏠 {st['home']} | 🛤️ {st['track'] + st['home_run']} | "
                f"🏁 {st['finished']}</li>"
            )
        lines.append("</ul>")
        return "".join(lines)

    def move_options(self, game: Game) -> List[dict]:
        """Selectable tokens of the current player, by per-player slot."""
        options: List[dict] = []
        for idx in sorted(game.movable_token_indices):
            options.append(
                {
                    "token_index": idx,
                    "slot": idx % config.TOKENS_PER_PLAYER,
                    "position": game.tokens[idx].position,
                }
            )
        return options

    def clear_delay(self, result) -> Optional[float]:
        """Seconds the UI waits before clearing the dice, None for no clear."""
        if isinstance(result, RollResult):
            if result.can_move:
                return None
            return ui_config.FORFEIT_CLEAR_DELAY
        if isinstance(result, SelectResult):
            return ui_config.DICE_CLEAR_DELAY
        return None

    def serialize_roll(self, result) -> str:
        if isinstance(result, Rejected):
            return f"Ignored: {result.reason}"
        color = PTOPlayerColor[result.player].value
        if result.forfeited:
            return f"{color} rolled a third 6 in a row - turn forfeited"
        if not result.can_move:
            return f"{color} rolled {result.value} - ❌ no valid moves"
        return f"{color} rolled {result.value} - choose a token to move"

    def serialize_move(self, player: int, result) -> str:
        if isinstance(result, Rejected):
            return f"Ignored: {result.reason}"
        color = PTOPlayerColor[player].value
        slot = result.token_index % config.TOKENS_PER_PLAYER
        parts = [
            f"{color} token {slot}: {result.old_position} -> {result.new_position} "
            f"({move_type(result.old_position, result.new_position)})"
        ]
        if result.player_won:
            parts.append("all tokens home!")
        if result.grants_extra_roll:
            parts.append("extra roll")
        return ", ".join(parts)
