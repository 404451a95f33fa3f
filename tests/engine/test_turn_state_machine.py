import random
import threading
import unittest
from unittest import mock

from ludo_cross import moves
from ludo_cross.game import Game, ScriptedDice
from ludo_cross.topology import build_topology
from ludo_cross.types import (
    Coord,
    Rejected,
    RollResult,
    SelectResult,
    Token,
    TurnPhase,
    is_valid_position,
)


def progress(token: Token, start: int) -> int:
    """Steps travelled from the yard; never decreases without captures."""
    if token.is_home():
        return -1
    if token.is_on_track():
        return (token.position - start) % 52
    if token.is_in_home_run():
        return 52 + token.home_run_step()
    return 57


class TestInitialState(unittest.TestCase):
    def test_fresh_game(self):
        game = Game(dice=ScriptedDice([]))
        state = game.state()
        self.assertEqual(len(state.tokens), 16)
        self.assertTrue(all(t.is_home() for t in state.tokens))
        self.assertEqual([t.player for t in state.tokens[4:8]], [1, 1, 1, 1])
        self.assertEqual(state.current_player, 0)
        self.assertIsNone(state.last_dice_value)
        self.assertEqual(state.consecutive_sixes, 0)
        self.assertEqual(state.phase, TurnPhase.AWAITING_ROLL)

    def test_reset_restores_initial_state(self):
        game = Game(dice=ScriptedDice([6]))
        game.roll_dice()
        game.select_token(0)
        before = game.epoch
        state = game.reset_game()
        self.assertTrue(all(t.is_home() for t in state.tokens))
        self.assertEqual(state.current_player, 0)
        self.assertGreater(state.epoch, before)


class TestRolling(unittest.TestCase):
    def test_no_moves_rotates_then_clears(self):
        game = Game(dice=ScriptedDice([3]))
        result = game.roll_dice()
        self.assertIsInstance(result, RollResult)
        self.assertFalse(result.can_move)
        self.assertEqual(result.movable_token_indices, frozenset())
        self.assertEqual(result.next_player, 1)
        self.assertEqual(game.phase, TurnPhase.ROLLED_NO_MOVES)
        self.assertEqual(game.last_dice_value, 3)

        self.assertTrue(game.clear_dice(result.epoch))
        self.assertIsNone(game.last_dice_value)
        self.assertEqual(game.phase, TurnPhase.AWAITING_ROLL)

    def test_next_player_may_roll_before_clear(self):
        game = Game(dice=ScriptedDice([3, 6]))
        game.roll_dice()
        result = game.roll_dice()
        self.assertIsInstance(result, RollResult)
        self.assertEqual(result.player, 1)
        self.assertEqual(result.movable_token_indices, frozenset({4, 5, 6, 7}))

    def test_roll_rejected_while_selection_pending(self):
        game = Game(dice=ScriptedDice([6, 2]))
        game.roll_dice()
        before = game.state()
        result = game.roll_dice()
        self.assertIsInstance(result, Rejected)
        self.assertFalse(result)
        self.assertEqual(game.state(), before)

    def test_invalid_injected_dice(self):
        game = Game(dice=ScriptedDice([7]))
        with self.assertRaises(ValueError):
            game.roll_dice()

    def test_seeded_rng_is_reproducible(self):
        a = Game(rng=random.Random(11))
        b = Game(rng=random.Random(11))
        self.assertEqual(a.roll_dice().value, b.roll_dice().value)


class TestSelection(unittest.TestCase):
    def test_six_spawns_and_grants_extra_roll(self):
        game = Game(dice=ScriptedDice([6]))
        game.roll_dice()
        result = game.select_token(0)
        self.assertIsInstance(result, SelectResult)
        self.assertEqual(result.old_position, -1)
        self.assertEqual(result.new_position, 0)
        self.assertTrue(result.grants_extra_roll)
        self.assertEqual(game.current_player, 0)
        self.assertEqual(game.consecutive_sixes, 1)
        self.assertEqual(game.phase, TurnPhase.AWAITING_ROLL)

    def test_foreign_token_rejected(self):
        game = Game(dice=ScriptedDice([6]))
        game.roll_dice()
        before = game.state()
        result = game.select_token(4)
        self.assertIsInstance(result, Rejected)
        self.assertEqual(game.state(), before)

    def test_select_without_roll_rejected(self):
        game = Game(dice=ScriptedDice([]))
        self.assertIsInstance(game.select_token(0), Rejected)

    def test_non_six_move_rotates(self):
        game = Game(dice=ScriptedDice([6, 4]))
        game.roll_dice()
        game.select_token(0)
        game.roll_dice()
        result = game.select_token(0)
        self.assertEqual(result.new_position, 4)
        self.assertFalse(result.grants_extra_roll)
        self.assertEqual(game.current_player, 1)
        self.assertEqual(game.consecutive_sixes, 0)

    def test_clear_ignored_while_selection_pending(self):
        game = Game(dice=ScriptedDice([6]))
        result = game.roll_dice()
        self.assertFalse(game.clear_dice(result.epoch))
        self.assertEqual(game.last_dice_value, 6)


class TestThreeSixes(unittest.TestCase):
    def test_third_six_forfeits_without_resolving(self):
        game = Game(dice=ScriptedDice([6, 6, 6]))
        with mock.patch(
            "ludo_cross.game.resolve_moves", wraps=moves.resolve_moves
        ) as resolver:
            game.roll_dice()
            game.select_token(0)
            game.roll_dice()
            game.select_token(0)
            self.assertEqual(game.tokens[0].position, 6)
            result = game.roll_dice()

        self.assertEqual(resolver.call_count, 2)
        self.assertTrue(result.forfeited)
        self.assertFalse(result.can_move)
        self.assertEqual(result.movable_token_indices, frozenset())
        self.assertEqual(game.phase, TurnPhase.ROLLED_FORFEITED)
        self.assertEqual(game.current_player, 1)
        self.assertEqual(game.consecutive_sixes, 0)
        self.assertEqual(game.tokens[0].position, 6)

    def test_blocked_six_rotates_and_resets_counter(self):
        game = Game(dice=ScriptedDice([6]))
        # Only token in play is one short of finishing; all others finished
        game.tokens = (
            Token(0, 104),
            Token(0, 999),
            Token(0, 999),
            Token(0, 999),
            *game.tokens[4:],
        )
        result = game.roll_dice()
        self.assertFalse(result.can_move)
        self.assertFalse(result.forfeited)
        self.assertEqual(game.phase, TurnPhase.ROLLED_NO_MOVES)
        self.assertEqual(game.current_player, 1)
        self.assertEqual(game.consecutive_sixes, 0)

    def test_non_six_resets_counter(self):
        game = Game(dice=ScriptedDice([6, 6, 2, 6]))
        game.roll_dice()
        game.select_token(0)
        game.roll_dice()
        game.select_token(0)
        game.roll_dice()
        game.select_token(0)
        self.assertEqual(game.current_player, 1)
        result = game.roll_dice()
        self.assertFalse(result.forfeited)
        self.assertEqual(game.consecutive_sixes, 1)


class TestHomeRunOvershoot(unittest.TestCase):
    def test_stuck_in_home_run_passes_turn(self):
        game = Game(dice=ScriptedDice([3]))
        game.tokens = (Token(0, 103), *game.tokens[1:])
        result = game.roll_dice()
        self.assertFalse(result.can_move)
        self.assertEqual(game.tokens[0].position, 103)
        self.assertEqual(game.current_player, 1)


class TestEpochs(unittest.TestCase):
    def test_stale_clear_is_ignored(self):
        game = Game(dice=ScriptedDice([3, 6]))
        first = game.roll_dice()
        second = game.roll_dice()
        self.assertNotEqual(first.epoch, second.epoch)
        self.assertFalse(game.clear_dice(first.epoch))
        self.assertEqual(game.last_dice_value, 6)

    def test_clear_after_reset_is_ignored(self):
        game = Game(dice=ScriptedDice([3]))
        result = game.roll_dice()
        game.reset_game()
        self.assertFalse(game.clear_dice(result.epoch))
        self.assertEqual(game.phase, TurnPhase.AWAITING_ROLL)

    def test_clear_from_another_thread_waits_for_roll(self):
        game = Game(dice=ScriptedDice([3]))
        pending = game.roll_dice()
        cleared = []
        observed = {}

        def clear_later():
            cleared.append(game.clear_dice(pending.epoch))

        def dice_with_concurrent_clear():
            worker = threading.Thread(target=clear_later)
            worker.start()
            worker.join(timeout=0.2)
            observed["blocked"] = worker.is_alive()
            observed["worker"] = worker
            return 6

        game.dice = dice_with_concurrent_clear
        result = game.roll_dice()
        observed["worker"].join(timeout=5)

        self.assertTrue(observed["blocked"])
        self.assertEqual(cleared, [False])
        self.assertEqual(game.phase, TurnPhase.ROLLED_AWAITING_SELECTION)
        self.assertEqual(game.last_dice_value, 6)
        self.assertIsInstance(game.select_token(result.player * 4), SelectResult)


class TestWinning(unittest.TestCase):
    def test_last_token_home_wins(self):
        game = Game(dice=ScriptedDice([1]))
        game.tokens = (
            Token(0, 104),
            Token(0, 999),
            Token(0, 999),
            Token(0, 999),
            *game.tokens[4:],
        )
        game.roll_dice()
        result = game.select_token(0)
        self.assertTrue(result.token_finished)
        self.assertTrue(result.player_won)
        self.assertTrue(game.has_won(0))
        self.assertEqual(game.winners(), [0])
        self.assertFalse(game.is_game_over())

    def test_roll_rejected_when_game_over(self):
        game = Game(dice=ScriptedDice([6]))
        game.tokens = tuple(Token(t.player, 999) for t in game.tokens)
        self.assertTrue(game.is_game_over())
        self.assertIsInstance(game.roll_dice(), Rejected)


class TestQueries(unittest.TestCase):
    def test_player_status_and_coordinates(self):
        game = Game(dice=ScriptedDice([6, 5]))
        game.roll_dice()
        game.select_token(1)
        game.roll_dice()
        game.select_token(1)
        status = game.player_status(0)
        self.assertEqual(status["color"], "red")
        self.assertEqual(status["home"], 3)
        self.assertEqual(status["track"], 1)
        coords = game.token_coordinates()
        self.assertEqual(coords[0], Coord(1, 1))
        self.assertEqual(coords[1], game.track_coordinate(5))
        self.assertEqual(coords[4], game.home_yard_coordinate(1, 0))

    def test_random_play_keeps_positions_valid(self):
        topology = build_topology()
        game = Game(topology=topology, rng=random.Random(2024))
        previous = [progress(t, topology.start_indices[t.player]) for t in game.tokens]
        for _ in range(2000):
            if game.is_game_over():
                break
            result = game.roll_dice()
            self.assertIsInstance(result, RollResult)
            if result.can_move:
                moved = game.select_token(min(result.movable_token_indices))
                self.assertIsInstance(moved, SelectResult)
            else:
                game.clear_dice(result.epoch)
            current = []
            for t in game.tokens:
                self.assertTrue(is_valid_position(t.position, t.player), t)
                current.append(progress(t, topology.start_indices[t.player]))
            for before, after in zip(previous, current):
                self.assertGreaterEqual(after, before)
            previous = current


if __name__ == "__main__":
    unittest.main()
