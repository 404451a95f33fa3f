import unittest

from PIL import Image

from ludo_cross.topology import build_topology
from ludo_cross.types import Token, initial_tokens
from ludo_interface.board_viz import PLAYER_RGB, _token_cells, draw_board
from ludo_interface.utils import Utils


class TestBoardViz(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.topology = build_topology()

    def test_image_size_follows_cell_size(self):
        img = draw_board(self.topology, initial_tokens(), cell=20)
        self.assertIsInstance(img, Image.Image)
        self.assertEqual(img.size, (300, 300))

    def test_home_tokens_sit_in_their_own_yard_slot(self):
        cells = _token_cells(self.topology, initial_tokens())
        self.assertEqual(len(cells), 16)
        self.assertTrue(all(len(v) == 1 for v in cells.values()))

    def test_stacked_and_finished_tokens(self):
        tokens = list(initial_tokens())
        tokens[0] = Token(0, 5)
        tokens[1] = Token(0, 5)
        tokens[4] = Token(1, 999)
        tokens[8] = Token(2, 999)
        cells = _token_cells(self.topology, tokens)
        self.assertEqual(cells[self.topology.track[5]], [0, 1])
        self.assertEqual(cells[self.topology.center], [4, 8])
        img = draw_board(self.topology, tokens, movable={0}, show_ids=False, cell=30)
        self.assertEqual(img.size, (450, 450))

    def test_yard_token_is_drawn_in_player_color(self):
        cell = 40
        img = draw_board(self.topology, initial_tokens(), show_ids=False, cell=cell)
        slot = self.topology.home_yard_coordinate(2, 0)
        pixel = img.getpixel((slot.x * cell + cell // 2, slot.y * cell + cell // 2))
        self.assertEqual(pixel, PLAYER_RGB[2])

    def test_data_uri(self):
        img = draw_board(self.topology, initial_tokens(), cell=10)
        html = Utils.img_to_data_uri(img)
        self.assertTrue(html.startswith("<img src='data:image/png;base64,"))


if __name__ == "__main__":
    unittest.main()
