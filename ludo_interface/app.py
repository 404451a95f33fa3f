import os

os.environ.setdefault("GRADIO_TEMP_DIR", os.path.join(os.getcwd(), "gradio_runtime"))
os.environ.setdefault(
    "GRADIO_CACHE_DIR",
    os.path.join(os.getcwd(), "gradio_runtime", "cache"),
)

from loguru import logger

from .event_handler import EventHandler
from .game_manager import GameManager
from .ui_builder import UIBuilder


class LudoApp:
    """Encapsulates the Ludo game application logic and Gradio UI."""

    def __init__(self, show_token_ids: bool = True):
        """
        Initializes the Ludo application.

        Args:
            show_token_ids (bool): Whether to display token IDs on the board.
        """
        self.show_token_ids = show_token_ids

        # Board tables are built here once; a malformed board stops startup
        self.game_manager = GameManager(self.show_token_ids)
        self.event_handler = EventHandler(self.game_manager, self.show_token_ids)
        self.ui_builder = UIBuilder(self.show_token_ids, self.event_handler)
        logger.info("🚀 Ludo app initialized")

    def create_ui(self):
        """Creates and returns the Gradio UI for the Ludo game."""
        return self.ui_builder.create_ui()

    def launch(self, server_name="0.0.0.0", server_port=7860, **kwargs):
        """Launches the Gradio application."""
        demo = self.create_ui()
        demo.launch(server_name=server_name, server_port=server_port, **kwargs)


def launch_app():
    """Main entry point for the application."""
    return LudoApp()


if __name__ == "__main__":
    launch_app().launch(share=False, inbrowser=True, show_error=True)
