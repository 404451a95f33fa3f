"""
Ludo - Main entry point
Launches the Gradio board, or renders a snapshot of a fresh board to PNG.
"""

import argparse
import sys

from loguru import logger

from ludo_cross import BoardIntegrityError, Game, build_topology
from ludo_cross.config import ui_config


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Four-player Ludo on a cross track")
    parser.add_argument(
        "--log-level", type=str, default=ui_config.LOG_LEVEL, help="loguru level"
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Launch the interactive Gradio board")
    serve.add_argument("--host", type=str, default="0.0.0.0")
    serve.add_argument("--port", type=int, default=7860)
    serve.add_argument("--share", action="store_true")
    serve.add_argument("--hide-ids", action="store_true", help="Hide token ids")

    render = sub.add_parser("render", help="Render the initial board to a PNG file")
    render.add_argument("--output", type=str, default="board.png")
    render.add_argument("--cell-size", type=int, default=ui_config.CELL_SIZE)
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def render_board(output: str, cell_size: int) -> None:
    from ludo_interface.board_viz import draw_board

    game = Game(topology=build_topology())
    img = draw_board(game.topology, game.tokens, cell=cell_size)
    img.save(output)
    logger.info(f"Board written to {output}")


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "render":
            render_board(args.output, args.cell_size)
            return 0

        from ludo_interface.app import LudoApp

        app = LudoApp(show_token_ids=not getattr(args, "hide_ids", False))
        app.launch(
            server_name=getattr(args, "host", "0.0.0.0"),
            server_port=getattr(args, "port", 7860),
            share=getattr(args, "share", False),
            show_error=True,
        )
    except BoardIntegrityError as e:
        logger.error(f"Board definition is invalid, refusing to start: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
