import gradio as gr

from ludo_cross.config import config

from .event_handler import EventHandler


class UIBuilder:
    """Handles Gradio UI construction and layout."""

    def __init__(self, show_token_ids: bool, handler: EventHandler):
        self.show_token_ids = show_token_ids
        self.handler = handler

    def create_ui(self):
        """Creates and returns the Gradio UI for the Ludo game."""
        with gr.Blocks(
            title="🎲 Ludo",
            theme=gr.themes.Soft(),
            css="""
            .board-container img {
                max-width: 100% !important;
                max-height: 80vh !important;
                object-fit: contain !important;
            }
            """,
        ) as demo:
            game_state = gr.State()
            move_history = gr.State([])
            # (epoch, delay) of the dice clear the UI still owes the engine
            pending_clear = gr.State(None)

            with gr.Row():
                with gr.Column(scale=3):
                    board = gr.HTML(elem_classes=["board-container"])
                with gr.Column(scale=2):
                    current_player_display = gr.HTML(
                        value="<h3>🎯 Current Player: Game not started</h3>"
                    )
                    with gr.Row():
                        init_btn = gr.Button("🔄 New Game", variant="secondary")
                        roll_btn = gr.Button("🎲 Roll", variant="primary")
                    show_ids = gr.Checkbox(
                        label="Show Token IDs", value=self.show_token_ids
                    )
                    move_buttons = [
                        gr.Button(f"Move Token {slot}", visible=False)
                        for slot in range(config.TOKENS_PER_PLAYER)
                    ]
                    with gr.Accordion("📝 Last Action", open=True):
                        log = gr.Textbox(show_label=False, interactive=False, lines=2)
                    with gr.Accordion("📚 History", open=False):
                        history_box = gr.Textbox(show_label=False, lines=8)
                    with gr.Accordion("📤 Export", open=False):
                        export_btn = gr.Button("Export Game State")
                        export_box = gr.JSON(show_label=False)
                    gr.Markdown(
                        """
                    ### 📋 Rules
                    - Roll a 6 to bring a token out of the yard
                    - A 6 after a completed move gives another roll
                    - Three 6s in a row forfeit the turn
                    - Tokens must land exactly on the center
                    """
                    )

            outputs = [
                game_state,
                board,
                log,
                move_history,
                history_box,
                current_player_display,
                *move_buttons,
                pending_clear,
            ]
            clear_outputs = [board, current_player_display, pending_clear]

            init_btn.click(
                self.handler._ui_init, [game_state, show_ids], outputs
            )
            roll_btn.click(
                self.handler._ui_roll, [game_state, move_history, show_ids], outputs
            ).then(
                self.handler._ui_delayed_clear,
                [game_state, pending_clear, show_ids],
                clear_outputs,
            )
            for slot, btn in enumerate(move_buttons):
                btn.click(
                    lambda g, h, s, slot=slot: self.handler._ui_select(slot, g, h, s),
                    [game_state, move_history, show_ids],
                    outputs,
                ).then(
                    self.handler._ui_delayed_clear,
                    [game_state, pending_clear, show_ids],
                    clear_outputs,
                )
            export_btn.click(self.handler._ui_export, [game_state], [export_box])
            demo.load(self.handler._ui_init, [game_state, show_ids], outputs)

        return demo
