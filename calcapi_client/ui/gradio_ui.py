"""Gradio browser UI for the calculator client.

Renders the keypad, the display, the error panel and the rolling history, and
routes every button press through the Calculator engine.
"""

from typing import Any, Callable, Iterator, List, Optional, Tuple

import gradio as gr

from calcapi_client.client.client import CalculationClient
from calcapi_client.common.config import ClientSettings
from calcapi_client.common.logger import logger
from calcapi_client.engine.calculator import CLEAR_KEY, DECIMAL_KEY, EQUALS_KEY, Calculator
from calcapi_client.engine.state import CalculatorState

EMPTY_HISTORY_TEXT = "*No calculations yet*"

# (button label, keypad key, relative width)
KEYPAD_ROWS: List[List[Tuple[str, str, int]]] = [
    [(CLEAR_KEY, CLEAR_KEY, 2), ("%", "%", 1), ("÷", "÷", 1)],
    [("7", "7", 1), ("8", "8", 1), ("9", "9", 1), ("×", "×", 1)],
    [("4", "4", 1), ("5", "5", 1), ("6", "6", 1), ("-", "-", 1)],
    [("1", "1", 1), ("2", "2", 1), ("3", "3", 1), ("+", "+", 1)],
    [("√", "√", 1), ("0", "0", 1), (DECIMAL_KEY, DECIMAL_KEY, 1), (EQUALS_KEY, EQUALS_KEY, 1)],
    [("x^y (Power)", "^", 4)],
]

CSS = """
<style>
#display textarea {
  font-family: "SF Mono", "Menlo", "Monaco", "Consolas", "Liberation Mono", monospace;
  font-size: 32px;
  font-weight: bold;
  text-align: right;
}
#pending textarea, #history {
  font-family: "SF Mono", "Menlo", "Monaco", "Consolas", "Liberation Mono", monospace;
}
#error_panel {
  border: 1px solid #ef4444;
  border-radius: 8px;
  padding: 8px 12px;
  color: #b91c1c;
}
</style>
"""


def render_history(history: List[str]) -> str:
    """
    Render history entries as a Markdown list, most recent first.

    :param list history: History entries

    :return: Markdown text
    :rtype: str
    """
    if not history:
        return EMPTY_HISTORY_TEXT
    return "\n".join(f"- `{entry}`" for entry in history)


def render(state: CalculatorState) -> Tuple[str, str, Any, str]:
    """
    Compute the values of the visible components for a state.

    :param CalculatorState state: Current calculator state

    :return: Pending indicator, display text, error panel update, history Markdown
    :rtype: tuple
    """
    error_panel = gr.Markdown(value=f"⚠️ {state.error}" if state.error else "", visible=state.error is not None)
    return state.pending_label, state.shown_display, error_panel, render_history(state.history)


def make_key_handler(calculator: Calculator, key: str) -> Callable[[CalculatorState], Iterator[tuple]]:
    """
    Build the click handler of one keypad button.

    Presses that need the API yield twice: first the loading view, then the
    outcome of the call. Other presses yield once.

    :param Calculator calculator: Engine shared by every session
    :param str key: Keypad key handled by the returned function

    :return: Generator function usable as a Gradio event handler
    """

    def _handler(state: CalculatorState) -> Iterator[tuple]:
        evaluation = calculator.dispatch_key(state, key)
        if evaluation is None:
            yield (state, *render(state))
            return

        # dispatch_key flagged the state as loading, show it while the request is in flight
        yield (state, *render(state))

        calculator.evaluate(state, evaluation)
        yield (state, *render(state))

    return _handler


def clear_history(state: CalculatorState) -> tuple:
    """Handler of the history trash button."""
    state.clear_history()
    return (state, *render(state))


def build_ui(calculator: Calculator, settings: Optional[ClientSettings] = None) -> gr.Blocks:
    """
    Assemble the calculator page.

    :param Calculator calculator: Engine evaluating key presses
    :param ClientSettings settings: Settings shown in the footer (defaults to ClientSettings())

    :return: Gradio app, not launched
    :rtype: gr.Blocks
    """
    settings = settings or ClientSettings()
    initial = calculator.new_state()

    with gr.Blocks(title="CalcAPI Pro") as demo:
        gr.HTML(CSS)
        gr.Markdown("## 🧮 CalcAPI Pro\nCalculator with a REST API backend")

        # One CalculatorState per browser session
        state = gr.State(value=initial)

        with gr.Row():
            with gr.Column(scale=1):
                with gr.Row():
                    gr.Markdown("### History")
                    clear_history_button = gr.Button("🗑️ Clear history", size="sm")
                history = gr.Markdown(value=render_history(initial.history), elem_id="history")

            with gr.Column(scale=2):
                pending = gr.Textbox(
                    value=initial.pending_label, show_label=False, interactive=False, elem_id="pending"
                )
                display = gr.Textbox(
                    value=initial.shown_display, show_label=False, interactive=False, elem_id="display"
                )
                error_panel = gr.Markdown(value="", visible=False, elem_id="error_panel")

                outputs = [state, pending, display, error_panel, history]

                for row in KEYPAD_ROWS:
                    with gr.Row():
                        for label, key, width in row:
                            variant = "primary" if key == EQUALS_KEY else "stop" if key == CLEAR_KEY else "secondary"
                            button = gr.Button(label, scale=width, variant=variant)
                            button.click(make_key_handler(calculator, key), inputs=[state], outputs=outputs)

                gr.Markdown(f"Connected to API: `{settings.api_root}`")

        clear_history_button.click(clear_history, inputs=[state], outputs=outputs)

    return demo


def launch_ui(settings: ClientSettings, calculator: Optional[Calculator] = None) -> None:
    """
    Build the page and serve it until interrupted.

    :param ClientSettings settings: Validated settings
    :param Calculator calculator: Engine to use (built from the settings when omitted)
    """
    if calculator is None:
        calculator = Calculator(
            client=CalculationClient.from_settings(settings),
            history_size=settings.history_size,
        )
    demo = build_ui(calculator, settings)
    logger.info(f"🖥️ Serving calculator UI on http://{settings.host}:{settings.port}")
    try:
        demo.queue().launch(server_name=str(settings.host), server_port=settings.port)
    finally:
        calculator.client.close()
