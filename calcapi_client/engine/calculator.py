"""Coordinate key presses, the state machine and the remote calculation API."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from calcapi_client.client.client import CalculationClient, CalculationError
from calcapi_client.common.logger import logger
from calcapi_client.common.models import OPERATION_SYMBOLS, Evaluation, Operation
from calcapi_client.engine.state import DIGITS, CalculatorState

CLEAR_KEY = "AC"
DECIMAL_KEY = "."
EQUALS_KEY = "="

# Keypad label -> operation
KEY_OPERATIONS: dict[str, Operation] = {symbol: op for op, symbol in OPERATION_SYMBOLS.items()}


class Calculator(BaseModel):
    """
    Calculator driving one CalculatorState per user session.

    Lifecycle of an operator or "=" press:
        - The state machine transitions synchronously and hands back an Evaluation
        - The state is flagged as loading
        - The client performs exactly one HTTP request, without retry
        - The result or the failure message is applied to the state
    """

    # Make the Pydantic instance immutable (read-only), the client is shared by all sessions
    model_config = ConfigDict(frozen=True)

    client: CalculationClient = Field(..., description="HTTP client of the calculation API")
    history_size: int = Field(default=5, ge=1, description="Maximum number of history entries per session")

    def new_state(self) -> CalculatorState:
        """
        Create the state of a fresh calculator showing "0".

        :return: Initial state
        :rtype: CalculatorState
        """
        return CalculatorState(history_size=self.history_size)

    def dispatch_key(self, state: CalculatorState, key: str) -> Optional[Evaluation]:
        """
        Apply a keypad press to the state without touching the network.

        A press that completes an operation flags the state as loading before
        the Evaluation is handed back.

        :param CalculatorState state: State to update in place
        :param str key: Keypad label ("0"-"9", ".", "AC", "=", or an operator symbol)

        :return: Evaluation to send to the API, or None if no call is needed
        :rtype: Optional[Evaluation]
        :raises ValueError: If the key is not on the keypad
        """
        if key in DIGITS:
            state.input_digit(key)
            return None
        if key == DECIMAL_KEY:
            state.input_decimal()
            return None
        if key == CLEAR_KEY:
            state.clear()
            return None
        if key == EQUALS_KEY:
            evaluation = state.press_equals()
        elif key in KEY_OPERATIONS:
            evaluation = state.press_operation(KEY_OPERATIONS[key])
        else:
            raise ValueError(f"Unknown key: {key!r}")

        if evaluation is not None:
            state.begin_evaluation()
        return evaluation

    def evaluate(self, state: CalculatorState, evaluation: Evaluation) -> None:
        """
        Send an evaluation returned by dispatch_key to the API and apply the outcome to the state.

        Failures are never raised, they end up in ``state.error`` with the error
        token in the display.

        :param CalculatorState state: State to update in place
        :param Evaluation evaluation: Operation produced by the state machine
        """
        logger.info(f"🧮🏁 Evaluating {evaluation.operation.value} a={evaluation.a} b={evaluation.b}")
        try:
            response = self.client.calculate(evaluation)
        except CalculationError as exc:
            state.apply_failure(exc.message)
            return
        state.apply_result(evaluation, response.result)

