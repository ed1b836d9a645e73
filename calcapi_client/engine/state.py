"""Client-side state machine of the calculator."""
from typing import List, Optional

from pydantic import BaseModel, Field

from calcapi_client.common.models import Evaluation, Operation
from calcapi_client.common.numbers import ERROR_TOKEN, DisplayFormatter

DIGITS = frozenset("0123456789")
LOADING_TEXT = "Loading..."


class CalculatorState(BaseModel):
    """
    Display buffer, pending operation and history of one calculator.

    Every key press is a synchronous transition. Operator and "=" presses that
    need the remote API return an Evaluation instead of calling it, so the caller
    decides when the network work happens:

        evaluation = state.press_operation(Operation.ADD)
        if evaluation is not None:
            state.begin_evaluation()
            ...  # call the API
            state.apply_result(evaluation, result)  # or state.apply_failure(message)
    """

    display: str = Field(default="0", description="Entered or last-shown value, or the error token")
    first_operand: Optional[float] = Field(default=None, description="Operand stored by a pending operation")
    operation: Optional[Operation] = Field(default=None, description="Operator of the pending operation")
    waiting_for_second: bool = Field(default=False, description="Next digit replaces the display")
    history: List[str] = Field(default_factory=list, description="Completed calculations, most recent first")
    error: Optional[str] = Field(default=None, description="Message of the last failed calculation")
    loading: bool = Field(default=False, description="A remote calculation is outstanding")
    history_size: int = Field(default=5, ge=1, description="Maximum number of history entries")

    @property
    def in_error(self) -> bool:
        """True while the display shows the error token."""
        return self.display == ERROR_TOKEN

    @property
    def has_pending(self) -> bool:
        """True while an operator waits for its second operand."""
        return self.first_operand is not None and self.operation is not None

    @property
    def shown_display(self) -> str:
        """Text to render in the display, replaced by a loading marker during a call."""
        return LOADING_TEXT if self.loading else self.display

    @property
    def pending_label(self) -> str:
        """Indicator above the display, e.g. "10 +", empty when nothing is pending."""
        if not self.has_pending:
            return ""
        return f"{DisplayFormatter.format(self.first_operand)} {self.operation.symbol}"

    def input_digit(self, digit: str) -> None:
        """
        Append a digit to the display, or start a new number.

        :param str digit: Single character "0" to "9"
        :raises ValueError: If digit is not a single decimal digit
        """
        if digit not in DIGITS:
            raise ValueError(f"Not a digit: {digit!r}")

        self.error = None
        if self.waiting_for_second:
            self.display = digit
            self.waiting_for_second = False
        elif self.display in ("0", ERROR_TOKEN) or not DisplayFormatter.is_number(self.display + digit):
            # Leading zero collapses, the error token and non-finite results are never prefixed
            self.display = digit
        else:
            self.display += digit

    def input_decimal(self) -> None:
        """Add a decimal point unless the current number already has one."""
        self.error = None
        if self.waiting_for_second or self.in_error:
            self.display = "0."
            self.waiting_for_second = False
        elif "." not in self.display and DisplayFormatter.is_number(self.display + "."):
            self.display += "."

    def clear(self) -> None:
        """AC: reset the display and forget the pending operation and error. History is kept."""
        self.display = "0"
        self.first_operand = None
        self.operation = None
        self.waiting_for_second = False
        self.error = None

    def clear_history(self) -> None:
        """Forget every history entry."""
        self.history = []

    def press_operation(self, operation: Operation) -> Optional[Evaluation]:
        """
        Handle an operator key.

        - sqrt evaluates the display right away
        - with nothing pending, the display becomes the first operand
        - with an operation pending and a second operand entered, the pending
          operation is evaluated
        - otherwise the press is ignored

        :param Operation operation: Operator pressed

        :return: Evaluation to send to the API, or None if no call is needed
        :rtype: Optional[Evaluation]
        """
        if self.in_error:
            return None

        current = DisplayFormatter.parse(self.display)

        if operation.is_unary:
            return self._dispatch(Evaluation(operation=operation, a=current))

        if not self.has_pending:
            self.first_operand = current
            self.operation = operation
            self.waiting_for_second = True
            return None

        if self.waiting_for_second:
            # No second operand typed yet
            return None

        return self._dispatch(Evaluation(operation=self.operation, a=self.first_operand, b=current))

    def press_equals(self) -> Optional[Evaluation]:
        """
        Handle "=": evaluate the pending operation with the display as second operand.

        :return: Evaluation to send to the API, or None if nothing is pending
        :rtype: Optional[Evaluation]
        """
        if not self.has_pending or self.in_error:
            return None
        current = DisplayFormatter.parse(self.display)
        return self._dispatch(Evaluation(operation=self.operation, a=self.first_operand, b=current))

    def begin_evaluation(self) -> None:
        """Mark a remote call as outstanding."""
        self.loading = True

    def apply_result(self, evaluation: Evaluation, result: float) -> None:
        """
        Show a successful result and record it in the history.

        :param Evaluation evaluation: Evaluation that was sent
        :param float result: Result returned by the API
        """
        self.display = DisplayFormatter.format(result)
        entry = DisplayFormatter.history_line(evaluation, result)
        self.history = [entry, *self.history][: self.history_size]
        self.first_operand = None
        self.operation = None
        self.error = None
        self.loading = False

    def apply_failure(self, message: str) -> None:
        """
        Show the error token and surface the failure message.

        :param str message: Reason of the failure
        """
        self.display = ERROR_TOKEN
        self.error = message
        self.first_operand = None
        self.operation = None
        self.waiting_for_second = False
        self.loading = False

    def _dispatch(self, evaluation: Evaluation) -> Evaluation:
        """Consume the pending operation before the evaluation leaves the state machine."""
        self.first_operand = None
        self.operation = None
        self.waiting_for_second = False
        return evaluation
