"""Test class Calculator with a mocked calculation API."""
from typing import List

import pytest

from calcapi_client.client.client import CalculationClient, CalculationError
from calcapi_client.common.models import CalculationResponse, Evaluation, Operation
from calcapi_client.common.numbers import ERROR_TOKEN
from calcapi_client.engine.calculator import Calculator


@pytest.fixture
def sent(monkeypatch) -> List[Evaluation]:
    """
    Replace CalculationClient.calculate by a local evaluator and record every evaluation sent.

    Division by zero and negative square roots fail the way the API does.
    """
    calls: List[Evaluation] = []

    def fake_calculate(self, evaluation: Evaluation) -> CalculationResponse:
        calls.append(evaluation)
        a, b = evaluation.a, evaluation.b
        op = evaluation.operation
        if op is Operation.DIVIDE and b == 0:
            raise CalculationError("division by zero", status_code=400, server_message="division by zero")
        if op is Operation.SQRT and a < 0:
            raise CalculationError(
                "cannot calculate square root of negative number",
                status_code=400,
                server_message="cannot calculate square root of negative number",
            )
        results = {
            Operation.ADD: lambda: a + b,
            Operation.SUBTRACT: lambda: a - b,
            Operation.MULTIPLY: lambda: a * b,
            Operation.DIVIDE: lambda: a / b,
            Operation.POWER: lambda: a ** b,
            Operation.SQRT: lambda: a ** 0.5,
            Operation.PERCENTAGE: lambda: a / 100 * b,
        }
        return CalculationResponse(result=results[op](), operation=op.value)

    monkeypatch.setattr(CalculationClient, "calculate", fake_calculate)
    return calls


@pytest.fixture
def calculator() -> Calculator:
    """Calculator bound to a client whose calculate method is mocked."""
    return Calculator(client=CalculationClient())


def press_all(calculator: Calculator, state, keys: List[str]):
    """Press keys in order, evaluating completed operations, and return the state."""
    for key in keys:
        evaluation = calculator.dispatch_key(state, key)
        if evaluation is not None:
            calculator.evaluate(state, evaluation)
    return state


def test_addition_via_api(calculator, sent) -> None:
    """10 + 5 = shows 15 and records the expression."""
    state = press_all(calculator, calculator.new_state(), ["1", "0", "+", "5", "="])

    assert state.display == "15"
    assert state.history[0] == "10 + 5 = 15"
    assert sent == [Evaluation(operation=Operation.ADD, a=10, b=5)]


def test_division_by_zero_error(calculator, sent) -> None:
    """A failed call shows the error token and the server message."""
    state = press_all(calculator, calculator.new_state(), ["1", "0", "÷", "0", "="])

    assert state.display == ERROR_TOKEN
    assert state.error == "division by zero"
    assert state.history == []
    assert not state.loading


def test_square_root_via_api(calculator, sent) -> None:
    """√ evaluates the display immediately with a single operand."""
    state = press_all(calculator, calculator.new_state(), ["2", "5", "√"])

    assert state.display == "5"
    assert state.history[0] == "√25 = 5"
    assert sent[0].b is None


@pytest.mark.parametrize("keys,display,entry", [
    (["7", "-", "9", "="], "-2", "7 - 9 = -2"),
    (["6", "×", "7", "="], "42", "6 × 7 = 42"),
    (["2", "^", "1", "0", "="], "1024", "2 ^ 10 = 1024"),
    (["2", "0", "%", "5", "0", "="], "10", "20% of 50 = 10"),
    (["1", ".", "5", "+", "1", "="], "2.5", "1.5 + 1 = 2.5"),
])
def test_binary_operations(calculator, sent, keys, display, entry) -> None:
    """Each binary operation shows its result and history line."""
    state = press_all(calculator, calculator.new_state(), keys)
    assert state.display == display
    assert state.history[0] == entry


def test_operator_chain_evaluates_stored_operation(calculator, sent) -> None:
    """Pressing an operator after a second operand evaluates the pending operation."""
    state = press_all(calculator, calculator.new_state(), ["6", "×", "7", "+"])

    assert state.display == "42"
    assert sent == [Evaluation(operation=Operation.MULTIPLY, a=6, b=7)]
    assert not state.has_pending


def test_equals_without_operation_makes_no_call(calculator, sent) -> None:
    """No request is issued when nothing is pending."""
    state = press_all(calculator, calculator.new_state(), ["4", "="])
    assert state.display == "4"
    assert sent == []


def test_error_then_new_entry(calculator, sent) -> None:
    """After an error, typing a digit starts over and dismisses the message."""
    state = press_all(calculator, calculator.new_state(), ["1", "÷", "0", "=", "8"])
    assert state.display == "8"
    assert state.error is None


def test_clear_key(calculator, sent) -> None:
    """AC resets the display whatever was pending."""
    state = press_all(calculator, calculator.new_state(), ["9", "+", "3", "AC"])
    assert state.display == "0"
    assert not state.has_pending


def test_history_limited_to_five(calculator, sent) -> None:
    """Only the five most recent calculations are kept."""
    state = calculator.new_state()
    for digit in "123456":
        press_all(calculator, state, ["AC", digit, "+", "1", "="])

    assert len(state.history) == 5
    assert state.history[0] == "6 + 1 = 7"
    assert state.history[-1] == "2 + 1 = 3"


def test_unknown_key(calculator) -> None:
    """Keys that are not on the keypad are rejected."""
    with pytest.raises(ValueError):
        calculator.dispatch_key(calculator.new_state(), "sin")


def test_transport_failure_message(monkeypatch, calculator) -> None:
    """A transport failure surfaces its message in the error panel."""

    def failing_calculate(self, evaluation):
        raise CalculationError("connection refused")

    monkeypatch.setattr(CalculationClient, "calculate", failing_calculate)
    state = press_all(calculator, calculator.new_state(), ["2", "+", "2", "="])

    assert state.display == ERROR_TOKEN
    assert state.error == "connection refused"


def test_dispatch_key_flags_loading(calculator, sent) -> None:
    """A press completing an operation flags the state as loading before any request."""
    state = press_all(calculator, calculator.new_state(), ["8", "÷", "2"])

    evaluation = calculator.dispatch_key(state, "=")

    assert evaluation == Evaluation(operation=Operation.DIVIDE, a=8, b=2)
    assert state.loading
    assert sent == []

    calculator.evaluate(state, evaluation)
    assert not state.loading
    assert state.display == "4"


def test_digit_press_does_not_flag_loading(calculator, sent) -> None:
    """Entry keys never start a request."""
    state = calculator.new_state()
    assert calculator.dispatch_key(state, "5") is None
    assert not state.loading


def test_operator_after_result_chains_from_result(calculator, sent) -> None:
    """A result becomes the first operand of the next operation."""
    state = press_all(calculator, calculator.new_state(), ["6", "×", "7", "=", "+", "1", "="])

    assert state.display == "43"
    assert state.history[:2] == ["42 + 1 = 43", "6 × 7 = 42"]
    assert sent[-1] == Evaluation(operation=Operation.ADD, a=42, b=1)


def test_small_result_shown_positionally(calculator, sent) -> None:
    """Results down to 1e-6 are written without exponent, and digits extend them."""
    state = press_all(calculator, calculator.new_state(), ["1", "÷", "1", "0", "0", "0", "0", "0", "="])

    assert state.display == "0.00001"
    assert state.history[0] == "1 ÷ 100000 = 0.00001"

    press_all(calculator, state, ["3"])
    assert state.display == "0.000013"
