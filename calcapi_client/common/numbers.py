"""Parse and format the numeric strings shown on the calculator display."""
from decimal import Decimal
import math

from calcapi_client.common.models import Evaluation, Operation


# Literal shown in the display after a failed calculation
ERROR_TOKEN = "Error"

# Decimal point positions written without exponent, like a browser does:
# 1e-6 <= |x| < 1e21
_MIN_POINT_POSITION = -5
_MAX_POINT_POSITION = 21


class DisplayFormatter:
    """
    Convert between display strings and operand values.

    Design constraints:
        - No eval(), numbers only go through float()
        - Digits are the shortest ones that round-trip, as given by repr()
        - Values with 1e-6 <= |x| < 1e21 are written positionally ("15", "0.00001")
        - Other values use exponent form ("1e-7", "1e+21")
    """

    @staticmethod
    def is_number(text: str) -> bool:
        """
        Determine if a display string represents a numeric value.

        :param str text: Display content

        :return: True if text can be converted to float, else False
        :rtype: bool
        """
        try:
            float(text)
            return True
        except ValueError:
            return False

    @staticmethod
    def parse(text: str) -> float:
        """
        Convert display content into an operand.

        A trailing decimal point is accepted ("5." is 5.0).

        :param str text: Display content

        :return: Operand value
        :rtype: float
        :raises ValueError: If the display does not hold a number (e.g. the error token)
        """
        if not DisplayFormatter.is_number(text):
            raise ValueError(f"Display does not hold a number: {text!r}")
        return float(text)

    @staticmethod
    def format(value: float) -> str:
        """
        Render a number for the display and for history lines.

        :param float value: Number to render

        :return: Display string
        :rtype: str
        """
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value == 0:
            return "0"

        sign, digit_tuple, exponent = Decimal(repr(float(value))).as_tuple()
        raw = "".join(str(d) for d in digit_tuple)
        digits = raw.lstrip("0")
        # Position of the decimal point relative to the first significant digit
        point = len(raw) + exponent - (len(raw) - len(digits))
        digits = digits.rstrip("0")
        count = len(digits)
        prefix = "-" if sign else ""

        if count <= point <= _MAX_POINT_POSITION:
            return prefix + digits + "0" * (point - count)
        if 0 < point <= _MAX_POINT_POSITION:
            return prefix + digits[:point] + "." + digits[point:]
        if _MIN_POINT_POSITION <= point <= 0:
            return prefix + "0." + "0" * -point + digits

        mantissa = digits[0] + ("." + digits[1:] if count > 1 else "")
        power = point - 1
        return f"{prefix}{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"

    @staticmethod
    def history_line(evaluation: Evaluation, result: float) -> str:
        """
        Build the human-readable summary of a completed calculation.

        Examples:
            - add(10, 5) -> "10 + 5 = 15"
            - sqrt(25) -> "√25 = 5"
            - percentage(20, 50) -> "20% of 50 = 10"

        :param Evaluation evaluation: Operation and operands that were sent
        :param float result: Result returned by the API

        :return: History entry
        :rtype: str
        """
        a = DisplayFormatter.format(evaluation.a)
        r = DisplayFormatter.format(result)
        op = evaluation.operation

        if op is Operation.SQRT:
            return f"{op.symbol}{a} = {r}"

        b = DisplayFormatter.format(evaluation.b)
        if op is Operation.PERCENTAGE:
            return f"{a}% of {b} = {r}"
        return f"{a} {op.symbol} {b} = {r}"
