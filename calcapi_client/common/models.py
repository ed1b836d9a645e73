"""Pydantic models for calculation requests, responses and operation tags."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Operation(str, Enum):
    """Operation tags understood by the calculation API."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    POWER = "power"
    SQRT = "sqrt"
    PERCENTAGE = "percentage"

    @property
    def symbol(self) -> str:
        """Symbol shown on the keypad and in the pending-operation indicator."""
        return OPERATION_SYMBOLS[self]

    @property
    def is_unary(self) -> bool:
        """Only square root takes a single operand."""
        return self is Operation.SQRT

    @property
    def endpoint(self) -> str:
        """Endpoint path relative to the API base URL."""
        return f"/calculate/{self.value}"


OPERATION_SYMBOLS: dict[Operation, str] = {
    Operation.ADD: "+",
    Operation.SUBTRACT: "-",
    Operation.MULTIPLY: "×",
    Operation.DIVIDE: "÷",
    Operation.POWER: "^",
    Operation.SQRT: "√",
    Operation.PERCENTAGE: "%",
}


class CalculationRequest(BaseModel):
    """JSON body posted to a calculation endpoint."""

    a: float = Field(..., description="First (or only) operand")
    b: Optional[float] = Field(default=None, description="Second operand, omitted for unary operations")

    def to_payload(self) -> dict[str, float]:
        """
        Build the JSON payload, leaving out the second operand when it is not set.

        :return: Request body
        :rtype: dict[str, float]
        """
        return self.model_dump(exclude_none=True)


class CalculationResponse(BaseModel):
    """Successful answer of a calculation endpoint."""

    result: float = Field(..., description="Numeric result of the operation")
    operation: str = Field(..., description="Operation name reported by the server")


class ErrorResponse(BaseModel):
    """Body returned by the API alongside a non-success status."""

    error: str = Field(..., description="Human-readable failure reason")


class Evaluation(BaseModel):
    """
    A fully specified operation ready to be sent to the API.

    Produced synchronously by the state machine when an operator or "=" is pressed,
    before any network work begins.
    """

    model_config = ConfigDict(frozen=True)

    operation: Operation = Field(..., description="Operation to evaluate")
    a: float = Field(..., description="First operand")
    b: Optional[float] = Field(default=None, description="Second operand for binary operations")

    @model_validator(mode="after")
    def check_operand_count(self) -> "Evaluation":
        """Unary operations take exactly one operand, binary ones exactly two."""
        if self.operation.is_unary and self.b is not None:
            raise ValueError(f"{self.operation.value} takes a single operand")
        if not self.operation.is_unary and self.b is None:
            raise ValueError(f"{self.operation.value} requires a second operand")
        return self

    def to_request(self) -> CalculationRequest:
        """Wire request carrying the operands of this evaluation."""
        return CalculationRequest(a=self.a, b=self.b)
