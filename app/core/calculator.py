"""
Calculator - safe arithmetic evaluation for chat commands

Supports +, -, *, / and parentheses over decimal numbers.
Expressions are never passed to eval(): they are checked against a
whitelist and evaluated by a small recursive descent parser.
"""
import html
import math
import logging
from enum import Enum
from typing import Optional, Union
from dataclasses import dataclass

logger = logging.getLogger(__name__)

Number = Union[int, float]

ALLOWED_CHARS = frozenset("0123456789+-*/().")
NUMBER_CHARS = frozenset("0123456789.")
MAX_EXPRESSION_LENGTH = 100
RESULT_PRECISION = 6
# Floats above this are not exact integers, so they keep their float form
MAX_EXACT_INTEGER = 2 ** 53
# Longest raw expression echoed back in a reply
MAX_ECHO_LENGTH = 200


class ErrorKind(str, Enum):
    """Categories of calculation failures shown to the user"""
    INVALID_EXPRESSION = "invalid_expression"
    DIVISION_BY_ZERO = "division_by_zero"
    TOO_COMPLEX = "too_complex"


ERROR_MESSAGES = {
    ErrorKind.INVALID_EXPRESSION: (
        "Sorry, I couldn't understand that expression. "
        "Try something like '2 + 2' or '5 * 10'."
    ),
    ErrorKind.DIVISION_BY_ZERO: "I can't divide by zero! That's not allowed in this universe.",
    ErrorKind.TOO_COMPLEX: "That expression is too complex for me to handle.",
}


class ExpressionError(ValueError):
    """Raised by the parser on malformed input or a zero divisor"""


@dataclass(frozen=True)
class CalculationResult:
    """Outcome of a calculation: either a number or an error kind"""
    result: Optional[Number] = None
    error: Optional[ErrorKind] = None

    def __post_init__(self):
        if (self.result is None) == (self.error is None):
            raise ValueError("CalculationResult needs exactly one of result or error")

    @classmethod
    def success(cls, value: Number) -> "CalculationResult":
        return cls(result=value)

    @classmethod
    def failure(cls, kind: ErrorKind) -> "CalculationResult":
        return cls(error=kind)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        """User-facing error text, or None on success"""
        if self.error is None:
            return None
        return ERROR_MESSAGES[self.error]


class ExpressionParser:
    """
    Recursive descent evaluator over a sanitized expression.

    Grammar:
        expression := term (("+" | "-") term)*
        term       := factor (("*" | "/") factor)*
        factor     := "(" expression ")" | number

    The parser owns its cursor, so a new instance is needed per evaluation.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def _peek(self) -> str:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def evaluate(self) -> float:
        """Evaluate the whole text, requiring every character to be consumed"""
        value = self.parse_expression()
        if self.pos != len(self.text):
            raise ExpressionError(
                f"Unexpected character {self.text[self.pos]!r} at position {self.pos}"
            )
        return value

    def parse_expression(self) -> float:
        left = self.parse_term()
        while True:
            char = self._peek()
            if char == "+":
                self.pos += 1
                left += self.parse_term()
            elif char == "-":
                self.pos += 1
                left -= self.parse_term()
            else:
                return left

    def parse_term(self) -> float:
        left = self.parse_factor()
        while True:
            char = self._peek()
            if char == "*":
                self.pos += 1
                left *= self.parse_factor()
            elif char == "/":
                self.pos += 1
                divisor = self.parse_factor()
                if divisor == 0:
                    raise ExpressionError("Division by zero")
                left /= divisor
            else:
                return left

    def parse_factor(self) -> float:
        if self._peek() == "(":
            self.pos += 1
            value = self.parse_expression()
            if self._peek() != ")":
                raise ExpressionError("Missing closing parenthesis")
            self.pos += 1
            return value

        start = self.pos
        while self._peek() and self._peek() in NUMBER_CHARS:
            self.pos += 1

        if start == self.pos:
            raise ExpressionError(f"Expected a number at position {start}")

        literal = self.text[start:self.pos]
        try:
            return float(literal)
        except ValueError:
            raise ExpressionError(f"Malformed number {literal!r}")


def sanitize_expression(expression: str) -> str:
    """Drop every whitespace character"""
    return "".join(expression.split())


def format_number(value: float) -> Optional[Number]:
    """Reduce a raw float to its display form, or None if it is not finite"""
    if not math.isfinite(value):
        return None
    if abs(value) >= MAX_EXACT_INTEGER:
        return value
    if value.is_integer():
        return int(value)
    rounded = round(value, RESULT_PRECISION)
    if rounded.is_integer():
        return int(rounded)
    return rounded


def display_number(value: Number) -> str:
    """Plain decimal text for a formatted result, e.g. 0.00005 rather than 5e-05"""
    if isinstance(value, int) or abs(value) >= MAX_EXACT_INTEGER:
        return str(value)
    return f"{value:.{RESULT_PRECISION}f}".rstrip("0").rstrip(".")


def calculate(expression: str) -> CalculationResult:
    """
    Evaluate a basic arithmetic expression.

    Checks run in a fixed order: allowed characters, length, then a
    literal "/0" scan. The scan is textual, so "7/0.5" is rejected as
    division by zero while "(1-1)*5/(3-3)" is left to the parser, which
    reports it as an invalid expression.

    Never raises; every failure is returned as a CalculationResult error.
    """
    try:
        sanitized = sanitize_expression(expression)

        if not sanitized or not all(c in ALLOWED_CHARS for c in sanitized):
            return CalculationResult.failure(ErrorKind.INVALID_EXPRESSION)

        if len(sanitized) > MAX_EXPRESSION_LENGTH:
            return CalculationResult.failure(ErrorKind.TOO_COMPLEX)

        if "/0" in sanitized:
            return CalculationResult.failure(ErrorKind.DIVISION_BY_ZERO)

        value = format_number(ExpressionParser(sanitized).evaluate())
        if value is None:
            return CalculationResult.failure(ErrorKind.INVALID_EXPRESSION)

        return CalculationResult.success(value)

    except Exception as e:
        logger.warning(f"Error evaluating expression {expression!r}: {e}")
        return CalculationResult.failure(ErrorKind.INVALID_EXPRESSION)


def format_calculation_result(expression: str, outcome: CalculationResult) -> str:
    """Render the raw expression and its outcome as a two-line HTML block"""
    if len(expression) > MAX_ECHO_LENGTH:
        expression = expression[:MAX_ECHO_LENGTH - 3] + "..."
    header = f"📝 <b>Expression:</b> <code>{html.escape(expression)}</code>"
    if not outcome.ok:
        return f"{header}\n❌ <b>Error:</b> {outcome.message}"
    return f"{header}\n✅ <b>Result:</b> <code>{display_number(outcome.result)}</code>"
