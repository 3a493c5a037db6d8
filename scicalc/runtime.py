import enum
import logging
from dataclasses import dataclass
from typing import Generic, NamedTuple, Optional

from scicalc.builtins import apply_builtin_func
from scicalc.parser import (
    Assignment,
    BinaryOperator,
    BinOp,
    Constant,
    Expression,
    Factorial,
    Function,
    Identifier,
    Neg,
    Pow,
    parse,
)
from scicalc.tokenizer import tokenize
from scicalc.utils import EvalError, PrintableEnum
from scicalc.value import FloatType, N, NumberType

logger = logging.getLogger("scicalc.runtime")


class ComputeErrorKind(PrintableEnum):
    INVALID_FACTORIAL = enum.auto()
    VARIABLE_IS_CONSTANT = enum.auto()
    UNRECOGNIZED_IDENTIFIER = enum.auto()
    NUMERIC_ERROR = enum.auto()
    NESTING_TOO_DEEP = enum.auto()


@dataclass
class ComputeError(EvalError):
    kind: ComputeErrorKind
    name: Optional[str] = None
    detail: Optional[str] = None

    def __str__(self) -> str:
        if self.kind is ComputeErrorKind.INVALID_FACTORIAL:
            errmsg = "Factorial is only defined for non-negative integers"
        elif self.kind is ComputeErrorKind.VARIABLE_IS_CONSTANT:
            errmsg = f"Variable {self.name!r} is constant and can't be assigned"
        elif self.kind is ComputeErrorKind.UNRECOGNIZED_IDENTIFIER:
            errmsg = f"Reference to non-existent variable {self.name!r}"
        elif self.kind is ComputeErrorKind.NESTING_TOO_DEEP:
            errmsg = "Expression is nested too deeply"
        else:
            errmsg = f"Numeric error: {self.detail}"
        return f"[Compute error] {errmsg}"


class Binding(NamedTuple):
    value: object
    constant: bool


class Computer(Generic[N]):
    """Evaluates expressions against variables that persist between calls

    >>> import math
    >>> computer = Computer(math.pi, math.e)
    >>> computer.eval("a = 2")
    2.0
    >>> computer.eval("a * 3")
    6.0

    Not thread safe, callers sharing an instance must serialize access.
    """

    def __init__(self, pi: N, e: N, number_type: Optional[NumberType[N]] = None) -> None:
        self.number_type: NumberType[N] = number_type if number_type is not None else FloatType()  # type: ignore
        self.variables: dict[str, Binding] = {
            "pi": Binding(pi, constant=True),
            "e": Binding(e, constant=True),
        }

    @classmethod
    def for_number_type(cls, number_type: NumberType[N]) -> "Computer[N]":
        return cls(number_type.pi(), number_type.e(), number_type=number_type)

    def eval(self, code: str) -> N:
        """Tokenize, parse and compute code; raises TokenizerError, ParserError or ComputeError"""
        tokens = tokenize(code, number=self.number_type.parse)
        expression = parse(tokens)
        return self.compute(expression)

    def compute(self, expression: Expression) -> N:
        try:
            result = self._compute_expression(expression)
        except (ArithmeticError, ValueError) as e:
            logger.debug("Numeric error in %s: %r", expression, e)
            raise ComputeError(ComputeErrorKind.NUMERIC_ERROR, detail=str(e) or type(e).__name__) from e
        except RecursionError as e:
            raise ComputeError(ComputeErrorKind.NESTING_TOO_DEEP) from e
        self.variables["ans"] = Binding(result, constant=True)
        logger.debug("ans = %s", result)
        return result

    def _compute_expression(self, expression: Expression) -> N:
        if isinstance(expression, Constant):
            return expression.value
        elif isinstance(expression, Identifier):
            if expression.name not in self.variables:
                raise ComputeError(ComputeErrorKind.UNRECOGNIZED_IDENTIFIER, name=expression.name)
            return self.variables[expression.name].value  # type: ignore
        elif isinstance(expression, Neg):
            return -self._compute_expression(expression.operand)  # type: ignore
        elif isinstance(expression, BinOp):
            left = self._compute_expression(expression.left)
            right = self._compute_expression(expression.right)
            if expression.operator is BinaryOperator.ADD:
                return left + right  # type: ignore
            elif expression.operator is BinaryOperator.SUB:
                return left - right  # type: ignore
            elif expression.operator is BinaryOperator.MUL:
                return left * right  # type: ignore
            elif expression.operator is BinaryOperator.DIV:
                return left / right  # type: ignore
            else:
                raise RuntimeError(f"Unexpected binary operator: {expression.operator}")
        elif isinstance(expression, Pow):
            base = self._compute_expression(expression.base)
            exponent = self._compute_expression(expression.exponent)
            return self.number_type.pow(base, exponent)
        elif isinstance(expression, Function):
            operand = self._compute_expression(expression.operand)
            return apply_builtin_func(expression.func, self.number_type, operand)
        elif isinstance(expression, Factorial):
            return self._factorial(self._compute_expression(expression.operand))
        elif isinstance(expression, Assignment):
            value = self._compute_expression(expression.value)
            existing = self.variables.get(expression.name)
            if existing is not None and existing.constant:
                raise ComputeError(ComputeErrorKind.VARIABLE_IS_CONSTANT, name=expression.name)
            # committed right away, a later failure in the same expression does not undo it
            self.variables[expression.name] = Binding(value, constant=False)
            logger.debug("%s = %s", expression.name, value)
            return value
        else:
            raise RuntimeError(f"Unexpected expression type: {expression}")

    def _factorial(self, value: N) -> N:
        zero, one = self.number_type.zero(), self.number_type.one()
        if value < zero or not self.number_type.is_integer(value):  # type: ignore
            raise ComputeError(ComputeErrorKind.INVALID_FACTORIAL)
        if value == zero or value == one:
            return one
        factor = value - one  # type: ignore
        if factor == value:
            # beyond the type's integer precision, counting down would never reach one
            raise OverflowError("factorial argument too large")
        result = value
        while factor > one:
            product = result * factor  # type: ignore
            if product == result:
                raise OverflowError("factorial result out of range")
            result = product
            factor = factor - one
        return result
