import decimal
import logging
import math
from decimal import Decimal

import pytest

from scicalc.parser import Constant, Expression, Neg, ParserError, ParserErrorKind
from scicalc.runtime import Binding, ComputeError, ComputeErrorKind, Computer
from scicalc.tokenizer import TokenizerError, TokenizerErrorKind
from scicalc.utils import EvalError
from scicalc.value import DecimalType


@pytest.fixture
def computer() -> Computer[float]:
    return Computer(math.pi, math.e)


def test_constants_are_seeded(computer: Computer[float]) -> None:
    value, constant = computer.variables["pi"]
    assert value == math.pi and constant
    assert computer.variables["e"] == Binding(math.e, constant=True)
    assert "ans" not in computer.variables


@pytest.mark.parametrize("code", ["pi = 4", "e = 1", "a = pi = 3"])
def test_constant_protection(computer: Computer[float], code: str) -> None:
    with pytest.raises(ComputeError) as exc_info:
        computer.eval(code)
    assert exc_info.value.kind is ComputeErrorKind.VARIABLE_IS_CONSTANT
    assert computer.variables["pi"] == Binding(math.pi, constant=True)
    assert computer.variables["e"] == Binding(math.e, constant=True)
    assert "a" not in computer.variables


def test_constant_error_names_variable(computer: Computer[float]) -> None:
    with pytest.raises(ComputeError) as exc_info:
        computer.eval("pi = 4")
    assert exc_info.value.name == "pi"
    assert str(exc_info.value) == "[Compute error] Variable 'pi' is constant and can't be assigned"


def test_user_variables_are_mutable(computer: Computer[float]) -> None:
    assert computer.eval("a = 2") == 2.0
    assert computer.eval("a = 3") == 3.0
    assert computer.variables["a"] == Binding(3.0, constant=False)
    assert computer.eval("a * 3") == 9.0


def test_chained_assignment(computer: Computer[float]) -> None:
    assert computer.eval("a = b = 3") == 3.0
    assert computer.variables["a"] == Binding(3.0, constant=False)
    assert computer.variables["b"] == Binding(3.0, constant=False)


def test_ans(computer: Computer[float]) -> None:
    assert computer.eval("3 + 4") == 7.0
    assert computer.variables["ans"] == Binding(7.0, constant=True)
    assert computer.eval("ans * 2") == 14.0
    assert computer.eval("ans + 1") == 15.0


def test_ans_is_constant_for_users(computer: Computer[float]) -> None:
    computer.eval("1")
    with pytest.raises(ComputeError) as exc_info:
        computer.eval("ans = 5")
    assert exc_info.value.kind is ComputeErrorKind.VARIABLE_IS_CONSTANT
    assert computer.variables["ans"].value == 1.0


def test_ans_unchanged_on_failure(computer: Computer[float]) -> None:
    computer.eval("7")
    with pytest.raises(ComputeError):
        computer.eval("z + 1")
    assert computer.variables["ans"].value == 7.0


def test_unrecognized_identifier(computer: Computer[float]) -> None:
    with pytest.raises(ComputeError) as exc_info:
        computer.eval("z")
    assert exc_info.value.kind is ComputeErrorKind.UNRECOGNIZED_IDENTIFIER
    assert exc_info.value.name == "z"


@pytest.mark.parametrize("code", ["(-1)!", "1.5!", "(0 - 3)!", "(1 / 3)!"])
def test_invalid_factorial(computer: Computer[float], code: str) -> None:
    with pytest.raises(ComputeError) as exc_info:
        computer.eval(code)
    assert exc_info.value.kind is ComputeErrorKind.INVALID_FACTORIAL


def test_large_factorial(computer: Computer[float]) -> None:
    assert computer.eval("20!") == float(math.factorial(20))


def test_assignments_commit_before_failure(computer: Computer[float]) -> None:
    with pytest.raises(ComputeError) as exc_info:
        computer.eval("(a = 1) + (b = 2.5)!")
    assert exc_info.value.kind is ComputeErrorKind.INVALID_FACTORIAL
    assert computer.variables["a"] == Binding(1.0, constant=False)
    assert computer.variables["b"] == Binding(2.5, constant=False)
    assert "ans" not in computer.variables


@pytest.mark.parametrize("code", ["1 / 0", "sqrt(-1)", "log(0)", "(-8) ^ (1 / 3)", "10 ^ 1000"])
def test_numeric_errors(computer: Computer[float], code: str) -> None:
    with pytest.raises(ComputeError) as exc_info:
        computer.eval(code)
    assert exc_info.value.kind is ComputeErrorKind.NUMERIC_ERROR
    assert isinstance(exc_info.value.__cause__, (ArithmeticError, ValueError))


@pytest.mark.parametrize(
    "code, error_type",
    [
        pytest.param("2 $ 3", TokenizerError),
        pytest.param("1.2.3", TokenizerError),
        pytest.param("2 + 3 4", ParserError),
        pytest.param("foo(1)", ParserError),
        pytest.param("z", ComputeError),
    ],
)
def test_eval_error_families(computer: Computer[float], code: str, error_type: type) -> None:
    with pytest.raises(EvalError) as exc_info:
        computer.eval(code)
    assert type(exc_info.value) is error_type


def test_eval_surfaces_stage_kinds(computer: Computer[float]) -> None:
    with pytest.raises(TokenizerError) as tokenizer_exc:
        computer.eval("1..2")
    assert tokenizer_exc.value.kind is TokenizerErrorKind.INVALID_NUMBER
    with pytest.raises(ParserError) as parser_exc:
        computer.eval("2 + 3 4")
    assert parser_exc.value.kind is ParserErrorKind.TRAILING_TOKENS


def test_usable_after_failures(computer: Computer[float]) -> None:
    computer.eval("a = 5")
    for code in ["2 $", "(1", "a = pi = 1", "1 / 0"]:
        with pytest.raises(EvalError):
            computer.eval(code)
    assert computer.eval("a + 1") == 6.0


def test_instances_do_not_share_variables() -> None:
    first = Computer(math.pi, math.e)
    second = Computer(3.0, 2.0)
    first.eval("a = 1")
    assert second.eval("pi + e") == 5.0
    with pytest.raises(ComputeError):
        second.eval("a")


def test_logs_assignments(computer: Computer[float], caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="scicalc.runtime")
    computer.eval("a = 2")
    assert "a = 2.0" in caplog.text
    assert "ans = 2.0" in caplog.text


def test_decimal_computer() -> None:
    computer = Computer.for_number_type(DecimalType())
    assert computer.eval("0.1 + 0.2") == Decimal("0.3")
    assert computer.eval("5!") == Decimal(120)
    assert computer.eval("ans / 4") == Decimal(30)
    assert computer.eval("2 ^ 10") == Decimal(1024)
    assert abs(computer.eval("sin(pi / 2)") - 1) < Decimal("1e-20")
    assert abs(computer.eval("log(e)") - 1) < Decimal("1e-20")
    with decimal.localcontext() as ctx:
        ctx.prec = 5
        assert computer.eval("1 / 3") == Decimal("0.33333")


@pytest.mark.parametrize("code", ["1 / 0", "sqrt(-1)"])
def test_decimal_numeric_errors(code: str) -> None:
    computer = Computer.for_number_type(DecimalType())
    with pytest.raises(ComputeError) as exc_info:
        computer.eval(code)
    assert exc_info.value.kind is ComputeErrorKind.NUMERIC_ERROR


def test_decimal_invalid_factorial() -> None:
    computer = Computer.for_number_type(DecimalType())
    with pytest.raises(ComputeError) as exc_info:
        computer.eval("2.5!")
    assert exc_info.value.kind is ComputeErrorKind.INVALID_FACTORIAL


def test_deeply_nested_input(computer: Computer[float]) -> None:
    computer.eval("2")
    with pytest.raises(EvalError) as exc_info:
        computer.eval("(" * 500 + "1" + ")" * 500)
    assert isinstance(exc_info.value, ParserError)
    assert exc_info.value.kind is ParserErrorKind.NESTING_TOO_DEEP
    assert computer.eval("ans + 1") == 3.0


def test_compute_too_deep(computer: Computer[float]) -> None:
    expression: Expression = Constant(1.0)
    for _ in range(50000):
        expression = Neg(expression)
    with pytest.raises(ComputeError) as exc_info:
        computer.compute(expression)
    assert exc_info.value.kind is ComputeErrorKind.NESTING_TOO_DEEP
    assert isinstance(exc_info.value.__cause__, RecursionError)
    assert "ans" not in computer.variables


@pytest.mark.parametrize("code", ["(2^60)!", "(2^53)!", "(10^15)!", "171!"])
def test_factorial_out_of_range(computer: Computer[float], code: str) -> None:
    with pytest.raises(ComputeError) as exc_info:
        computer.eval(code)
    assert exc_info.value.kind is ComputeErrorKind.NUMERIC_ERROR
    assert isinstance(exc_info.value.__cause__, OverflowError)


def test_largest_float_factorial(computer: Computer[float]) -> None:
    assert computer.eval("170!") == pytest.approx(float(math.factorial(170)), rel=1e-12)


def test_decimal_factorial_out_of_range() -> None:
    computer = Computer.for_number_type(DecimalType())
    with pytest.raises(ComputeError) as exc_info:
        computer.eval("(10^30)!")
    assert exc_info.value.kind is ComputeErrorKind.NUMERIC_ERROR
