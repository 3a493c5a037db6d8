import enum
from dataclasses import dataclass
from typing import Any, Union

from scicalc.builtins import BUILTIN_FUNCS, BuiltinFunc
from scicalc.tokenizer import Token, TokenType, untokenize
from scicalc.utils import EvalError, PrintableEnum


class ParserErrorKind(PrintableEnum):
    UNMATCHED_BRACKET = enum.auto()
    MISSING_OPERAND = enum.auto()
    UNEXPECTED_TOKEN = enum.auto()
    UNKNOWN_FUNCTION = enum.auto()
    TRAILING_TOKENS = enum.auto()
    NESTING_TOO_DEEP = enum.auto()


@dataclass
class ParserError(EvalError):
    kind: ParserErrorKind
    errmsg: str
    tokens: list[Token]
    error_token_idx: int

    @property
    def token(self) -> Token | None:
        if self.error_token_idx < len(self.tokens):
            return self.tokens[self.error_token_idx]
        return None

    def __str__(self) -> str:
        parsed_tokens = self.tokens[: self.error_token_idx]
        filler_whitespace = " " * len(untokenize(parsed_tokens)) + (" " if parsed_tokens else "")
        return "\n".join([f"[Parser error] {self.errmsg}", untokenize(self.tokens), filler_whitespace + "^"])


class BinaryOperator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()


@dataclass
class Constant:
    value: Any


@dataclass
class Identifier:
    name: str


@dataclass
class Neg:
    operand: "Expression"


@dataclass
class BinOp:
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass
class Pow:
    base: "Expression"
    exponent: "Expression"


@dataclass
class Factorial:
    operand: "Expression"


@dataclass
class Function:
    func: BuiltinFunc
    operand: "Expression"


@dataclass
class Assignment:
    name: str
    value: "Expression"


Expression = Union[Constant, Identifier, Neg, BinOp, Pow, Factorial, Function, Assignment]

ADDITIVE_OPERATORS = {TokenType.PLUS: BinaryOperator.ADD, TokenType.MINUS: BinaryOperator.SUB}
MULTIPLICATIVE_OPERATORS = {TokenType.STAR: BinaryOperator.MUL, TokenType.SLASH: BinaryOperator.DIV}


def parse(tokens: list[Token]) -> Expression:
    """Parse a complete expression, every token must be consumed

    expression     -> assignment
    assignment     -> IDENTIFIER '=' expression | additive
    additive       -> multiplicative (('+' | '-') multiplicative)*
    multiplicative -> unary (('*' | '/') unary)*
    unary          -> ('-' | '+') unary | power
    power          -> postfix ('^' unary)?
    postfix        -> primary '!'*
    primary        -> NUMBER | IDENTIFIER | FUNCTION '(' expression ')' | '(' expression ')'
    """
    try:
        expr, i = _consume_expression(tokens, 0)
    except RecursionError as e:
        raise ParserError(
            ParserErrorKind.NESTING_TOO_DEEP,
            "Expression is nested too deeply",
            tokens=tokens,
            error_token_idx=0,
        ) from e
    if i < len(tokens):
        if tokens[i].type is TokenType.BRACKET_CLOSE:
            raise ParserError(ParserErrorKind.UNMATCHED_BRACKET, "Unmatched ')'", tokens=tokens, error_token_idx=i)
        raise ParserError(
            ParserErrorKind.TRAILING_TOKENS,
            f"Unexpected {tokens[i].type} after complete expression",
            tokens=tokens,
            error_token_idx=i,
        )
    return expr


def _peek(tokens: list[Token], i: int) -> TokenType | None:
    return tokens[i].type if i < len(tokens) else None


def _consume_expression(tokens: list[Token], i: int) -> tuple[Expression, int]:
    if (
        _peek(tokens, i) is TokenType.IDENTIFIER
        and tokens[i].lexeme not in BUILTIN_FUNCS
        and _peek(tokens, i + 1) is TokenType.EQUAL
    ):
        # right-associative, a = b = 3 assigns b first
        value, i_next = _consume_expression(tokens, i + 2)
        return Assignment(name=tokens[i].lexeme, value=value), i_next
    return _consume_additive(tokens, i)


def _consume_additive(tokens: list[Token], i: int) -> tuple[Expression, int]:
    result, i = _consume_multiplicative(tokens, i)
    while _peek(tokens, i) in ADDITIVE_OPERATORS:
        operator = ADDITIVE_OPERATORS[tokens[i].type]
        right, i = _consume_multiplicative(tokens, i + 1)
        result = BinOp(operator=operator, left=result, right=right)
    return result, i


def _consume_multiplicative(tokens: list[Token], i: int) -> tuple[Expression, int]:
    result, i = _consume_unary(tokens, i)
    while _peek(tokens, i) in MULTIPLICATIVE_OPERATORS:
        operator = MULTIPLICATIVE_OPERATORS[tokens[i].type]
        right, i = _consume_unary(tokens, i + 1)
        result = BinOp(operator=operator, left=result, right=right)
    return result, i


def _consume_unary(tokens: list[Token], i: int) -> tuple[Expression, int]:
    if _peek(tokens, i) is TokenType.MINUS:
        operand, i = _consume_unary(tokens, i + 1)
        return Neg(operand), i
    elif _peek(tokens, i) is TokenType.PLUS:
        return _consume_unary(tokens, i + 1)
    return _consume_power(tokens, i)


def _consume_power(tokens: list[Token], i: int) -> tuple[Expression, int]:
    base, i = _consume_postfix(tokens, i)
    if _peek(tokens, i) is TokenType.CARET:
        # exponent goes back up to unary: 2^3^2 is 2^(3^2), 2^-1 is allowed
        exponent, i = _consume_unary(tokens, i + 1)
        return Pow(base=base, exponent=exponent), i
    return base, i


def _consume_postfix(tokens: list[Token], i: int) -> tuple[Expression, int]:
    result, i = _consume_primary(tokens, i)
    while _peek(tokens, i) is TokenType.BANG:
        result = Factorial(result)
        i += 1
    return result, i


def _consume_primary(tokens: list[Token], i: int) -> tuple[Expression, int]:
    if i >= len(tokens):
        raise ParserError(ParserErrorKind.MISSING_OPERAND, "Operand expected", tokens=tokens, error_token_idx=i)
    first = tokens[i]
    if first.type is TokenType.NUMBER:
        return Constant(first.value), i + 1
    elif first.type is TokenType.IDENTIFIER:
        if first.lexeme in BUILTIN_FUNCS:
            if _peek(tokens, i + 1) is not TokenType.BRACKET_OPEN:
                raise ParserError(
                    ParserErrorKind.UNEXPECTED_TOKEN,
                    f"'(' expected after function {first.lexeme!r}",
                    tokens=tokens,
                    error_token_idx=i + 1,
                )
            operand, i = _consume_bracketed(tokens, i + 1)
            return Function(func=BUILTIN_FUNCS[first.lexeme], operand=operand), i
        elif _peek(tokens, i + 1) is TokenType.BRACKET_OPEN:
            raise ParserError(
                ParserErrorKind.UNKNOWN_FUNCTION,
                f"Unknown function {first.lexeme!r}",
                tokens=tokens,
                error_token_idx=i,
            )
        return Identifier(first.lexeme), i + 1
    elif first.type is TokenType.BRACKET_OPEN:
        return _consume_bracketed(tokens, i)
    elif first.type is TokenType.BRACKET_CLOSE:
        raise ParserError(ParserErrorKind.MISSING_OPERAND, "Operand expected", tokens=tokens, error_token_idx=i)
    else:
        raise ParserError(
            ParserErrorKind.UNEXPECTED_TOKEN,
            f"Operand expected, found {first.type}",
            tokens=tokens,
            error_token_idx=i,
        )


def _consume_bracketed(tokens: list[Token], i: int) -> tuple[Expression, int]:
    """Starts at the opening bracket"""
    expr, j = _consume_expression(tokens, i + 1)
    if _peek(tokens, j) is not TokenType.BRACKET_CLOSE:
        if j >= len(tokens):
            raise ParserError(ParserErrorKind.UNMATCHED_BRACKET, "Unclosed bracket", tokens=tokens, error_token_idx=i)
        raise ParserError(
            ParserErrorKind.UNEXPECTED_TOKEN,
            f"')' expected, found {tokens[j].type}",
            tokens=tokens,
            error_token_idx=j,
        )
    return expr, j + 1
