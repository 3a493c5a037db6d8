import enum
import re
from dataclasses import dataclass
from typing import Any, Callable

from scicalc.utils import EvalError, PrintableEnum, point_at


class TokenizerErrorKind(PrintableEnum):
    INVALID_CHARACTER = enum.auto()
    INVALID_NUMBER = enum.auto()


@dataclass
class TokenizerError(EvalError):
    kind: TokenizerErrorKind
    errmsg: str
    code: str
    error_char_idx: int

    def __str__(self) -> str:
        return "\n".join([f"[Tokenizer error] {self.errmsg}", *point_at(self.code, self.error_char_idx)])


class TokenType(PrintableEnum):
    NUMBER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    CARET = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()
    EQUAL = enum.auto()
    BANG = enum.auto()
    IDENTIFIER = enum.auto()


@dataclass
class Token:
    type: TokenType
    lexeme: str
    position: int = 0
    value: Any = None  # parsed literal, NUMBER tokens only

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


def _is_valid_in_number(s: str) -> bool:
    return s.isdigit() or s == "."


def _is_valid_in_identifier(s: str) -> bool:
    return s.isalnum() or s == "_"


SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
    "=": TokenType.EQUAL,
    "!": TokenType.BANG,
}


def tokenize(code: str, number: Callable[[str], Any] = float) -> list[Token]:
    """Split code into tokens, converting numeric literals with number()

    number is the literal parser of the numeric type in use (float, Decimal, ...);
    a literal it rejects is reported as INVALID_NUMBER.
    """
    i = 0
    tokens: list[Token] = []
    while i < len(code):
        if _is_valid_in_number(code[i]):
            number_end_idx = i + 1
            while number_end_idx < len(code) and _is_valid_in_number(code[number_end_idx]):
                number_end_idx += 1
            lexeme = code[i:number_end_idx]
            try:
                value = number(lexeme)
            except (ValueError, ArithmeticError):
                raise TokenizerError(
                    TokenizerErrorKind.INVALID_NUMBER,
                    f"Invalid number: {lexeme!r}",
                    code=code,
                    error_char_idx=i,
                ) from None
            tokens.append(Token(type=TokenType.NUMBER, lexeme=lexeme, position=i, value=value))
            i = number_end_idx - 1  # to account for += 1 later
        elif code[i].isalpha():
            ident_end_idx = i + 1
            while ident_end_idx < len(code) and _is_valid_in_identifier(code[ident_end_idx]):
                ident_end_idx += 1
            tokens.append(Token(type=TokenType.IDENTIFIER, lexeme=code[i:ident_end_idx], position=i))
            i = ident_end_idx - 1  # to account for += 1 later
        elif code[i] in SINGLE_CHAR_TOKENS:
            tokens.append(Token(type=SINGLE_CHAR_TOKENS[code[i]], lexeme=code[i], position=i))
        elif code[i].isspace():
            pass
        else:
            raise TokenizerError(
                TokenizerErrorKind.INVALID_CHARACTER,
                f"Unexpected character: {code[i]!r}",
                code=code,
                error_char_idx=i,
            )
        i += 1

    return tokens


def untokenize(tokens: list[Token]) -> str:
    result = " ".join(t.lexeme for t in tokens)

    # ( 1 + 2 ) => (1 + 2)
    result = re.sub(r"\(\s+", "(", result)
    result = re.sub(r"\s+\)", ")", result)

    # 4 ^ 5 => 4^5, 3 ! => 3!
    result = re.sub(r"\s*\^\s*", "^", result)
    result = re.sub(r"\s+!", "!", result)

    # sqrt (2) => sqrt(2)
    result = re.sub(r"(\w) \(", r"\1(", result)
    return result
