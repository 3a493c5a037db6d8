import enum


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


class EvalError(Exception):
    """Base for tokenizer, parser and compute errors"""


def point_at(text: str, idx: int, context: int = 10) -> list[str]:
    """Two lines: an excerpt of text around idx and a caret under idx"""
    start_idx = max(0, idx - context)
    ellipsis_pre = start_idx > 0
    end_idx = min(len(text), idx + context)
    ellipsis_post = end_idx < len(text)
    return [
        ("..." if ellipsis_pre else "") + text[start_idx:end_idx] + ("..." if ellipsis_post else ""),
        " " * (idx - start_idx + (3 if ellipsis_pre else 0)) + "^",
    ]
