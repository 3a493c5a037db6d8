import enum

from scicalc.utils import PrintableEnum
from scicalc.value import N, NumberType


class BuiltinFunc(PrintableEnum):
    SQRT = enum.auto()
    SIN = enum.auto()
    COS = enum.auto()
    TAN = enum.auto()
    LOG = enum.auto()
    ABS = enum.auto()


BUILTIN_FUNCS: dict[str, BuiltinFunc] = {func.name.lower(): func for func in BuiltinFunc}


def apply_builtin_func(func: BuiltinFunc, number_type: NumberType[N], arg: N) -> N:
    if func is BuiltinFunc.SQRT:
        return number_type.sqrt(arg)
    elif func is BuiltinFunc.SIN:
        return number_type.sin(arg)
    elif func is BuiltinFunc.COS:
        return number_type.cos(arg)
    elif func is BuiltinFunc.TAN:
        return number_type.tan(arg)
    elif func is BuiltinFunc.LOG:
        return number_type.log(arg)
    elif func is BuiltinFunc.ABS:
        return number_type.abs(arg)
    else:
        raise RuntimeError(f"Unexpected built-in function: {func}")
