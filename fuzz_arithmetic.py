"""Differential fuzzing against Python's own arithmetic

Two generators: random character soup over digits and + - * / ( ), compared with eval()
directly, and random expression trees over the full grammar (^, !, built-in functions)
rendered twice, once for the calculator and once as the equivalent Python source.
"""
import math
import random
import re
import string
import warnings

from scicalc.runtime import Computer
from scicalc.utils import EvalError

FUNCS = {"sqrt": "math.sqrt", "sin": "math.sin", "cos": "math.cos", "tan": "math.tan", "log": "math.log", "abs": "abs"}


def eval_py(code: str) -> object:
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            return eval(code, {"math": math})
    except Exception as e:
        return str(e)


def eval_my(code: str) -> float | str:
    try:
        return Computer(math.pi, math.e).eval(code)
    except EvalError as e:
        return str(e)


def agrees(res_py: object, res_my: float | str) -> bool:
    py_is_number = isinstance(res_py, (int, float)) and not isinstance(res_py, bool)
    if py_is_number and isinstance(res_my, float):
        try:
            return math.isclose(float(res_py), res_my, rel_tol=1e-9, abs_tol=1e-12)  # type: ignore
        except OverflowError:
            return False
    # anything python can't turn into a real number must be an error here too
    return not py_is_number and isinstance(res_my, str)


def generate_soup(rng: random.Random, length: int = 10) -> str | None:
    code = "".join(rng.choices(string.digits + ".()+-*/ ", k=length))
    if re.findall(r"\*\s*\*", code):
        return None  # avoid generating powers (10**4)
    if re.findall(r"/\s*/", code):
        return None  # avoid generating int devision (10 // 3)
    if re.findall(r"(^|[^\d.])0+\d", code):
        return None  # python rejects leading zeros (007)
    return code


def generate_tree(rng: random.Random, depth: int, allow_pow: bool = True) -> tuple[str, str]:
    """Returns (calculator code, python code) for the same expression

    Powers only take small integer exponents and non-power bases, and function arguments
    stay shallow, so both sides work with exactly representable values.
    """
    if depth == 0 or rng.random() < 0.2:
        literal = rng.choice(["0", "1", "2", "3", "5", "7", "9", "0.5", "2.5"])
        return literal, literal

    kind = rng.choice(["binop", "binop", "neg", "pow", "factorial", "func"])
    if kind == "binop":
        op = rng.choice("+-*/")
        left_my, left_py = generate_tree(rng, depth - 1, allow_pow)
        right_my, right_py = generate_tree(rng, depth - 1, allow_pow)
        return f"({left_my}) {op} ({right_my})", f"({left_py}) {op} ({right_py})"
    elif kind == "neg":
        operand_my, operand_py = generate_tree(rng, depth - 1, allow_pow)
        return f"-({operand_my})", f"-({operand_py})"
    elif kind == "pow" and allow_pow:
        base_my, base_py = generate_tree(rng, min(depth - 1, 2), allow_pow=False)
        exponent = rng.choice(["0", "1", "2", "(-1)", "(-2)"])
        return f"({base_my}) ^ {exponent}", f"({base_py}) ** {exponent}"
    elif kind == "factorial":
        n = rng.randint(0, 6)
        return f"({n})!", f"math.factorial({n})"
    else:
        name = rng.choice(sorted(FUNCS))
        arg_my, arg_py = generate_tree(rng, min(depth - 1, 1), allow_pow=False)
        return f"{name}({arg_my})", f"{FUNCS[name]}({arg_py})"


if __name__ == "__main__":
    rng = random.Random()

    while True:
        code = generate_soup(rng)
        if code is not None:
            res_py = eval_py(code)
            res_my = eval_my(code)
            if not agrees(res_py, res_my):
                print(f"{code!r}\npy: {res_py}\nmy: {res_my}\n\n")

        code_my, code_py = generate_tree(rng, depth=3)
        res_py = eval_py(code_py)
        res_my = eval_my(code_my)
        if not agrees(res_py, res_my):
            print(f"{code_my!r}\n{code_py!r}\npy: {res_py}\nmy: {res_my}\n\n")
