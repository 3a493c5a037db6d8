import abc
import decimal
import functools
import math
from decimal import Decimal
from typing import Generic, TypeVar

N = TypeVar("N")


class NumberType(abc.ABC, Generic[N]):
    """Numeric capability the runtime is written against

    Values of N must also support the Python operators for negation, +, -, *, /, < and ==.
    Errors are the type's own: operations are free to raise ArithmeticError or ValueError.
    """

    @classmethod
    @abc.abstractmethod
    def type_name(cls) -> str:
        ...

    @abc.abstractmethod
    def parse(self, lexeme: str) -> N:
        ...

    @abc.abstractmethod
    def zero(self) -> N:
        ...

    @abc.abstractmethod
    def one(self) -> N:
        ...

    @abc.abstractmethod
    def pi(self) -> N:
        ...

    @abc.abstractmethod
    def e(self) -> N:
        ...

    @abc.abstractmethod
    def is_integer(self, x: N) -> bool:
        ...

    @abc.abstractmethod
    def sqrt(self, x: N) -> N:
        ...

    @abc.abstractmethod
    def sin(self, x: N) -> N:
        ...

    @abc.abstractmethod
    def cos(self, x: N) -> N:
        ...

    @abc.abstractmethod
    def tan(self, x: N) -> N:
        ...

    @abc.abstractmethod
    def log(self, x: N) -> N:
        ...

    @abc.abstractmethod
    def abs(self, x: N) -> N:
        ...

    @abc.abstractmethod
    def pow(self, base: N, exponent: N) -> N:
        ...


class FloatType(NumberType[float]):
    @classmethod
    def type_name(cls) -> str:
        return "float"

    def parse(self, lexeme: str) -> float:
        return float(lexeme)

    def zero(self) -> float:
        return 0.0

    def one(self) -> float:
        return 1.0

    def pi(self) -> float:
        return math.pi

    def e(self) -> float:
        return math.e

    def is_integer(self, x: float) -> bool:
        return float(x).is_integer()

    def sqrt(self, x: float) -> float:
        return math.sqrt(x)

    def sin(self, x: float) -> float:
        return math.sin(x)

    def cos(self, x: float) -> float:
        return math.cos(x)

    def tan(self, x: float) -> float:
        return math.tan(x)

    def log(self, x: float) -> float:
        return math.log(x)

    def abs(self, x: float) -> float:
        return abs(x)

    def pow(self, base: float, exponent: float) -> float:
        # math.pow raises instead of returning a complex number for (-8) ^ (1/3)
        return math.pow(base, exponent)


@functools.lru_cache(maxsize=None)
def _decimal_pi(prec: int) -> Decimal:
    with decimal.localcontext() as ctx:
        ctx.prec = prec + 2
        three = Decimal(3)
        lasts, t, s, n, na, d, da = 0, three, 3, 1, 0, 0, 24
        while s != lasts:
            lasts = s
            n, na = n + na, na + 8
            d, da = d + da, da + 32
            t = (t * n) / d
            s += t
        ctx.prec = prec
        return +s


class DecimalType(NumberType[Decimal]):
    """decimal.Decimal in the current decimal context

    Trigonometry follows the series recipes from the decimal module documentation.
    """

    @classmethod
    def type_name(cls) -> str:
        return "decimal"

    def parse(self, lexeme: str) -> Decimal:
        return Decimal(lexeme)

    def zero(self) -> Decimal:
        return Decimal(0)

    def one(self) -> Decimal:
        return Decimal(1)

    def pi(self) -> Decimal:
        return +_decimal_pi(decimal.getcontext().prec)

    def e(self) -> Decimal:
        return Decimal(1).exp()

    def is_integer(self, x: Decimal) -> bool:
        return x.is_finite() and x == x.to_integral_value()

    def sqrt(self, x: Decimal) -> Decimal:
        return x.sqrt()

    def sin(self, x: Decimal) -> Decimal:
        with decimal.localcontext() as ctx:
            ctx.prec += 2
            x = self._reduce_angle(x)
            i, lasts, s, fact, num, sign = 1, 0, x, 1, x, 1
            while s != lasts:
                lasts = s
                i += 2
                fact *= i * (i - 1)
                num *= x * x
                sign *= -1
                s += num / fact * sign
        return +s

    def cos(self, x: Decimal) -> Decimal:
        with decimal.localcontext() as ctx:
            ctx.prec += 2
            x = self._reduce_angle(x)
            i, lasts, s, fact, num, sign = 0, 0, Decimal(1), 1, Decimal(1), 1
            while s != lasts:
                lasts = s
                i += 2
                fact *= i * (i - 1)
                num *= x * x
                sign *= -1
                s += num / fact * sign
        return +s

    def tan(self, x: Decimal) -> Decimal:
        return self.sin(x) / self.cos(x)

    def log(self, x: Decimal) -> Decimal:
        return x.ln()

    def abs(self, x: Decimal) -> Decimal:
        return abs(x)

    def pow(self, base: Decimal, exponent: Decimal) -> Decimal:
        return base**exponent

    def _reduce_angle(self, x: Decimal) -> Decimal:
        # series converge slowly far from zero, bring x into [-pi, pi]
        return x.remainder_near(2 * self.pi())


NUMBER_TYPES: dict[str, NumberType] = {t.type_name(): t for t in (FloatType(), DecimalType())}
