import argparse
import decimal
import logging
from typing import Optional

from scicalc.runtime import Computer
from scicalc.utils import EvalError
from scicalc.value import NUMBER_TYPES

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive calculator")
    parser.add_argument("--number", choices=sorted(NUMBER_TYPES), default="float", help="numeric type to compute with")
    parser.add_argument("--precision", type=int, default=None, help="significant digits for --number decimal")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="logging level, DEBUG shows assignments",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(level=args.log_level)
    if args.precision is not None:
        decimal.getcontext().prec = args.precision

    computer = Computer.for_number_type(NUMBER_TYPES[args.number])

    while True:
        try:
            code = input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not code.strip():
            continue

        try:
            result = computer.eval(code)
        except EvalError as e:
            print(e)
            continue

        print(result)
