import sys
from pathlib import Path

import fncli

from . import db
from .core.errors import RoutineError
from .lib import ansi
from .lib.log import setup_logging

_VERBOSE_FLAGS = {"-v", "--verbose"}


def main():
    user_args = sys.argv[1:]
    setup_logging(verbose=any(a in _VERBOSE_FLAGS for a in user_args))
    user_args = [a for a in user_args if a not in _VERBOSE_FLAGS]
    if not sys.stdout.isatty():
        ansi.use(ansi.PLAIN)
    db.init()
    fncli.autodiscover(Path(__file__).parent, "routine")

    argv = ["routine", *(user_args or ["ls"])]
    try:
        code = fncli.dispatch(argv)
    except RoutineError as e:
        sys.stderr.write(f"{e}\n")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
