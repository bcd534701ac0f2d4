import sys

__all__ = ["echo"]


def echo(message: str = "") -> None:
    sys.stdout.write(message + "\n")
