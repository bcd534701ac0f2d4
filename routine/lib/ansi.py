import re
from dataclasses import dataclass

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


@dataclass(frozen=True)
class Theme:
    red: str = "\033[38;5;203m"
    yellow: str = "\033[38;5;221m"
    gray: str = "\033[38;5;245m"
    muted: str = "\033[90m"
    bold: str = "\033[1m"
    dim: str = "\033[2m"
    reset: str = "\033[0m"


DEFAULT = Theme()
PLAIN = Theme(**{name: "" for name in Theme.__dataclass_fields__})
_active: Theme = DEFAULT


def use(theme: Theme) -> None:
    global _active
    _active = theme


def _wrap(code: str, text: str) -> str:
    return f"{code}{text}{_active.reset}" if code else text


def red(text: str) -> str:
    return _wrap(_active.red, text)


def yellow(text: str) -> str:
    return _wrap(_active.yellow, text)


def gray(text: str) -> str:
    return _wrap(_active.gray, text)


def muted(text: str) -> str:
    return _wrap(_active.muted, text)


def bold(text: str) -> str:
    return _wrap(_active.bold, text)


def dim(text: str) -> str:
    return _wrap(_active.dim, text)


def strip(text: str) -> str:
    return _ANSI_RE.sub("", text)
