"""Launch command construction.

A launch command template may reference the ROM through a fixed set of tokens:

    %ROM%        the ROM path
    %ROM_RAW%    the ROM path (kept for templates written for older releases)
    %BASENAME%   the ROM file name without directory and last extension

Substituted values are prepared for the command-line convention understood by
``split_command``: a literal double quote is written as three double quotes, and
a value containing whitespace is enclosed in double quotes.
"""

import re
from enum import Enum

from romrunner.core.logger import RomRunnerLogger

logger = RomRunnerLogger(__name__)

_WHITESPACE = re.compile(r"\s")


class Placeholder(Enum):
    """Closed set of template tokens."""

    ROM = "%ROM%"
    ROM_RAW = "%ROM_RAW%"
    BASENAME = "%BASENAME%"

    @property
    def quoted(self) -> str:
        """The token as written inside literal double quotes."""
        return f'"{self.value}"'


# Longest tokens first so that a shorter token never shadows a longer one
_TOKENS = sorted(Placeholder, key=lambda p: len(p.value), reverse=True)
_TOKEN_PATTERN = re.compile(
    "|".join(
        [re.escape(p.quoted) for p in _TOKENS] + [re.escape(p.value) for p in _TOKENS]
    )
)
_BY_TEXT = {p.value: p for p in Placeholder} | {p.quoted: p for p in Placeholder}


def complete_basename(rom_path: str) -> str:
    """Return the file name of ``rom_path`` without its last extension.

    Both ``/`` and ``\\`` separate directories. Everything from the last dot of
    the file name is removed, so ``a.b.tar.gz`` gives ``a.b.tar`` and a dotfile
    such as ``.hidden`` gives an empty string.
    """
    name = re.split(r"[/\\]", rom_path)[-1]
    stem, dot, _ = name.rpartition(".")
    return stem if dot else name


def prepare_argument(value: str) -> str:
    """Escape and quote a value so it survives ``split_command`` as one argument."""
    value = value.replace('"', '"""')
    if _WHITESPACE.search(value):
        value = f'"{value}"'
    return value


def placeholder_values(rom_path: str) -> dict[Placeholder, str]:
    """Map every placeholder to its prepared value for ``rom_path``."""
    path = prepare_argument(rom_path)
    basename = prepare_argument(complete_basename(rom_path))

    logger.debug("Prepared launch parameters", path=path, basename=basename)

    return {
        Placeholder.ROM: path,
        Placeholder.ROM_RAW: path,
        Placeholder.BASENAME: basename,
    }


def build_launch_command(template: str, rom_path: str) -> str:
    """Substitute the ROM placeholders of ``template``.

    Tokens the template author already enclosed in double quotes are replaced
    with the value quoted exactly once; bare tokens are replaced with the
    prepared value. The template is scanned once from left to right, so text
    coming from a substituted value is never substituted again. Unknown
    ``%TOKENS%`` are left as they are.

    Args:
        template: Command template, e.g. ``retroarch -L core.so "%ROM%"``
        rom_path: Path of the resource to launch

    Returns:
        The command line, ready for ``split_command``
    """
    values = placeholder_values(rom_path)

    def substitute(match: re.Match[str]) -> str:
        text = match.group(0)
        value = values[_BY_TEXT[text]]
        if text.startswith('"') and not _WHITESPACE.search(value):
            return f'"{value}"'
        return value

    return _TOKEN_PATTERN.sub(substitute, template)


def split_command(command: str) -> list[str]:
    """Split a command line into program and arguments.

    Whitespace outside double quotes separates arguments. A single double quote
    starts or ends a quoted section, three consecutive double quotes produce a
    literal double quote, and an empty pair ``""`` produces nothing.
    """
    args: list[str] = []
    current: list[str] = []
    quote_count = 0
    in_quote = False

    for char in command:
        if char == '"':
            quote_count += 1
            if quote_count == 3:
                quote_count = 0
                current.append(char)
            continue
        if quote_count:
            if quote_count == 1:
                in_quote = not in_quote
            quote_count = 0
        if not in_quote and char.isspace():
            if current:
                args.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        args.append("".join(current))

    return args
