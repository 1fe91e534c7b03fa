# botguard/executable/charset.py
"""
Shell metacharacter grammar.

The spawned process never goes through a shell, but the command string is
shown back to users and may be re-parsed, so anything that only means
something to a shell is refused outright.

Each character maps to exactly one `CharClass`. A command is rejected when it
contains a rejected class, or the two-symbol sequence DOLLAR OPEN_PAREN.
Everything accepted or rejected is visible in the two tables below.
"""

from enum import Enum
from typing import Iterator, List, Optional, Tuple


class CharClass(Enum):
    PLAIN = "plain"
    SEPARATOR = "separator"  # ;
    PIPE = "pipe"  # |
    AMPERSAND = "ampersand"  # &
    BACKTICK = "backtick"  # `
    REDIRECT = "redirect"  # < >
    LINEBREAK = "linebreak"  # \n \r
    CONTROL = "control"  # \0
    DOLLAR = "dollar"  # $
    OPEN_PAREN = "open_paren"  # (


CHAR_CLASSES = {
    ";": CharClass.SEPARATOR,
    "|": CharClass.PIPE,
    "&": CharClass.AMPERSAND,
    "`": CharClass.BACKTICK,
    "<": CharClass.REDIRECT,
    ">": CharClass.REDIRECT,
    "\n": CharClass.LINEBREAK,
    "\r": CharClass.LINEBREAK,
    "\0": CharClass.CONTROL,
    "$": CharClass.DOLLAR,
    "(": CharClass.OPEN_PAREN,
}

REJECTED = frozenset(
    {
        CharClass.SEPARATOR,
        CharClass.PIPE,
        CharClass.AMPERSAND,
        CharClass.BACKTICK,
        CharClass.REDIRECT,
        CharClass.LINEBREAK,
        CharClass.CONTROL,
    }
)

# command substitution, $(...)
REJECTED_SEQUENCES = frozenset({(CharClass.DOLLAR, CharClass.OPEN_PAREN)})


def classify_char(char: str) -> CharClass:
    return CHAR_CLASSES.get(char, CharClass.PLAIN)


def scan(text: str) -> Iterator[Tuple[int, str]]:
    """Yield `(index, offending text)` for every rejected construct in order."""
    previous: Optional[CharClass] = None
    for index, char in enumerate(text):
        kind = classify_char(char)
        if kind in REJECTED:
            yield index, char
        elif (previous, kind) in REJECTED_SEQUENCES:
            yield index - 1, text[index - 1 : index + 1]
        previous = kind


def first_violation(text: str) -> Optional[Tuple[int, str]]:
    return next(scan(text), None)


def violations(text: str) -> List[str]:
    """All offending constructs, for messages."""
    return [construct for _, construct in scan(text)]
