# botguard/text/tokenize.py
"""
Quote-aware command line tokenizer.

keep this as dead simple as possible.

The tokenizer never raises. Any input produces some token sequence, so callers
that must refuse malformed input (e.g. unbalanced quotes) have to inspect the
tokens themselves.

---
Grammar
---

  - tokens are separated by a plain space, nothing else.
  - a quote only opens a quoted region at the start of a token.
  - outside quotes, `\\ ` keeps the space inside the token. every other
    backslash is literal so windows paths like `C:\\Users` survive.
  - inside double quotes, `\\"` and `\\\\` are escapes.
  - inside single quotes, `\\'` and `\\\\` are escapes.
  - `"C:\\Folder\\"` at the end of the input keeps its trailing backslash.
  - an unterminated quote is closed implicitly at the end of the input.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Sequence

import regex as re


class State(Enum):
    NORMAL = auto()
    IN_DOUBLE_QUOTE = auto()
    IN_SINGLE_QUOTE = auto()
    ESCAPE = auto()


@dataclass(frozen=True)
class CommandSpec:
    """An executable and its argument vector, split from raw user text."""

    executable: str
    argv: List[str] = field(default_factory=list)


def tokenize(text: str) -> List[str]:
    """Split `text` into argument tokens respecting quotes and escapes."""
    if not text:
        return []

    tokens: List[str] = []
    current: List[str] = []
    state = State.NORMAL
    previous = State.NORMAL
    quoted = False  # the current token was opened by a quote
    length = len(text)

    i = 0
    while i < length:
        char = text[i]
        following = text[i + 1] if i + 1 < length else None

        if state is State.NORMAL:
            if char == "\\" and following == " ":
                previous, state = state, State.ESCAPE
            elif char == '"' and not current:
                quoted, state = True, State.IN_DOUBLE_QUOTE
            elif char == "'" and not current:
                quoted, state = True, State.IN_SINGLE_QUOTE
            elif char == " ":
                if current or quoted:
                    tokens.append("".join(current))
                    current, quoted = [], False
            else:
                current.append(char)

        elif state is State.IN_DOUBLE_QUOTE:
            if char == "\\" and following is not None:
                if following == '"' and i + 2 == length:
                    # trailing backslash of a windows directory, e.g. "C:\Folder\"
                    current.append(char)
                    i += 1
                    state = State.NORMAL
                elif following in ('"', "\\"):
                    previous, state = state, State.ESCAPE
                else:
                    current.append(char)
            elif char == '"':
                state = State.NORMAL
            else:
                current.append(char)

        elif state is State.IN_SINGLE_QUOTE:
            if char == "\\" and following in ("'", "\\"):
                previous, state = state, State.ESCAPE
            elif char == "'":
                state = State.NORMAL
            else:
                current.append(char)

        else:  # State.ESCAPE
            current.append(char)
            state = previous

        i += 1

    if current or quoted:
        tokens.append("".join(current))

    return tokens


def parse_command_args(text: str) -> List[str]:
    """
    Tokenize the arguments of a chat command, dropping the command word.

    e.g. `/addproject web "C:\\My Projects\\web"` -> `["web", "C:\\My Projects\\web"]`
    """
    index = text.find(" ")
    if index == -1:
        return []
    return tokenize(text[index + 1 :])


def split_command(text: str) -> Optional[CommandSpec]:
    """Split a full command line into its executable and argv, or None if empty."""
    tokens = tokenize(text.strip()) if text else []
    if not tokens:
        return None
    return CommandSpec(executable=tokens[0], argv=tokens[1:])


# anything a shell (or a reader) could misread must be quoted for display
_NEEDS_QUOTING = re.compile(r"""[\s;|&<>()$`\\!*?\[\]{}'"~]""")


def quote_argument(arg: str) -> str:
    """Quote a single argument for display, escaping backslashes and quotes."""
    if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in ('"', "'"):
        return arg
    if arg and not _NEEDS_QUOTING.search(arg):
        return arg
    escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_command(executable: str, argv: Sequence[str] = ()) -> str:
    """Re-serialize a command for display; the executable is kept verbatim."""
    return " ".join([executable, *(quote_argument(arg) for arg in argv)])
