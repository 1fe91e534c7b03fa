# botguard/executable/flags.py
"""
Module: botguard.executable.flags

Spot arguments that make an interpreter run inline code instead of a file,
e.g. `node -e "..."` or `python -c "..."`.

A match never fails validation. It tells the caller that an explicit
confirmation is needed before the command is registered.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import regex as re

from botguard.text.tokenize import format_command, quote_argument

# matched as whole tokens, case-sensitive
DANGEROUS_FLAGS = (
    "-e",  # node, perl, ruby eval
    "--eval",
    "-c",  # python, sh, bash command string
    "--code",
    "-p",  # node, perl print eval
    "--print",
    "--interactive",
    "-i",
)

FLAG_EXPLANATIONS = {
    "-e": "evaluates inline code",
    "--eval": "evaluates inline code",
    "-c": "runs a command string",
    "--code": "runs inline code",
    "-p": "evaluates and prints inline code",
    "--print": "evaluates and prints inline code",
    "--interactive": "opens an interactive interpreter",
    "-i": "opens an interactive interpreter",
}

_EQUALS_FORM = re.compile(r"^(--eval|--code|--print)=")
_PACKED_SHORT = re.compile(r"^-[ecpi]{2,}$")
_ATTACHED_SHORT = re.compile(r"^-[ecpi].")

# only these understand packed (-pe) or attached (-eCODE) short forms
_INTERPRETERS = (
    re.compile(r"^(node|nodejs|bun|deno)$"),
    re.compile(r"^python(\d+(\.\d+)*)?$"),
    re.compile(r"^(bash|sh|zsh|ksh|dash)$"),
    re.compile(r"^(pwsh|powershell|perl|ruby|php|lua)$"),
)
_LAUNCHER_SUFFIX = re.compile(r"\.(exe|cmd|bat|ps1)$")


@dataclass(frozen=True)
class DangerousFlagReport:
    matched: Tuple[str, ...] = ()
    command: str = ""

    def __bool__(self) -> bool:
        return bool(self.matched)

    def explain(self) -> str:
        return ", ".join(
            f"{flag} ({FLAG_EXPLANATIONS.get(flag, 'may execute code')})"
            for flag in self.matched
        )


def is_interpreter(command: Optional[str]) -> bool:
    if not command:
        return False
    name = re.split(r"[\\/]", command)[-1].lower()
    name = _LAUNCHER_SUFFIX.sub("", name)
    return any(pattern.match(name) for pattern in _INTERPRETERS)


def _matches(arg: str, interpreter: bool) -> List[str]:
    if arg in DANGEROUS_FLAGS:
        return [arg]

    match = _EQUALS_FORM.match(arg)
    if match:
        return [match.group(1)]

    if interpreter and _PACKED_SHORT.match(arg):
        return [f"-{char}" for char in arg[1:]]

    if interpreter and _ATTACHED_SHORT.match(arg):
        return [arg[:2]]

    return []


def detect_dangerous_flags(
    argv: Sequence[str],
    command: Optional[str] = None,
) -> DangerousFlagReport:
    """
    Scan `argv` for inline-code flags.

    :param argv: The tokenized arguments, without the executable.
    :param command: The executable. When it names a known interpreter, packed
        and attached short forms are reported too.
    :return: A report with unique matches in first-seen order.
    """
    if isinstance(argv, str):
        raise TypeError("argv must be a sequence of tokens, not a string")

    interpreter = is_interpreter(command)
    found: List[str] = []
    for arg in argv:
        if not isinstance(arg, str):
            raise TypeError(f"argv entries must be strings, got {type(arg).__name__}")
        for flag in _matches(arg, interpreter):
            if flag not in found:
                found.append(flag)

    if command:
        display = format_command(command, argv)
    else:
        display = " ".join(quote_argument(arg) for arg in argv)
    return DangerousFlagReport(matched=tuple(found), command=display)
