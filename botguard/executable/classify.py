# botguard/executable/classify.py
"""
Module: botguard.executable.classify

Sort a command reference into exactly one shape before any allowlist logic runs.

    Bare("node")                     -> allowlist + optional PATH advisory
    Absolute("/usr/bin/node")        -> allowlist + PATH must contain this exact file
    Unc("\\\\host\\share\\node.exe") -> always rejected
    Relative("bin/node")             -> always rejected

Both `/` and `\\` count as separators on every platform.
"""

from dataclasses import dataclass
from typing import List, Union

import regex as re

_SEPARATORS = re.compile(r"[\\/]")
_DRIVE_ABSOLUTE = re.compile(r"^[A-Za-z]:[\\/]")
_DRIVE_RELATIVE = re.compile(r"^[A-Za-z]:")


def split_segments(path: str) -> List[str]:
    return _SEPARATORS.split(path)


def basename(path: str) -> str:
    """The last path component, whatever separator the path uses."""
    return split_segments(path)[-1]


def has_parent_segments(path: str) -> bool:
    return ".." in split_segments(path)


@dataclass(frozen=True)
class Bare:
    name: str

    @property
    def basename(self) -> str:
        return self.name


@dataclass(frozen=True)
class Absolute:
    path: str

    @property
    def basename(self) -> str:
        return basename(self.path)


@dataclass(frozen=True)
class Unc:
    path: str


@dataclass(frozen=True)
class Relative:
    path: str


CommandShape = Union[Bare, Absolute, Unc, Relative]


def classify(command: str) -> CommandShape:
    """Classify a trimmed command reference."""
    if command.startswith(("\\\\", "//")):
        return Unc(command)
    if _DRIVE_ABSOLUTE.match(command) or command.startswith(("/", "\\")):
        return Absolute(command)
    if _SEPARATORS.search(command) or _DRIVE_RELATIVE.match(command):
        return Relative(command)
    return Bare(command)
