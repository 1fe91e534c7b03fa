# botguard/executable/validate.py
"""
Module: botguard.executable.validate

Decide whether an executable may be spawned.

Order of checks, first failure wins:

1. empty command
2. shell metacharacters (see `botguard.executable.charset`)
3. command shape: UNC and relative references are refused
4. exact basename allowlist match, case-insensitive on windows only
5. absolute paths only: the path must be what PATH resolves the basename to,
   directly or through symlinks, so `/tmp/attacker/node` cannot borrow the
   name of `/usr/bin/node`

A bare name that PATH cannot resolve still passes, with a warning; the binary
may simply not be installed where validation runs.
"""

import asyncio
import ntpath
import os
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from logging import Logger
from typing import List, Optional, Sequence, Tuple

from botguard.config import config, env_value
from botguard.executable.charset import first_violation, violations
from botguard.executable.classify import (
    Absolute,
    Bare,
    Relative,
    Unc,
    classify,
    has_parent_segments,
)
from botguard.executable.flags import DangerousFlagReport, detect_dangerous_flags
from botguard.executable.resolver import PathResolver, get_resolver

IS_WINDOWS = os.name == "nt"

DEFAULT_ALLOWED_EXECUTABLES = (
    "node",
    "node.exe",
    "python",
    "python.exe",
    "python3",
    "python3.exe",
    "npx",
    "npx.cmd",
    "deno",
    "deno.exe",
    "bun",
    "bun.exe",
)


class ErrorKind(Enum):
    EMPTY_COMMAND = "empty-command"
    DISALLOWED_METACHARACTERS = "disallowed-metacharacters"
    NOT_IN_ALLOWLIST = "not-in-allowlist"
    ABSOLUTE_PATH_NOT_IN_SYSTEM_PATH = "absolute-path-not-in-system-path"
    UNSUPPORTED_PATH = "unsupported-path"


@dataclass(frozen=True)
class ValidationVerdict:
    ok: bool
    error: Optional[ErrorKind] = None
    message: str = ""
    warnings: Tuple[str, ...] = ()
    rejected: Optional[str] = None
    allowed: Tuple[str, ...] = ()
    flags: DangerousFlagReport = field(default_factory=DangerousFlagReport)

    @property
    def needs_confirmation(self) -> bool:
        return self.ok and bool(self.flags)


def get_allowed_executables() -> List[str]:
    """Allowed basenames, read fresh from the environment on every call."""
    value = env_value("executables")
    if not value.strip():
        return list(DEFAULT_ALLOWED_EXECUTABLES)
    return [name.strip() for name in value.split(",") if name.strip()]


class ExecutableValidator:
    """Validates executables against the allowlist using an injected resolver."""

    def __init__(self, resolver: Optional[PathResolver] = None, windows: bool = IS_WINDOWS):
        self.resolver = resolver if resolver else get_resolver()
        self.windows = windows
        self.logger: Logger = config.get_logger("logger", self.__class__.__name__)
        self.logger.debug(f"Initialized {self.__class__.__name__} instance.")

    def _fold(self, name: str) -> str:
        return name.lower() if self.windows else name

    def _normalize(self, path: str) -> str:
        flavor = ntpath if self.windows else posixpath
        return self._fold(flavor.normpath(path))

    def is_resolved_path(self, path: str, resolved: Sequence[str]) -> bool:
        """True when `path` is one of the PATH hits, lexically or after resolving links."""
        wanted = self._normalize(path)
        if any(self._normalize(entry) == wanted for entry in resolved):
            return True
        if self.windows != IS_WINDOWS:
            return False
        # merged /usr: /bin/node and /usr/bin/node are the same file
        real = self._fold(os.path.realpath(path))
        return any(self._fold(os.path.realpath(entry)) == real for entry in resolved)

    def is_allowed_name(self, name: str, allowed: Sequence[str]) -> bool:
        """Exact membership; `node.evil.exe` is not `node`."""
        folded = self._fold(name)
        return any(folded == self._fold(entry) for entry in allowed)

    def _reject(self, error: ErrorKind, message: str, **kwargs) -> ValidationVerdict:
        return ValidationVerdict(ok=False, error=error, message=message, **kwargs)

    def validate(
        self,
        command: str,
        argv: Optional[Sequence[str]] = None,
    ) -> ValidationVerdict:
        command = (command or "").strip()
        if not command:
            return self._reject(ErrorKind.EMPTY_COMMAND, "Command is empty.")

        if first_violation(command) is not None:
            found = ", ".join(repr(v) for v in violations(command))
            self.logger.warning(f"Rejected {command!r}: metacharacters {found}")
            return self._reject(
                ErrorKind.DISALLOWED_METACHARACTERS,
                f"Command contains characters that are not allowed: {found}",
            )

        shape = classify(command)
        allowed = tuple(get_allowed_executables())

        if isinstance(shape, (Unc, Relative)) or has_parent_segments(command):
            self.logger.warning(f"Rejected {command!r}: unsupported path shape")
            return self._reject(
                ErrorKind.UNSUPPORTED_PATH,
                f"'{command}' must be a bare executable name or an absolute path "
                "without network shares or '..' segments.",
            )

        name = shape.basename
        if not self.is_allowed_name(name, allowed):
            self.logger.warning(f"Rejected {command!r}: '{name}' is not allowlisted")
            return self._reject(
                ErrorKind.NOT_IN_ALLOWLIST,
                f"'{name}' is not an allowed executable. Allowed: {', '.join(allowed)}",
                rejected=name,
                allowed=allowed,
            )

        warnings: List[str] = []
        resolved = self.resolver.lookup(name)

        if isinstance(shape, Absolute):
            if not self.is_resolved_path(shape.path, resolved):
                self.logger.warning(
                    f"Rejected {command!r}: not among PATH entries for '{name}' {resolved}"
                )
                return self._reject(
                    ErrorKind.ABSOLUTE_PATH_NOT_IN_SYSTEM_PATH,
                    f"The absolute path '{command}' is not in the system PATH. "
                    "Only absolute paths to system executables are allowed.",
                )
        elif isinstance(shape, Bare) and not resolved:
            warnings.append(
                f"The command '{name}' was not found in PATH. "
                "Make sure it is installed or use a full path."
            )

        flags = DangerousFlagReport()
        if argv is not None:
            flags = detect_dangerous_flags(argv, command)

        self.logger.debug(f"Accepted {command!r} (flags={list(flags.matched)})")
        return ValidationVerdict(ok=True, warnings=tuple(warnings), flags=flags)


def validate_executable(
    command: str,
    argv: Optional[Sequence[str]] = None,
    resolver: Optional[PathResolver] = None,
) -> ValidationVerdict:
    """Validate `command`, optionally scanning `argv` for dangerous flags."""
    return ExecutableValidator(resolver).validate(command, argv)


async def validate_executable_async(
    command: str,
    argv: Optional[Sequence[str]] = None,
    resolver: Optional[PathResolver] = None,
) -> ValidationVerdict:
    """Same as `validate_executable`, with the PATH lookup kept off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, validate_executable, command, argv, resolver)
