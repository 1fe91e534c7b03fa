# botguard/executable/resolver.py
"""
Module: botguard.executable.resolver

PATH lookup as an injectable capability.

`which`/`where` is a blocking subprocess; keeping it behind `PathResolver` lets
the validator stay pure in tests and lets hosts choose how to run it.

A resolver never raises for a missing binary: every failure, including a timeout,
is an empty result.
"""

import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from logging import Logger
from typing import Dict, List, Mapping, Optional, Sequence

from botguard.config import config, lookup_timeout

IS_WINDOWS = os.name == "nt"


class PathResolver(ABC):
    def __init__(self):
        self.logger: Logger = config.get_logger("logger", self.__class__.__name__)
        self.logger.debug(f"Initialized {self.__class__.__name__} instance.")

    @abstractmethod
    def lookup(self, name: str) -> List[str]:
        """Return every path `name` resolves to on the system PATH, or []."""


class SubprocessResolver(PathResolver):
    """Ask the platform's `which` (or `where` on windows) without a shell."""

    def __init__(self, timeout: Optional[float] = None, program: Optional[str] = None):
        super().__init__()
        self.timeout = timeout if timeout is not None else lookup_timeout()
        self.program = program or ("where" if IS_WINDOWS else "which")

    def lookup(self, name: str) -> List[str]:
        try:
            result = subprocess.run(
                [self.program, name],
                capture_output=True,
                text=True,
                # PATH entries need not be valid in the locale encoding
                errors="surrogateescape",
                timeout=self.timeout,
                check=False,
                shell=False,  # NOTE: Enabling this is dangerous!
            )
        except subprocess.TimeoutExpired:
            self.logger.warning(f"{self.program} {name!r} timed out after {self.timeout}s")
            return []
        except OSError as e:
            self.logger.warning(f"Could not run {self.program}: {e}")
            return []

        if result.returncode != 0:
            self.logger.debug(f"{name!r} not found in PATH (exit {result.returncode})")
            return []

        paths = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not paths:
            self.logger.warning(f"{self.program} succeeded but returned no paths for {name!r}")
        return paths


class ShutilResolver(PathResolver):
    """In-process lookup through `shutil.which`, no subprocess involved."""

    def __init__(self, search_path: Optional[str] = None):
        super().__init__()
        self.search_path = search_path

    def lookup(self, name: str) -> List[str]:
        which = shutil.which(name, path=self.search_path)
        return [which] if which else []


class StaticResolver(PathResolver):
    """A fixed table, for tests and dry runs."""

    def __init__(self, table: Optional[Mapping[str, Sequence[str]]] = None):
        super().__init__()
        self.table: Dict[str, List[str]] = {k: list(v) for k, v in (table or {}).items()}

    def lookup(self, name: str) -> List[str]:
        return list(self.table.get(name, []))


RESOLVERS = {
    "subprocess": SubprocessResolver,
    "shutil": ShutilResolver,
}


def get_resolver(name: Optional[str] = None) -> PathResolver:
    """Build the resolver named in the settings (`lookup.resolver`)."""
    name = name or config.get_value("lookup.resolver", "subprocess")
    if name not in RESOLVERS:
        raise ValueError(f"Unknown resolver '{name}', expected one of {sorted(RESOLVERS)}")
    return RESOLVERS[name]()
