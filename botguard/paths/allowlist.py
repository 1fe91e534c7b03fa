# botguard/paths/allowlist.py
"""
Module: botguard.paths.allowlist

Decide whether a filesystem path lies inside the configured allowlist.

The allowlist lives in the environment (see `environment.paths` in the settings)
as a comma separated list of directories. It is read on every query, so a setup
flow that calls `set_allowed_paths` takes effect immediately.

Warning: An empty allowlist denies everything, including the would-be root.
"""

import ntpath
import os
import posixpath
from typing import Iterable, List

import regex as re

from botguard.config import config, env_name, env_value

IS_WINDOWS = os.name == "nt"

# \\?\C:\path and \\?\UNC\host\share\path
_EXTENDED_PREFIX = "\\\\?\\"
_EXTENDED_UNC_PREFIX = "\\\\?\\UNC\\"
# \\.\PhysicalDrive0, \\.\pipe\name, ...
_DEVICE_PREFIXES = ("\\\\.\\", "//./")
# CON, NUL, COM1, LPT9.txt, ...
_RESERVED_NAME = re.compile(r"^(con|prn|aux|nul|com[1-9]|lpt[1-9])(\..*)?$", re.IGNORECASE)

logger = config.get_logger("logger", __name__)


def get_allowed_paths() -> List[str]:
    """Return the allowlist as absolute paths, read fresh from the environment."""
    return [
        os.path.abspath(entry)
        for entry in (part.strip() for part in env_value("paths").split(","))
        if entry
    ]


def set_allowed_paths(paths: Iterable[str]) -> None:
    """Replace the allowlist wholesale."""
    if isinstance(paths, str):
        raise TypeError("paths must be an iterable of paths, not a string")
    entries = [os.path.abspath(p.strip()) for p in paths if p and p.strip()]
    for entry in entries:
        if "," in entry:
            raise ValueError(f"Allowed paths cannot contain a comma: {entry!r}")
    # a single assignment, readers see either the old or the new list
    os.environ[env_name("paths")] = ",".join(entries)
    logger.info(f"Allowlist replaced with {len(entries)} path(s)")


def normalize_path(path: str, windows: bool = IS_WINDOWS) -> str:
    """Platform normalization applied to both sides of a comparison."""
    if not windows:
        return path
    if path.startswith(_EXTENDED_UNC_PREFIX):
        path = "\\\\" + path[len(_EXTENDED_UNC_PREFIX) :]
    elif path.startswith(_EXTENDED_PREFIX):
        path = path[len(_EXTENDED_PREFIX) :]
    return path.lower()


def is_device_path(path: str) -> bool:
    """True for windows device namespace paths and reserved device names."""
    if path.startswith(_DEVICE_PREFIXES):
        return True
    name = ntpath.basename(path.rstrip("\\/"))
    return bool(name) and _RESERVED_NAME.match(name.rstrip(" .")) is not None


def is_within(root: str, candidate: str, windows: bool = IS_WINDOWS) -> bool:
    """
    Lexical containment of an already canonical `candidate` in `root`.

    Compares relative paths rather than string prefixes, so `/allowed-other`
    is not inside `/allowed` and `..` can never climb out.
    """
    flavor = ntpath if windows else posixpath
    root = normalize_path(root, windows)
    candidate = normalize_path(candidate, windows)

    if root == candidate:
        return True

    try:
        relative = flavor.relpath(candidate, root)
    except ValueError:  # different drives or mounts
        return False

    return (
        relative != ""
        and relative != ".."
        and not relative.startswith(".." + flavor.sep)
        and not flavor.isabs(relative)
    )


def canonicalize(path: str) -> str:
    """
    Resolve symlinks so that a link under an allowed root pointing elsewhere
    is judged by its real target.

    Paths that do not exist yet are resolved as far as they exist, then lexically.
    """
    try:
        return os.path.realpath(path, strict=True)
    except OSError:
        pass
    try:
        return os.path.realpath(path)
    except (OSError, ValueError):
        return os.path.abspath(path)


def is_path_allowed(path: str) -> bool:
    """Return True iff `path` equals or descends from an allowlisted directory."""
    if not isinstance(path, str) or not path.strip():
        return False
    if "\0" in path:
        logger.warning("Rejected path containing a NUL byte")
        return False

    allowed = get_allowed_paths()
    if not allowed:
        return False

    resolved = canonicalize(path)
    if IS_WINDOWS and is_device_path(normalize_path(resolved)):
        logger.warning(f"Rejected device path {path!r}")
        return False

    # entries go through the same resolution, e.g. /tmp -> /private/tmp on macOS
    return any(is_within(canonicalize(root), resolved) for root in allowed)
