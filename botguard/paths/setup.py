# botguard/paths/setup.py
"""
Module: botguard.paths.setup

Helpers for the administrative side of the allowlist: checking candidate
directories, parsing what a user typed during setup, and persisting the result
to the dotenv file so it survives a restart.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from dotenv import set_key

from botguard.config import DEFAULT_PATH_DENV, config, env_name
from botguard.paths.allowlist import (
    get_allowed_paths,
    normalize_path,
    set_allowed_paths,
)

logger = config.get_logger("logger", __name__)


@dataclass(frozen=True)
class PathCheck:
    valid: bool
    path: str = ""
    error: Optional[str] = None
    warning: Optional[str] = None


def _is_root(path: Path) -> bool:
    return path.parent == path


def validate_path(path: str) -> PathCheck:
    """Check that `path` is a sane directory to hand out access to."""
    if not path or not path.strip() or "\0" in path:
        return PathCheck(False, path, error="Path is empty or malformed")

    resolved = Path(path.strip()).expanduser().resolve()

    # the allowlist is stored comma separated
    if "," in str(resolved):
        return PathCheck(False, str(resolved), error=f"Path cannot contain a comma: {resolved}")

    if not resolved.exists():
        return PathCheck(False, str(resolved), error=f"Path does not exist: {resolved}")
    if not resolved.is_dir():
        return PathCheck(False, str(resolved), error=f"Not a directory: {resolved}")
    if not os.access(resolved, os.R_OK):
        return PathCheck(False, str(resolved), error=f"Path is not readable: {resolved}")
    if _is_root(resolved):
        return PathCheck(
            False,
            str(resolved),
            error="Refusing a filesystem root, use a more specific directory",
        )

    warning = None
    if resolved == Path.home().resolve():
        warning = f"Allowing the home directory exposes every file in it: {resolved}"
        logger.warning(f"Home directory configured as allowed path: {resolved}")

    return PathCheck(True, str(resolved), warning=warning)


def parse_paths(text: str) -> Tuple[List[str], List[PathCheck]]:
    """
    Split a comma separated list of directories and validate each one.

    Returns the valid absolute paths and the failed checks.
    """
    valid: List[str] = []
    invalid: List[PathCheck] = []
    for item in (part.strip() for part in (text or "").split(",")):
        if not item:
            continue
        check = validate_path(item)
        if check.valid:
            valid.append(check.path)
        else:
            invalid.append(check)
    return valid, invalid


def update_env_file(paths: Sequence[str], env_path: Optional[str] = None) -> Path:
    """Write the allowlist into the dotenv file, creating it if needed."""
    target = Path(env_path or config.get_value("environment.dotenv", DEFAULT_PATH_DENV))
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.touch(exist_ok=True)
        set_key(str(target), env_name("paths"), ",".join(paths), quote_mode="never")
    except OSError as e:
        logger.error(f"Failed to update {target}: {e}")
        raise
    logger.info(f"Updated {target} with {len(paths)} allowed path(s)")
    return target


def add_allowed_path(
    path: str,
    persist: bool = True,
    env_path: Optional[str] = None,
) -> PathCheck:
    """Append a single existing directory to the allowlist."""
    check = validate_path(path)
    if not check.valid:
        return check

    current = get_allowed_paths()
    wanted = normalize_path(check.path)
    if any(normalize_path(entry) == wanted for entry in current):
        return PathCheck(False, check.path, error=f"Path is already allowed: {check.path}")

    updated = [*current, check.path]
    if persist:
        update_env_file(updated, env_path)
    set_allowed_paths(updated)

    logger.info(f"Allowed path added: {check.path}")
    return check
