"""
Module: botguard.__init__

Validation layer between a chat front end and the host it drives: which
directories may be entered, which executables may be spawned, and how raw
user text is split into arguments.
"""

from botguard.executable import (
    DangerousFlagReport,
    ErrorKind,
    ValidationVerdict,
    detect_dangerous_flags,
    get_allowed_executables,
    validate_executable,
    validate_executable_async,
)
from botguard.paths.allowlist import get_allowed_paths, is_path_allowed, set_allowed_paths
from botguard.text.tokenize import CommandSpec, parse_command_args, split_command, tokenize
