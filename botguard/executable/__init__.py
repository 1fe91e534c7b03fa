"""
Module: botguard.executable.__init__
"""

from botguard.executable.flags import DangerousFlagReport, detect_dangerous_flags
from botguard.executable.resolver import (
    PathResolver,
    ShutilResolver,
    StaticResolver,
    SubprocessResolver,
    get_resolver,
)
from botguard.executable.validate import (
    DEFAULT_ALLOWED_EXECUTABLES,
    ErrorKind,
    ExecutableValidator,
    ValidationVerdict,
    get_allowed_executables,
    validate_executable,
    validate_executable_async,
)
