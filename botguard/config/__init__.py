"""
Module: botguard.config
"""

import os

from dotenv import load_dotenv
from jsonpycraft import (
    ConfigurationManager,
    JSONDecodeErrorHandler,
    JSONFileErrorHandler,
    JSONMap,
)

DEFAULT_PATH_LOGS = ".botguard/botguard.log"
DEFAULT_PATH_CONF = ".botguard/settings.json"
DEFAULT_PATH_HIST = ".botguard/history.log"
DEFAULT_PATH_DENV = ".env"

DEFAULT_CONF = {
    "logger": {
        "path": DEFAULT_PATH_LOGS,
        "level": "DEBUG",
        "type": "file",
    },
    "history": {
        "path": DEFAULT_PATH_HIST,
        "type": "file",
    },
    "lookup": {
        "timeout": 5,
        "resolver": "subprocess",
    },
    "environment": {
        "paths": "ALLOWED_PATHS",
        "executables": "MCP_ALLOWED_EXECUTABLES",
        "dotenv": DEFAULT_PATH_DENV,
    },
}


def load_or_init_config(path: str, defaults: JSONMap):
    config = ConfigurationManager(path, initial_data=defaults)
    config.mkdir()
    try:
        config.load()
    except (JSONFileErrorHandler, JSONDecodeErrorHandler):
        config.save()
    return config


# NOTE: Do not assign to `config` in any function; it is a top-level singleton.
config = load_or_init_config(DEFAULT_PATH_CONF, DEFAULT_CONF)

# the process environment always wins over the dotenv file
load_dotenv(config.get_value("environment.dotenv", DEFAULT_PATH_DENV), override=False)


def env_name(key: str) -> str:
    """Name of the environment variable backing `environment.<key>`."""
    return config.get_value(f"environment.{key}", DEFAULT_CONF["environment"][key])


def env_value(key: str) -> str:
    """Current value of the variable backing `environment.<key>`, read fresh."""
    return os.environ.get(env_name(key), "")


def lookup_timeout() -> float:
    try:
        return float(config.get_value("lookup.timeout", 5))
    except (TypeError, ValueError):
        return 5.0
