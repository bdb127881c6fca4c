"""
Configuration module for the OAK toolkit.

Holds process-wide settings for schema lookup, document fetching, site output
and logging. Each setting can be set programmatically (the CLI does this from
its arguments) and most can be overridden through environment variables,
which may also come from a ``.env`` file loaded by the CLI.
"""

import os
from pathlib import Path
from typing import Optional, Union

DEFAULT_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_SITE_DIR_NAME = "site"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_schema_dir: Optional[Path] = None
_log_level: Optional[str] = None
_fetch_timeout: Optional[float] = None


def set_schema_dir(schema_dir: Optional[Union[str, Path]]):
    """
    Set the directory holding the protocol schema files.

    Args:
        schema_dir: Directory path, or None to fall back to the environment
                    or the bundled schemas
    """
    global _schema_dir
    _schema_dir = None if schema_dir is None else Path(schema_dir)


def get_schema_dir() -> Path:
    """
    Get the schema directory.

    Returns:
        The explicitly configured directory, else ``OAK_SCHEMA_DIR``, else the
        schemas bundled with the package
    """
    if _schema_dir is not None:
        return _schema_dir
    env_dir = os.getenv("OAK_SCHEMA_DIR")
    if env_dir:
        return Path(env_dir)
    return DEFAULT_SCHEMA_DIR


def set_log_level(level: Optional[str]):
    """
    Set the logging level name.

    Args:
        level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL (case-insensitive),
               or None to fall back to the environment

    Raises:
        ValueError: If the level name is unknown
    """
    global _log_level
    if level is None:
        _log_level = None
        return
    normalized = level.upper()
    if normalized not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Valid options: {sorted(VALID_LOG_LEVELS)}")
    _log_level = normalized


def get_log_level() -> str:
    if _log_level is not None:
        return _log_level
    env_level = os.getenv("OAK_LOG_LEVEL")
    if env_level and env_level.upper() in VALID_LOG_LEVELS:
        return env_level.upper()
    return DEFAULT_LOG_LEVEL


def set_fetch_timeout(timeout: Optional[float]):
    """
    Set the HTTP timeout used when fetching remote documents.

    Args:
        timeout: Timeout in seconds, or None to fall back to the environment

    Raises:
        ValueError: If the timeout is not positive
    """
    global _fetch_timeout
    if timeout is not None and timeout <= 0:
        raise ValueError(f"Fetch timeout must be positive, got {timeout}")
    _fetch_timeout = timeout


def get_fetch_timeout() -> float:
    """
    Get the HTTP fetch timeout in seconds.

    Raises:
        ValueError: If ``OAK_FETCH_TIMEOUT`` is set but is not a positive number
    """
    if _fetch_timeout is not None:
        return _fetch_timeout
    env_timeout = os.getenv("OAK_FETCH_TIMEOUT")
    if env_timeout:
        try:
            timeout = float(env_timeout)
        except ValueError:
            raise ValueError(f"OAK_FETCH_TIMEOUT must be a number, got {env_timeout!r}") from None
        if timeout <= 0:
            raise ValueError(f"OAK_FETCH_TIMEOUT must be positive, got {env_timeout!r}")
        return timeout
    return DEFAULT_FETCH_TIMEOUT


def get_site_dir_name() -> str:
    """Name of the output directory created under the source tree by default."""
    return os.getenv("OAK_SITE_DIR_NAME") or DEFAULT_SITE_DIR_NAME


def get_default_output_dir(source_dir: Union[str, Path]) -> Path:
    return Path(source_dir) / get_site_dir_name()


def reset_config():
    """
    Reset all configuration to defaults.

    Useful for testing and cleanup.
    """
    global _schema_dir, _log_level, _fetch_timeout

    _schema_dir = None
    _log_level = None
    _fetch_timeout = None
