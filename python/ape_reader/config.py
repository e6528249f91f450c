"""Configuration management for APE Reader."""

import os
import sys
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

from ape_header import MAX_TAG_SIZE
from ape_locator import DEFAULT_CHUNK_SIZE

TRUE_VALUES = {"1", "true", "yes", "on"}


def eprint(*args, **kwargs):
    """Print to stderr."""
    print(*args, file=sys.stderr, **kwargs)


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def _get_int(name: str, default: int) -> Optional[int]:
    """Read an integer setting; None means the value could not be parsed."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return None


def load_config(env_file: Optional[str] = None) -> dict:
    """
    Load configuration from .env file.

    Args:
        env_file: Path to .env file. Defaults to .env in current directory.

    Returns:
        Dictionary of configuration values.
    """
    if env_file is None:
        env_file = ".env"

    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        eprint(f"Loaded environment from {env_path.resolve()}")
    else:
        eprint(
            f"Warning: .env file not found at {env_path.resolve()} "
            "- falling back to process env."
        )

    return {
        # Tag location
        "slow_scan": _get_bool("APE_SLOW_SCAN", False),
        "scan_chunk_size": _get_int("APE_SCAN_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        # Tag body
        "max_tag_size": _get_int("APE_MAX_TAG_SIZE", MAX_TAG_SIZE),
        # Other formats
        "use_fallback": _get_bool("APE_USE_FALLBACK", True),
    }


def validate_config(config: dict) -> List[str]:
    """
    Validate configuration and return list of problems.

    Args:
        config: Configuration dictionary from load_config()

    Returns:
        List of human readable problems (empty if the config is usable).
    """
    problems = []

    int_keys = [
        ("scan_chunk_size", "APE_SCAN_CHUNK_SIZE"),
        ("max_tag_size", "APE_MAX_TAG_SIZE"),
    ]
    for key, env_name in int_keys:
        value = config.get(key)
        if value is None:
            problems.append(f"{env_name} must be an integer")
        elif value <= 0:
            problems.append(f"{env_name} must be positive (got {value})")

    return problems
