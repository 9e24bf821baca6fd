"""
Configuration management for gitlab-graph.

Loads optional GitLab credentials and tuning knobs from environment variables.
"""

import logging
import os
from dotenv import load_dotenv

# Load .env file from project root
load_dotenv()

GITLAB_URL = os.getenv("GITLAB_URL")
GITLAB_TOKEN = os.getenv("GITLAB_TOKEN")

DB_PATH = os.getenv("GITLAB_GRAPH_DB_PATH")
TIMEOUT = os.getenv("GITLAB_GRAPH_TIMEOUT", "15")
MAX_RETRIES = os.getenv("GITLAB_GRAPH_MAX_RETRIES", "2")
MAX_WORKERS = os.getenv("GITLAB_GRAPH_MAX_WORKERS", "4")
LOG_LEVEL = os.getenv("GITLAB_GRAPH_LOG_LEVEL", "WARNING")

PLACEHOLDER_VALUES = {"your_token_here", "https://gitlab.example.com"}


def get_env_credentials() -> tuple[str | None, str | None]:
    """GITLAB_URL and GITLAB_TOKEN, with .env.example placeholders treated as unset."""
    url = GITLAB_URL if GITLAB_URL not in PLACEHOLDER_VALUES else None
    token = GITLAB_TOKEN if GITLAB_TOKEN not in PLACEHOLDER_VALUES else None
    return url, token


def get_timeout() -> float:
    return float(TIMEOUT)


def get_max_retries() -> int:
    return int(MAX_RETRIES)


def get_max_workers() -> int:
    return int(MAX_WORKERS)


def validate_config():
    """Validate that the numeric settings are usable."""
    problems = []

    try:
        if get_timeout() <= 0:
            problems.append("GITLAB_GRAPH_TIMEOUT must be greater than 0")
    except ValueError:
        problems.append(f"GITLAB_GRAPH_TIMEOUT is not a number: {TIMEOUT!r}")

    try:
        if get_max_retries() < 0:
            problems.append("GITLAB_GRAPH_MAX_RETRIES must not be negative")
    except ValueError:
        problems.append(f"GITLAB_GRAPH_MAX_RETRIES is not an integer: {MAX_RETRIES!r}")

    try:
        if get_max_workers() < 1:
            problems.append("GITLAB_GRAPH_MAX_WORKERS must be at least 1")
    except ValueError:
        problems.append(f"GITLAB_GRAPH_MAX_WORKERS is not an integer: {MAX_WORKERS!r}")

    if not isinstance(logging.getLevelName(LOG_LEVEL.upper()), int):
        problems.append(f"GITLAB_GRAPH_LOG_LEVEL is not a logging level: {LOG_LEVEL!r}")

    if problems:
        raise ValueError(
            "Invalid configuration:\n"
            + "\n".join(f"  - {problem}" for problem in problems)
            + "\nCheck your .env file or environment variables."
        )
