"""
Plugin configuration.

Connection defaults and environment lookups used by the CLI.
"""

import os
from typing import Dict, List, Optional

# Connection defaults
DEFAULT_HOST = "localhost"
DEFAULT_PORT = "5432"
DEFAULT_SSLMODE = "disable"
DEFAULT_CONNECT_TIMEOUT = 5  # seconds

# Metric key prefix used when none (or a blank one) is given
DEFAULT_PREFIX = "postgres"

# Environment variables
PASSWORD_ENV_VAR = "PGPASSWORD"
PLUGIN_META_ENV_VAR = "MACKEREL_AGENT_PLUGIN_META"

LOG_LEVEL = os.getenv("POSTGRES_METRICS_LOG_LEVEL", "WARNING")


def default_password() -> Optional[str]:
    """Password fallback for --password, read from PGPASSWORD."""
    return os.getenv(PASSWORD_ENV_VAR) or None


def plugin_meta_requested() -> bool:
    """True when the agent asks for graph definitions instead of values."""
    return os.getenv(PLUGIN_META_ENV_VAR, "") != ""


def parse_extra_options(pairs: Optional[List[str]]) -> Dict[str, str]:
    """
    Parse repeated KEY=VALUE arguments into a libpq options dict.

    Args:
        pairs: Raw strings such as ["application_name=mackerel", "target_session_attrs=any"]

    Returns:
        Dict of option name to value

    Raises:
        ValueError: If an entry has no '=' or an empty key
    """
    options = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid option {pair!r}, expected KEY=VALUE")
        options[key] = value.strip()
    return options
