# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
npm-sweep configuration.
YAML for settings. Env vars ONLY for secrets (and the config path).

Everything that shapes a run is inspectable with `cat`:
registry endpoints, retry budget, concurrency, policy thresholds.
"""

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError


DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_DOWNLOADS_API_URL = "https://api.npmjs.org"
DEFAULT_CONFIG_PATH = "./npm-sweep.yaml"


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Immutable runtime configuration.
    All values from YAML. No hidden state.
    """

    # -- Registry --
    registry_url: str = DEFAULT_REGISTRY_URL
    downloads_api_url: str = DEFAULT_DOWNLOADS_API_URL
    http_timeout: float = 30.0

    # -- Retry --
    max_attempts: int = 3
    retry_delay: float = 1.0

    # -- Execution --
    default_concurrency: int = 3

    # -- Search --
    search_page_size: int = 250

    # -- Unpublish policy --
    recent_publish_hours: int = 72
    download_threshold: int = 300

    # -- OTP --
    one_password_item: Optional[str] = None

    # -- Logging --
    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError("retry.max_attempts must be at least 1")
        if self.default_concurrency < 1:
            raise ConfigurationError("execution.concurrency must be at least 1")
        if self.retry_delay < 0:
            raise ConfigurationError("retry.delay cannot be negative")


# =============================================================================
# SECRETS - The ONLY thing from environment variables
# =============================================================================

def load_env(env_path: Optional[str] = None) -> None:
    """
    Load a local .env file (if any) so secrets resolve like exported vars.
    Variables already set in the environment win over the file.
    """
    load_dotenv(env_path or find_dotenv(usecwd=True))


def get_registry_token() -> Optional[str]:
    """Tokens cannot be in version control."""
    return os.getenv("NPM_TOKEN") or os.getenv("NODE_AUTH_TOKEN") or None


# =============================================================================
# LOADER
# =============================================================================

def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from YAML.
    Returns defaults if file doesn't exist.
    """
    if not Path(path).exists():
        return Config(log_level=os.getenv("LOG_LEVEL", "INFO"))

    try:
        with open(path) as f:
            y = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", config_file=path)

    if not isinstance(y, dict):
        raise ConfigurationError("Top-level YAML value must be a mapping", config_file=path)

    # Helper to safely navigate nested dicts
    def get(d: dict, *keys, default=None):
        for k in keys:
            if not isinstance(d, dict):
                return default
            d = d.get(k, {})
        return d if d != {} else default

    return Config(
        # Registry
        registry_url=get(y, "registry", "url") or DEFAULT_REGISTRY_URL,
        downloads_api_url=get(y, "registry", "downloads_url") or DEFAULT_DOWNLOADS_API_URL,
        http_timeout=float(get(y, "registry", "timeout") or 30.0),

        # Retry
        max_attempts=int(get(y, "retry", "max_attempts") or 3),
        retry_delay=float(get(y, "retry", "delay", default=1.0)),

        # Execution
        default_concurrency=int(get(y, "execution", "concurrency") or 3),

        # Search
        search_page_size=int(get(y, "search", "page_size") or 250),

        # Policy
        recent_publish_hours=int(get(y, "policy", "recent_publish_hours") or 72),
        download_threshold=int(get(y, "policy", "download_threshold") or 300),

        # OTP
        one_password_item=get(y, "otp", "one_password_item"),

        # Logging
        log_level=os.getenv("LOG_LEVEL") or get(y, "logging", "level") or "INFO",
        log_format=get(y, "logging", "format") or "text",
    )


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        load_env()
        config_path = os.getenv("NPM_SWEEP_CONFIG_PATH", DEFAULT_CONFIG_PATH)
        _config = load_config(config_path)
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    _config = None
    return get_config()
