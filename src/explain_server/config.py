"""
Server configuration management.

This module handles loading and accessing server configuration from multiple sources
with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/server.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The ServerConfig
dataclass provides typed access to all settings.

Usage:
    from explain_server.config import config

    print(config.server.port)
    print(config.model.api_endpoint)

Environment Variable Mapping:
    EXPLAIN_HOST                   -> server.host
    EXPLAIN_PORT                   -> server.port
    EXPLAIN_CORS_ORIGINS           -> security.cors_origins
    EXPLAIN_LOG_LEVEL              -> logging.level
    EXPLAIN_MODEL                  -> model.model
    EXPLAIN_MODEL_BASE_URL         -> model.base_url
    EXPLAIN_MODEL_TIMEOUT_SECONDS  -> model.timeout_seconds
    EXPLAIN_LENGTH_LIMIT           -> formatting.length_limit
    EXPLAIN_FORMATTING_POLICY      -> formatting.policy_path
    OPENAI_API_KEY                 -> model.api_key (environment only)
"""

import configparser
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal

from explain_server.formatting.config import FormattingConfig, load_formatting_policy

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, policies/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "server.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "server.example.ini"

_LOG_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """Network server configuration."""

    host: str = "0.0.0.0"  # nosec B104 - intentional for server binding
    port: int = 8000


@dataclass
class SecuritySettings:
    """CORS configuration for the browser client."""

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    cors_allow_methods: list[str] = field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    cors_allow_headers: list[str] = field(
        default_factory=lambda: ["Content-Type", "Authorization"]
    )


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class ModelSettings:
    """Model provider configuration.

    ``api_key`` is only ever read from ``OPENAI_API_KEY`` so that the
    credential never lands in a config file.
    """

    api_key: str | None = None
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-5-nano"
    timeout_seconds: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 600

    @property
    def api_endpoint(self) -> str:
        """Full ``/chat/completions`` URL constructed from ``base_url``."""
        return f"{self.base_url.rstrip('/')}/chat/completions"


@dataclass
class FormattingSettings:
    """Formatting pipeline configuration.

    ``length_limit`` overrides the policy's limit when set.  ``policy_path``
    points at a YAML formatting policy, relative to the project root unless
    absolute.
    """

    length_limit: int | None = None
    policy_path: str | None = None

    def load_policy(self) -> FormattingConfig:
        """Build the frozen formatting policy these settings describe.

        Raises:
            FileNotFoundError: If ``policy_path`` is set but missing.
            ValueError:        If the policy file or ``length_limit`` is
                               invalid.
        """
        policy = FormattingConfig.default()
        if self.policy_path:
            path = Path(self.policy_path)
            if not path.is_absolute():
                path = PROJECT_ROOT / path
            policy = load_formatting_policy(path)
        if self.length_limit is not None:
            if self.length_limit < 0:
                raise ValueError(f"length_limit must be >= 0, got {self.length_limit}.")
            policy = replace(policy, length_limit=self.length_limit)
        return policy


@dataclass
class ServerConfig:
    """
    Complete server configuration.

    This is the main configuration object that aggregates all settings sections.
    Access via the module-level `config` singleton.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    model: ModelSettings = field(default_factory=ModelSettings)
    formatting: FormattingSettings = field(default_factory=FormattingSettings)

    @property
    def has_api_key(self) -> bool:
        return bool(self.model.api_key)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated string to list, stripping whitespace."""
    if not value or value.strip() == "":
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_from_ini(parser: configparser.ConfigParser, cfg: ServerConfig) -> None:
    """Load configuration from parsed INI file into ServerConfig."""
    # Server section
    if parser.has_section("server"):
        if parser.has_option("server", "host"):
            cfg.server.host = parser.get("server", "host")
        if parser.has_option("server", "port"):
            cfg.server.port = parser.getint("server", "port")

    # Security section
    if parser.has_section("security"):
        if parser.has_option("security", "cors_origins"):
            cfg.security.cors_origins = _parse_list(parser.get("security", "cors_origins"))
        if parser.has_option("security", "cors_allow_methods"):
            cfg.security.cors_allow_methods = _parse_list(
                parser.get("security", "cors_allow_methods")
            )
        if parser.has_option("security", "cors_allow_headers"):
            cfg.security.cors_allow_headers = _parse_list(
                parser.get("security", "cors_allow_headers")
            )

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]

    # Model section
    if parser.has_section("model"):
        if parser.has_option("model", "base_url"):
            cfg.model.base_url = parser.get("model", "base_url")
        if parser.has_option("model", "model"):
            cfg.model.model = parser.get("model", "model")
        if parser.has_option("model", "timeout_seconds"):
            cfg.model.timeout_seconds = parser.getfloat("model", "timeout_seconds")
        if parser.has_option("model", "temperature"):
            cfg.model.temperature = parser.getfloat("model", "temperature")
        if parser.has_option("model", "max_tokens"):
            cfg.model.max_tokens = parser.getint("model", "max_tokens")

    # Formatting section
    if parser.has_section("formatting"):
        if parser.has_option("formatting", "length_limit"):
            cfg.formatting.length_limit = parser.getint("formatting", "length_limit")
        if parser.has_option("formatting", "policy_path"):
            cfg.formatting.policy_path = parser.get("formatting", "policy_path") or None


def _apply_env_overrides(cfg: ServerConfig) -> None:
    """Apply environment variable overrides to configuration."""
    # Server settings
    if env_host := os.getenv("EXPLAIN_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("EXPLAIN_PORT"):
        cfg.server.port = int(env_port)

    # Security settings
    if env_cors := os.getenv("EXPLAIN_CORS_ORIGINS"):
        cfg.security.cors_origins = _parse_list(env_cors)

    # Logging settings
    if env_log := os.getenv("EXPLAIN_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()

    # Model settings
    if env_key := os.getenv("OPENAI_API_KEY"):
        cfg.model.api_key = env_key
    if env_model := os.getenv("EXPLAIN_MODEL"):
        cfg.model.model = env_model
    if env_base_url := os.getenv("EXPLAIN_MODEL_BASE_URL"):
        cfg.model.base_url = env_base_url
    if env_timeout := os.getenv("EXPLAIN_MODEL_TIMEOUT_SECONDS"):
        cfg.model.timeout_seconds = float(env_timeout)

    # Formatting settings
    if env_limit := os.getenv("EXPLAIN_LENGTH_LIMIT"):
        cfg.formatting.length_limit = int(env_limit)
    if env_policy := os.getenv("EXPLAIN_FORMATTING_POLICY"):
        cfg.formatting.policy_path = env_policy


def load_config() -> ServerConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/server.ini
        3. config/server.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        ServerConfig: Fully populated configuration object.
    """
    cfg = ServerConfig()

    # Determine which config file to use
    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        # Use example as fallback for development
        config_file = CONFIG_EXAMPLE

    # Load from INI file if available
    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")
        _load_from_ini(parser, cfg)

    # Apply environment variable overrides (highest priority)
    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "ServerConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton. Use sparingly as it
    doesn't update an already-running app's middleware.

    Returns:
        ServerConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


def configure_logging(settings: LoggingSettings) -> None:
    """Apply the configured level and format to the root logger."""
    logging.basicConfig(
        level=getattr(logging, settings.level.upper(), logging.INFO),
        format=_LOG_FORMATS.get(settings.format, _LOG_FORMATS["detailed"]),
        force=True,
    )


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

# Load configuration once at module import time
config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information. The API key
    itself is never included, only whether one is present.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "api_key_configured": config.has_api_key,
        "model": config.model.model,
        "cors_origins_count": len(config.security.cors_origins),
        "formatting_policy": config.formatting.policy_path,
    }


def print_config_summary() -> None:
    """Print a summary of current configuration to stdout."""
    status = get_config_status()
    print("\n" + "=" * 60)
    print("SERVER CONFIGURATION")
    print("=" * 60)
    print(f"Config file: {status['config_file_path']}")
    print(f"File exists: {status['config_file_exists']}")
    if status["using_example"]:
        print("WARNING: Using example config (copy to server.ini for production)")
    print("-" * 60)
    print(f"Server:       {config.server.host}:{config.server.port}")
    print(f"CORS origins: {config.security.cors_origins}")
    print(f"Model:        {config.model.model} ({config.model.api_endpoint})")
    print(f"API key set:  {status['api_key_configured']}")
    print(f"Policy file:  {status['formatting_policy'] or '(built-in)'}")
    print(f"Log level:    {config.logging.level}")
    print("=" * 60 + "\n")
