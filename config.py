"""
Configuration validation and management for the issue/chat proxy.

Reads every setting from the environment (optionally seeded from a .env file),
reports missing or malformed values once at startup, and exposes a cached
AppConfig to the rest of the application.
"""

import os
from typing import Optional, List
from dataclasses import dataclass, field

# Vercel injects environment variables directly
if os.getenv("VERCEL") != "1":
    from dotenv import load_dotenv
    load_dotenv()

from logger import get_logger

logger = get_logger(__name__)

MISSING_GEMINI_KEY_MESSAGE = (
    "Missing GEMINI_API_KEY. Get a free key at https://aistudio.google.com/apikey and add it to .env"
)


@dataclass
class ConfigValidationError:
    """Represents a configuration validation error."""
    key: str
    message: str
    is_critical: bool = True


@dataclass
class AppConfig:
    """Application configuration with validated values."""

    # Gemini
    gemini_api_key: str = ""
    gemini_model_name: str = "gemini-2.5-flash"

    # Jira
    jira_domain: str = ""
    jira_email: str = ""
    jira_api_token: str = ""
    jira_timeout: int = 30

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False
    log_level: str = "INFO"
    is_serverless: bool = False

    # CORS: empty means every origin is allowed
    allowed_origin: str = ""

    # Chat sessions
    session_ttl_seconds: int = 3600
    max_sessions: int = 1000

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def jira_configured(self) -> bool:
        """Jira needs the domain and both credentials; any one missing disables it."""
        return bool(self.jira_domain and self.jira_email and self.jira_api_token)

    @property
    def cors_origins(self) -> List[str]:
        return [self.allowed_origin] if self.allowed_origin else ["*"]


class ConfigValidator:
    """Validates and loads application configuration."""

    JIRA_VARS = ("JIRA_DOMAIN", "JIRA_EMAIL", "JIRA_API_TOKEN")

    NUMERIC_VARS = [
        ("PORT", 1, 65535),
        ("JIRA_TIMEOUT", 1, 300),
        ("CHAT_SESSION_TTL", 60, 86400),
        ("MAX_CHAT_SESSIONS", 1, 100000),
    ]

    def __init__(self):
        self.errors: List[ConfigValidationError] = []
        self.warnings: List[str] = []
        self.config: Optional[AppConfig] = None

    def validate(self) -> bool:
        """
        Validate all configuration values.

        Returns:
            bool: True if no critical error was found
        """
        self.errors = []
        self.warnings = []

        if not os.getenv("GEMINI_API_KEY", "").strip():
            self.warnings.append(MISSING_GEMINI_KEY_MESSAGE)

        self._validate_jira()
        self._validate_numeric_values()

        return not any(e.is_critical for e in self.errors)

    def _validate_jira(self) -> None:
        present = [name for name in self.JIRA_VARS if os.getenv(name, "").strip()]
        if not present:
            self.warnings.append("Jira not configured: /api/jira endpoints will return 503")
            return
        if len(present) != len(self.JIRA_VARS):
            missing = [name for name in self.JIRA_VARS if name not in present]
            self.warnings.append(
                f"Jira partially configured, missing {', '.join(missing)}: /api/jira endpoints will return 503"
            )

        domain = os.getenv("JIRA_DOMAIN", "").strip()
        if domain and not (domain.startswith("http://") or domain.startswith("https://")):
            self.errors.append(ConfigValidationError(
                key="JIRA_DOMAIN",
                message=f"Invalid JIRA_DOMAIN format: {domain}. Must start with http:// or https://",
                is_critical=True
            ))

    def _validate_numeric_values(self) -> None:
        for var_name, min_val, max_val in self.NUMERIC_VARS:
            value_str = os.getenv(var_name)
            if not value_str:
                continue
            try:
                value = int(value_str)
            except ValueError:
                self.errors.append(ConfigValidationError(
                    key=var_name,
                    message=f"Invalid {var_name}: {value_str}. Must be a number",
                    is_critical=False
                ))
                continue
            if value < min_val or value > max_val:
                self.warnings.append(
                    f"{var_name}={value} is outside recommended range [{min_val}, {max_val}]"
                )

    def load_config(self) -> AppConfig:
        """
        Load and return the configuration. Unparsable numbers fall back to defaults.

        Returns:
            AppConfig: Loaded configuration object
        """
        def safe_int(value: Optional[str], default: int) -> int:
            try:
                return int(value) if value else default
            except (ValueError, TypeError):
                return default

        def safe_bool(value: Optional[str], default: bool) -> bool:
            if not value:
                return default
            return value.lower() in ("true", "1", "yes")

        self.config = AppConfig(
            gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
            gemini_model_name=os.getenv("GEMINI_MODEL_NAME", "gemini-2.5-flash"),
            jira_domain=os.getenv("JIRA_DOMAIN", "").strip(),
            jira_email=os.getenv("JIRA_EMAIL", "").strip(),
            jira_api_token=os.getenv("JIRA_API_TOKEN", "").strip(),
            jira_timeout=safe_int(os.getenv("JIRA_TIMEOUT"), 30),
            host=os.getenv("HOST", "0.0.0.0"),
            port=safe_int(os.getenv("PORT"), 3001),
            debug=safe_bool(os.getenv("DEBUG"), False),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            is_serverless=os.getenv("VERCEL") == "1",
            allowed_origin=os.getenv("ALLOWED_ORIGIN", "").strip(),
            session_ttl_seconds=safe_int(os.getenv("CHAT_SESSION_TTL"), 3600),
            max_sessions=safe_int(os.getenv("MAX_CHAT_SESSIONS"), 1000),
        )

        return self.config

    def log_status(self) -> None:
        """Report validation results through the application logger."""
        for error in self.errors:
            if error.is_critical:
                logger.error(f"[CONFIG] {error.key}: {error.message}")
            else:
                logger.warning(f"[CONFIG] {error.key}: {error.message}")

        for warning in self.warnings:
            logger.warning(f"[CONFIG] {warning}")

        if not self.errors and not self.warnings:
            logger.info("[CONFIG] All configuration values are valid")


# Global config instance
_config: Optional[AppConfig] = None


def validate_config_on_startup() -> AppConfig:
    """
    Validate configuration on application startup and cache the result.

    Raises:
        ValueError: If a critical value is malformed

    Returns:
        AppConfig: Validated configuration
    """
    global _config

    validator = ConfigValidator()
    is_valid = validator.validate()
    _config = validator.load_config()

    validator.log_status()

    if not is_valid:
        error_msgs = [f"{error.key}: {error.message}" for error in validator.errors if error.is_critical]
        raise ValueError(f"Invalid configuration: {', '.join(error_msgs)}")

    return _config


def get_config() -> AppConfig:
    """
    Get the global configuration instance, loading it on first use.

    Returns:
        AppConfig: Application configuration
    """
    global _config
    if _config is None:
        validator = ConfigValidator()
        validator.validate()
        _config = validator.load_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config
    _config = None
