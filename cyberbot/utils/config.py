"""
Configuration management.

This module provides a centralized way to access configuration settings and
environment variables across the application. Credentials are never required
at startup; each route checks the keys it needs at request time so a missing
token surfaces as an explanatory error instead of a crash.

Usage:
    from cyberbot.utils.config import config

    # Access configuration values
    api_key = config.OPENAI_API_KEY
    env_mode = config.ENV_MODE
"""

import os
from enum import Enum
from typing import Dict, Any, Optional, get_type_hints
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

class EnvMode(Enum):
    """Environment mode enumeration."""
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"

class Configuration:
    """
    Centralized configuration for the Cyber Bot service.

    This class loads environment variables and provides type checking and validation.
    Default values can be specified for optional configuration items.
    """

    # Environment mode
    ENV_MODE: EnvMode = EnvMode.LOCAL

    # OpenAI Assistants configuration
    OPENAI_ASSISTANT_ID: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_ORGANIZATION: Optional[str] = None
    OPENAI_API_BASE: str = "https://api.openai.com/v1"

    # SonarCloud configuration
    SONARCLOUD_TOKEN: Optional[str] = None
    SONARCLOUD_ORGANIZATION: Optional[str] = None
    SONARCLOUD_API_BASE: str = "https://sonarcloud.io/api"
    SONAR_REPOS_PATH: Optional[str] = None

    # PageSpeed Insights configuration
    PAGESPEED_API_KEY: Optional[str] = None
    GOOGLE_API_KEY: Optional[str] = None

    # Run polling
    RUN_POLL_INTERVAL_SECONDS: float = 1.0
    RUN_POLL_MAX_ATTEMPTS: int = 30

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = 60.0
    CORS_ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    def __init__(self):
        """Initialize configuration by loading from environment variables."""
        # Load environment variables from .env file if it exists
        load_dotenv()

        # Set environment mode first
        env_mode_str = os.getenv("ENV_MODE", EnvMode.LOCAL.value)
        try:
            self.ENV_MODE = EnvMode(env_mode_str.lower())
        except ValueError:
            logger.warning(f"Invalid ENV_MODE: {env_mode_str}, defaulting to LOCAL")
            self.ENV_MODE = EnvMode.LOCAL

        logger.info(f"Environment mode: {self.ENV_MODE.value}")

        # Load configuration from environment variables
        self._load_from_env()

        # Perform validation
        self._validate()

    def _load_from_env(self):
        """Load configuration values from environment variables."""
        for key, expected_type in get_type_hints(self.__class__).items():
            env_val = os.getenv(key)

            if env_val is not None:
                # Convert environment variable to the expected type
                if expected_type == bool:
                    setattr(self, key, env_val.lower() in ('true', 't', 'yes', 'y', '1'))
                elif expected_type in (int, float):
                    try:
                        setattr(self, key, expected_type(env_val))
                    except ValueError:
                        logger.warning(f"Invalid value for {key}: {env_val}, using default")
                elif expected_type == EnvMode:
                    # Already handled for ENV_MODE
                    pass
                else:
                    # String or other type
                    setattr(self, key, env_val)

    def _validate(self):
        """Warn about missing credentials; routes reject requests that need them."""
        required_keys = [
            "OPENAI_ASSISTANT_ID",
            "OPENAI_API_KEY",
        ]

        if self.ENV_MODE != EnvMode.LOCAL:
            required_keys.extend([
                "SONARCLOUD_TOKEN",
                "SONARCLOUD_ORGANIZATION",
            ])

        for key in required_keys:
            if not getattr(self, key):
                logger.warning(f"Required configuration {key} is missing for {self.ENV_MODE.value} environment")

        if self.RUN_POLL_MAX_ATTEMPTS <= 0:
            logger.warning(f"RUN_POLL_MAX_ATTEMPTS must be positive, got {self.RUN_POLL_MAX_ATTEMPTS}; using 30")
            self.RUN_POLL_MAX_ATTEMPTS = 30

    @property
    def pagespeed_api_key(self) -> Optional[str]:
        """PageSpeed key; GOOGLE_API_KEY is accepted as an alias."""
        return self.PAGESPEED_API_KEY or self.GOOGLE_API_KEY

    @property
    def cors_origins(self) -> list:
        return [origin.strip() for origin in self.CORS_ALLOWED_ORIGINS.split(",") if origin.strip()]

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value with an optional default."""
        return getattr(self, key, default)

    def as_dict(self) -> Dict[str, Any]:
        """Return configuration as a dictionary."""
        return {
            key: getattr(self, key)
            for key in get_type_hints(self.__class__).keys()
            if not key.startswith('_')
        }

# Create a singleton instance
config = Configuration()
