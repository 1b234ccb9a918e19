"""
Cyber Bot

A chat service that answers code quality and web performance questions by
running an OpenAI assistant with SonarCloud and PageSpeed Insights tools.
"""

__version__ = "0.1.0"

from .exceptions import (
    CyberBotError,
    ConfigurationError,
    VendorAPIError,
    AssistantAPIError,
    SonarCloudError,
    PageSpeedError,
    ChatTurnError,
)

__all__ = [
    "CyberBotError",
    "ConfigurationError",
    "VendorAPIError",
    "AssistantAPIError",
    "SonarCloudError",
    "PageSpeedError",
    "ChatTurnError",
]
