"""
Cyber Bot exceptions
"""

from typing import Any, Optional


class CyberBotError(Exception):
    """Base exception for all Cyber Bot errors"""
    pass


class ConfigurationError(CyberBotError):
    """Raised when a required credential or setting is missing"""
    pass


class ValidationError(CyberBotError):
    """Raised when caller input is malformed or missing"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class VendorAPIError(CyberBotError):
    """Raised when a third-party API request fails"""

    def __init__(self, message: str, status_code: int = 500, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    @property
    def http_status(self) -> int:
        """Status to surface to our own callers; out-of-range codes become 500."""
        if isinstance(self.status_code, int) and 400 <= self.status_code < 600:
            return self.status_code
        return 500


class AssistantAPIError(VendorAPIError):
    """Raised when the OpenAI Assistants API rejects a request"""

    @property
    def vendor_message(self) -> Optional[str]:
        if isinstance(self.details, dict):
            error = self.details.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]
        return None


class SonarCloudError(VendorAPIError):
    """Raised when SonarCloud API requests fail"""
    pass


class RateLimitError(SonarCloudError):
    pass


class AuthenticationError(SonarCloudError):
    pass


class NotFoundError(SonarCloudError):
    pass


class ServerError(SonarCloudError):
    pass


class PageSpeedError(VendorAPIError):
    """Raised when PageSpeed Insights requests fail"""
    pass


class ChatTurnError(CyberBotError):
    """Raised when a conversational turn cannot be completed.

    Carries the thread id (when one exists) so the caller does not lose it.
    """

    def __init__(self, message: str, thread_id: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.thread_id = thread_id
        self.cause = cause
