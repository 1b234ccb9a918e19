from .client import PageSpeedClient

__all__ = ["PageSpeedClient"]
