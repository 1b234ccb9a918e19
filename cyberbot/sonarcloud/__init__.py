from .client import SonarCloudClient

__all__ = ["SonarCloudClient"]
