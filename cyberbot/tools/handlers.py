"""
Default assistant tools.

Each handler runs the same service operation as the matching HTTP route and
returns its body, whatever the status, so the assistant can explain errors.
"""

from typing import Any, Dict, Optional

from cyberbot.pagespeed import service as pagespeed_service
from cyberbot.pagespeed.client import PageSpeedClient
from cyberbot.sonarcloud import service as sonar_service
from cyberbot.sonarcloud.client import SonarCloudClient
from .definitions import (
    ANALYZE_WEBSITE_PERFORMANCE_SCHEMA,
    GET_CODE_ANALYSIS_SCHEMA,
    VALIDATE_GITHUB_REPO_SCHEMA,
)
from .registry import ToolName, ToolRegistry


def build_default_registry(
    sonar_client: Optional[SonarCloudClient],
    pagespeed_client: PageSpeedClient,
) -> ToolRegistry:
    registry = ToolRegistry()

    async def validate_github_repo(args: Dict[str, Any]) -> Dict[str, Any]:
        body, _ = await sonar_service.validate_repository(args.get("githubUrl"))
        return body

    async def get_code_analysis(args: Dict[str, Any]) -> Dict[str, Any]:
        body, _ = await sonar_service.get_repository_analysis(
            args.get("githubUrl"),
            sonar_client,
            include_issues=args.get("includeIssues"),
        )
        return body

    async def analyze_website_performance(args: Dict[str, Any]) -> Dict[str, Any]:
        body, _ = await pagespeed_service.analyze_performance(
            args.get("targetUrl"),
            args.get("strategy") or "mobile",
            pagespeed_client,
        )
        return body

    registry.register(ToolName.VALIDATE_GITHUB_REPO, validate_github_repo, VALIDATE_GITHUB_REPO_SCHEMA)
    registry.register(ToolName.GET_CODE_ANALYSIS, get_code_analysis, GET_CODE_ANALYSIS_SCHEMA)
    registry.register(ToolName.ANALYZE_WEBSITE_PERFORMANCE, analyze_website_performance, ANALYZE_WEBSITE_PERFORMANCE_SCHEMA)

    return registry
