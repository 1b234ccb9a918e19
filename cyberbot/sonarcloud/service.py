"""
Code quality operations shared by the HTTP routes and the assistant tools.

Each operation returns ``(body, status_code)`` so a tool call hands the
assistant exactly what the equivalent route would have returned.
"""

from typing import Any, Dict, Optional, Tuple

from cyberbot.exceptions import SonarCloudError, ValidationError
from cyberbot.utils.logger import logger
from .client import SonarCloudClient
from .repos import find_repo_by_github_url, is_valid_github_url, load_projects_from_api

ServiceResult = Tuple[Dict[str, Any], int]


def require_github_url(github_url: Any) -> str:
    if not github_url or not isinstance(github_url, str):
        raise ValidationError("GitHub URL is required")
    return github_url


def resolve_include_issues(value: Any) -> bool:
    """Only a real boolean turns issue lists off; anything else means the default."""
    return value if isinstance(value, bool) else True


async def validate_repository(github_url: Any) -> ServiceResult:
    logger.info("Validate repository", github_url=github_url)

    try:
        github_url = require_github_url(github_url)
        if not is_valid_github_url(github_url):
            raise ValidationError("Invalid GitHub URL format. Expected: https://github.com/owner/repo")
    except ValidationError as e:
        return {"valid": False, "error": e.message}, 400

    repo = find_repo_by_github_url(github_url)
    if repo is None:
        return {
            "valid": False,
            "error": "Repository not configured in SonarCloud",
            "message": (
                "Please ensure this repository is added to your SonarCloud organization "
                "and listed in the repository configuration"
            ),
        }, 200

    return {
        "valid": True,
        "projectKey": repo.sonar_project_key,
        "displayName": repo.display_name,
        "lastSync": repo.last_sync,
        "message": "Repository is configured and ready for analysis",
    }, 200


async def get_repository_analysis(
    github_url: Any,
    client: Optional[SonarCloudClient],
    include_issues: Any = True,
) -> ServiceResult:
    """Full normalized analysis for a configured repository.

    ``client`` is None when SonarCloud credentials are not configured.
    """
    include_issues = resolve_include_issues(include_issues)
    logger.info("Get analysis", github_url=github_url, include_issues=include_issues)

    try:
        github_url = require_github_url(github_url)
    except ValidationError as e:
        return {"error": e.message}, 400

    repo = find_repo_by_github_url(github_url)
    if repo is None:
        return {
            "error": "Repository not configured",
            "message": (
                "This repository is not configured in SonarCloud. "
                "Please add it to the repository configuration first."
            ),
        }, 404

    if client is None:
        logger.error("Missing SonarCloud configuration")
        return {
            "error": "SonarCloud not configured",
            "message": "Missing SONARCLOUD_TOKEN or SONARCLOUD_ORGANIZATION environment variables",
        }, 500

    try:
        analysis = await client.get_full_analysis(repo.sonar_project_key, repo, include_issues=include_issues)
    except SonarCloudError as e:
        logger.error("SonarCloud analysis failed", project_key=repo.sonar_project_key, status_code=e.status_code, error=e.message)
        return {
            "error": e.message,
            "statusCode": e.status_code,
            "details": e.details,
        }, e.http_status

    logger.info(
        "Analysis fetched",
        project_key=repo.sonar_project_key,
        bugs=analysis["summary"]["bugs"],
        vulnerabilities=analysis["summary"]["vulnerabilities"],
    )
    return {"success": True, "data": analysis}, 200


async def list_repositories(client: Optional[SonarCloudClient] = None) -> Dict[str, Any]:
    try:
        repos = await load_projects_from_api(client)
    except Exception as e:
        logger.error("Failed to load repositories", error=str(e), exc_info=True)
        return {"success": False, "error": "Failed to load repositories", "repos": [], "count": 0}

    repo_list = [repo.to_summary() for repo in repos]
    return {"success": True, "repos": repo_list, "count": len(repo_list)}
