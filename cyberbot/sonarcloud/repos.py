"""
Configured repository lookup.

The list of known repositories is a static JSON file read once per process.
Lookups compare GitHub URLs after normalization (lowercase, no trailing
slash, no ``.git`` suffix).
"""

import json
import os
import re
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from cyberbot.exceptions import VendorAPIError
from cyberbot.utils.config import config
from cyberbot.utils.logger import logger
from .client import SonarCloudClient
from .models import ConfiguredRepo

PACKAGED_REPOS_PATH = Path(__file__).resolve().parent.parent / "data" / "sonar-repos.json"
FALLBACK_REPOS_PATH = Path("config") / "sonar-repos.json"

GITHUB_URL_PATTERN = re.compile(r"^https?://(www\.)?github\.com/[\w-]+/[\w.-]+(\.git)?/?$", re.IGNORECASE)
GITHUB_OWNER_REPO_PATTERN = re.compile(r"github\.com/([^/]+)/([^/]+)/?$")

# Populated on first successful load; read-only afterwards.
_cached_repos: Optional[List[ConfiguredRepo]] = None


def _candidate_paths() -> List[Path]:
    primary = Path(config.SONAR_REPOS_PATH) if config.SONAR_REPOS_PATH else PACKAGED_REPOS_PATH
    return [primary, Path(os.getcwd()) / FALLBACK_REPOS_PATH]


def load_configured_repos() -> List[ConfiguredRepo]:
    """Load configured repositories, memoized for the life of the process.

    Returns an empty list (without caching it) when no file is found or the
    file cannot be parsed.
    """
    global _cached_repos
    if _cached_repos is not None:
        return _cached_repos

    paths = _candidate_paths()
    config_path = next((path for path in paths if path.is_file()), None)
    if config_path is None:
        logger.error("Repository config not found", checked_paths=[str(path) for path in paths])
        return []

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        repos = [ConfiguredRepo.model_validate(entry) for entry in data.get("repositories", [])]
    except (OSError, ValueError, AttributeError, PydanticValidationError) as e:
        logger.error("Failed to load repository config", path=str(config_path), error=str(e))
        return []

    _cached_repos = repos
    logger.info("Loaded configured repositories", path=str(config_path), count=len(repos))
    return _cached_repos


def clear_cache() -> None:
    """Forget the loaded repository list."""
    global _cached_repos
    _cached_repos = None


def normalize_github_url(url: str) -> str:
    url = url.lower()
    if url.endswith("/"):
        url = url[:-1]
    if url.endswith(".git"):
        url = url[:-4]
    return url


def is_valid_github_url(url: str) -> bool:
    return bool(GITHUB_URL_PATTERN.match(url))


def parse_github_url(url: str) -> Optional[Tuple[str, str]]:
    """Split a GitHub URL into ``(owner, repo)``."""
    match = GITHUB_OWNER_REPO_PATTERN.search(url)
    if not match:
        return None

    repo = match.group(2)
    if repo.endswith(".git"):
        repo = repo[:-4]
    return match.group(1), repo


def find_repo_by_github_url(url: str) -> Optional[ConfiguredRepo]:
    normalized_url = normalize_github_url(url)
    repos = load_configured_repos()

    for repo in repos:
        if normalize_github_url(repo.github_url) == normalized_url:
            logger.debug("Found repository", display_name=repo.display_name)
            return repo

    logger.info(
        "Repository not found",
        url=url,
        normalized_url=normalized_url,
        available=[normalize_github_url(repo.github_url) for repo in repos],
    )
    return None


def find_repo_by_project_key(project_key: str) -> Optional[ConfiguredRepo]:
    return next((repo for repo in load_configured_repos() if repo.sonar_project_key == project_key), None)


def github_url_from_project_key(project_key: str) -> Optional[str]:
    """Guess the source repository from a SonarCloud key like ``owner_repo``."""
    owner, sep, repo = project_key.partition("_")
    if not sep or not owner or not repo:
        return None
    return f"https://github.com/{owner}/{repo}"


async def load_projects_from_api(client: Optional[SonarCloudClient] = None) -> List[ConfiguredRepo]:
    """List the organization's projects live from SonarCloud.

    Falls back to the static list when no client is available or the search fails.
    """
    if client is None:
        logger.info("SonarCloud credentials not configured, using static repository list")
        return load_configured_repos()

    try:
        components = await client.search_projects()
    except VendorAPIError as e:
        logger.warning("Project search failed, using static repository list", error=e.message, status_code=e.status_code)
        return load_configured_repos()

    repos = []
    for component in components:
        key = component.get("key", "")
        github_url = github_url_from_project_key(key)
        if github_url is None:
            logger.debug("Skipping project without owner_repo key", project_key=key)
            continue

        repos.append(ConfiguredRepo(
            github_url=github_url,
            sonar_project_key=key,
            display_name=component.get("name") or key,
            last_sync=component.get("lastAnalysisDate"),
        ))

    return repos
