import asyncio
from typing import Any, Dict, List, Optional, Sequence

import httpx

from cyberbot.exceptions import (
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    ServerError,
    SonarCloudError,
)
from cyberbot.utils.config import config
from cyberbot.utils.logger import logger
from .models import ConfiguredRepo
from .normalizer import (
    categorize_issues,
    count_issues,
    generate_recommendations,
    normalize_metrics,
    normalize_ratings,
)

METRIC_KEYS = [
    "bugs",
    "vulnerabilities",
    "security_hotspots",
    "code_smells",
    "coverage",
    "duplicated_lines_density",
    "ncloc",
    "sqale_index",
    "reliability_rating",
    "security_rating",
    "sqale_rating",
]

MAX_ISSUES = 500


class SonarCloudClient:
    """Client for the SonarCloud Web API, scoped to one organization."""

    def __init__(
        self,
        token: str,
        organization: str,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token
        self.organization = organization
        self.base_url = (base_url or config.SONARCLOUD_API_BASE).rstrip("/")
        self.session: Optional[httpx.AsyncClient] = http_client
        self._owns_session = http_client is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_session(self) -> httpx.AsyncClient:
        if self.session is None or self.session.is_closed:
            self.session = httpx.AsyncClient(timeout=httpx.Timeout(config.HTTP_TIMEOUT_SECONDS))
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        if self.session and self._owns_session and not self.session.is_closed:
            await self.session.aclose()

    async def _request(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        logger.debug("SonarCloud API request", endpoint=endpoint, params=params)
        session = await self._get_session()

        try:
            response = await session.get(
                f"{self.base_url}{endpoint}",
                params=params,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            logger.error("SonarCloud request failed", endpoint=endpoint, params=params, error=str(e))
            raise SonarCloudError(f"Failed to connect to SonarCloud: {str(e)}", 500)

        if response.status_code < 400:
            try:
                return response.json()
            except ValueError:
                raise SonarCloudError("SonarCloud returned an invalid JSON response", 502, response.text)

        try:
            error_data = response.json()
        except ValueError:
            error_data = {"detail": response.text}

        logger.error(
            "SonarCloud API error",
            endpoint=endpoint,
            params=params,
            status_code=response.status_code,
            error_data=error_data,
        )

        status = response.status_code
        if status == 429:
            raise RateLimitError("Rate limit exceeded. Please try again later.", status, error_data)
        if status == 401:
            raise AuthenticationError("Authentication failed. Check your SonarCloud token.", status, error_data)
        if status == 404:
            raise NotFoundError("Resource not found. Check project key and organization.", status, error_data)
        if status >= 500:
            raise ServerError("SonarCloud server error. Please try again.", status, error_data)

        message = None
        if isinstance(error_data, dict):
            message = error_data.get("message")
            if not message and isinstance(error_data.get("error"), dict):
                message = error_data["error"].get("message")
            errors = error_data.get("errors")
            if not message and isinstance(errors, list) and errors and isinstance(errors[0], dict):
                message = errors[0].get("msg")
        raise SonarCloudError(message or "SonarCloud API request failed", status, error_data)

    async def get_project(self, project_key: str) -> Dict[str, Any]:
        response = await self._request("/projects/search", {
            "projects": project_key,
            "organization": self.organization,
        })

        components = response.get("components") or []
        if not components:
            raise NotFoundError(f"Project not found: {project_key}", 404)
        return components[0]

    async def search_projects(self) -> List[Dict[str, Any]]:
        """All projects in the organization."""
        response = await self._request("/projects/search", {
            "organization": self.organization,
            "ps": str(MAX_ISSUES),
        })
        return response.get("components") or []

    async def get_metrics(self, project_key: str, metric_keys: Sequence[str] = METRIC_KEYS) -> Dict[str, Any]:
        return await self._request("/measures/component", {
            "component": project_key,
            "metricKeys": ",".join(metric_keys),
        })

    async def get_issues(
        self,
        project_key: str,
        severities: Optional[Sequence[str]] = None,
        types: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Up to 500 issues; no pagination beyond the first page."""
        params = {
            "componentKeys": project_key,
            "ps": str(MAX_ISSUES),
        }
        if severities:
            params["severities"] = ",".join(severities)
        if types:
            params["types"] = ",".join(types)

        response = await self._request("/issues/search", params)
        return response.get("issues") or []

    async def get_hotspots(self, project_key: str) -> List[Dict[str, Any]]:
        response = await self._request("/hotspots/search", {"projectKey": project_key})
        return response.get("hotspots") or []

    async def get_full_analysis(
        self,
        project_key: str,
        repo: ConfiguredRepo,
        include_issues: bool = True,
    ) -> Dict[str, Any]:
        """Fetch project, metrics and issues concurrently and normalize them.

        If any of the three requests fails the whole analysis fails and the
        requests still in flight are cancelled.
        """
        tasks = [
            asyncio.ensure_future(self.get_project(project_key)),
            asyncio.ensure_future(self.get_metrics(project_key)),
            asyncio.ensure_future(self.get_issues(project_key)),
        ]
        try:
            project, measures, issues = await asyncio.gather(*tasks)
        except BaseException as e:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if isinstance(e, SonarCloudError) or not isinstance(e, Exception):
                raise
            raise SonarCloudError(f"Failed to fetch analysis: {str(e)}", 500)

        summary = normalize_metrics(measures)
        categorized = categorize_issues(issues)

        return {
            "repository": {
                "githubUrl": repo.github_url,
                "sonarProjectKey": project_key,
                "displayName": repo.display_name,
                "lastAnalysisDate": project.get("lastAnalysisDate") or "N/A",
            },
            "summary": summary,
            "ratings": normalize_ratings(measures),
            "issueCounts": count_issues(categorized),
            "issues": categorized if include_issues else {bucket: [] for bucket in categorized},
            "recommendations": generate_recommendations(summary, categorized),
        }
