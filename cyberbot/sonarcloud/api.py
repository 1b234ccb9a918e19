from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cyberbot.utils.config import config
from cyberbot.utils.logger import logger
from .client import SonarCloudClient
from .models import AnalyzeRepoRequest, ValidateRepoRequest
from . import service

router = APIRouter(prefix="/code-quality", tags=["code-quality"])


async def get_sonarcloud_client() -> AsyncGenerator[Optional[SonarCloudClient], None]:
    """Yields None when SonarCloud credentials are missing; routes report that themselves."""
    if not config.SONARCLOUD_TOKEN or not config.SONARCLOUD_ORGANIZATION:
        yield None
        return

    client = SonarCloudClient(config.SONARCLOUD_TOKEN, config.SONARCLOUD_ORGANIZATION)
    try:
        yield client
    finally:
        await client.close()


@router.post("/validate")
async def validate_repo(request: ValidateRepoRequest):
    try:
        body, status_code = await service.validate_repository(request.github_url)
    except Exception as e:
        logger.error(f"Error validating repository: {e}", exc_info=True)
        return JSONResponse({"valid": False, "error": "Internal server error"}, status_code=500)
    return JSONResponse(body, status_code=status_code)


@router.post("/analyze")
async def analyze_repo(
    request: AnalyzeRepoRequest,
    client: Optional[SonarCloudClient] = Depends(get_sonarcloud_client),
):
    try:
        body, status_code = await service.get_repository_analysis(
            request.github_url,
            client,
            include_issues=request.include_issues,
        )
    except Exception as e:
        logger.error(f"Error fetching analysis: {e}", exc_info=True)
        return JSONResponse(
            {"error": "Failed to fetch analysis", "message": str(e) or "Unknown error occurred"},
            status_code=500,
        )
    return JSONResponse(body, status_code=status_code)


@router.get("/repos")
async def list_repos(client: Optional[SonarCloudClient] = Depends(get_sonarcloud_client)):
    return await service.list_repositories(client)
