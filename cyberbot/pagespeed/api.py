from typing import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cyberbot.utils.config import config
from cyberbot.utils.logger import logger
from .client import PageSpeedClient
from .models import PerformanceAnalyzeRequest, WebsiteAnalyzeRequest
from . import service

router = APIRouter(prefix="/performance", tags=["performance"])


async def get_pagespeed_client() -> AsyncGenerator[PageSpeedClient, None]:
    client = PageSpeedClient(api_key=config.pagespeed_api_key)
    try:
        yield client
    finally:
        await client.close()


@router.post("/analyze")
async def analyze_performance(
    request: PerformanceAnalyzeRequest,
    client: PageSpeedClient = Depends(get_pagespeed_client),
):
    try:
        body, status_code = await service.analyze_performance(request.target_url, request.strategy, client)
    except Exception as e:
        logger.error(f"Unexpected error analyzing performance: {e}", exc_info=True)
        return JSONResponse({"success": False, "error": "Internal server error"}, status_code=500)
    return JSONResponse(body, status_code=status_code)


@router.post("/analyze-website")
async def analyze_website(
    request: WebsiteAnalyzeRequest,
    client: PageSpeedClient = Depends(get_pagespeed_client),
):
    try:
        body, status_code = await service.analyze_website(request.url, request.strategy, client)
    except Exception as e:
        logger.error(f"Unexpected error analyzing website: {e}", exc_info=True)
        return JSONResponse(
            {"error": "Failed to analyze website", "message": str(e) or "Unknown error occurred"},
            status_code=500,
        )
    return JSONResponse(body, status_code=status_code)
