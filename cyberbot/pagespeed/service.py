"""
Web performance operations shared by the HTTP routes and the assistant tools.
"""

from typing import Any, Dict, Tuple

from cyberbot.exceptions import PageSpeedError, ValidationError
from cyberbot.utils.logger import logger
from .client import PageSpeedClient, STRATEGIES, is_valid_url

ServiceResult = Tuple[Dict[str, Any], int]


def resolve_strategy(strategy: Any, message: str) -> str:
    """Missing strategies default to mobile; anything else must be a known one."""
    strategy = strategy or "mobile"
    if strategy not in STRATEGIES:
        raise ValidationError(message)
    return strategy


async def analyze_performance(target_url: Any, strategy: Any, client: PageSpeedClient) -> ServiceResult:
    """Compact PageSpeed summary, wrapped as ``{success, data}``."""
    try:
        if not target_url:
            raise ValidationError("targetUrl is required")
        if not is_valid_url(target_url):
            raise ValidationError("Invalid URL format. Please provide a full URL (e.g., https://example.com)")
        strategy = resolve_strategy(strategy, 'strategy must be "mobile" or "desktop"')
    except ValidationError as e:
        return {"success": False, "error": e.message}, 400

    logger.info("Analyzing performance", target_url=target_url, strategy=strategy)

    try:
        result = await client.analyze(target_url, strategy)
    except PageSpeedError as e:
        return {"success": False, "error": e.message, "details": e.details}, e.http_status

    return {"success": True, "data": result}, 200


async def analyze_website(url: Any, strategy: Any, client: PageSpeedClient) -> ServiceResult:
    """Full Lighthouse report, returned unwrapped."""
    try:
        if not url or not isinstance(url, str) or not url.strip():
            raise ValidationError("URL is required")
        strategy = resolve_strategy(strategy, 'Strategy must be either "mobile" or "desktop"')
    except ValidationError as e:
        return {"error": e.message}, 400

    logger.info("Starting Lighthouse analysis", url=url, strategy=strategy, has_api_key=bool(client.api_key))

    try:
        report = await client.analyze_website(url, strategy)
    except PageSpeedError as e:
        logger.error("Lighthouse analysis failed", url=url, status_code=e.status_code, error=e.message)
        return {"error": e.message, "details": e.details}, e.http_status

    logger.info("Lighthouse analysis completed", url=url, strategy=strategy, performance_score=report["scores"]["performance"])
    return report, 200
