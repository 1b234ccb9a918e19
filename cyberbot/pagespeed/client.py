from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import httpx

from cyberbot.exceptions import PageSpeedError
from cyberbot.utils.config import config
from cyberbot.utils.logger import logger
from .normalizer import normalize_lighthouse_report, normalize_pagespeed_result

PAGESPEED_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]
STRATEGIES = ("mobile", "desktop")


def is_valid_url(url: Any) -> bool:
    """Absolute http(s) URL with a host."""
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class PageSpeedClient:
    """Client for Google PageSpeed Insights.

    Works without an API key at a much lower daily quota.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = PAGESPEED_URL,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.session: Optional[httpx.AsyncClient] = http_client
        self._owns_session = http_client is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_session(self) -> httpx.AsyncClient:
        if self.session is None or self.session.is_closed:
            # Lighthouse runs routinely take 20-40 seconds
            self.session = httpx.AsyncClient(timeout=httpx.Timeout(config.HTTP_TIMEOUT_SECONDS))
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        if self.session and self._owns_session and not self.session.is_closed:
            await self.session.aclose()

    def _build_params(self, url: str, strategy: str) -> List[Tuple[str, str]]:
        params = [("url", url), ("strategy", strategy)]
        params.extend(("category", category) for category in CATEGORIES)
        if self.api_key:
            params.append(("key", self.api_key))
        return params

    async def _fetch(self, url: str, strategy: str) -> Dict[str, Any]:
        if not is_valid_url(url):
            raise PageSpeedError(
                "Invalid URL format. Please provide a full URL (e.g., https://example.com)",
                400,
            )
        if strategy not in STRATEGIES:
            raise PageSpeedError('Strategy must be either "mobile" or "desktop"', 400)

        logger.info("PageSpeed request", url=url, strategy=strategy, has_api_key=bool(self.api_key))
        session = await self._get_session()

        try:
            response = await session.get(self.base_url, params=self._build_params(url, strategy))
        except httpx.HTTPError as e:
            logger.error("PageSpeed request failed", url=url, strategy=strategy, error=str(e))
            raise PageSpeedError(f"Failed to analyze website: {str(e)}", 500)

        if response.status_code < 400:
            try:
                return response.json()
            except ValueError:
                raise PageSpeedError("PageSpeed API returned an invalid JSON response", 502, response.text)

        try:
            error_data = response.json()
        except ValueError:
            error_data = {"detail": response.text}

        logger.error(
            "PageSpeed API error",
            url=url,
            strategy=strategy,
            status_code=response.status_code,
            error_data=error_data,
        )

        vendor_message = None
        if isinstance(error_data, dict) and isinstance(error_data.get("error"), dict):
            vendor_message = error_data["error"].get("message")

        status = response.status_code
        if status == 429:
            hint = (
                "Please try again later."
                if self.api_key
                else "Consider adding PAGESPEED_API_KEY for higher rate limits (25k/day vs 25/day)."
            )
            raise PageSpeedError(f"PageSpeed API rate limit exceeded. {hint}", status, error_data)
        if status == 401:
            raise PageSpeedError("Authentication failed. Check your Google API key.", status, error_data)
        if status == 400:
            raise PageSpeedError(vendor_message or "Invalid request. Check the URL format.", status, error_data)
        if status >= 500:
            raise PageSpeedError("PageSpeed API server error. Please try again later.", status, error_data)
        raise PageSpeedError(vendor_message or "PageSpeed API request failed", status, error_data)

    async def analyze(self, url: str, strategy: str = "mobile") -> Dict[str, Any]:
        """Scores, Core Web Vitals and the worst opportunities/diagnostics."""
        data = await self._fetch(url, strategy)
        result = normalize_pagespeed_result(data, url, strategy)

        logger.info(
            "PageSpeed analysis complete",
            url=result["url"],
            performance_score=result["scores"]["performance"],
            opportunities=len(result["opportunities"]),
            diagnostics=len(result["diagnostics"]),
        )
        return result

    async def analyze_website(self, url: str, strategy: str = "mobile") -> Dict[str, Any]:
        """Full Lighthouse report with ratings and recommendations."""
        data = await self._fetch(url, strategy)
        return normalize_lighthouse_report(data, url, strategy)
