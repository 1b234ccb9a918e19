"""
Normalization of PageSpeed Insights (Lighthouse) responses.

Two shapes are produced from the same vendor payload:

* ``normalize_pagespeed_result`` - compact summary used by the assistant tool:
  category scores, Core Web Vitals and the five worst opportunities and
  diagnostics.
* ``normalize_lighthouse_report`` - richer report with per-metric ratings,
  impact/severity classification and free-text recommendations.
"""

from typing import Any, Dict, List, Optional

from cyberbot.utils.numbers import round_half_up

MAX_AUDIT_ITEMS = 5

OPPORTUNITY_AUDITS = [
    "render-blocking-resources",
    "unused-css-rules",
    "unused-javascript",
    "modern-image-formats",
    "offscreen-images",
    "unminified-css",
    "unminified-javascript",
    "efficient-animated-content",
    "duplicated-javascript",
    "legacy-javascript",
]

DIAGNOSTIC_AUDITS = [
    "mainthread-work-breakdown",
    "bootup-time",
    "uses-long-cache-ttl",
    "total-byte-weight",
    "dom-size",
    "critical-request-chains",
    "redirects",
    "uses-responsive-images",
    "server-response-time",
]

IMPACT_ORDER = {"high": 0, "medium": 1, "low": 2}

LCP_THRESHOLD_MS = 2500
TBT_THRESHOLD_MS = 300
CLS_THRESHOLD = 0.1

ALL_GOOD_MESSAGE = "Great job! All scores are good. Keep monitoring and maintaining these standards."


def _lighthouse(response: Dict[str, Any]) -> Dict[str, Any]:
    return response.get("lighthouseResult") or {}


def _score(value: Optional[float]) -> int:
    return round_half_up((value or 0) * 100)


def normalize_scores(categories: Dict[str, Any]) -> Dict[str, int]:
    """Category scores from 0-1 to 0-100."""

    def category(key: str) -> int:
        return _score((categories.get(key) or {}).get("score"))

    return {
        "performance": category("performance"),
        "accessibility": category("accessibility"),
        "bestPractices": category("best-practices"),
        "seo": category("seo"),
    }


def _numeric(audits: Dict[str, Any], audit_id: str) -> float:
    return (audits.get(audit_id) or {}).get("numericValue") or 0


def extract_core_web_vitals(audits: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "lcp": round_half_up(_numeric(audits, "largest-contentful-paint")),
        "fid": round_half_up(_numeric(audits, "max-potential-fid")),
        "cls": round(_numeric(audits, "cumulative-layout-shift"), 3),
        "fcp": round_half_up(_numeric(audits, "first-contentful-paint")),
        "ttfb": round_half_up(_numeric(audits, "server-response-time")),
    }


def _audit_item(audit: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": audit.get("id", ""),
        "title": audit.get("title", ""),
        "description": audit.get("description", ""),
        "score": audit.get("score"),
        "displayValue": audit.get("displayValue", "N/A"),
    }


def _worst_audits(audits: Dict[str, Any], details_type: str) -> List[Dict[str, Any]]:
    """Audits of a detail type scoring below 1, worst first, capped."""
    matching = [
        audit for audit in audits.values()
        if isinstance(audit, dict)
        and (audit.get("details") or {}).get("type") == details_type
        and audit.get("score") is not None
        and audit["score"] < 1
    ]
    matching.sort(key=lambda audit: audit.get("score") or 0)
    return [_audit_item(audit) for audit in matching[:MAX_AUDIT_ITEMS]]


def normalize_pagespeed_result(response: Dict[str, Any], url: str, strategy: str) -> Dict[str, Any]:
    lighthouse = _lighthouse(response)
    categories = lighthouse.get("categories") or {}
    audits = lighthouse.get("audits") or {}

    return {
        "url": response.get("id") or lighthouse.get("finalUrl") or url,
        "fetchTime": response.get("analysisUTCTimestamp") or lighthouse.get("fetchTime") or "N/A",
        "strategy": strategy,
        "scores": normalize_scores(categories),
        "coreWebVitals": extract_core_web_vitals(audits),
        "opportunities": _worst_audits(audits, "opportunity"),
        "diagnostics": _worst_audits(audits, "table"),
    }


def classify_impact(score: float) -> str:
    if score < 0.5:
        return "high"
    if score < 0.9:
        return "medium"
    return "low"


def classify_severity(score: float) -> str:
    if score < 0.5:
        return "critical"
    if score < 0.9:
        return "warning"
    return "info"


def metric_rating(score: Optional[float]) -> str:
    score = score or 0
    if score >= 0.9:
        return "good"
    if score >= 0.5:
        return "needs-improvement"
    return "poor"


def normalize_metric(audit: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not audit:
        return {"value": 0, "unit": "ms", "displayValue": "N/A", "rating": "poor"}

    return {
        "value": audit.get("numericValue") or 0,
        "unit": audit.get("numericUnit") or "ms",
        "displayValue": audit.get("displayValue") or "N/A",
        "rating": metric_rating(audit.get("score")),
    }


def extract_opportunities(audits: Dict[str, Any]) -> List[Dict[str, Any]]:
    opportunities = []

    for audit_id in OPPORTUNITY_AUDITS:
        audit = audits.get(audit_id)
        if not audit or audit.get("score") is None or audit["score"] >= 1:
            continue

        savings_ms = (audit.get("details") or {}).get("overallSavingsMs")
        if savings_ms:
            savings = f"{round_half_up(savings_ms)}ms"
        else:
            savings = audit.get("displayValue") or "Unknown"

        opportunities.append({
            "title": audit.get("title", ""),
            "description": audit.get("description", ""),
            "savings": savings,
            "impact": classify_impact(audit["score"]),
        })

    return sorted(opportunities, key=lambda item: IMPACT_ORDER[item["impact"]])


def extract_diagnostics(audits: Dict[str, Any]) -> List[Dict[str, Any]]:
    diagnostics = []

    for audit_id in DIAGNOSTIC_AUDITS:
        audit = audits.get(audit_id)
        if not audit or audit.get("score") is None or audit["score"] >= 0.9:
            continue

        diagnostics.append({
            "title": audit.get("title", ""),
            "description": audit.get("description", ""),
            "severity": classify_severity(audit["score"]),
        })

    return diagnostics


def _below(audits: Dict[str, Any], audit_id: str, threshold: float) -> bool:
    score = (audits.get(audit_id) or {}).get("score")
    return score is not None and score < threshold


def _numeric_above(audits: Dict[str, Any], audit_id: str, threshold: float) -> bool:
    value = (audits.get(audit_id) or {}).get("numericValue")
    return value is not None and value > threshold


def generate_recommendations(categories: Dict[str, Any], audits: Dict[str, Any]) -> List[str]:
    recommendations = []
    scores = normalize_scores(categories)

    if scores["performance"] < 50:
        recommendations.append(
            "CRITICAL: Performance score is very low. Focus on reducing JavaScript execution time and optimizing images."
        )
    elif scores["performance"] < 90:
        recommendations.append(
            "Performance needs improvement. Consider lazy loading images and deferring non-critical JavaScript."
        )

    if _numeric_above(audits, "largest-contentful-paint", LCP_THRESHOLD_MS):
        recommendations.append(
            "Largest Contentful Paint is slow. Optimize your largest image or text block above the fold."
        )

    if _numeric_above(audits, "total-blocking-time", TBT_THRESHOLD_MS):
        recommendations.append(
            "Total Blocking Time is high. Reduce JavaScript execution time and break up long tasks."
        )

    if _numeric_above(audits, "cumulative-layout-shift", CLS_THRESHOLD):
        recommendations.append(
            "Cumulative Layout Shift detected. Add size attributes to images and avoid inserting content above existing content."
        )

    if scores["accessibility"] < 90:
        recommendations.append(
            "Improve accessibility: Add alt text to images, ensure proper heading hierarchy, and verify color contrast."
        )

    if scores["seo"] < 90:
        recommendations.append(
            "Enhance SEO: Ensure meta descriptions exist, use descriptive link text, and verify mobile-friendliness."
        )

    if scores["bestPractices"] < 90:
        recommendations.append(
            "Follow best practices: Use HTTPS, avoid deprecated APIs, and ensure proper image aspect ratios."
        )

    if _below(audits, "modern-image-formats", 1) or _below(audits, "uses-optimized-images", 1):
        recommendations.append(
            "Optimize images: Convert to WebP/AVIF format and compress images without losing quality."
        )

    if _below(audits, "uses-long-cache-ttl", 0.9):
        recommendations.append(
            "Improve caching: Set proper cache headers for static resources to reduce repeat visitor load times."
        )

    return recommendations or [ALL_GOOD_MESSAGE]


def normalize_lighthouse_report(response: Dict[str, Any], url: str, strategy: str) -> Dict[str, Any]:
    lighthouse = _lighthouse(response)
    categories = lighthouse.get("categories") or {}
    audits = lighthouse.get("audits") or {}

    return {
        "url": url,
        "strategy": strategy,
        "analyzedAt": response.get("analysisUTCTimestamp") or lighthouse.get("fetchTime") or "N/A",
        "scores": normalize_scores(categories),
        "metrics": {
            "firstContentfulPaint": normalize_metric(audits.get("first-contentful-paint")),
            "largestContentfulPaint": normalize_metric(audits.get("largest-contentful-paint")),
            "totalBlockingTime": normalize_metric(audits.get("total-blocking-time")),
            "cumulativeLayoutShift": normalize_metric(audits.get("cumulative-layout-shift")),
            "speedIndex": normalize_metric(audits.get("speed-index")),
        },
        "opportunities": extract_opportunities(audits),
        "diagnostics": extract_diagnostics(audits),
        "recommendations": generate_recommendations(categories, audits),
    }
