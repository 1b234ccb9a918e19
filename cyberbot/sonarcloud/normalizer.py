from typing import Any, Dict, List

from cyberbot.utils.numbers import round_half_up, to_number

RATING_LABELS = {
    "1": "A",
    "2": "B",
    "3": "C",
    "4": "D",
    "5": "E",
}

SEVERITY_BUCKETS = {
    "BLOCKER": "critical",
    "CRITICAL": "critical",
    "MAJOR": "high",
    "MINOR": "medium",
}

ISSUE_BUCKETS = ("critical", "high", "medium", "low")

GOOD_QUALITY_MESSAGE = "Code quality metrics look good! Continue maintaining current standards."


def _measures(measures: Dict[str, Any]) -> List[Dict[str, Any]]:
    return (measures.get("component") or {}).get("measures") or []


def _find_measure(measures: Dict[str, Any], key: str):
    return next((m for m in _measures(measures) if m.get("metric") == key), None)


def rating_to_label(rating: str) -> str:
    """Convert a SonarCloud rating (1-5) to a letter grade (A-E)."""
    return RATING_LABELS.get(rating, rating)


def normalize_metrics(measures: Dict[str, Any]) -> Dict[str, Any]:
    """Summary numbers from a /measures/component response; missing values are 0."""

    def value(key: str):
        metric = _find_measure(measures, key)
        return to_number(metric.get("value")) if metric else 0

    return {
        "bugs": value("bugs"),
        "vulnerabilities": value("vulnerabilities"),
        "securityHotspots": value("security_hotspots"),
        "codeSmells": value("code_smells"),
        "coverage": value("coverage"),
        "duplication": value("duplicated_lines_density"),
        "linesOfCode": value("ncloc"),
        "technicalDebtMinutes": value("sqale_index"),
    }


def normalize_ratings(measures: Dict[str, Any]) -> Dict[str, str]:
    def rating(key: str) -> str:
        metric = _find_measure(measures, key)
        if not metric:
            return "N/A"
        return rating_to_label(str(metric.get("value", "")))

    return {
        "reliability": rating("reliability_rating"),
        "security": rating("security_rating"),
        "maintainability": rating("sqale_rating"),
    }


def categorize_issues(issues: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Bucket issues by severity; anything unrecognized lands in ``low``."""
    categorized: Dict[str, List[Dict[str, Any]]] = {bucket: [] for bucket in ISSUE_BUCKETS}

    for issue in issues:
        bucket = SEVERITY_BUCKETS.get(issue.get("severity"), "low")
        categorized[bucket].append(issue)

    return categorized


def count_issues(issues: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
    return {bucket: len(issues.get(bucket, [])) for bucket in ISSUE_BUCKETS}


def _plural(count, singular: str, plural: str) -> str:
    return plural if count > 1 else singular


def generate_recommendations(summary: Dict[str, Any], issues: Dict[str, List[Dict[str, Any]]]) -> List[str]:
    recommendations = []

    if summary["coverage"] < 80:
        recommendations.append(
            f"Code coverage is {summary['coverage']:.1f}%. Consider increasing test coverage to at least 80%."
        )

    bugs = summary["bugs"]
    if bugs > 0:
        recommendations.append(
            f"Found {bugs} {_plural(bugs, 'bug', 'bugs')}. Prioritize fixing bugs to improve reliability."
        )

    vulnerabilities = summary["vulnerabilities"]
    if vulnerabilities > 0:
        recommendations.append(
            f"Found {vulnerabilities} security "
            f"{_plural(vulnerabilities, 'vulnerability', 'vulnerabilities')}. Address immediately."
        )

    hotspots = summary["securityHotspots"]
    if hotspots > 0:
        recommendations.append(
            f"Review {hotspots} security {_plural(hotspots, 'hotspot', 'hotspots')} for potential vulnerabilities."
        )

    if summary["codeSmells"] > 50:
        recommendations.append(
            f"High number of code smells ({summary['codeSmells']}). Consider refactoring to improve maintainability."
        )

    if summary["duplication"] > 5:
        recommendations.append(
            f"Code duplication is {summary['duplication']:.1f}%. Look for opportunities to reduce duplication."
        )

    debt_hours = summary["technicalDebtMinutes"] / 60
    if debt_hours > 40:
        recommendations.append(
            f"Technical debt is approximately {round_half_up(debt_hours)} hours. "
            "Plan refactoring efforts to reduce debt."
        )

    critical = len(issues.get("critical", []))
    if critical > 0:
        recommendations.append(
            f"Address {critical} critical {_plural(critical, 'issue', 'issues')} as highest priority."
        )

    if not recommendations:
        recommendations.append(GOOD_QUALITY_MESSAGE)

    return recommendations
