"""
Tests for SonarCloud response normalization
"""

import pytest

from cyberbot.sonarcloud.normalizer import (
    GOOD_QUALITY_MESSAGE,
    categorize_issues,
    count_issues,
    generate_recommendations,
    normalize_metrics,
    normalize_ratings,
    rating_to_label,
)


def measures_response(**values):
    return {
        "component": {
            "key": "acme_widgets",
            "measures": [{"metric": key, "value": value} for key, value in values.items()],
        }
    }


def clean_summary(**overrides):
    summary = {
        "bugs": 0,
        "vulnerabilities": 0,
        "securityHotspots": 0,
        "codeSmells": 0,
        "coverage": 95.0,
        "duplication": 1.0,
        "linesOfCode": 1000,
        "technicalDebtMinutes": 0,
    }
    summary.update(overrides)
    return summary


class TestRatings:
    """Test rating conversion"""

    @pytest.mark.parametrize("rating,label", [
        ("1", "A"),
        ("2", "B"),
        ("3", "C"),
        ("4", "D"),
        ("5", "E"),
        ("1.0", "1.0"),
        ("9", "9"),
    ])
    def test_rating_to_label(self, rating, label):
        assert rating_to_label(rating) == label

    def test_normalize_ratings(self):
        measures = measures_response(reliability_rating="1", security_rating="3")
        assert normalize_ratings(measures) == {
            "reliability": "A",
            "security": "C",
            "maintainability": "N/A",
        }


class TestNormalizeMetrics:
    """Test summary metric extraction"""

    def test_parses_values(self):
        measures = measures_response(
            bugs="3",
            vulnerabilities="1",
            security_hotspots="2",
            code_smells="57",
            coverage="72.5",
            duplicated_lines_density="6.3",
            ncloc="15000",
            sqale_index="3000",
        )

        assert normalize_metrics(measures) == {
            "bugs": 3,
            "vulnerabilities": 1,
            "securityHotspots": 2,
            "codeSmells": 57,
            "coverage": 72.5,
            "duplication": 6.3,
            "linesOfCode": 15000,
            "technicalDebtMinutes": 3000,
        }

    def test_missing_and_unparsable_values_are_zero(self):
        summary = normalize_metrics(measures_response(bugs="lots"))
        assert summary["bugs"] == 0
        assert summary["coverage"] == 0

    def test_empty_response(self):
        assert normalize_metrics({})["linesOfCode"] == 0


class TestCategorizeIssues:
    """Test severity bucketing"""

    def test_buckets(self):
        issues = [
            {"key": "1", "severity": "BLOCKER"},
            {"key": "2", "severity": "CRITICAL"},
            {"key": "3", "severity": "MAJOR"},
            {"key": "4", "severity": "MINOR"},
            {"key": "5", "severity": "INFO"},
            {"key": "6"},
        ]

        categorized = categorize_issues(issues)

        assert [issue["key"] for issue in categorized["critical"]] == ["1", "2"]
        assert [issue["key"] for issue in categorized["high"]] == ["3"]
        assert [issue["key"] for issue in categorized["medium"]] == ["4"]
        assert [issue["key"] for issue in categorized["low"]] == ["5", "6"]
        assert count_issues(categorized) == {"critical": 2, "high": 1, "medium": 1, "low": 2}

    def test_empty(self):
        assert categorize_issues([]) == {"critical": [], "high": [], "medium": [], "low": []}


class TestRecommendations:
    """Test code quality recommendations"""

    def test_clean_project(self):
        assert generate_recommendations(clean_summary(), categorize_issues([])) == [GOOD_QUALITY_MESSAGE]

    def test_low_coverage(self):
        recommendations = generate_recommendations(clean_summary(coverage=72), {})
        assert recommendations == [
            "Code coverage is 72.0%. Consider increasing test coverage to at least 80%."
        ]

    def test_singular_and_plural(self):
        one = generate_recommendations(clean_summary(bugs=1, vulnerabilities=1, securityHotspots=1), {})
        many = generate_recommendations(clean_summary(bugs=2, vulnerabilities=3, securityHotspots=4), {})

        assert "Found 1 bug. Prioritize fixing bugs to improve reliability." in one
        assert "Found 1 security vulnerability. Address immediately." in one
        assert "Review 1 security hotspot for potential vulnerabilities." in one
        assert "Found 2 bugs. Prioritize fixing bugs to improve reliability." in many
        assert "Found 3 security vulnerabilities. Address immediately." in many
        assert "Review 4 security hotspots for potential vulnerabilities." in many

    def test_smells_duplication_and_debt(self):
        recommendations = generate_recommendations(
            clean_summary(codeSmells=51, duplication=7.25, technicalDebtMinutes=2430),
            {},
        )

        assert "High number of code smells (51). Consider refactoring to improve maintainability." in recommendations
        assert any(r.startswith("Code duplication is 7.") for r in recommendations)
        assert "Technical debt is approximately 41 hours. Plan refactoring efforts to reduce debt." in recommendations

    def test_thresholds_are_exclusive(self):
        summary = clean_summary(coverage=80, codeSmells=50, duplication=5, technicalDebtMinutes=2400)
        assert generate_recommendations(summary, {}) == [GOOD_QUALITY_MESSAGE]

    def test_critical_issues(self):
        issues = categorize_issues([{"severity": "BLOCKER"}, {"severity": "CRITICAL"}])
        assert generate_recommendations(clean_summary(), issues) == [
            "Address 2 critical issues as highest priority."
        ]

    def test_order(self):
        recommendations = generate_recommendations(
            clean_summary(coverage=10, bugs=1, vulnerabilities=1),
            categorize_issues([{"severity": "BLOCKER"}]),
        )

        assert recommendations[0].startswith("Code coverage")
        assert recommendations[1].startswith("Found 1 bug")
        assert recommendations[2].startswith("Found 1 security")
        assert recommendations[-1] == "Address 1 critical issue as highest priority."
