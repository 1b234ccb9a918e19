"""
Function definitions and instructions for the hosted assistant.

These are configured on the assistant itself (dashboard or API); the service
only needs them to print the expected configuration and to attach schemas to
the tool registry.
"""

import json
from typing import Any, Dict, List

from .registry import ToolName

VALIDATE_GITHUB_REPO_SCHEMA: Dict[str, Any] = {
    "name": ToolName.VALIDATE_GITHUB_REPO.value,
    "description": (
        "Check whether a GitHub repository URL is configured in SonarCloud for analysis. "
        "Call this first whenever the user provides a GitHub URL."
    ),
    "strict": False,
    "parameters": {
        "type": "object",
        "properties": {
            "github_url": {
                "type": "string",
                "description": "Full GitHub repository URL (e.g., https://github.com/owner/repo)",
            }
        },
        "required": ["github_url"],
    },
}

GET_CODE_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "name": ToolName.GET_CODE_ANALYSIS.value,
    "description": (
        "Retrieve the SonarCloud code quality analysis for a validated repository: bugs, "
        "vulnerabilities, code smells, coverage, duplication, technical debt and recommendations."
    ),
    "strict": False,
    "parameters": {
        "type": "object",
        "properties": {
            "github_url": {
                "type": "string",
                "description": "GitHub repository URL that was previously validated",
            },
            "include_issues": {
                "type": "boolean",
                "description": "Include the categorized issue list (defaults to true)",
            },
        },
        "required": ["github_url"],
    },
}

ANALYZE_WEBSITE_PERFORMANCE_SCHEMA: Dict[str, Any] = {
    "name": ToolName.ANALYZE_WEBSITE_PERFORMANCE.value,
    "description": (
        "Analyze a public website with Google PageSpeed Insights. Returns Lighthouse scores "
        "(performance, accessibility, best practices, SEO), Core Web Vitals (LCP, FID, CLS, FCP, TTFB) "
        "and the top improvement opportunities."
    ),
    "strict": True,
    "parameters": {
        "type": "object",
        "properties": {
            "target_url": {
                "type": "string",
                "description": "Full URL of the website to analyze (e.g., https://example.com)",
            },
            "strategy": {
                "type": "string",
                "enum": ["mobile", "desktop"],
                "description": "Simulate a mobile or a desktop device",
            },
        },
        "required": ["target_url", "strategy"],
        "additionalProperties": False,
    },
}

SONAR_FUNCTIONS: List[Dict[str, Any]] = [VALIDATE_GITHUB_REPO_SCHEMA, GET_CODE_ANALYSIS_SCHEMA]
PAGESPEED_FUNCTIONS: List[Dict[str, Any]] = [ANALYZE_WEBSITE_PERFORMANCE_SCHEMA]
ALL_FUNCTIONS: List[Dict[str, Any]] = SONAR_FUNCTIONS + PAGESPEED_FUNCTIONS

SYSTEM_PROMPT = """You are **Cyber Bot**, a code review and web performance assistant. You report
SonarCloud code quality analysis for GitHub repositories and Google PageSpeed Insights
results for any public website.

## Tools
- `validate_github_repo(github_url)` then `get_code_analysis(github_url)` for code quality
- `analyze_website_performance(target_url, strategy)` for performance; default to "desktop"
  when the user does not name a device

## Flow
- Run the matching analysis immediately when the intent is clear.
- Ask which analysis is wanted only when the user sends a bare URL with no context.
- When both are requested, present code quality first, then performance, then a combined summary.

## Rules
- Always validate a repository before requesting its analysis.
- Never invent metrics. Only use tool results; say "Not reported" when a value is missing.
- Explain abbreviations on first use (LCP, FID, CLS, TTFB, code smells, technical debt).
- Be actionable: rank next steps as [P0], [P1], [P2].
- If a tool returns an error, explain what went wrong and how to fix it (for example, import
  the repository into SonarCloud, or check that the URL is publicly reachable).

## Style
Concise markdown for a tech lead: a one-line health snapshot, a scorecard of the key numbers,
the top risks, prioritized actions and a short list of follow-up options.
"""


def functions_json(functions: List[Dict[str, Any]] = ALL_FUNCTIONS) -> str:
    """JSON for pasting into the assistant's function configuration."""
    return json.dumps(functions, indent=2)
