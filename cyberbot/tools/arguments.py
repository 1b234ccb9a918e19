"""
Argument normalization for assistant function calls

The assistant sends snake_case parameters; our services take the camelCase
field names used by the HTTP API. The rename happens once, here, before a
tool handler is invoked.
"""

from typing import Any, Dict, Mapping

PARAM_MAPPINGS: Dict[str, str] = {
    "github_url": "githubUrl",
    "include_issues": "includeIssues",
    "target_url": "targetUrl",
}


def normalize_arguments(
    args: Mapping[str, Any],
    mappings: Mapping[str, str] = PARAM_MAPPINGS,
) -> Dict[str, Any]:
    """Return a copy of ``args`` with snake_case keys renamed per ``mappings``.

    Keys that are absent or explicitly ``None`` are left alone, so an already
    camelCased argument is never overwritten by a null.
    """
    normalized = dict(args)

    for snake_case, camel_case in mappings.items():
        if normalized.get(snake_case) is not None:
            normalized[camel_case] = normalized.pop(snake_case)

    return normalized
