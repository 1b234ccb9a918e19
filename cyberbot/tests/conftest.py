"""
Pytest configuration and shared fixtures for Cyber Bot tests
"""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from cyberbot.assistant.client import AssistantClient
from cyberbot.assistant.models import PollingPolicy, Run, ToolCall
from cyberbot.sonarcloud import repos
from cyberbot.tools.registry import ToolRegistry
from cyberbot.utils.config import config


SAMPLE_REPOS = {
    "repositories": [
        {
            "githubUrl": "https://github.com/acme/widgets",
            "sonarProjectKey": "acme_widgets",
            "displayName": "Widgets",
            "branch": "main",
            "configured": True,
            "lastSync": "2024-10-01T08:00:00Z",
        },
        {
            "githubUrl": "https://github.com/acme/gadgets",
            "sonarProjectKey": "acme_gadgets",
            "displayName": "Gadgets",
        },
    ]
}


@pytest.fixture(autouse=True)
def reset_repo_cache():
    """Every test starts with an empty repository cache"""
    repos.clear_cache()
    yield
    repos.clear_cache()


@pytest.fixture
def repos_file(tmp_path, monkeypatch):
    """Point the repository lookup at a temporary config file"""
    path = tmp_path / "sonar-repos.json"
    path.write_text(json.dumps(SAMPLE_REPOS), encoding="utf-8")
    monkeypatch.setattr(config, "SONAR_REPOS_PATH", str(path))
    return path


@pytest.fixture
def fast_policy() -> PollingPolicy:
    """Polling policy that never sleeps"""
    return PollingPolicy(interval_seconds=0, max_attempts=30)


@pytest.fixture
def mock_assistant_client():
    """AssistantClient double with a thread and a run ready to go"""
    client = AsyncMock(spec=AssistantClient)
    client.create_thread.return_value = "thread_new"
    client.add_message.return_value = {"id": "msg_user"}
    client.create_run.return_value = make_run("queued")
    client.list_messages.return_value = [assistant_message("Hello from the assistant")]
    return client


@pytest.fixture
def echo_registry() -> ToolRegistry:
    """Registry with a single tool that echoes its arguments"""
    registry = ToolRegistry()

    async def echo(args: Dict[str, Any]) -> Dict[str, Any]:
        return {"echo": args}

    registry.register("echo", echo)
    return registry


def make_run(status: str, tool_calls: Optional[List[ToolCall]] = None, run_id: str = "run_1", thread_id: str = "thread_new") -> Run:
    return Run(id=run_id, thread_id=thread_id, status=status, tool_calls=tool_calls or [])


def assistant_message(text: str) -> Dict[str, Any]:
    return {
        "id": "msg_assistant",
        "role": "assistant",
        "content": [{"type": "text", "text": {"value": text, "annotations": []}}],
    }


def pagespeed_payload(
    performance: Optional[float] = 0.42,
    accessibility: Optional[float] = 0.9,
    best_practices: Optional[float] = 0.005,
    seo: Optional[float] = 1.0,
    audits: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """A trimmed PageSpeed Insights v5 response"""
    default_audits = {
        "largest-contentful-paint": {"id": "largest-contentful-paint", "title": "Largest Contentful Paint", "score": 0.5, "numericValue": 3200.4, "displayValue": "3.2 s"},
        "max-potential-fid": {"id": "max-potential-fid", "title": "Max Potential First Input Delay", "score": 0.9, "numericValue": 120, "displayValue": "120 ms"},
        "cumulative-layout-shift": {"id": "cumulative-layout-shift", "title": "Cumulative Layout Shift", "score": 0.95, "numericValue": 0.05, "displayValue": "0.05"},
        "first-contentful-paint": {"id": "first-contentful-paint", "title": "First Contentful Paint", "score": 0.8, "numericValue": 1500, "displayValue": "1.5 s"},
        "server-response-time": {"id": "server-response-time", "title": "Initial server response time was short", "score": 1, "numericValue": 310, "displayValue": "Root document took 310 ms"},
        "speed-index": {"id": "speed-index", "title": "Speed Index", "score": 0.7, "numericValue": 4100, "displayValue": "4.1 s"},
        "total-blocking-time": {"id": "total-blocking-time", "title": "Total Blocking Time", "score": 0.6, "numericValue": 450, "displayValue": "450 ms"},
        "interactive": {"id": "interactive", "title": "Time to Interactive", "score": 0.4, "numericValue": 7800, "displayValue": "7.8 s"},
    }

    def category(score):
        return {"score": score}

    return {
        "id": "https://example.com/",
        "lighthouseResult": {
            "finalUrl": "https://example.com/",
            "fetchTime": "2024-10-01T12:00:00.000Z",
            "lighthouseVersion": "12.0.0",
            "categories": {
                "performance": category(performance),
                "accessibility": category(accessibility),
                "best-practices": category(best_practices),
                "seo": category(seo),
            },
            "audits": audits if audits is not None else default_audits,
        },
    }
