"""
Tests for assistant run orchestration
"""

import json

import pytest

from cyberbot.assistant.models import PollingPolicy, ToolCall, TURN_COMPLETED, TURN_FAILED, TURN_TIMEOUT
from cyberbot.assistant.orchestrator import (
    FAILED_REPLY,
    FETCH_FAILED_REPLY,
    NO_TEXT_REPLY,
    TIMEOUT_REPLY,
    RunOrchestrator,
    extract_reply,
    strip_citations,
)
from cyberbot.exceptions import AssistantAPIError, ChatTurnError
from cyberbot.tools.registry import ToolRegistry
from .conftest import assistant_message, make_run


class TestStripCitations:
    """Test citation marker removal"""

    def test_removes_markers(self):
        assert strip_citations("Coverage is 80%【4:0†source】.") == "Coverage is 80%."

    def test_removes_multiple_markers(self):
        text = "A【1:2†report.json】 and B【3:4†source】"
        assert strip_citations(text) == "A and B"

    def test_leaves_plain_text(self):
        assert strip_citations("No citations [here]") == "No citations [here]"


class TestExtractReply:
    """Test reply extraction from a thread listing"""

    def test_first_assistant_message_wins(self):
        messages = [
            assistant_message("newest【0:0†source】"),
            assistant_message("older"),
        ]
        assert extract_reply(messages) == "newest"

    def test_skips_user_messages(self):
        messages = [
            {"role": "user", "content": [{"type": "text", "text": {"value": "hi"}}]},
            assistant_message("hello"),
        ]
        assert extract_reply(messages) == "hello"

    def test_no_assistant_message(self):
        assert extract_reply([{"role": "user", "content": []}]) is None

    def test_non_text_content(self):
        messages = [{"role": "assistant", "content": [{"type": "image_file", "image_file": {"file_id": "f"}}]}]
        assert extract_reply(messages) is None


class TestRunOrchestrator:
    """Test a full conversational turn"""

    @pytest.mark.asyncio
    async def test_completed_turn_creates_thread(self, mock_assistant_client, echo_registry, fast_policy):
        """A turn without a thread id creates one and returns the reply"""
        mock_assistant_client.get_run.side_effect = [make_run("in_progress"), make_run("completed")]

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("How is my repo?")

        assert turn.reply == "Hello from the assistant"
        assert turn.thread_id == "thread_new"
        assert turn.status == TURN_COMPLETED
        assert turn.run_id == "run_1"
        mock_assistant_client.create_thread.assert_awaited_once()
        mock_assistant_client.add_message.assert_awaited_once_with("thread_new", "How is my repo?")
        mock_assistant_client.create_run.assert_awaited_once_with("thread_new", "asst_1")
        assert mock_assistant_client.get_run.await_count == 2

    @pytest.mark.asyncio
    async def test_existing_thread_is_reused(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.get_run.return_value = make_run("completed", thread_id="thread_old")

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("again", thread_id="thread_old")

        assert turn.thread_id == "thread_old"
        mock_assistant_client.create_thread.assert_not_awaited()
        mock_assistant_client.add_message.assert_awaited_once_with("thread_old", "again")

    @pytest.mark.asyncio
    async def test_timeout_caps_status_fetches(self, mock_assistant_client, echo_registry, fast_policy):
        """A run that never settles is checked exactly max_attempts times"""
        mock_assistant_client.get_run.side_effect = [make_run("in_progress")] * 31

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("slow")

        assert turn.status == TURN_TIMEOUT
        assert turn.reply == TIMEOUT_REPLY
        assert turn.thread_id == "thread_new"
        assert mock_assistant_client.get_run.await_count == 30
        mock_assistant_client.list_messages.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_attempt_limit(self, mock_assistant_client, echo_registry):
        mock_assistant_client.get_run.return_value = make_run("queued")

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", PollingPolicy(0, 3))
        turn = await orchestrator.run_turn("slow")

        assert turn.status == TURN_TIMEOUT
        assert mock_assistant_client.get_run.await_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["failed", "cancelled", "expired", "incomplete"])
    async def test_failure_statuses(self, mock_assistant_client, echo_registry, fast_policy, status):
        mock_assistant_client.get_run.return_value = make_run(status)

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("hi")

        assert turn.status == TURN_FAILED
        assert turn.reply == FAILED_REPLY
        assert turn.thread_id == "thread_new"
        mock_assistant_client.list_messages.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_fetch_error_fails_turn(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.get_run.side_effect = AssistantAPIError("boom", status_code=500)

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("hi")

        assert turn.status == TURN_FAILED
        assert mock_assistant_client.get_run.await_count == 1

    @pytest.mark.asyncio
    async def test_mixed_known_and_unknown_tools(self, mock_assistant_client, echo_registry, fast_policy):
        """Every call in a batch gets an output, in order, submitted once"""
        tool_calls = [
            ToolCall(id="call_1", name="echo", arguments={"github_url": "https://github.com/acme/widgets"}),
            ToolCall(id="call_2", name="does_not_exist", arguments={}),
        ]
        mock_assistant_client.get_run.side_effect = [
            make_run("requires_action", tool_calls),
            make_run("completed"),
        ]

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("check it")

        assert turn.status == TURN_COMPLETED
        mock_assistant_client.submit_tool_outputs.assert_awaited_once()

        thread_id, run_id, outputs = mock_assistant_client.submit_tool_outputs.await_args.args
        assert (thread_id, run_id) == ("thread_new", "run_1")
        assert [output.tool_call_id for output in outputs] == ["call_1", "call_2"]
        assert json.loads(outputs[0].output) == {"echo": {"githubUrl": "https://github.com/acme/widgets"}}
        assert json.loads(outputs[1].output) == {"error": "Unknown function: does_not_exist"}

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_error_output(self, mock_assistant_client, fast_policy):
        registry = ToolRegistry()

        async def explode(args):
            raise RuntimeError("kaboom")

        registry.register("explode", explode)
        mock_assistant_client.get_run.side_effect = [
            make_run("requires_action", [ToolCall(id="call_1", name="explode", arguments={})]),
            make_run("completed"),
        ]

        orchestrator = RunOrchestrator(mock_assistant_client, registry, "asst_1", fast_policy)
        await orchestrator.run_turn("go")

        outputs = mock_assistant_client.submit_tool_outputs.await_args.args[2]
        assert json.loads(outputs[0].output) == {"error": "kaboom"}

    @pytest.mark.asyncio
    async def test_requires_action_without_calls_keeps_polling(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.get_run.side_effect = [make_run("requires_action"), make_run("completed")]

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("hi")

        assert turn.status == TURN_COMPLETED
        mock_assistant_client.submit_tool_outputs.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_citations_stripped_from_reply(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.get_run.return_value = make_run("completed")
        mock_assistant_client.list_messages.return_value = [assistant_message("Score is 42【7:1†source】")]

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("score?")

        assert turn.reply == "Score is 42"

    @pytest.mark.asyncio
    async def test_no_text_reply(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.get_run.return_value = make_run("completed")
        mock_assistant_client.list_messages.return_value = []

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("hi")

        assert turn.reply == NO_TEXT_REPLY

    @pytest.mark.asyncio
    async def test_message_listing_failure(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.get_run.return_value = make_run("completed")
        mock_assistant_client.list_messages.side_effect = AssistantAPIError("nope", status_code=500)

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        turn = await orchestrator.run_turn("hi")

        assert turn.reply == FETCH_FAILED_REPLY
        assert turn.status == TURN_COMPLETED

    @pytest.mark.asyncio
    async def test_thread_creation_failure(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.create_thread.side_effect = AssistantAPIError("down", status_code=503)

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        with pytest.raises(ChatTurnError) as exc_info:
            await orchestrator.run_turn("hi")

        assert exc_info.value.message == "Failed to create thread"
        assert exc_info.value.thread_id is None

    @pytest.mark.asyncio
    async def test_add_message_failure_keeps_thread_id(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.add_message.side_effect = AssistantAPIError("bad", status_code=400)

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        with pytest.raises(ChatTurnError) as exc_info:
            await orchestrator.run_turn("hi")

        assert exc_info.value.message == "Failed to add message to thread"
        assert exc_info.value.thread_id == "thread_new"
        mock_assistant_client.create_run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_run_creation_failure(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.create_run.side_effect = AssistantAPIError("bad", status_code=404)

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        with pytest.raises(ChatTurnError) as exc_info:
            await orchestrator.run_turn("hi", thread_id="thread_old")

        assert exc_info.value.message == "Failed to create run"
        assert exc_info.value.thread_id == "thread_old"

    @pytest.mark.asyncio
    async def test_submit_failure_ends_turn(self, mock_assistant_client, echo_registry, fast_policy):
        mock_assistant_client.get_run.return_value = make_run(
            "requires_action", [ToolCall(id="call_1", name="echo", arguments={})]
        )
        mock_assistant_client.submit_tool_outputs.side_effect = AssistantAPIError("expired", status_code=400)

        orchestrator = RunOrchestrator(mock_assistant_client, echo_registry, "asst_1", fast_policy)
        with pytest.raises(ChatTurnError) as exc_info:
            await orchestrator.run_turn("hi")

        assert exc_info.value.message == "Failed to submit tool outputs"
        assert exc_info.value.thread_id == "thread_new"
        assert mock_assistant_client.get_run.await_count == 1
