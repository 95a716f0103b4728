"""Tests for AgentState and ToolResult."""

from appforge.models.agent_state import AgentState, ToolResult


class TestAgentState:
    def test_defaults(self):
        state = AgentState()
        assert state.summary == ""
        assert state.files == {}

    def test_merge_last_write_wins(self):
        state = AgentState()
        state.merge_files({"app/page.tsx": "v1", "lib/a.ts": "a"})
        state.merge_files({"app/page.tsx": "v2"})
        assert state.files == {"app/page.tsx": "v2", "lib/a.ts": "a"}

    def test_states_do_not_share_files(self):
        a, b = AgentState(), AgentState()
        a.merge_files({"x": "1"})
        assert b.files == {}


class TestToolResult:
    def test_ok(self):
        result = ToolResult.ok("done", files={"a": "1"})
        assert not result.is_error
        assert result.files == {"a": "1"}

    def test_err_keeps_partial_files(self):
        result = ToolResult.err("Error: disk full", files={"a": "1"})
        assert result.is_error
        assert result.output == "Error: disk full"
        assert result.files == {"a": "1"}

    def test_from_doc(self):
        result = ToolResult.from_doc({"output": "x", "is_error": True, "files": {"p": "c"}})
        assert result == ToolResult.err("x", files={"p": "c"})
