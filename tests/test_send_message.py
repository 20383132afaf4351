"""Unit tests for SendMessageUseCase with mocked and in-memory stores."""

from datetime import datetime
from unittest.mock import MagicMock, call

import pytest

from application.errors import GatewayError, GatewayErrorKind, StorageError, ValidationError
from application.models import ChatMessage
from application.ports.completion_gateway import CompletionConfig, CompletionResult
from application.use_cases.send_message import SendMessageUseCase
from backend.services.history_window import SYSTEM_PROMPT

CONFIG = CompletionConfig(model="llama-3.1-8b-instant")


def _msg(i: int, role: str, content: str) -> ChatMessage:
    return ChatMessage(
        id=i, session_id="sess-123", role=role, content=content, timestamp=datetime(2024, 1, 1)
    )


@pytest.fixture
def mock_session_repo():
    repo = MagicMock()
    repo.get_history.side_effect = [
        [],
        [_msg(1, "user", "Hello")],
    ]
    return repo


@pytest.fixture
def mock_gateway():
    gateway = MagicMock()
    gateway.complete.return_value = CompletionResult(
        text="Hi! How can I help?", total_tokens=150, model=CONFIG.model
    )
    return gateway


@pytest.fixture
def use_case(mock_session_repo, mock_gateway):
    return SendMessageUseCase(
        session_repo=mock_session_repo,
        gateway=mock_gateway,
        config=CONFIG,
    )


@pytest.mark.unit
class TestValidation:
    @pytest.mark.parametrize("text", [None, "", "   ", "\n\t"])
    def test_blank_message_rejected_before_store_access(self, use_case, mock_session_repo, text):
        with pytest.raises(ValidationError):
            use_case.execute("sess-123", text)

        mock_session_repo.get_history.assert_not_called()
        mock_session_repo.append_message.assert_not_called()


@pytest.mark.unit
class TestSuccessfulTurn:
    def test_returns_reply_and_tokens(self, use_case):
        result = use_case.execute("sess-123", "Hello")

        assert result.reply == "Hi! How can I help?"
        assert result.tokens_used == 150
        assert result.session_id == "sess-123"

    def test_first_message_flag_set_for_empty_history(self, use_case, mock_session_repo):
        use_case.execute("sess-123", "Hello")

        assert mock_session_repo.append_message.call_args_list == [
            call("sess-123", "user", "Hello", True),
            call("sess-123", "assistant", "Hi! How can I help?", False),
        ]

    def test_first_message_flag_clear_for_existing_history(self, use_case, mock_session_repo):
        mock_session_repo.get_history.side_effect = [
            [_msg(1, "user", "Earlier"), _msg(2, "assistant", "Reply")],
            [_msg(1, "user", "Earlier"), _msg(2, "assistant", "Reply"), _msg(3, "user", "Again")],
        ]

        use_case.execute("sess-123", "Again")

        first_call = mock_session_repo.append_message.call_args_list[0]
        assert first_call == call("sess-123", "user", "Again", False)

    def test_gateway_receives_windowed_history_and_config(self, use_case, mock_gateway):
        use_case.execute("sess-123", "Hello")

        messages, config = mock_gateway.complete.call_args.args
        assert messages == [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "Hello"},
        ]
        assert config is CONFIG

    def test_history_window_limit_applied(self, mock_session_repo, mock_gateway):
        long_history = [_msg(i, "user", f"m{i}") for i in range(20)]
        mock_session_repo.get_history.side_effect = [long_history[:-1], long_history]
        use_case = SendMessageUseCase(mock_session_repo, mock_gateway, CONFIG, history_window=5)

        use_case.execute("sess-123", "m19")

        messages, _ = mock_gateway.complete.call_args.args
        assert len(messages) == 6
        assert [m["content"] for m in messages[1:]] == ["m15", "m16", "m17", "m18", "m19"]


@pytest.mark.unit
class TestFailures:
    @pytest.mark.parametrize("kind", list(GatewayErrorKind))
    def test_gateway_error_propagates_and_keeps_user_message(
        self, use_case, mock_session_repo, mock_gateway, kind
    ):
        mock_gateway.complete.side_effect = GatewayError("provider down", kind)

        with pytest.raises(GatewayError) as exc_info:
            use_case.execute("sess-123", "Hello")

        assert exc_info.value.kind == kind
        # User turn persisted, assistant turn never written, nothing compensated.
        mock_session_repo.append_message.assert_called_once_with("sess-123", "user", "Hello", True)
        mock_session_repo.delete_session.assert_not_called()

    def test_storage_error_propagates_before_gateway_call(
        self, use_case, mock_session_repo, mock_gateway
    ):
        mock_session_repo.append_message.side_effect = StorageError("append_message")

        with pytest.raises(StorageError):
            use_case.execute("sess-123", "Hello")

        mock_gateway.complete.assert_not_called()


@pytest.mark.integration
class TestWithSqliteStore:
    def test_full_turn_persists_user_then_assistant(self, session_repo, gateway):
        session_id = session_repo.create_session()
        use_case = SendMessageUseCase(session_repo, gateway, CONFIG)

        result = use_case.execute(session_id, "hello")

        history = session_repo.get_history(session_id)
        assert [(m.role, m.content) for m in history] == [
            ("user", "hello"),
            ("assistant", gateway.reply),
        ]
        assert result.tokens_used == gateway.total_tokens
        assert session_repo.get_session(session_id).title == "hello"

    def test_title_only_derived_from_first_message(self, session_repo, gateway):
        session_id = session_repo.create_session()
        use_case = SendMessageUseCase(session_repo, gateway, CONFIG)

        use_case.execute(session_id, "What is the capital of France, exactly?")
        use_case.execute(session_id, "And of Spain?")

        assert session_repo.get_session(session_id).title == "What is the capital of France,..."

    def test_retry_after_gateway_failure_duplicates_user_message(self, session_repo, gateway):
        session_id = session_repo.create_session()
        use_case = SendMessageUseCase(session_repo, gateway, CONFIG)

        gateway.error = GatewayError("Rate limit reached", GatewayErrorKind.RATE_LIMITED)
        with pytest.raises(GatewayError):
            use_case.execute(session_id, "hello")

        gateway.error = None
        use_case.execute(session_id, "hello")

        roles = [m.role for m in session_repo.get_history(session_id)]
        assert roles == ["user", "user", "assistant"]
        # The retried call saw both copies of the user turn.
        messages, _ = gateway.calls[-1]
        assert [m["role"] for m in messages] == ["system", "user", "user"]
