import json
import pytest
from unittest.mock import patch

from nexus.domain.errors import AIClientError
from nexus.domain.models.api_models import ChatMessage
from nexus.services import chat_service
from nexus.utils.sse import DONE_EVENT

MESSAGES = [ChatMessage(role="user", content="Hi")]


def _fragments(items, state):
    try:
        for item in items:
            if isinstance(item, Exception):
                raise item
            yield item
    finally:
        state["closed"] = True


@patch('nexus.services.chat_service.ai_client')
def test_generate_chat_response_passes_search_flag(mock_ai_client):
    mock_ai_client.complete_chat.return_value = "Hello!"

    assert chat_service.generate_chat_response(MESSAGES, with_search=True) == "Hello!"
    mock_ai_client.complete_chat.assert_called_once_with(MESSAGES, with_search=True)


@patch('nexus.services.chat_service.ai_client')
def test_stream_frames_and_single_done(mock_ai_client):
    state = {}
    mock_ai_client.stream_chat.return_value = _fragments(["Hel", "lo", "!"], state)

    frames = list(chat_service.open_chat_stream(MESSAGES))

    chunks = [json.loads(f[len("data: "):])["chunk"] for f in frames[:-1]]
    assert "".join(chunks) == "Hello!"
    assert frames[-1] == DONE_EVENT
    assert frames.count(DONE_EVENT) == 1
    assert state["closed"] is True


@patch('nexus.services.chat_service.ai_client')
def test_error_before_first_fragment_raises_on_open(mock_ai_client):
    state = {}
    mock_ai_client.stream_chat.return_value = _fragments([AIClientError("invalid key")], state)

    with pytest.raises(AIClientError):
        chat_service.open_chat_stream(MESSAGES)


@patch('nexus.services.chat_service.ai_client')
def test_mid_stream_error_propagates_without_done(mock_ai_client):
    state = {}
    mock_ai_client.stream_chat.return_value = _fragments(["Partial", AIClientError("connection reset")], state)

    frames = chat_service.open_chat_stream(MESSAGES)
    first = next(frames)

    assert json.loads(first[len("data: "):]) == {"chunk": "Partial"}
    with pytest.raises(AIClientError):
        next(frames)
    assert state["closed"] is True


@patch('nexus.services.chat_service.ai_client')
def test_closing_relay_closes_upstream(mock_ai_client):
    state = {}
    mock_ai_client.stream_chat.return_value = _fragments(["One", "Two", "Three"], state)

    frames = chat_service.open_chat_stream(MESSAGES)
    next(frames)
    frames.close()

    assert state["closed"] is True
