"""
Headless client for the chat relay.

``ChatSession`` keeps the conversation in memory the way the web widget does
and reads the streamed reply with an incremental SSE decoder. Starting a new
request aborts the previous one, so two replies never interleave in
``messages``.
"""
import json
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional

import requests

from nexus.domain.errors import ChatRelayError
from nexus.domain.models.api_models import ChatMessage
from nexus.utils.sse import DONE_SENTINEL, SSEDecoder
from nx_utils.logger_utils import logger

FALLBACK_REPLY = "Sorry, I encountered an error. Please try again."

_READ_SIZE = 1024


def _utc_now():
    return datetime.now(timezone.utc)


class ChatSession:
    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/api",
        http: Optional[requests.Session] = None,
        timeout: float = 60.0,
    ):
        self.chat_url = f"{base_url.rstrip('/')}{api_prefix}/chat"
        self.http = http or requests.Session()
        self.timeout = timeout
        self.messages: List[ChatMessage] = []
        self._lock = threading.Lock()
        self._cancel: Optional[threading.Event] = None
        self._response: Optional[requests.Response] = None

    def cancel(self) -> None:
        """Abort the in-flight request, if any."""
        with self._lock:
            cancel, response = self._cancel, self._response
            self._cancel, self._response = None, None
        if cancel is not None:
            cancel.set()
        if response is not None:
            response.close()

    def send(
        self,
        text: str,
        with_search: bool = False,
        stream: bool = True,
        on_chunk: Optional[Callable[[str], None]] = None,
        image_url: Optional[str] = None,
    ) -> ChatMessage:
        """
        Send ``text`` with the whole history and return the assistant reply.

        ``on_chunk`` receives the accumulated reply after every streamed
        fragment. On failure the generic fallback reply is appended and
        ChatRelayError is raised. A request cancelled by a newer ``send``
        returns the partial reply without touching ``messages``.
        """
        self.cancel()
        cancel = threading.Event()
        with self._lock:
            self._cancel = cancel

        self.messages.append(ChatMessage(role="user", content=text, timestamp=_utc_now(), image_url=image_url))
        payload = {
            "messages": [m.to_wire() for m in self.messages],
            "withSearch": with_search,
        }
        headers = {"Accept": "text/event-stream" if stream else "application/json"}

        response = None
        try:
            response = self.http.post(self.chat_url, json=payload, headers=headers, stream=stream, timeout=self.timeout)
            with self._lock:
                if self._cancel is cancel:
                    self._response = response
            if response.status_code != 200:
                raise ChatRelayError(f"API error: {response.status_code} {self._error_message(response)}")

            if stream:
                content = self._read_stream(response, cancel, on_chunk)
            else:
                content = response.json()["response"]
        except Exception as e:
            if cancel.is_set():
                logger.info("Chat request cancelled")
                return ChatMessage(role="assistant", content="", timestamp=_utc_now())
            logger.error(f"Error in chat: {e}", exc_info=True)
            self.messages.append(ChatMessage(role="assistant", content=FALLBACK_REPLY, timestamp=_utc_now()))
            if isinstance(e, ChatRelayError):
                raise
            raise ChatRelayError(str(e)) from e
        finally:
            with self._lock:
                if self._cancel is cancel:
                    self._cancel, self._response = None, None
            if response is not None:
                response.close()

        reply = ChatMessage(role="assistant", content=content, timestamp=_utc_now())
        if cancel.is_set():
            return reply
        self.messages.append(reply)
        return reply

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return response.json().get("error", "")
        except (ValueError, AttributeError):
            return ""

    @staticmethod
    def _read_stream(
        response: requests.Response,
        cancel: threading.Event,
        on_chunk: Optional[Callable[[str], None]],
    ) -> str:
        decoder = SSEDecoder()
        accumulated = ""
        finished = False
        for raw in response.iter_content(chunk_size=_READ_SIZE):
            if cancel.is_set():
                break
            for data in decoder.feed(raw):
                if data == DONE_SENTINEL:
                    finished = True
                    break
                try:
                    parsed = json.loads(data)
                except json.JSONDecodeError:
                    logger.warning("Skipping malformed chat frame")
                    continue
                fragment = parsed.get("chunk") if isinstance(parsed, dict) else None
                if fragment:
                    accumulated += fragment
                    if on_chunk is not None:
                        on_chunk(accumulated)
            if finished:
                break

        if not finished and not cancel.is_set():
            for data in decoder.flush():
                if data == DONE_SENTINEL:
                    finished = True
        if not finished and not cancel.is_set():
            raise ChatRelayError("Chat stream ended before completion")
        return accumulated
