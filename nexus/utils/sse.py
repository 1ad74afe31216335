"""
Server-sent event framing for the chat relay.

Every frame is a single ``data: <payload>\\n\\n`` line. Text fragments travel
as ``{"chunk": "..."}`` JSON and the stream ends with ``data: [DONE]``.
"""
import codecs
import json
from typing import Iterable, Iterator, List, Optional

DONE_SENTINEL = "[DONE]"
EVENT_DELIMITER = "\n\n"
DATA_PREFIX = "data: "

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse_event(payload: str) -> str:
    return f"{DATA_PREFIX}{payload}{EVENT_DELIMITER}"


def chunk_event(text: str) -> str:
    return format_sse_event(json.dumps({"chunk": text}, ensure_ascii=False))


DONE_EVENT = format_sse_event(DONE_SENTINEL)


def relay_events(fragments: Iterable[str]) -> Iterator[str]:
    """Turn upstream text fragments into frames, ending with exactly one DONE frame."""
    for text in fragments:
        if text:
            yield chunk_event(text)
    yield DONE_EVENT


class SSEDecoder:
    """
    Incremental decoder for the relay stream.

    Bytes may arrive split anywhere, including inside a UTF-8 sequence or in
    the middle of a frame, so both the text decoder and the frame buffer keep
    state between calls to :meth:`feed`.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""

    def feed(self, data: bytes) -> List[str]:
        """Consume raw bytes and return the payloads of every completed frame."""
        self._buffer += self._decoder.decode(data)
        payloads = []
        while EVENT_DELIMITER in self._buffer:
            frame, self._buffer = self._buffer.split(EVENT_DELIMITER, 1)
            payload = self._payload(frame)
            if payload is not None:
                payloads.append(payload)
        return payloads

    def flush(self) -> List[str]:
        """Return whatever complete frame is left when the stream closes."""
        self._buffer += self._decoder.decode(b"", final=True)
        frame, self._buffer = self._buffer, ""
        payload = self._payload(frame)
        return [payload] if payload is not None else []

    @staticmethod
    def _payload(frame: str) -> Optional[str]:
        data_lines = [
            line[len(DATA_PREFIX):] if line.startswith(DATA_PREFIX) else line[len("data:"):]
            for line in frame.split("\n")
            if line.startswith("data:")
        ]
        if not data_lines:
            return None
        return "\n".join(data_lines)
