from itertools import chain
from typing import Iterator, Optional, Sequence

from .ai_client import ai_client
from nexus.domain.models.api_models import ChatMessage
from nexus.utils.sse import relay_events
from nx_utils.logger_utils import logger


def generate_chat_response(messages: Sequence[ChatMessage], with_search: bool = False) -> str:
    """
    Returns the complete assistant reply for a conversation.
    """
    logger.info(f"Generating chat response for {len(messages)} messages (search={with_search})")
    return ai_client.complete_chat(messages, with_search=with_search)


def open_chat_stream(messages: Sequence[ChatMessage], with_search: bool = False) -> Iterator[str]:
    """
    Starts the upstream generation and returns an iterator of SSE frames.

    The first fragment is pulled before returning, so a provider failure
    surfaces here as an exception while the HTTP status can still change.
    Later failures propagate out of the iterator and abort the transfer.
    """
    logger.info(f"Opening chat stream for {len(messages)} messages (search={with_search})")
    fragments = ai_client.stream_chat(messages, with_search=with_search)
    first = next(fragments, None)
    return _relay(first, fragments)


def _relay(first: Optional[str], fragments: Iterator[str]) -> Iterator[str]:
    head = [first] if first is not None else []
    sent = 0
    try:
        for frame in relay_events(chain(head, fragments)):
            sent += 1
            yield frame
        logger.info(f"Chat stream finished after {sent} frames")
    except GeneratorExit:
        logger.info(f"Client disconnected after {sent} frames; cancelling upstream")
        raise
    except Exception as e:
        logger.error(f"Chat stream aborted after {sent} frames: {e}", exc_info=True)
        raise
    finally:
        close = getattr(fragments, "close", None)
        if close is not None:
            close()
