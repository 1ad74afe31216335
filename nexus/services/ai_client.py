import base64
import re
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import google.generativeai as genai
import openai

from nexus.infrastructure.config import settings
from nexus.domain.errors import AIClientError
from nexus.domain.models.api_models import ChatMessage
from nx_utils.logger_utils import logger
from nx_utils.ai_safety import PDF_EXTRACTION_PROMPT, create_support_system_prompt
from nx_utils.retry_utils import build_retrying

SUPPORTED_PROVIDERS = ("gemini", "openai")

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


def _split_system(messages: Sequence[ChatMessage]) -> Tuple[str, List[ChatMessage]]:
    """Caller-supplied system messages are folded into the system instruction."""
    system = "\n\n".join(m.content for m in messages if m.role == "system" and m.content)
    turns = [m for m in messages if m.role != "system"]
    return system, turns


def _inline_image(image_url: Optional[str]) -> Optional[Dict[str, Any]]:
    if not image_url:
        return None
    match = _DATA_URL_RE.match(image_url)
    if not match:
        logger.warning("Ignoring image that is not a base64 data URL")
        return None
    return {"mime_type": match.group("mime"), "data": base64.b64decode(match.group("data"))}


class AIClient:
    """
    Thin wrapper around the Gemini and OpenAI SDKs.

    Every public method raises ``AIClientError`` when the provider call fails
    and ``ValueError`` when the provider is not configured.
    """

    def __init__(self, provider: Optional[str] = None):
        self.provider = (provider or settings.NX_DEFAULT_PROVIDER).lower()
        self._openai_initialized = False
        self._gemini_initialized = False

    # -------------------------------------------------------------------------
    # Provider init
    # -------------------------------------------------------------------------
    def _ensure_openai_initialized(self) -> None:
        if self._openai_initialized:
            return
        if not settings.OPENAI_API_KEY or "your_openai" in settings.OPENAI_API_KEY:
            raise ValueError("OpenAI API key is not configured.")
        self._openai_initialized = True

    def _ensure_gemini_initialized(self) -> None:
        if self._gemini_initialized:
            return
        if not settings.GEMINI_API_KEY or "your_google" in settings.GEMINI_API_KEY:
            raise ValueError("Gemini API key is not configured.")
        genai.configure(api_key=settings.GEMINI_API_KEY)
        self._gemini_initialized = True

    def _ensure_initialized(self) -> None:
        if self.provider == "gemini":
            self._ensure_gemini_initialized()
        elif self.provider == "openai":
            self._ensure_openai_initialized()
        else:
            raise ValueError(f"Unsupported AI provider: {self.provider}")

    def is_configured(self) -> bool:
        if self.provider == "gemini":
            return bool(settings.GEMINI_API_KEY)
        if self.provider == "openai":
            return bool(settings.OPENAI_API_KEY)
        return False

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    def complete_chat(self, messages: Sequence[ChatMessage], with_search: bool = False) -> str:
        """Return the whole assistant reply for a conversation."""
        self._ensure_initialized()
        for attempt in build_retrying(settings.NX_AI_MAX_ATTEMPTS):
            with attempt:
                if self.provider == "openai":
                    return self._openai_complete(messages, with_search)
                return self._gemini_complete(messages, with_search)

    def stream_chat(self, messages: Sequence[ChatMessage], with_search: bool = False) -> Iterator[str]:
        """
        Yield the assistant reply as text fragments while the provider produces them.

        Closing the returned generator stops consuming the upstream stream.
        """
        self._ensure_initialized()
        if self.provider == "openai":
            return self._openai_stream(messages, with_search)
        return self._gemini_stream(messages, with_search)

    def generate_json(self, prompt: str) -> str:
        """Ask the provider for a JSON document and return it as raw text."""
        self._ensure_initialized()
        for attempt in build_retrying(settings.NX_AI_MAX_ATTEMPTS):
            with attempt:
                if self.provider == "openai":
                    return self._openai_json(prompt)
                return self._gemini_json(prompt)

    def extract_pdf_text(self, data: bytes) -> str:
        """Send PDF bytes to Gemini and return the text it reads out of them."""
        self._ensure_gemini_initialized()
        for attempt in build_retrying(settings.NX_AI_MAX_ATTEMPTS):
            with attempt:
                return self._gemini_extract(data)

    # -------------------------------------------------------------------------
    # Gemini path
    # -------------------------------------------------------------------------
    def _gemini_request(self, messages: Sequence[ChatMessage], with_search: bool):
        extra, turns = _split_system(messages)
        model = genai.GenerativeModel(
            settings.NX_GEMINI_MODEL,
            system_instruction=create_support_system_prompt(with_search, extra),
        )

        contents = []
        for message in turns:
            parts: List[Any] = [message.content] if message.content else []
            image = _inline_image(message.image_url)
            if image:
                parts.append(image)
            if parts:
                contents.append({"role": "model" if message.role == "assistant" else "user", "parts": parts})

        tools = "google_search_retrieval" if with_search else None
        logger.debug(f"Using {settings.NX_GEMINI_MODEL} (turns: {len(contents)}, search: {with_search})")
        return model, contents, tools

    @staticmethod
    def _gemini_text(response) -> str:
        try:
            return response.text or ""
        except ValueError:
            # No text parts (blocked candidate or a search-only chunk)
            candidates = getattr(response, "candidates", None) or []
            if not candidates or not getattr(candidates[0], "content", None):
                return ""
            return "".join(getattr(p, "text", "") or "" for p in candidates[0].content.parts)

    def _gemini_complete(self, messages: Sequence[ChatMessage], with_search: bool) -> str:
        try:
            model, contents, tools = self._gemini_request(messages, with_search)
            response = model.generate_content(
                contents,
                tools=tools,
                request_options={"timeout": settings.NX_AI_TIMEOUT},
            )
            return self._gemini_text(response)
        except Exception as e:
            logger.error(f"Gemini chat call failed: {e}", exc_info=True)
            raise AIClientError(f"The AI service failed to process the request: {e}") from e

    def _gemini_stream(self, messages: Sequence[ChatMessage], with_search: bool) -> Iterator[str]:
        try:
            model, contents, tools = self._gemini_request(messages, with_search)
            response = model.generate_content(
                contents,
                stream=True,
                tools=tools,
                request_options={"timeout": settings.NX_AI_TIMEOUT},
            )
            for chunk in response:
                text = self._gemini_text(chunk)
                if text:
                    yield text
        except GeneratorExit:
            logger.info("Gemini stream closed before completion")
            raise
        except Exception as e:
            logger.error(f"Gemini streaming call failed: {e}", exc_info=True)
            raise AIClientError(f"The AI service failed to process the request: {e}") from e

    def _gemini_json(self, prompt: str) -> str:
        try:
            model = genai.GenerativeModel(settings.NX_GEMINI_MODEL)
            response = model.generate_content(
                prompt,
                generation_config={"response_mime_type": "application/json"},
                request_options={"timeout": settings.NX_AI_TIMEOUT},
            )
            return self._gemini_text(response).strip()
        except Exception as e:
            logger.error(f"Gemini JSON call failed: {e}", exc_info=True)
            raise AIClientError(f"The AI service failed to process the request: {e}") from e

    def _gemini_extract(self, data: bytes) -> str:
        try:
            model = genai.GenerativeModel(settings.NX_GEMINI_MODEL)
            logger.debug(f"Using {settings.NX_GEMINI_MODEL} for PDF extraction (bytes: {len(data)})")
            response = model.generate_content(
                [{"mime_type": "application/pdf", "data": data}, PDF_EXTRACTION_PROMPT],
                request_options={"timeout": settings.NX_AI_TIMEOUT},
            )
            return self._gemini_text(response).strip()
        except Exception as e:
            logger.error(f"Gemini PDF extraction failed: {e}", exc_info=True)
            raise AIClientError(f"Failed to extract text from PDF: {e}") from e

    # -------------------------------------------------------------------------
    # OpenAI path
    # -------------------------------------------------------------------------
    def _openai_client(self) -> openai.OpenAI:
        client_args: Dict[str, Any] = {
            "api_key": settings.OPENAI_API_KEY,
            "timeout": settings.NX_AI_TIMEOUT,
        }
        if settings.NX_BASE_URL:
            client_args["base_url"] = settings.NX_BASE_URL
        return openai.OpenAI(**client_args)

    @staticmethod
    def _openai_messages(messages: Sequence[ChatMessage], with_search: bool) -> List[Dict[str, Any]]:
        extra, turns = _split_system(messages)
        payload: List[Dict[str, Any]] = [
            {"role": "system", "content": create_support_system_prompt(with_search, extra)}
        ]
        for message in turns:
            if message.image_url and message.role == "user":
                content: Any = [
                    {"type": "text", "text": message.content},
                    {"type": "image_url", "image_url": {"url": message.image_url}},
                ]
            else:
                content = message.content
            payload.append({"role": message.role, "content": content})
        return payload

    def _openai_complete(self, messages: Sequence[ChatMessage], with_search: bool) -> str:
        if with_search:
            logger.warning(f"{settings.NX_OPENAI_MODEL} has no web search; answering without it")
        try:
            response = self._openai_client().chat.completions.create(
                model=settings.NX_OPENAI_MODEL,
                messages=self._openai_messages(messages, with_search=False),
                temperature=0.7,
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"{settings.NX_OPENAI_MODEL} call failed: {e}", exc_info=True)
            raise AIClientError(f"The AI service failed to process the request: {e}") from e

    def _openai_stream(self, messages: Sequence[ChatMessage], with_search: bool) -> Iterator[str]:
        if with_search:
            logger.warning(f"{settings.NX_OPENAI_MODEL} has no web search; answering without it")
        stream = None
        try:
            stream = self._openai_client().chat.completions.create(
                model=settings.NX_OPENAI_MODEL,
                messages=self._openai_messages(messages, with_search=False),
                temperature=0.7,
                stream=True,
            )
            for chunk in stream:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        except Exception as e:
            logger.error(f"{settings.NX_OPENAI_MODEL} streaming call failed: {e}", exc_info=True)
            raise AIClientError(f"The AI service failed to process the request: {e}") from e
        finally:
            # Releases the HTTP connection so the upstream generation stops
            if stream is not None:
                stream.close()

    def _openai_json(self, prompt: str) -> str:
        if "json" not in prompt.lower():
            prompt = prompt + "\nReturn your response as valid JSON."
        try:
            response = self._openai_client().chat.completions.create(
                model=settings.NX_OPENAI_MODEL,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
                temperature=0.4,
            )
            return (response.choices[0].message.content or "").strip()
        except Exception as e:
            logger.error(f"{settings.NX_OPENAI_MODEL} JSON call failed: {e}", exc_info=True)
            raise AIClientError(f"The AI service failed to process the request: {e}") from e


ai_client = AIClient(provider=settings.NX_DEFAULT_PROVIDER)
