"""Streaming Gemini invocation.

``GeminiStreamClient.stream`` performs exactly one generation request and
yields :class:`ResponseFragment` objects as the upstream chunks arrive. It
never retries. ``FallbackStreamClient`` is the opt-in policy on top of it: the
next model is only tried when the previous one failed before producing any
output, so a caller never receives duplicated partial text.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import aclosing
from typing import Any, Protocol

from langchain_google_genai import ChatGoogleGenerativeAI

from .config import Settings, get_settings
from .errors import GenerationFailure, is_quota_exhausted
from .prompts import ComposedPrompt
from .types import ResponseFragment

logger = logging.getLogger(__name__)

# model_id -> chat model exposing ``astream(messages)``
ChatModelFactory = Callable[[str], Any]


class StreamClient(Protocol):
    def stream(
        self, prompt: ComposedPrompt, message_id: str, deadline: float | None = None
    ) -> AsyncIterator[ResponseFragment]: ...


def build_chat_model(settings: Settings, model_id: str) -> ChatGoogleGenerativeAI:
    if not settings.gemini_api_key:
        raise GenerationFailure("GEMINI_API_KEY is not configured", cause="not_configured")
    kwargs: dict[str, Any] = {}
    if settings.gemini_temperature is not None:
        kwargs["temperature"] = settings.gemini_temperature
    return ChatGoogleGenerativeAI(
        model=model_id,
        api_key=settings.gemini_api_key,
        timeout=settings.request_timeout_seconds,
        max_retries=0,
        **kwargs,
    )


def chunk_text(chunk: Any) -> str:
    """Extract text from a message chunk (string or list-of-parts content)."""
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type", "text") == "text":
                parts.append(block.get("text") or "")
        return "".join(parts)
    return ""


class GeminiStreamClient:
    """One streamed generation per ``stream`` call against a single model."""

    def __init__(
        self,
        settings: Settings | None = None,
        model_id: str | None = None,
        model_factory: ChatModelFactory | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.model_id = model_id or self.settings.gemini_model
        self._model_factory = model_factory or (lambda mid: build_chat_model(self.settings, mid))

    async def stream(
        self, prompt: ComposedPrompt, message_id: str, deadline: float | None = None
    ) -> AsyncIterator[ResponseFragment]:
        loop = asyncio.get_running_loop()
        timeout = self.settings.stream_timeout_seconds
        if deadline is None:
            deadline = loop.time() + timeout
        model = self._model_factory(self.model_id)

        started = time.monotonic()
        index = 0
        logger.info("Starting Gemini stream model=%s message_id=%s", self.model_id, message_id)
        try:
            async with aclosing(model.astream(prompt.to_messages())) as upstream:
                while True:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        raise GenerationFailure(f"Generation exceeded {timeout:g}s", cause="timeout")
                    try:
                        chunk = await asyncio.wait_for(anext(upstream), timeout=remaining)
                    except StopAsyncIteration:
                        break
                    except asyncio.TimeoutError:
                        raise GenerationFailure(f"Generation exceeded {timeout:g}s", cause="timeout") from None
                    except GenerationFailure:
                        raise
                    except Exception as exc:
                        cause = "throttled" if is_quota_exhausted(exc) else "upstream"
                        raise GenerationFailure(f"Gemini stream failed: {exc}", cause=cause) from exc

                    text = chunk_text(chunk)
                    if not text:
                        continue
                    yield ResponseFragment(message_id=message_id, index=index, text=text)
                    index += 1
        except asyncio.CancelledError:
            logger.info("Gemini stream cancelled message_id=%s after %d fragments", message_id, index)
            raise
        except GenerationFailure as exc:
            logger.warning(
                "Gemini stream failed model=%s message_id=%s cause=%s after %d fragments: %s",
                self.model_id,
                message_id,
                exc.cause,
                index,
                exc,
            )
            raise

        logger.info(
            "Gemini stream finished model=%s message_id=%s fragments=%d elapsed=%.2fs",
            self.model_id,
            message_id,
            index,
            time.monotonic() - started,
        )


class FallbackStreamClient:
    """Try each client in order until one produces output.

    A failure after the first fragment is propagated unchanged. All attempts
    share one deadline.
    """

    def __init__(self, clients: Sequence[StreamClient], timeout: float) -> None:
        if not clients:
            raise ValueError("FallbackStreamClient needs at least one client")
        self._clients = list(clients)
        self._timeout = timeout

    async def stream(
        self, prompt: ComposedPrompt, message_id: str, deadline: float | None = None
    ) -> AsyncIterator[ResponseFragment]:
        if deadline is None:
            deadline = asyncio.get_running_loop().time() + self._timeout
        last_failure: GenerationFailure | None = None
        for attempt, client in enumerate(self._clients, start=1):
            delivered = False
            try:
                async with aclosing(client.stream(prompt, message_id, deadline)) as fragments:
                    async for fragment in fragments:
                        delivered = True
                        yield fragment
                return
            except GenerationFailure as exc:
                if delivered or exc.cause in ("not_configured", "timeout"):
                    raise
                last_failure = exc
                logger.warning(
                    "Attempt %d/%d failed before first fragment (cause=%s), trying next model",
                    attempt,
                    len(self._clients),
                    exc.cause,
                )
        assert last_failure is not None
        raise last_failure


def build_stream_client(
    settings: Settings | None = None,
    model_factory: ChatModelFactory | None = None,
) -> StreamClient:
    """Client for the configured model, wrapped in fallback only when fallbacks are configured."""
    resolved = settings or get_settings()
    clients = [
        GeminiStreamClient(resolved, model_id=model_id, model_factory=model_factory)
        for model_id in resolved.model_ids
    ]
    if len(clients) == 1:
        return clients[0]
    return FallbackStreamClient(clients, timeout=resolved.stream_timeout_seconds)
