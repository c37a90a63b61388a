"""Shared test helpers (fake chat models and stream utilities)."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, Iterable
from typing import Any

from langchain_core.messages import AIMessageChunk

from analysis_service.types import ResponseFragment


class FakeChatModel:
    """Stand-in for ChatGoogleGenerativeAI that streams scripted chunks.

    ``fail_after`` raises ``error`` once that many chunks were yielded.
    ``delay`` sleeps before every chunk. ``gate`` (an asyncio.Event) blocks the
    stream after the scripted chunks until it is set.
    """

    def __init__(
        self,
        chunks: list[Any],
        fail_after: int | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.chunks = chunks
        self.fail_after = fail_after
        self.error = error or RuntimeError("upstream exploded")
        self.delay = delay
        self.gate = gate
        self.calls: list[list[Any]] = []
        self.yielded = 0
        self.closed = False

    async def astream(self, messages):
        self.calls.append(list(messages))
        try:
            for chunk in self.chunks:
                if self.fail_after is not None and self.yielded >= self.fail_after:
                    raise self.error
                if self.delay:
                    await asyncio.sleep(self.delay)
                self.yielded += 1
                yield AIMessageChunk(content=chunk)
            if self.fail_after is not None and self.yielded >= self.fail_after:
                raise self.error
            if self.gate is not None:
                await self.gate.wait()
        finally:
            self.closed = True


class FakeModelFactory:
    """model_id -> FakeChatModel, recording which models were built."""

    def __init__(self, models: dict[str, FakeChatModel] | None = None, default: FakeChatModel | None = None) -> None:
        self.models = models or {}
        self.default = default
        self.requested: list[str] = []

    def __call__(self, model_id: str) -> FakeChatModel:
        self.requested.append(model_id)
        if model_id in self.models:
            return self.models[model_id]
        if self.default is None:
            raise KeyError(model_id)
        return self.default


def fragments_of(texts: Iterable[str], message_id: str = "msg-1") -> list[ResponseFragment]:
    return [ResponseFragment(message_id=message_id, index=i, text=t) for i, t in enumerate(texts)]


async def aiter_list(items: Iterable[Any]):
    for item in items:
        yield item


async def collect(stream: AsyncIterable[Any]) -> list[Any]:
    return [item async for item in stream]
