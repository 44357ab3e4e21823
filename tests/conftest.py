"""
Shared pytest fixtures for the specflow test suite.

Provides:
    - ScriptedBackend: ModelBackend that replays canned replies / errors
    - storage: SpecStorage rooted in a per-test tmp directory
    - mock_engine: SpecEngine wired to the offline MockBackend
    - engine_factory: build an engine around any backend
"""

from typing import Callable, Iterator, Optional, Union

import pytest

from specflow.llm.backends import LLMCallResult, MockBackend, StreamChunk
from specflow.specs.engine import SpecEngine
from specflow.specs.generator import SpecGenerator
from specflow.specs.prompts import PHASE_TEMPLATES
from specflow.specs.schemas import GenerationOptions, Phase
from specflow.specs.storage import SpecStorage


class ScriptedBackend:
    """Backend returning queued replies in order; Exception entries are raised."""

    def __init__(self, replies: list[Union[str, Exception]], chunk_size: int = 16):
        self.replies = list(replies)
        self.chunk_size = chunk_size
        self.calls: list[dict] = []

    @property
    def model_id(self) -> str:
        return "scripted"

    @property
    def max_output_tokens(self) -> int:
        return 100_000

    def _next(self, system_prompt: str, user_message: str) -> str:
        self.calls.append({"system_prompt": system_prompt, "user_message": user_message})
        if not self.replies:
            raise RuntimeError("No scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def execute_sync(self, system_prompt, user_message, *, max_tokens, temperature=None, label=""):
        content = self._next(system_prompt, user_message)
        return LLMCallResult(
            content=content, model_id="scripted", input_tokens=1, output_tokens=1, duration_ms=0
        )

    def stream_text(
        self,
        system_prompt,
        user_message,
        *,
        max_tokens,
        temperature=None,
        label="",
        cancellation_check: Optional[Callable[[], bool]] = None,
    ) -> Iterator[StreamChunk]:
        content = self._next(system_prompt, user_message)
        for start in range(0, len(content), self.chunk_size):
            if cancellation_check and cancellation_check():
                raise InterruptedError("cancelled")
            yield StreamChunk(delta=content[start:start + self.chunk_size])
        yield StreamChunk(
            delta="",
            done=True,
            result=LLMCallResult(
                content=content, model_id="scripted", input_tokens=1, output_tokens=1, duration_ms=0
            ),
        )


SYNC = GenerationOptions(stream=False)
STREAM = GenerationOptions(stream=True)


@pytest.fixture
def templates() -> dict[Phase, str]:
    return dict(PHASE_TEMPLATES)


@pytest.fixture
def storage(tmp_path) -> SpecStorage:
    return SpecStorage(tmp_path)


@pytest.fixture
def engine_factory(storage) -> Callable[..., SpecEngine]:
    def build(backend) -> SpecEngine:
        return SpecEngine(storage, SpecGenerator(backend))

    return build


@pytest.fixture
def mock_engine(engine_factory) -> SpecEngine:
    return engine_factory(MockBackend())


def drain(events) -> list:
    """Consume a progress iterator into a list."""
    return list(events)
