"""LLM backend abstraction for spec generation.

Provides a unified interface for calling a model provider with a
consistent response format. The workflow engine never talks to a provider
directly: it receives a backend as an opaque dependency.

Each backend handles provider-specific concerns:
- Client creation and timeout configuration
- Response parsing and token counting
- Streaming with heartbeat monitoring and cancellation checks

Streaming yields StreamChunk objects. The final chunk has done=True and
carries the normalized LLMCallResult, so consumers can tell a completed
stream from a truncated one.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass
class LLMCallResult:
    """Normalized response from any LLM backend."""

    content: str
    model_id: str
    input_tokens: int
    output_tokens: int
    duration_ms: int


@dataclass
class StreamChunk:
    """One incremental piece of a streamed response.

    The terminal chunk has an empty delta, done=True and the final result.
    """

    delta: str
    done: bool = False
    result: Optional[LLMCallResult] = None


# Constants shared across backends
HEARTBEAT_TIMEOUT = 120  # seconds without data before considering stalled
HEARTBEAT_LOG_INTERVAL = 30  # Log every 30s to confirm call is alive


@runtime_checkable
class ModelBackend(Protocol):
    """Protocol for LLM backend implementations."""

    @property
    def model_id(self) -> str: ...

    @property
    def max_output_tokens(self) -> int: ...

    def execute_sync(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        label: str = "",
    ) -> LLMCallResult: ...

    def stream_text(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        label: str = "",
        cancellation_check: Optional[Callable[[], bool]] = None,
    ) -> Iterator[StreamChunk]: ...


class AnthropicBackend:
    """Anthropic Claude backend.

    Requires ANTHROPIC_API_KEY in the environment (read by the SDK).
    """

    def __init__(self, model_id: str = "claude-sonnet-4-6"):
        self._model_id = model_id

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def max_output_tokens(self) -> int:
        if "haiku" in self._model_id:
            return 16_000
        return 64_000

    def _client(self, read_timeout: float):
        import httpx
        from anthropic import Anthropic

        return Anthropic(
            timeout=httpx.Timeout(
                connect=60.0,
                read=read_timeout,
                write=60.0,
                pool=60.0,
            ),
        )

    def _request_kwargs(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: int,
        temperature: Optional[float],
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._model_id,
            "max_tokens": min(max_tokens, self.max_output_tokens),
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_message}],
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        return kwargs

    def execute_sync(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        label: str = "",
    ) -> LLMCallResult:
        """Execute a synchronous (non-streaming) Anthropic call."""
        client = self._client(read_timeout=600.0)
        start_time = time.time()

        kwargs = self._request_kwargs(system_prompt, user_message, max_tokens, temperature)
        logger.info(
            f"[{label}] Anthropic sync: model={self._model_id}, "
            f"max_tokens={kwargs['max_tokens']}, prompt_chars={len(system_prompt) + len(user_message):,}"
        )
        response = client.messages.create(**kwargs)

        duration_ms = int((time.time() - start_time) * 1000)
        raw_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                raw_text += block.text

        if not raw_text.strip():
            raise RuntimeError(f"[{label}] Empty response from {self._model_id}")

        logger.info(
            f"[{label}] Sync completed: {response.usage.input_tokens}+"
            f"{response.usage.output_tokens} tokens, {duration_ms}ms, "
            f"{len(raw_text):,} chars"
        )

        return LLMCallResult(
            content=raw_text,
            model_id=self._model_id,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            duration_ms=duration_ms,
        )

    def stream_text(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        label: str = "",
        cancellation_check: Optional[Callable[[], bool]] = None,
    ) -> Iterator[StreamChunk]:
        """Stream an Anthropic call, yielding text deltas as they arrive.

        Raises InterruptedError when cancellation_check returns True and
        TimeoutError when the stream stalls for HEARTBEAT_TIMEOUT seconds.
        """
        client = self._client(read_timeout=300.0)
        start_time = time.time()
        kwargs = self._request_kwargs(system_prompt, user_message, max_tokens, temperature)

        raw_text = ""
        chunk_count = 0
        last_chunk_time = time.time()
        last_heartbeat_log = time.time()

        with client.messages.stream(**kwargs) as stream:
            for event in stream:
                chunk_count += 1

                now = time.time()
                if now - last_chunk_time > HEARTBEAT_TIMEOUT:
                    raise TimeoutError(
                        f"[{label}] No data for {HEARTBEAT_TIMEOUT}s -- stalled"
                    )
                last_chunk_time = now

                if now - last_heartbeat_log > HEARTBEAT_LOG_INTERVAL:
                    logger.info(
                        f"[{label}] Streaming: {chunk_count} chunks, "
                        f"{int(now - start_time)}s, {len(raw_text):,} chars"
                    )
                    last_heartbeat_log = now

                if cancellation_check and cancellation_check():
                    raise InterruptedError(f"[{label}] Cancelled during streaming")

                if getattr(event, "type", None) == "content_block_delta":
                    delta = event.delta
                    if getattr(delta, "type", None) == "text_delta":
                        raw_text += delta.text
                        yield StreamChunk(delta=delta.text)

            response = stream.get_final_message()

        final_text = "".join(
            block.text for block in response.content if hasattr(block, "text")
        )
        if len(final_text) >= len(raw_text):
            raw_text = final_text

        if not raw_text.strip():
            raise RuntimeError(f"[{label}] Empty response from {self._model_id}")

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"[{label}] Stream completed: {response.usage.input_tokens}+"
            f"{response.usage.output_tokens} tokens, {duration_ms}ms"
        )
        yield StreamChunk(
            delta="",
            done=True,
            result=LLMCallResult(
                content=raw_text,
                model_id=self._model_id,
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                duration_ms=duration_ms,
            ),
        )


class MockBackend:
    """Offline backend that answers with the phase template for the prompt.

    Useful for local development and demos without an API key. The reply
    is picked by looking for the phase's output file name in the prompt.
    """

    CHUNK_SIZE = 64

    def __init__(self, model_id: str = "mock", replies: Optional[dict[str, str]] = None):
        self._model_id = model_id
        self._replies = replies

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def max_output_tokens(self) -> int:
        return 1_000_000

    def _reply_for(self, user_message: str) -> str:
        if self._replies is None:
            from specflow.specs.prompts import PHASE_TEMPLATES
            from specflow.specs.schemas import Phase

            replies = {phase.output_file_name: PHASE_TEMPLATES[phase] for phase in Phase}
        else:
            replies = self._replies
        for marker, reply in replies.items():
            if marker in user_message:
                return reply
        return f"[Mock Reply] {user_message.strip()[:200]}"

    def execute_sync(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        label: str = "",
    ) -> LLMCallResult:
        content = self._reply_for(user_message)
        return LLMCallResult(
            content=content,
            model_id=self._model_id,
            input_tokens=max(1, (len(system_prompt) + len(user_message)) // 4),
            output_tokens=max(1, len(content) // 4),
            duration_ms=0,
        )

    def stream_text(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        temperature: Optional[float] = None,
        label: str = "",
        cancellation_check: Optional[Callable[[], bool]] = None,
    ) -> Iterator[StreamChunk]:
        result = self.execute_sync(system_prompt, user_message, max_tokens=max_tokens, label=label)
        for start in range(0, len(result.content), self.CHUNK_SIZE):
            if cancellation_check and cancellation_check():
                raise InterruptedError(f"[{label}] Cancelled during streaming")
            yield StreamChunk(delta=result.content[start:start + self.CHUNK_SIZE])
        yield StreamChunk(delta="", done=True, result=result)
