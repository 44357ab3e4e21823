"""LLM capability used by the spec generator.

The generator only depends on the ModelBackend protocol; concrete
backends (Anthropic, offline mock) are resolved by model id.
"""

from specflow.llm.backends import (
    LLMCallResult,
    StreamChunk,
    ModelBackend,
    AnthropicBackend,
    MockBackend,
)
from specflow.llm.factory import get_backend

__all__ = [
    "LLMCallResult",
    "StreamChunk",
    "ModelBackend",
    "AnthropicBackend",
    "MockBackend",
    "get_backend",
]
