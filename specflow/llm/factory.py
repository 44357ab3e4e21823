"""Model backend factory.

Resolves model IDs to the appropriate backend implementation.
"""

import logging
from typing import Union

from specflow.llm.backends import AnthropicBackend, MockBackend

logger = logging.getLogger(__name__)


def get_backend(model_id: str) -> Union[AnthropicBackend, MockBackend]:
    """Get the appropriate backend for a model ID.

    Args:
        model_id: Full model identifier (e.g. 'claude-sonnet-4-6') or
                  'mock' for the offline backend

    Returns:
        Backend instance for the model

    Raises:
        ValueError: If model_id is not recognized
    """
    if model_id.startswith("claude-"):
        return AnthropicBackend(model_id=model_id)
    elif model_id == "mock" or model_id.startswith("mock-"):
        logger.info(f"Using offline mock backend ({model_id})")
        return MockBackend(model_id=model_id)
    else:
        raise ValueError(
            f"Unknown model: '{model_id}'. "
            f"Expected a model ID starting with 'claude-' or 'mock'."
        )
