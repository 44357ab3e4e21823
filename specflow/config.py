"""Environment configuration and engine wiring.

    SPECFLOW_PROJECT_ROOT   project directory holding .spec-coding/ (default: cwd)
    SPECFLOW_MODEL          model id; 'mock' selects the offline backend
    SPECFLOW_MAX_TOKENS     output token cap per generation (read by the generator)
    ENABLE_STREAMING        stream model output by default when true
    ANTHROPIC_API_KEY       read by the anthropic SDK
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from specflow.llm import get_backend
from specflow.specs.engine import SpecEngine
from specflow.specs.generator import SpecGenerator
from specflow.specs.storage import SpecStorage

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.environ.get("SPECFLOW_PROJECT_ROOT", os.getcwd())
DEFAULT_MODEL = os.environ.get("SPECFLOW_MODEL", "claude-sonnet-4-6")


def build_engine(
    project_root: Optional[Union[str, Path]] = None,
    model_id: Optional[str] = None,
) -> SpecEngine:
    """Create an engine for a project directory and model id."""
    root = Path(project_root or PROJECT_ROOT)
    model = model_id or DEFAULT_MODEL
    logger.info(f"Spec engine: project_root={root}, model={model}")
    return SpecEngine(SpecStorage(root), SpecGenerator(get_backend(model)))
