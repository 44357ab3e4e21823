"""Spec workflow core.

Components, in dependency order:
- sanitizer: raw model output -> clean markdown
- validator: per-phase required-topic checks
- prompts / generator: LLM call -> sanitized, validated SpecDocument
- storage: workflow directories, history snapshots, archive + audit log
- delta: phase-by-phase comparison of two workflows
- engine: the SPECIFY -> DESIGN -> IMPLEMENT -> COMPLETED state machine
"""

from .engine import SpecEngine
from .generator import SpecGenerator
from .storage import SpecStorage

__all__ = ["SpecEngine", "SpecGenerator", "SpecStorage"]
