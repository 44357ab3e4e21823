"""specflow - specification-driven workflow engine.

Walks a change request through three phases, each producing a validated
markdown artifact generated by an LLM:
- Specify: requirements.md
- Design: design.md
- Implement: tasks.md

Every artifact is versioned on disk so it can be audited, diffed against
a baseline workflow, and archived once the workflow completes.
"""

__version__ = "0.1.0"
