#!/usr/bin/env python3
"""Prune spec document history and recover interrupted archives.

Keeps the newest N snapshots of every phase document, for one workflow or
for all active workflows in a project.

Usage:
    cd ~/projects/my-app
    python scripts/prune_history.py --keep 5
    python scripts/prune_history.py --keep 1 --workflow spec-1718000000000-a1b2c3
    python scripts/prune_history.py --recover --dry-run
"""

import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from specflow.specs.schemas import Phase
from specflow.specs.storage import SpecStorage


def prune(storage: SpecStorage, workflow_ids: list[str], keep: int, dry_run: bool) -> int:
    total = 0
    for workflow_id in workflow_ids:
        for phase in Phase:
            history = storage.list_document_history(workflow_id, phase)
            excess = max(0, len(history) - keep)
            if not excess:
                continue
            if dry_run:
                print(f"  {workflow_id} {phase.value}: would prune {excess} of {len(history)}")
            else:
                removed = storage.prune_document_history(workflow_id, phase, keep)
                print(f"  {workflow_id} {phase.value}: pruned {removed} of {len(history)}")
            total += excess
    return total


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Prune spec document history")
    parser.add_argument(
        "--project-root",
        default=os.environ.get("SPECFLOW_PROJECT_ROOT", os.getcwd()),
        help="Project directory containing .spec-coding/ (default: $SPECFLOW_PROJECT_ROOT or cwd)",
    )
    parser.add_argument("--keep", type=int, default=5, help="Snapshots to keep per phase (default: 5)")
    parser.add_argument("--workflow", help="Only prune this workflow id")
    parser.add_argument("--recover", action="store_true", help="Recover interrupted archives first")
    parser.add_argument("--dry-run", action="store_true", help="Report without deleting")
    args = parser.parse_args()

    if args.keep < 0:
        parser.error("--keep must be >= 0")

    storage = SpecStorage(Path(args.project_root))

    if args.recover and not args.dry_run:
        recovered = storage.recover_interrupted_archives()
        print(f"Recovered {recovered} interrupted archive(s)")

    workflow_ids = [args.workflow] if args.workflow else storage.list_workflows()
    print(f"Pruning {len(workflow_ids)} workflow(s), keeping {args.keep} snapshot(s) per phase")
    total = prune(storage, workflow_ids, args.keep, args.dry_run)
    print(f"\n{'Would prune' if args.dry_run else 'Pruned'} {total} snapshot(s)")
