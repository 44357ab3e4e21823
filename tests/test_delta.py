"""Workflow delta tests."""

from specflow.specs.delta import compare_phase, compare_workflows, normalize_content
from specflow.specs.schemas import DeltaStatus, DocumentMetadata, Phase, SpecDocument, Workflow


def _workflow(workflow_id: str, **contents: str) -> Workflow:
    workflow = Workflow(id=workflow_id, title=workflow_id, description="d")
    for name, content in contents.items():
        phase = Phase[name.upper()]
        workflow.documents[phase] = SpecDocument(
            phase=phase, content=content, metadata=DocumentMetadata(title="t")
        )
    return workflow


class TestCompareWorkflows:

    def test_statuses_in_phase_order(self):
        baseline = _workflow("base", specify="## A\nsame", design="## Architecture\nold")
        target = _workflow(
            "next", specify="## A\r\nsame\n", design="## Architecture\nnew", implement="## Task List"
        )
        delta = compare_workflows(baseline, target)

        assert [d.phase for d in delta.phase_deltas] == [Phase.SPECIFY, Phase.DESIGN, Phase.IMPLEMENT]
        assert delta.status_of(Phase.SPECIFY) == DeltaStatus.UNCHANGED
        assert delta.status_of(Phase.DESIGN) == DeltaStatus.MODIFIED
        assert delta.status_of(Phase.IMPLEMENT) == DeltaStatus.ADDED
        assert delta.has_changes()
        assert delta.count(DeltaStatus.MODIFIED) == 1

    def test_modified_phase_has_unified_diff(self):
        delta = compare_workflows(
            _workflow("base", design="## Architecture\nold"),
            _workflow("next", design="## Architecture\nnew"),
        )
        diff = delta.phase_deltas[0].diff
        assert "--- baseline/design.md" in diff
        assert "+++ target/design.md" in diff
        assert "-old" in diff
        assert "+new" in diff

    def test_removed_phase(self):
        delta = compare_workflows(_workflow("base", implement="x"), _workflow("next"))
        removed = delta.phase_deltas[0]
        assert removed.status == DeltaStatus.REMOVED
        assert removed.baseline_content == "x"
        assert removed.target_content is None
        assert removed.diff == ""

    def test_no_documents_on_either_side(self):
        delta = compare_workflows(_workflow("base"), _workflow("next"))
        assert delta.phase_deltas == []
        assert not delta.has_changes()
        assert delta.status_of(Phase.SPECIFY) is None
        assert "(no documents on either side)" in delta.summary()

    def test_identical_workflows_have_no_changes(self):
        delta = compare_workflows(_workflow("a", specify="x"), _workflow("b", specify="x"))
        assert not delta.has_changes()

    def test_summary_lists_each_phase(self):
        delta = compare_workflows(_workflow("base", specify="a"), _workflow("next", specify="b"))
        summary = delta.summary()
        assert summary.startswith("Delta base -> next")
        assert "Specify: MODIFIED" in summary
        assert "modified=1" in summary


class TestComparePhase:

    def test_both_missing(self):
        assert compare_phase(Phase.DESIGN, None, None) is None

    def test_line_endings_ignored(self):
        assert normalize_content("a\r\nb\r\n\n") == "a\nb"
        assert compare_phase(Phase.DESIGN, "a\r\nb", "a\nb\n").status == DeltaStatus.UNCHANGED
