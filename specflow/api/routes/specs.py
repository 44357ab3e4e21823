"""Spec workflow API routes.

Endpoints:
    POST   /v1/specs                                          Create workflow
    GET    /v1/specs                                          List workflows
    GET    /v1/specs/delta?baseline=..&target=..              Compare two workflows
    GET    /v1/specs/{workflow_id}                            Load workflow
    PATCH  /v1/specs/{workflow_id}                            Update title/description
    DELETE /v1/specs/{workflow_id}                            Delete workflow
    POST   /v1/specs/{workflow_id}/generate                   Generate current phase (NDJSON stream)
    POST   /v1/specs/{workflow_id}/clarify                    Draft clarification questions
    POST   /v1/specs/{workflow_id}/proceed                    Advance to next phase
    POST   /v1/specs/{workflow_id}/back                       Return to previous phase
    POST   /v1/specs/{workflow_id}/complete                   Mark completed
    POST   /v1/specs/{workflow_id}/archive                    Archive a completed workflow
    PUT    /v1/specs/{workflow_id}/documents/{phase}          Edit document content
    GET    /v1/specs/{workflow_id}/documents/{phase}/history  List snapshots
    POST   /v1/specs/{workflow_id}/documents/{phase}/history/prune
    GET    /v1/specs/{workflow_id}/documents/{phase}/history/{snapshot_id}
    DELETE /v1/specs/{workflow_id}/documents/{phase}/history/{snapshot_id}
"""

import logging
from typing import Iterator, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from specflow.specs.engine import SpecEngine
from specflow.specs.schemas import (
    ArchiveRecord,
    ChangeIntent,
    ClarificationDraft,
    GenerationOptions,
    HistorySnapshot,
    OperationResult,
    Phase,
    SpecDelta,
    SpecDocument,
    Workflow,
    WorkflowSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/specs", tags=["specs"])

_engine: Optional[SpecEngine] = None


def init_engine(engine: SpecEngine) -> None:
    global _engine
    _engine = engine


def _get_engine() -> SpecEngine:
    if _engine is None:
        raise HTTPException(status_code=503, detail="Spec engine not initialized")
    return _engine


ERROR_STATUS = {
    "WorkflowNotFoundError": 404,
    "DocumentNotFoundError": 404,
    "SnapshotNotFoundError": 404,
    "TransitionGuardError": 409,
    "ArchiveRejectedError": 409,
    "DocumentRevisionConflictError": 409,
    "InvalidWorkflowInputError": 400,
    "GenerationError": 502,
}


def _unwrap(result: OperationResult):
    """Return the value of a successful result or raise the matching HTTPException."""
    if result.success:
        return result.value
    status = ERROR_STATUS.get(result.error_type or "", 500)
    raise HTTPException(status_code=status, detail=result.error)


# --- Request models ---


class CreateWorkflowRequest(BaseModel):
    title: str
    description: str
    change_intent: Optional[ChangeIntent] = None
    baseline_workflow_id: Optional[str] = None


class UpdateWorkflowRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class GenerateRequest(BaseModel):
    user_input: str = ""
    options: Optional[GenerationOptions] = None


class EditDocumentRequest(BaseModel):
    content: str
    expected_revision: Optional[str] = Field(
        default=None, description="metadata.updated_at of the document the edit is based on"
    )


class PruneRequest(BaseModel):
    keep_latest: int = Field(ge=0)


# --- Workflow endpoints ---


@router.post("", response_model=Workflow, status_code=201)
def create_workflow(request: CreateWorkflowRequest) -> Workflow:
    """Create a workflow at the Specify phase."""
    return _unwrap(
        _get_engine().create_workflow(
            request.title,
            request.description,
            change_intent=request.change_intent,
            baseline_workflow_id=request.baseline_workflow_id,
        )
    )


@router.get("", response_model=list[WorkflowSummary])
def list_workflows() -> list[WorkflowSummary]:
    return _unwrap(_get_engine().list_workflows())


@router.get("/delta", response_model=SpecDelta)
def compare_workflows(
    baseline: str = Query(..., description="Baseline workflow id"),
    target: str = Query(..., description="Target workflow id"),
) -> SpecDelta:
    """Phase-by-phase delta between two active workflows."""
    return _unwrap(_get_engine().compare_workflows(baseline, target))


@router.get("/{workflow_id}", response_model=Workflow)
def get_workflow(workflow_id: str) -> Workflow:
    return _unwrap(_get_engine().load_workflow(workflow_id))


@router.patch("/{workflow_id}", response_model=Workflow)
def update_workflow(workflow_id: str, request: UpdateWorkflowRequest) -> Workflow:
    return _unwrap(
        _get_engine().update_workflow_metadata(
            workflow_id, title=request.title, description=request.description
        )
    )


@router.delete("/{workflow_id}")
def delete_workflow(workflow_id: str):
    _unwrap(_get_engine().delete_workflow(workflow_id))
    return {"deleted": workflow_id}


# --- Generation ---


@router.post("/{workflow_id}/generate")
def generate_current_phase(workflow_id: str, request: GenerateRequest):
    """Generate the current phase's document.

    Streams newline-delimited JSON progress events. The last event is one
    of completed, validation_failed, failed or cancelled. Disconnecting
    closes the stream and nothing is saved.
    """
    engine = _get_engine()

    def event_stream() -> Iterator[str]:
        for event in engine.generate_current_phase(
            workflow_id, request.user_input, options=request.options
        ):
            yield event.model_dump_json() + "\n"

    return StreamingResponse(event_stream(), media_type="application/x-ndjson")


@router.post("/{workflow_id}/clarify", response_model=ClarificationDraft)
def clarify_current_phase(workflow_id: str, request: GenerateRequest) -> ClarificationDraft:
    return _unwrap(
        _get_engine().draft_current_phase_clarification(
            workflow_id, request.user_input, options=request.options
        )
    )


# --- Transitions ---


@router.post("/{workflow_id}/proceed", response_model=Workflow)
def proceed_to_next_phase(workflow_id: str) -> Workflow:
    return _unwrap(_get_engine().proceed_to_next_phase(workflow_id))


@router.post("/{workflow_id}/back", response_model=Workflow)
def go_back_to_previous_phase(workflow_id: str) -> Workflow:
    return _unwrap(_get_engine().go_back_to_previous_phase(workflow_id))


@router.post("/{workflow_id}/complete", response_model=Workflow)
def complete_workflow(workflow_id: str) -> Workflow:
    return _unwrap(_get_engine().complete_workflow(workflow_id))


@router.post("/{workflow_id}/archive", response_model=ArchiveRecord)
def archive_workflow(workflow_id: str) -> ArchiveRecord:
    """Archive a completed workflow. Other statuses are rejected with 409."""
    return _unwrap(_get_engine().archive_workflow(workflow_id))


# --- Documents & history ---


@router.put("/{workflow_id}/documents/{phase}", response_model=SpecDocument)
def edit_document(workflow_id: str, phase: Phase, request: EditDocumentRequest) -> SpecDocument:
    return _unwrap(
        _get_engine().update_document_content(
            workflow_id, phase, request.content, expected_revision=request.expected_revision
        )
    )


@router.get("/{workflow_id}/documents/{phase}/history", response_model=list[HistorySnapshot])
def list_document_history(workflow_id: str, phase: Phase) -> list[HistorySnapshot]:
    return _unwrap(_get_engine().list_document_history(workflow_id, phase))


@router.post("/{workflow_id}/documents/{phase}/history/prune")
def prune_document_history(workflow_id: str, phase: Phase, request: PruneRequest):
    pruned = _unwrap(
        _get_engine().prune_document_history(workflow_id, phase, request.keep_latest)
    )
    return {"pruned": pruned, "keep_latest": request.keep_latest}


@router.get(
    "/{workflow_id}/documents/{phase}/history/{snapshot_id}",
    response_model=SpecDocument,
)
def get_document_snapshot(workflow_id: str, phase: Phase, snapshot_id: str) -> SpecDocument:
    return _unwrap(_get_engine().load_document_snapshot(workflow_id, phase, snapshot_id))


@router.delete("/{workflow_id}/documents/{phase}/history/{snapshot_id}")
def delete_document_snapshot(workflow_id: str, phase: Phase, snapshot_id: str):
    _unwrap(_get_engine().delete_document_snapshot(workflow_id, phase, snapshot_id))
    return {"deleted": snapshot_id}
