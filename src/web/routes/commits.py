"""Commit review routes: list, decide, process, and batch management."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from shared_types import ActionType, BatchStatus
from web.auth import get_current_user
from web.deps import get_service
from web.models import BatchCreate, BatchUpdate, ProcessRequest, StatusUpdate
from web.user_store import log_event

router = APIRouter(prefix="/api/commits", tags=["commits"])


# --- batches (must precede /{commit_id}) ---


@router.get("/batches")
async def list_batches(
    batch_status: Optional[BatchStatus] = Query(None, alias="status"),
    limit: int = 50,
    user: dict = Depends(get_current_user),
):
    batches = get_service().commits.list_batches(user["id"], status=batch_status, limit=limit)
    return [b.model_dump(mode="json") for b in batches]


@router.post("/batches", status_code=status.HTTP_201_CREATED)
async def create_batch(
    body: BatchCreate,
    user: dict = Depends(get_current_user),
):
    batch = get_service().commits.create_batch(
        user["id"], body.batch_title, body.batch_type, body.session_summary
    )
    return batch.model_dump(mode="json")


@router.get("/batches/{batch_id}")
async def get_batch(batch_id: str, user: dict = Depends(get_current_user)):
    return get_service().commits.get_batch(user["id"], batch_id).model_dump(mode="json")


@router.put("/batches/{batch_id}")
async def update_batch(
    batch_id: str,
    body: BatchUpdate,
    user: dict = Depends(get_current_user),
):
    if body.batch_status is None and body.session_summary is None:
        raise HTTPException(status_code=400, detail="No fields to update")
    batch = get_service().commits.update_batch(
        user["id"], batch_id, status=body.batch_status, session_summary=body.session_summary
    )
    return batch.model_dump(mode="json")


# --- commits ---


@router.get("")
async def list_commits(
    commit_status: Optional[Literal["pending", "approved", "rejected", "committed"]] = Query(
        None, alias="status"
    ),
    batch_id: Optional[str] = None,
    extraction_type: Optional[ActionType] = None,
    limit: int = 100,
    user: dict = Depends(get_current_user),
):
    commits = get_service().commits.list_commits(
        user["id"],
        status=commit_status,
        batch_id=batch_id,
        extraction_type=extraction_type.value if extraction_type else None,
        limit=limit,
    )
    return [c.model_dump(mode="json") for c in commits]


@router.post("/process")
async def process_commits(
    body: ProcessRequest,
    user: dict = Depends(get_current_user),
):
    report = get_service().process_approved(
        user["id"], commit_ids=body.commit_ids, batch_id=body.batch_id
    )
    log_event("commits_processed", user["id"], {"committed": len(report.committed)})
    return report.to_dict()


@router.get("/{commit_id}")
async def get_commit(commit_id: str, user: dict = Depends(get_current_user)):
    return get_service().commits.get_commit(user["id"], commit_id).model_dump(mode="json")


@router.put("/{commit_id}/status")
async def update_commit_status(
    commit_id: str,
    body: StatusUpdate,
    user: dict = Depends(get_current_user),
):
    try:
        commit = get_service().set_status(
            user["id"],
            commit_id,
            body.status,
            review_notes=body.review_notes,
            commit_message=body.commit_message,
            suggested_edits=body.suggested_edits,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid suggested edits: {e.errors()[0]['msg']}")
    log_event("commit_reviewed", user["id"], {"status": body.status})
    return commit.model_dump(mode="json")
