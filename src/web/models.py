"""Pydantic request/response schemas for the web API."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from shared_types import ActionType, BatchStatus, BatchType

# --- Conversation ---


class AnalyzeRequest(BaseModel):
    text: str = Field(..., max_length=100_000)
    mode: Literal["auto", "manual"] = "auto"
    batch_id: Optional[str] = None
    batch_title: Optional[str] = Field(None, max_length=200)
    batch_type: BatchType = BatchType.LIVE_CONVERSATION
    target_types: Optional[list[ActionType]] = None


class ConfirmRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=100_000)
    batch_id: Optional[str] = None
    batch_title: Optional[str] = Field(None, max_length=200)
    batch_type: BatchType = BatchType.LIVE_CONVERSATION
    target_types: Optional[list[ActionType]] = None


# --- Review ---


class StatusUpdate(BaseModel):
    status: Literal["approved", "rejected"]
    review_notes: Optional[str] = Field(None, max_length=2000)
    commit_message: Optional[str] = Field(None, max_length=500)
    suggested_edits: Optional[dict] = None


class ProcessRequest(BaseModel):
    commit_ids: Optional[list[str]] = None
    batch_id: Optional[str] = None


class BatchCreate(BaseModel):
    batch_title: str = Field(..., min_length=1, max_length=200)
    batch_type: BatchType = BatchType.MANUAL
    session_summary: Optional[str] = Field(None, max_length=5000)


class BatchUpdate(BaseModel):
    batch_status: Optional[BatchStatus] = None
    session_summary: Optional[str] = Field(None, max_length=5000)
