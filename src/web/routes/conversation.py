"""Conversation analysis routes: extract, score and stage."""

from fastapi import APIRouter, Depends, status

from insights.aggregator import compose_reply
from web.auth import get_current_user
from web.deps import get_config, get_service
from web.models import AnalyzeRequest, ConfirmRequest
from web.user_store import log_event

router = APIRouter(prefix="/api/conversation", tags=["conversation"])


@router.post("/analyze")
async def analyze_conversation(
    body: AnalyzeRequest,
    user: dict = Depends(get_current_user),
):
    outcome = get_service().analyze(
        user["id"],
        body.text,
        mode=body.mode,
        batch_id=body.batch_id,
        batch_title=body.batch_title,
        batch_type=body.batch_type,
        target_types=body.target_types,
    )
    analysis = outcome.analysis
    log_event(
        "conversation_analyzed",
        user["id"],
        {"mode": body.mode, "actions": len(analysis.actions), "staged": len(outcome.commits)},
    )
    return {
        "analysis": analysis.model_dump(mode="json"),
        "response": compose_reply(analysis, get_config().response.seed),
        "batch": outcome.batch.model_dump(mode="json") if outcome.batch else None,
        "commits": [c.model_dump(mode="json") for c in outcome.commits],
    }


@router.post("/confirm", status_code=status.HTTP_201_CREATED)
async def confirm_conversation(
    body: ConfirmRequest,
    user: dict = Depends(get_current_user),
):
    batch, staged = get_service().confirm(
        user["id"],
        body.text,
        batch_id=body.batch_id,
        batch_title=body.batch_title,
        batch_type=body.batch_type,
        target_types=body.target_types,
    )
    log_event("conversation_confirmed", user["id"], {"staged": len(staged)})
    return {
        "batch": batch.model_dump(mode="json") if batch else None,
        "commits": [c.model_dump(mode="json") for c in staged],
    }
