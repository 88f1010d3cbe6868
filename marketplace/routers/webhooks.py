# marketplace/routers/webhooks.py
import json
import logging
from typing import get_args

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from marketplace.core.config import get_settings
from marketplace.core.errors import InvalidRequestError
from marketplace.core.webhooks import verify_webhook
from marketplace.database import DocumentStore, get_store
from marketplace.repositories.user_repo import UserRepository
from marketplace.schemas.identity import IdentityEvent, IdentityEventType
from marketplace.services.identity_service import IdentityService

logger = logging.getLogger(__name__)

SUPPORTED_EVENTS = set(get_args(IdentityEventType))

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

service = IdentityService(UserRepository())


@router.post("/identity")
async def identity_webhook(
    request: Request,
    db: DocumentStore = Depends(get_store),
):
    """
    Identity provider lifecycle events: user.created, user.updated,
    user.deleted.

    The signature is checked against the raw body before anything is
    parsed or written. Unknown event types are acknowledged and ignored.
    """
    secret = get_settings().IDENTITY_WEBHOOK_SECRET
    if not secret:
        logger.error("IDENTITY_WEBHOOK_SECRET is not set")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook secret not configured",
        )

    body = await request.body()
    verify_webhook(
        body,
        request.headers,
        secret,
        tolerance_seconds=get_settings().WEBHOOK_TOLERANCE_SECONDS,
    )

    try:
        payload = json.loads(body)
    except ValueError:
        raise InvalidRequestError(detail="Webhook body is not JSON")

    event_type = payload.get("type") if isinstance(payload, dict) else None
    if event_type not in SUPPORTED_EVENTS:
        logger.info("Ignoring identity webhook of type %s", event_type)
        return {"ok": True, "ignored": True}

    try:
        event = IdentityEvent.model_validate(payload)
    except ValidationError:
        raise InvalidRequestError(detail=f"Malformed {event_type} event")

    await run_in_threadpool(service.handle_event, db, event)
    return {"ok": True}
