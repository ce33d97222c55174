import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.schemas.clerk_event import SUPPORTED_EVENT_TYPES, parse_clerk_event
from app.services.clerk_sync import ClerkSyncService
from app.services.errors import AuthenticationError, ClerkWebhookError
from app.services.webhook_verifier import WebhookVerifier

logger = logging.getLogger(__name__)

router = APIRouter()

SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


@router.post(
    "/clerk",
    status_code=200,
    response_class=Response,
    summary="Receive Clerk webhook",
    responses={
        400: {"description": "Missing svix headers, bad signature or invalid payload"},
        500: {"description": "Webhook secret not configured or store error"},
    },
)
async def receive_clerk_webhook(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Verify a Svix-signed Clerk delivery and mirror it into the local store.

    Every handled event, including no-ops and unknown kinds, is acknowledged
    with an empty 200 so Clerk stops redelivering it.
    """
    if any(not request.headers.get(name) for name in SVIX_HEADERS):
        logger.warning("Clerk webhook rejected: missing svix headers")
        return Response(status_code=400)

    if not settings.webhook_secret_configured:
        logger.error("Clerk webhook rejected: CLERK_WEBHOOK_SECRET is not configured")
        return Response(status_code=500)

    event_id = request.headers["svix-id"]
    body = await request.body()
    verifier = WebhookVerifier(settings.CLERK_WEBHOOK_SECRET, settings.WEBHOOK_TOLERANCE_SECONDS)
    try:
        payload = verifier.verify(body, request.headers)
    except AuthenticationError as exc:
        logger.warning("Clerk webhook %s rejected: %s", event_id, exc)
        return Response(status_code=exc.status_code)

    try:
        event = parse_clerk_event(payload)
    except PydanticValidationError as exc:
        logger.warning(
            "Clerk webhook %s [%s]: invalid payload: %s", event_id, payload.get("type"), exc
        )
        return Response(status_code=400)

    logger.info("Clerk webhook %s received: %s", event_id, event.type)
    try:
        ClerkSyncService(db).handle(event, event_id)
    except ClerkWebhookError as exc:
        return Response(status_code=exc.status_code)

    return Response(status_code=200)


@router.get(
    "/clerk",
    summary="Clerk webhook status",
)
async def clerk_webhook_status(
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Report whether the webhook endpoint is ready to receive deliveries."""
    configured = settings.webhook_secret_configured
    return {
        "status": "ok" if configured else "misconfigured",
        "endpoint": "/api/webhooks/clerk",
        "webhook_secret_configured": configured,
        "message": (
            "Clerk webhook endpoint is ready to receive events"
            if configured
            else "CLERK_WEBHOOK_SECRET is not set; deliveries will be rejected"
        ),
        "supported_events": list(SUPPORTED_EVENT_TYPES),
        "timestamp": datetime.now(UTC).isoformat(),
    }
