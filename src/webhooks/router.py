import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from src.core.models import EventType, WebhookEvent
from src.webhooks.auth import verify_github_signature
from src.webhooks.dispatcher import WebhookDispatcher, dispatcher

logger = logging.getLogger(__name__)
router = APIRouter()


def get_dispatcher() -> WebhookDispatcher:
    """Returns the shared WebhookDispatcher instance."""
    return dispatcher


def _create_event_from_request(event_name: str | None, payload: dict) -> WebhookEvent:
    """Factory function to create a WebhookEvent from raw request data."""
    if not event_name:
        raise HTTPException(status_code=400, detail="Missing X-GitHub-Event header")

    normalized_event_name = event_name.split(".")[0]
    logger.info(f"Received event: {event_name}, normalized: {normalized_event_name}")

    try:
        event_type = EventType(normalized_event_name)
    except ValueError as e:
        logger.info(f"Received an unsupported event type: {event_name}")
        # Acknowledge receipt so GitHub does not retry the delivery.
        raise HTTPException(status_code=202, detail=f"Event type '{event_name}' is received but not supported.") from e

    return WebhookEvent(event_type=event_type, payload=payload)


@router.post("/github", summary="Endpoint for all GitHub webhooks")
async def github_webhook_endpoint(
    request: Request,
    is_verified: bool = Depends(verify_github_signature),
    dispatcher_instance: WebhookDispatcher = Depends(get_dispatcher),
):
    """
    This endpoint receives all events from a configured GitHub App.

    - It first verifies the request signature to ensure it's from GitHub.
    - It then creates a domain event object from the request payload.
    - Finally, it passes the event to the dispatcher, which enqueues the work.
    """
    payload = await request.json()
    event_name = request.headers.get("X-GitHub-Event")

    try:
        event = _create_event_from_request(event_name, payload)
    except HTTPException as e:
        if e.status_code == 202:
            return {"status": "event received but not supported", "detail": e.detail}
        raise

    if event.event_type == EventType.PUSH:
        logger.info(f"Webhook push received: ref={payload.get('ref', '')}, after={payload.get('after', '')}")

    result = await dispatcher_instance.dispatch(event)
    return {"status": "event dispatched successfully", "result": result}
