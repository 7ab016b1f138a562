"""
Dodo Payments Webhook Router

Receives Standard Webhooks-signed payment events and reconciles the user's
subscription (plan, word quota, 30-day term) in the profiles table.
Always answers 200 {"received": true} once an event is understood, including
deliberate no-ops; see core.middleware for the error bodies.
"""
import logging

from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse, Response

from core.factory import ServiceFactory
from core.middleware import WEBHOOK_CORS_HEADERS
from services.webhook_processor import WebhookEnvelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks", "dodo"])


@router.options("/dodo")
async def dodo_webhook_preflight():
    return Response(status_code=204, headers=WEBHOOK_CORS_HEADERS)


@router.get("/dodo")
async def dodo_webhook_get():
    return JSONResponse({"ok": True, "provider": "dodo"}, headers=WEBHOOK_CORS_HEADERS)


@router.post("/dodo")
async def dodo_webhook(
    request: Request,
    webhook_id: str | None = Header(default=None, alias="webhook-id"),
    webhook_timestamp: str | None = Header(default=None, alias="webhook-timestamp"),
    webhook_signature: str | None = Header(default=None, alias="webhook-signature"),
):
    raw = await request.body()
    envelope = WebhookEnvelope(
        body=raw,
        webhook_id=webhook_id or "",
        webhook_timestamp=webhook_timestamp or "",
        webhook_signature=webhook_signature or "",
    )

    body = await ServiceFactory.get_webhook_processor().process(envelope)
    return JSONResponse(body, headers=WEBHOOK_CORS_HEADERS)
