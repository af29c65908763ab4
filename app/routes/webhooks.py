from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from app.core.config import Settings, get_settings
from app.dependencies import get_orchestrator
from app.services.sync_orchestrator import AssetSyncOrchestrator, InboundWebhook

router = APIRouter(tags=["webhooks"])


@router.post("/webhooks/snipeit", response_class=PlainTextResponse)
async def snipeit_webhook(
    request: Request,
    orchestrator: AssetSyncOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
):
    """
    Receive a Snipe-IT check-in/check-out webhook and push the change to Jamf.

    Authentication happens inside the pipeline so that rejected requests are
    audited like any other. With WEBHOOK_RESPONSE_MODE=always_ok the status
    is always 200 and the outcome is only in the body, which keeps Snipe-IT
    from retrying or disabling the webhook.
    """
    webhook = InboundWebhook(
        body=await request.body(),
        headers=request.headers,
        query_params=request.query_params,
    )
    result = await orchestrator.handle(webhook)

    return PlainTextResponse(
        content=result.response_text,
        status_code=result.http_status(settings.WEBHOOK_RESPONSE_MODE),
    )
