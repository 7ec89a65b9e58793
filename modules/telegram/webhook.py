"""
Webhook Endpoint for the Bot Gateway.

Receives Telegram updates, relays them to the backend over the backend
link and delivers the returned outgoing messages.

Responses:
    200 {"status": "ok"}
    200 {"status": "processed but failed to send response"}
    400 {"error": ...}   body is not a valid update
    403                  secret token mismatch
    500 {"error": ...}   the backend link failed or rejected the update

Delivery failures never produce a non-200 answer: Telegram would redeliver
the update and the backend would process it a second time.
"""

import hmac

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from modules.backend.core.config import get_app_config, get_settings
from modules.backend.core.logging import get_logger
from modules.telegram.schemas import TelegramUpdate
from modules.telegram.services.backend_client import BackendClient
from modules.telegram.services.delivery import DeliveryService

logger = get_logger(__name__)

STATUS_OK = "ok"
STATUS_DELIVERY_FAILED = "processed but failed to send response"


def get_webhook_router(
    backend: BackendClient,
    delivery: DeliveryService,
    webhook_path: str | None = None,
    webhook_secret: str | None = None,
) -> APIRouter:
    """
    Create a FastAPI router for Telegram webhook requests.

    Args:
        backend: Backend link client
        delivery: Outbound delivery service
        webhook_path: Route path. If None, read from gateway.yaml.
        webhook_secret: Expected X-Telegram-Bot-Api-Secret-Token. If None,
            read from config/.env; an empty secret disables the check.

    Returns:
        FastAPI APIRouter with the webhook endpoint
    """
    if webhook_path is None:
        webhook_path = get_app_config().gateway.webhook.path
    if webhook_secret is None:
        webhook_secret = get_settings().telegram_webhook_secret

    router = APIRouter(tags=["telegram"])

    @router.post(webhook_path)
    async def telegram_webhook(request: Request) -> Response:
        """Relay one Telegram update."""
        if webhook_secret:
            secret_header = request.headers.get("X-Telegram-Bot-Api-Secret-Token")
            if not secret_header or not hmac.compare_digest(secret_header, webhook_secret):
                logger.warning(
                    "Invalid webhook secret token",
                    extra={"client_ip": request.client.host if request.client else None},
                )
                return Response(status_code=403)

        body = await request.body()
        try:
            update = TelegramUpdate.model_validate_json(body)
        except ValidationError as e:
            logger.warning("Invalid webhook payload", extra={"error_count": e.error_count()})
            return JSONResponse(status_code=400, content={"error": str(e)})

        logger.debug(
            "Received Telegram update",
            extra={
                "update_id": update.update_id,
                "has_message": update.message is not None,
                "has_callback": update.callback_query is not None,
            },
        )

        try:
            response = await backend.process_update(update.to_update_request())
        except Exception as e:
            logger.error(
                "Error routing Telegram update",
                extra={"update_id": update.update_id, "error": str(e)},
                exc_info=True,
            )
            return JSONResponse(status_code=500, content={"error": str(e)})

        if not response.success:
            logger.warning(
                "Update processed with errors",
                extra={"update_id": update.update_id, "error": response.error},
            )

        if response.success and response.messages:
            result = await delivery.deliver(response.messages)
            if not result.success:
                logger.warning(
                    "Update processed but reply delivery failed",
                    extra={"update_id": update.update_id, "skipped": result.skipped},
                )
                return JSONResponse(status_code=200, content={"status": STATUS_DELIVERY_FAILED})

        return JSONResponse(status_code=200, content={"status": STATUS_OK})

    return router
