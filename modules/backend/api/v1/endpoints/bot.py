"""
Bot API Endpoints.

The backend link consumed by the bot gateway: ProcessUpdate routes one
Telegram update envelope, SendMessage accepts a message pushed to a chat.
Both return the standard ApiResponse envelope; InvalidArgumentError maps
to 400 with code VAL_INVALID_ARGUMENT.
"""

from fastapi import APIRouter

from modules.backend.core.dependencies import RequestId, UpdateHandlerDep, UpdateRouterDep
from modules.backend.schemas.base import ApiResponse, ResponseMetadata
from modules.backend.schemas.bot import (
    SendMessageRequest,
    SendMessageResponse,
    UpdateRequest,
    UpdateResponse,
)

router = APIRouter()


@router.post(
    "/process-update",
    response_model=ApiResponse[UpdateResponse],
    summary="Process an update",
    description="Route a message and/or callback query and return the outgoing messages.",
)
async def process_update(
    data: UpdateRequest,
    update_router: UpdateRouterDep,
    request_id: RequestId,
) -> ApiResponse[UpdateResponse]:
    response = await update_router.route(data)
    return ApiResponse(data=response, metadata=ResponseMetadata(request_id=request_id))


@router.post(
    "/send-message",
    response_model=ApiResponse[SendMessageResponse],
    summary="Send a message",
    description="Accept a message pushed to a chat. chat_id must not be 0.",
)
async def send_message(
    data: SendMessageRequest,
    handler: UpdateHandlerDep,
    request_id: RequestId,
) -> ApiResponse[SendMessageResponse]:
    response = await handler.process_incoming_message(data)
    return ApiResponse(data=response, metadata=ResponseMetadata(request_id=request_id))
