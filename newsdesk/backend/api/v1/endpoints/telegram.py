"""
Telegram API Endpoints.

Lets an administrator push a raw message through the telegram relay.
Unlike workflow notifications, relay failures are returned to the caller.
"""

from fastapi import APIRouter

from newsdesk.backend.core.dependencies import AdminUser, Notifier, RequestId
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.schemas.base import ApiResponse
from newsdesk.backend.schemas.telegram import TelegramMessage, TelegramSendResult

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/send",
    response_model=ApiResponse[TelegramSendResult],
    summary="Send a telegram message",
)
async def send_message(
    data: TelegramMessage,
    admin: AdminUser,
    notifier: Notifier,
    request_id: RequestId,
) -> ApiResponse[TelegramSendResult]:
    response = await notifier.send_telegram_message(data.message)
    logger.info("Telegram message relayed", extra={"admin_id": admin.id})
    return ApiResponse(data=TelegramSendResult(sent=True, response=response))
