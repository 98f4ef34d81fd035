"""
Notification Service.

Best-effort notifications for the article workflow and comment threads.
Email goes through the email microservice, moderator notices through the
telegram relay. A failed notification is logged and reported in the
returned NotificationResult; it never interrupts the calling operation.

Usage:
    service = get_notification_service()
    result = await service.article_approved(article, author)
    if not result.success:
        ...
"""

from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Any

from newsdesk.backend.clients.email import EmailClient, get_email_client
from newsdesk.backend.clients.telegram import TelegramClient, get_telegram_client
from newsdesk.backend.core.config import get_app_config
from newsdesk.backend.core.config_schema import FeaturesSchema, NotificationsSchema
from newsdesk.backend.core.exceptions import ApplicationError
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.core.utils import utc_now
from newsdesk.backend.models.article import Article
from newsdesk.backend.models.user import User

logger = get_logger(__name__)

CHANNEL_EMAIL = "email"
CHANNEL_TELEGRAM = "telegram"


@dataclass
class NotificationResult:
    """Result of a notification send attempt."""

    success: bool
    channel: str
    error: str | None = None
    skipped: bool = False
    timestamp: datetime = field(default_factory=utc_now)


class NotificationService:
    """Sends workflow notifications through the email and telegram clients."""

    def __init__(
        self,
        email: EmailClient,
        telegram: TelegramClient,
        settings: NotificationsSchema,
        features: FeaturesSchema,
    ) -> None:
        self.email = email
        self.telegram = telegram
        self.settings = settings
        self.features = features

    def _article_url(self, article: Article) -> str:
        return f"{self.settings.site_url.rstrip('/')}/articles/{article.slug}"

    async def _send_email(
        self,
        recipient: User,
        template_type: str,
        params: dict[str, Any],
    ) -> NotificationResult:
        if not self.features.notifications_email_enabled:
            return NotificationResult(success=True, channel=CHANNEL_EMAIL, skipped=True)
        try:
            await self.email.send_email(
                recipient.email,
                template_type,
                self.settings.company_name,
                params,
            )
        except ApplicationError as e:
            logger.warning(
                "Email notification failed",
                extra={"template": template_type, "user_id": recipient.id, "error": e.message},
            )
            return NotificationResult(success=False, channel=CHANNEL_EMAIL, error=e.message)

        logger.info(
            "Email notification sent",
            extra={"template": template_type, "user_id": recipient.id},
        )
        return NotificationResult(success=True, channel=CHANNEL_EMAIL)

    async def _send_telegram(self, text: str) -> NotificationResult:
        if not self.features.notifications_telegram_enabled:
            return NotificationResult(success=True, channel=CHANNEL_TELEGRAM, skipped=True)
        try:
            await self.telegram.send_message(text)
        except ApplicationError as e:
            logger.warning("Telegram notification failed", extra={"error": e.message})
            return NotificationResult(success=False, channel=CHANNEL_TELEGRAM, error=e.message)
        return NotificationResult(success=True, channel=CHANNEL_TELEGRAM)

    async def article_submitted(self, article: Article, author: User) -> NotificationResult:
        """Tell moderators a new article waits for review."""
        text = (
            f"New article for review: \"{article.title}\"\n"
            f"Author: {author.display_name or author.email}\n"
            f"ID: {article.id}"
        )
        return await self._send_telegram(text)

    async def article_approved(self, article: Article, author: User) -> NotificationResult:
        if not author.email_on_approval:
            return NotificationResult(success=True, channel=CHANNEL_EMAIL, skipped=True)
        return await self._send_email(
            author,
            self.settings.templates.article_approved,
            {
                "authorName": author.display_name,
                "articleTitle": article.title,
                "articleUrl": self._article_url(article),
            },
        )

    async def article_rejected(
        self,
        article: Article,
        author: User,
        reason: str,
    ) -> NotificationResult:
        if not author.email_on_rejection:
            return NotificationResult(success=True, channel=CHANNEL_EMAIL, skipped=True)
        return await self._send_email(
            author,
            self.settings.templates.article_rejected,
            {
                "authorName": author.display_name,
                "articleTitle": article.title,
                "reason": reason,
            },
        )

    async def comment_reply(
        self,
        recipient: User,
        replier: User,
        article: Article,
    ) -> NotificationResult:
        """Tell a commenter someone answered them. Replies to oneself are not reported."""
        if recipient.id == replier.id or not recipient.email_on_reply:
            return NotificationResult(success=True, channel=CHANNEL_EMAIL, skipped=True)
        return await self._send_email(
            recipient,
            self.settings.templates.comment_reply,
            {
                "userName": recipient.display_name,
                "replierName": replier.display_name,
                "articleTitle": article.title,
                "articleUrl": self._article_url(article),
            },
        )

    async def send_telegram_message(self, text: str) -> dict[str, Any]:
        """Relay a raw message for an administrator. Errors propagate."""
        return await self.telegram.send_message(text)


@lru_cache
def get_notification_service() -> NotificationService:
    config = get_app_config()
    return NotificationService(
        email=get_email_client(),
        telegram=get_telegram_client(),
        settings=config.services.notifications,
        features=config.features,
    )
