"""
Email Service Client.

Transactional email is rendered and delivered by a remote microservice.
The request body carries a sealed envelope so addresses never travel in
clear text.
"""

from functools import lru_cache
from typing import Any

from newsdesk.backend.clients.base import ServiceClient
from newsdesk.backend.core.config import get_app_config, get_settings
from newsdesk.backend.core.exceptions import ValidationError
from newsdesk.backend.core.security import seal_payload


class EmailClient(ServiceClient):
    """Client for POST /email/send."""

    service_name = "email"
    error_prefix = "Email sending failed"

    async def send_email(
        self,
        email: str,
        template_type: str,
        company_name: str,
        custom_params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send a templated email.

        Args:
            email: Recipient address
            template_type: Template identifier known to the email service
            company_name: Sender brand shown in the template
            custom_params: Template variables

        Raises:
            ValidationError: If email, template type or company name is missing
            ExternalServiceError: If the service rejects or cannot be reached
        """
        if not email or not template_type or not company_name:
            raise ValidationError("Email, template type and company name are required")

        envelope = seal_payload({
            "email": email,
            "type": template_type,
            "companyName": company_name,
            "customParams": custom_params or {},
        })
        return await self._send("POST", "/email/send", {"data": envelope})


@lru_cache
def get_email_client() -> EmailClient:
    return EmailClient.from_config(
        get_app_config().services.email,
        get_settings().email_service_api_key,
    )
