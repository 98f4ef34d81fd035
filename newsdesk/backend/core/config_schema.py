"""
Configuration Schemas.

One top-level model per file in config/settings/ (ApplicationSchema for
application.yaml and so on). Unknown keys are rejected, so a typo in YAML
fails at startup rather than silently falling back to a default.
"""

from pydantic import BaseModel, ConfigDict


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


# application.yaml


class ServerSchema(_Section):
    host: str
    port: int


class PaginationSchema(_Section):
    default_limit: int
    max_limit: int


class ApplicationSchema(_Section):
    name: str
    version: str
    description: str
    environment: str
    api_prefix: str
    docs_enabled: bool
    cors_origins: list[str]
    # Seconds allowed for all /health/ready checks together
    readiness_timeout: int
    server: ServerSchema
    pagination: PaginationSchema


# database.yaml


class DatabaseSchema(_Section):
    driver: str
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool


# logging.yaml


class ConsoleHandlerSchema(_Section):
    enabled: bool


class FileHandlerSchema(_Section):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class LogHandlersSchema(_Section):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_Section):
    level: str
    format: str
    handlers: LogHandlersSchema


# features.yaml


class FeaturesSchema(_Section):
    auth_allow_registration: bool
    api_detailed_errors: bool
    notifications_email_enabled: bool
    notifications_telegram_enabled: bool
    health_check_crypto_enabled: bool


# security.yaml


class JwtSchema(_Section):
    algorithm: str
    access_token_expire_minutes: int
    refresh_token_expire_days: int
    audience: str
    issuer: str


class ServiceTokenSchema(_Section):
    algorithm: str
    ttl_seconds: int


class GoogleIdentitySchema(_Section):
    google_client_id: str
    token_info_url: str
    allowed_issuers: list[str]
    timeout: int


class SecuritySchema(_Section):
    jwt: JwtSchema
    service_tokens: ServiceTokenSchema
    identity: GoogleIdentitySchema


# services.yaml


class RetrySchema(_Section):
    max_attempts: int
    backoff_multiplier: int
    backoff_max: int


class CircuitBreakerSchema(_Section):
    fail_max: int
    timeout_duration: int


class RemoteServiceSchema(_Section):
    """Base URL and failure policy of one microservice."""

    base_url: str
    timeout: int
    retry: RetrySchema
    circuit_breaker: CircuitBreakerSchema


class EmailTemplatesSchema(_Section):
    article_approved: str
    article_rejected: str
    comment_reply: str


class NotificationsSchema(_Section):
    company_name: str
    # Frontend base URL used for links in emails
    site_url: str
    templates: EmailTemplatesSchema


class ServicesSchema(_Section):
    crypto: RemoteServiceSchema
    email: RemoteServiceSchema
    telegram: RemoteServiceSchema
    notifications: NotificationsSchema
