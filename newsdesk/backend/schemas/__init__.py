# Pydantic schemas package
from newsdesk.backend.schemas.base import (
    ApiResponse,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
    PaginationInfo,
    ResponseMetadata,
)

__all__ = [
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "MessageResponse",
    "PaginatedResponse",
    "PaginationInfo",
    "ResponseMetadata",
]
