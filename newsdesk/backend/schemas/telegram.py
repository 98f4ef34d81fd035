"""
Telegram Schemas.
"""

from pydantic import BaseModel, Field, field_validator


class TelegramMessage(BaseModel):
    message: str = Field(..., min_length=1, max_length=4096)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be blank")
        return v


class TelegramSendResult(BaseModel):
    sent: bool
    response: dict
