from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

INVALID_MESSAGES_MESSAGE = "Messages array is required"


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(default=None, validate_default=True)

    @field_validator("messages", mode="before")
    @classmethod
    def _require_list(cls, v: Any) -> Any:
        if not isinstance(v, list):
            raise ValueError(INVALID_MESSAGES_MESSAGE)
        return v


class ChatResponse(BaseModel):
    message: ChatMessage
