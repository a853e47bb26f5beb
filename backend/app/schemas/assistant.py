"""Assistant Schemas — AI chat request/response."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1)


class ChatRequest(BaseModel):
    prompt: str = Field(min_length=1, max_length=10_000)
    history: list[ChatTurn] = Field(default_factory=list)

    @field_validator("prompt")
    @classmethod
    def strip_prompt(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("prompt cannot be empty or whitespace")
        return v


class ChatResponse(BaseModel):
    output: str
    success: bool = True
