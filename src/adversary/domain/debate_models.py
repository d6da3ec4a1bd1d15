from __future__ import annotations

import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Action = Literal["start", "continue", "quick"]
TurnRole = Literal["user", "opponent"]


def new_turn_id() -> str:
    return uuid.uuid4().hex


class Turn(BaseModel):
    id: str = Field(default_factory=new_turn_id)
    role: TurnRole
    content: str


class DebateSetup(BaseModel):
    topic: str = Field(min_length=1)
    position: str = Field(min_length=1)
    context: str = ""
    # Free-form on purpose: unknown values fall back to defaults downstream.
    template: Optional[str] = None
    lens: Optional[str] = None

    @field_validator("context", mode="before")
    @classmethod
    def context_or_empty(cls, value):
        return "" if value is None else value

    @field_validator("template", "lens", mode="before")
    @classmethod
    def tag_or_none(cls, value):
        return value if isinstance(value, str) else None


class DebateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Action
    setup: DebateSetup
    messages: List[Turn] = Field(default_factory=list)
    quick_action: Optional[str] = Field(default=None, alias="quickAction")
    stream: bool = True

    @field_validator("messages", mode="before")
    @classmethod
    def messages_or_empty(cls, value):
        return [] if value is None else value


class SamplingParams(BaseModel):
    temperature: float
    max_tokens: int
    stream: bool = True


class DebateResponse(BaseModel):
    response: str


class ErrorBody(BaseModel):
    error: str
