"""Request/response bodies of the /functions/v1 endpoints (camelCase on the wire)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, EmailStr, Field


class ExistingIdea(BaseModel):
    title: str = ""
    description: str = ""


class AnalyzeIdeaRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    category: str = Field(..., min_length=1, max_length=64)
    existingIdeas: list[ExistingIdea] = Field(default_factory=list, max_length=100)


class Suggestion(BaseModel):
    title: str
    description: str


class SimilarIdea(BaseModel):
    index: int
    similarity_score: float
    reason: str
    title: str


class AnalyzeIdeaResponse(BaseModel):
    suggestions: list[Suggestion]
    similarIdeas: list[SimilarIdea]
    similarityScore: float


class StatusNotificationRequest(BaseModel):
    email: EmailStr
    userName: str = Field(..., min_length=1, max_length=120)
    ideaTitle: str = Field(..., min_length=1, max_length=200)
    oldStatus: str = Field(..., min_length=1, max_length=32)
    newStatus: str = Field(..., min_length=1, max_length=32)


class StatusNotificationResponse(BaseModel):
    success: bool
    data: dict[str, Any]


class ChatRequest(BaseModel):
    message: str | None = Field(None, max_length=4000)


class ChatResponse(BaseModel):
    reply: str
