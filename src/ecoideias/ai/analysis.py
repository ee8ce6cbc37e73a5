"""AI features: idea improvement suggestions, similarity check and the chat assistant."""

from __future__ import annotations

from typing import Any

import structlog

from ecoideias.ai import prompts
from ecoideias.ai.client import AIClient
from ecoideias.errors import AIServiceError

logger = structlog.get_logger()

FALLBACK_REPLY = "Desculpe, não consegui gerar uma resposta."


def _clamp_score(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(max(score, 0.0), 1.0)


def _clean_suggestions(raw: Any) -> list[dict[str, str]]:
    suggestions = []
    if not isinstance(raw, list):
        return suggestions
    for item in raw:
        if isinstance(item, dict) and item.get("title"):
            suggestions.append({
                "title": str(item["title"]),
                "description": str(item.get("description") or ""),
            })
    return suggestions


def _clean_similar(raw: Any, existing: list[dict[str, str]]) -> list[dict[str, Any]]:
    """Keep matches that point at a real existing idea, clamping scores to [0, 1]."""
    matches = []
    if not isinstance(raw, list):
        return matches
    for item in raw:
        if not isinstance(item, dict):
            continue
        index = item.get("index")
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(existing):
            continue
        matches.append({
            "index": index,
            "similarity_score": _clamp_score(item.get("similarity_score")),
            "reason": str(item.get("reason") or ""),
            "title": existing[index].get("title", ""),
        })
    return matches


async def analyze_idea(
    client: AIClient,
    title: str,
    description: str,
    category: str,
    existing_ideas: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    """
    Suggest improvements for an idea and look for similar existing ideas.

    The suggestions call must succeed. The similarity call only runs when
    there are existing ideas and degrades to no matches when it fails.

    Raises:
        AIServiceError: If the client is unconfigured or the suggestions call fails.
    """
    client.ensure_configured()
    existing_ideas = existing_ideas or []
    logger.info("ai_analyze_idea", category=category, existing=len(existing_ideas))

    suggestions_data = await client.chat_json(
        [
            {"role": "system", "content": prompts.SUGGESTIONS_SYSTEM},
            {"role": "user", "content": prompts.suggestions_prompt(title, description, category)},
        ],
        temperature=0.7,
    )
    suggestions = _clean_suggestions(suggestions_data.get("suggestions"))

    similar: list[dict[str, Any]] = []
    max_similarity = 0.0
    if existing_ideas:
        pairs = [(i.get("title", ""), i.get("description", "")) for i in existing_ideas]
        try:
            similarity_data = await client.chat_json(
                [
                    {"role": "system", "content": prompts.SIMILARITY_SYSTEM},
                    {"role": "user", "content": prompts.similarity_prompt(title, description, pairs)},
                ],
                temperature=0.3,
            )
        except AIServiceError:
            logger.warning("ai_similarity_failed")
        else:
            similar = _clean_similar(similarity_data.get("similar_ideas"), existing_ideas)
            if "max_similarity" in similarity_data:
                max_similarity = _clamp_score(similarity_data.get("max_similarity"))
            elif similar:
                max_similarity = max(m["similarity_score"] for m in similar)

    return {
        "suggestions": suggestions,
        "similarIdeas": similar,
        "similarityScore": max_similarity,
    }


async def ask_assistant(client: AIClient, message: str) -> str:
    """
    Forward a question to the sustainability assistant.

    Raises:
        AIServiceError: If the client is unconfigured or the request fails.
    """
    content = await client.chat(
        [
            {"role": "system", "content": prompts.SUSTAINABILITY_CONTEXT},
            {"role": "user", "content": message},
        ],
        temperature=0.7,
        max_tokens=1024,
    )
    return content or FALLBACK_REPLY
