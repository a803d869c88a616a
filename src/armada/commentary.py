"""
Best-effort tactical commentary from the Gemini text API.

The engine never calls this module. A driver may request a line of
commentary after an event and display whatever comes back; every failure
path returns a fixed fallback string instead of raising.
"""

from __future__ import annotations

import logging

import httpx

from armada.config import GameSettings
from armada.engine.ship import SHIP_ORDER

logger = logging.getLogger(__name__)

API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

OFFLINE_FALLBACK = "COMMUNICATIONS LINK OFFLINE: ENCRYPTION KEY REQUIRED"
ERROR_FALLBACK = "TACTICAL ANALYSIS INTERRUPTED. RE-ESTABLISHING LINK..."
EMPTY_FALLBACK = "CALCULATING NEXT MANEUVER..."

FLEET_SIZE = len(SHIP_ORDER)


def build_prompt(player_afloat: int, enemy_afloat: int, last_event: str) -> str:
    return (
        "You are an advanced naval tactical AI in a game of Battleship.\n"
        f"Player remaining ships: {player_afloat}/{FLEET_SIZE}.\n"
        f"AI remaining ships: {enemy_afloat}/{FLEET_SIZE}.\n"
        f"Last event: {last_event}.\n"
        "Provide a brief, futuristic, one-sentence tactical commentary or taunt "
        "for the command log."
    )


def extract_text(payload: dict) -> str:
    """Concatenate the text parts of the first candidate, skipping anything malformed."""
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts") or []
    texts = [
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    return "".join(texts).strip()


async def get_tactical_insight(
    player_afloat: int,
    enemy_afloat: int,
    last_event: str,
    settings: GameSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Ask the text service for a one-line comment on the last event.

    Args:
        player_afloat: Ships side A still has afloat
        enemy_afloat: Ships side B still has afloat
        last_event: Combat log line describing what just happened
        settings: Source of the API key, model and timeout
        client: Optional shared client (tests pass one with a mock transport)

    Returns:
        The comment, or one of the fallback strings.
    """
    settings = settings or GameSettings.from_env()
    if not settings.commentary_enabled or settings.commentary_api_key is None:
        logger.warning("commentary_offline", extra={"enabled": settings.commentary_enabled})
        return OFFLINE_FALLBACK

    url = API_URL.format(model=settings.commentary_model)
    body = {
        "contents": [{"parts": [{"text": build_prompt(player_afloat, enemy_afloat, last_event)}]}],
        "generationConfig": {"thinkingConfig": {"thinkingBudget": 0}},
    }
    headers = {"x-goog-api-key": settings.commentary_api_key.get_secret_value()}

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=settings.commentary_timeout)
    try:
        response = await http.post(url, json=body, headers=headers)
        response.raise_for_status()
        text = extract_text(response.json())
    except (
        httpx.HTTPError,
        ValueError,
        TypeError,
        KeyError,
        AttributeError,
        IndexError,
    ) as exc:
        logger.error("commentary_failed", extra={"error": str(exc)})
        return ERROR_FALLBACK
    finally:
        if owns_client:
            await http.aclose()

    return text or EMPTY_FALLBACK
