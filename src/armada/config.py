"""Game settings loaded from keyword arguments or the environment."""

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, SecretStr

from armada.ai.targeting import Difficulty

DEFAULT_COMMENTARY_MODEL = "gemini-3-flash-preview"


class GameMode(Enum):
    """Solo against the computer, or two humans sharing one device."""

    SINGLE = "single"
    MULTI = "multi"


class GameSettings(BaseModel):
    """Match and commentary settings chosen on the menu/settings screens."""

    difficulty: Difficulty = Difficulty.MEDIUM
    mode: GameMode = GameMode.SINGLE
    player1_name: str = ""
    player2_name: str = ""
    commentary_enabled: bool = True
    commentary_model: str = DEFAULT_COMMENTARY_MODEL
    commentary_api_key: SecretStr | None = None
    commentary_timeout: float = Field(default=10.0, gt=0)

    @property
    def side_a_name(self) -> str:
        return self.player1_name.strip() or "Player 1"

    @property
    def side_b_name(self) -> str:
        if self.player2_name.strip():
            return self.player2_name.strip()
        return "AI OVERLORD" if self.mode is GameMode.SINGLE else "Player 2"

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameSettings":
        """Read `ARMADA_*` variables; the API key comes from `GEMINI_API_KEY` or `API_KEY`."""

        data: Dict[str, Any] = {}
        plain = {
            "difficulty": "ARMADA_DIFFICULTY",
            "mode": "ARMADA_MODE",
            "player1_name": "ARMADA_PLAYER1_NAME",
            "player2_name": "ARMADA_PLAYER2_NAME",
            "commentary_model": "ARMADA_COMMENTARY_MODEL",
            "commentary_timeout": "ARMADA_COMMENTARY_TIMEOUT",
        }
        for key, name in plain.items():
            value = os.getenv(name)
            if value is not None:
                data[key] = value.strip().lower() if key in ("difficulty", "mode") else value

        commentary = os.getenv("ARMADA_COMMENTARY")
        if commentary is not None:
            data["commentary_enabled"] = commentary.strip().lower() in {"1", "true", "yes", "on"}

        api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
        if api_key:
            data["commentary_api_key"] = api_key

        data.update(overrides)
        return cls(**data)
