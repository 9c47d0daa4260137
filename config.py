"""
config.py
=========
Settings for the Noir Mystery engine.

Groq and OpenAI model ids, the score penalties, and the hint and history
limits are frozen dataclass singletons; the engine modules import them
rather than hard-coding numbers. API keys, the data directory, and feature
switches come from the environment through Settings.from_env().

Usage:
    from config import MODEL_CONFIG, SCORING_CONFIG, GAME_CONFIG, Settings
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional, Tuple


# ---------------------------------------------------------------------------
# Model selection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelConfig:
    """
    Model identifiers used across the system.

    Attributes:
        game_master_model: Large Groq model that narrates each turn and
                           classifies accusations.
        case_writer_model: Large Groq model that writes fresh mysteries when
                           the generative case source is selected.
        utility_model:     Smaller, faster Groq model for the image-prompt
                           sanitiser.
        image_model:       OpenAI image model used for case illustrations.
        image_size:        Requested illustration size (portrait).
        request_timeout:   Seconds before an oracle HTTP request is abandoned.
                           The engine never retries on its own.
    """
    game_master_model: str   = "llama-3.3-70b-versatile"
    case_writer_model: str   = "llama-3.3-70b-versatile"
    utility_model:     str   = "llama-3.1-8b-instant"
    image_model:       str   = "gpt-image-1"
    image_size:        str   = "1024x1536"
    request_timeout:   float = 60.0


# ---------------------------------------------------------------------------
# Scoring parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoringConfig:
    """
    Weights and caps for the deterministic scoring function.

    score = max(floor, base - question_penalty - hint_penalty - time_penalty)

    Attributes:
        base_score:          Starting score before any penalties.
        floor_score:         Minimum score for a correct accusation.
        per_question:        Penalty per question asked.
        question_cap:        Maximum total question penalty.
        per_hint:            Penalty per hint used (uncapped, hints are capped).
        per_minute:          Penalty per whole elapsed minute.
        time_cap:            Maximum total time penalty.
    """
    base_score:   int = 1000
    floor_score:  int = 100
    per_question: int = 10
    question_cap: int = 500
    per_hint:     int = 100
    per_minute:   int = 5
    time_cap:     int = 200


# ---------------------------------------------------------------------------
# Game-balance parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GameConfig:
    """
    Top-level game-balance settings.

    Attributes:
        max_hints:          Hints available per session.
        history_cap:        Most recent case summaries kept in the case history.
        avoidance_window:   Summaries quoted in the case writer's avoidance prompt.
        default_difficulty: Difficulty used when the caller does not pick one.
        difficulties:       Accepted difficulty levels.
    """
    max_hints:          int = 2
    history_cap:        int = 10
    avoidance_window:   int = 5
    default_difficulty: str = "medium"
    difficulties:       Tuple[str, ...] = ("easy", "medium", "hard")


# ---------------------------------------------------------------------------
# Singleton instances (import-ready)
# ---------------------------------------------------------------------------

MODEL_CONFIG   = ModelConfig()
SCORING_CONFIG = ScoringConfig()
GAME_CONFIG    = GameConfig()


# ---------------------------------------------------------------------------
# Environment settings
# ---------------------------------------------------------------------------

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """
    Environment / deployment settings.

    Attributes:
        groq_api_key:       Key for the narrative oracle and case writer.
        openai_api_key:     Key for case illustrations (optional).
        data_dir:           Directory for the JSON store. None keeps
                            everything in memory for the process lifetime.
        case_source:        "catalog" (authored cases) or "generate" (oracle).
        catalog_path:       Optional JSON catalog replacing the built-in cases.
        illustrations:      Whether to request a case illustration at start.
    """
    groq_api_key:   Optional[str] = None
    openai_api_key: Optional[str] = None
    data_dir:       Optional[str] = None
    case_source:    str           = "catalog"
    catalog_path:   Optional[str] = None
    illustrations:  bool          = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            data_dir=os.getenv("MYSTERY_DATA_DIR") or None,
            case_source=os.getenv("MYSTERY_CASE_SOURCE", "catalog").strip().lower(),
            catalog_path=os.getenv("MYSTERY_CATALOG_PATH") or None,
            illustrations=os.getenv("MYSTERY_ILLUSTRATIONS", "").strip().lower() in _TRUTHY,
        )

    def validate(self) -> List[str]:
        """Return human-readable problems with this configuration (empty if fine)."""
        errors: List[str] = []
        if not self.groq_api_key:
            errors.append("GROQ_API_KEY is not set.")
        if self.case_source not in {"catalog", "generate"}:
            errors.append(
                f"MYSTERY_CASE_SOURCE must be 'catalog' or 'generate', got {self.case_source!r}."
            )
        if self.illustrations and not self.openai_api_key:
            errors.append("MYSTERY_ILLUSTRATIONS is on but OPENAI_API_KEY is not set.")
        return errors
