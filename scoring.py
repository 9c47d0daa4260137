"""
scoring.py
==========
Score and rating for a closed case.

Pure functions of the session counters and elapsed time. The penalty weights
and caps come from SCORING_CONFIG.

Only a correct accusation is scored. A wrong accusation scores exactly 0 and
giving up yields no score at all; neither path calls into this module.
"""

from __future__ import annotations

import math
from datetime import datetime

from config import SCORING_CONFIG


def elapsed_minutes(start: datetime, end: datetime) -> float:
    """Minutes between two instants; a clock that ran backwards counts as 0."""
    return max(0.0, (end - start).total_seconds() / 60.0)


def calculate_score(
    questions_asked: int,
    hints_used:      int,
    minutes:         float,
) -> int:
    """
    Compute the player's score for a correct accusation.

    Penalties:
        questions → per_question each, capped at question_cap  (default 10, cap 500)
        hints     → per_hint each                               (default 100)
        time      → per_minute per WHOLE minute, capped at time_cap (default 5, cap 200)

    The result never drops below floor_score (default 100), so a correct
    accusation is always worth something, and never exceeds base_score.

    Args:
        questions_asked: Player turns processed, including the accusation itself.
        hints_used:      Hints handed out this session.
        minutes:         Elapsed minutes from session start to completion.

    Returns:
        Integer score in [floor_score, base_score].

    Examples:
        >>> calculate_score(3, 1, 2)
        860
        >>> calculate_score(100, 2, 0)
        300
    """
    cfg = SCORING_CONFIG

    question_penalty = min(max(0, questions_asked) * cfg.per_question, cfg.question_cap)
    hint_penalty     = max(0, hints_used) * cfg.per_hint
    time_penalty     = min(math.floor(max(0.0, minutes)) * cfg.per_minute, cfg.time_cap)

    return max(cfg.floor_score, cfg.base_score - question_penalty - hint_penalty - time_penalty)


def detective_rating(score: int) -> str:
    """Map a final score to the title shown in the victory narration."""
    if score >= 900:
        return "Master Detective"
    if score >= 700:
        return "Senior Investigator"
    if score >= 500:
        return "Detective"
    if score >= 300:
        return "Junior Detective"
    return "Rookie"
