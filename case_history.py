"""
case_history.py
===============
Bounded record of recently played cases.

Each new case is summarised in one paragraph and appended; only the most
recent GAME_CONFIG.history_cap summaries are kept. The generative case
repository quotes the latest few in its prompt so the case writer steers away
from repeating settings, methods, and motives. It is a soft nudge, never a
hard constraint.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from config import GAME_CONFIG
from models import CaseScript, utc_now
from storage import HISTORY, KeyValueStore

logger = logging.getLogger("murder_mystery.case_history")

_HISTORY_KEY = "recent_cases"


class CaseSummary(BaseModel):
    id:         str
    summary:    str
    created_at: datetime


def summarize_case(script: CaseScript) -> str:
    """One-paragraph synopsis of a case, spoilers included (never shown to players)."""
    crime    = script.crime
    suspects = ", ".join(s.name for s in script.suspects)
    return (
        f'In "{script.title}", {crime.victim.name} ({crime.victim.occupation}) was found dead '
        f"at {script.setting.location} from {crime.cause_of_death}. "
        f"The investigation took place in {script.setting.time} with suspects including "
        f"{suspects}. {script.solution.murderer} was the killer, motivated by "
        f"{script.solution.motive}. The case featured {len(crime.crime_scene.evidence)} "
        f"pieces of evidence and {len(script.red_herrings)} red herrings."
    )


class CaseHistory:
    """Append-only, capped list of case summaries kept in a KeyValueStore."""

    def __init__(self, store: KeyValueStore, cap: int = GAME_CONFIG.history_cap) -> None:
        self.store = store
        self.cap   = cap

    def entries(self) -> List[CaseSummary]:
        try:
            blob = self.store.get(HISTORY, _HISTORY_KEY) or []
            return [CaseSummary.model_validate(item) for item in blob]
        except ValueError:
            logger.error("Case history is unreadable; starting afresh.", exc_info=True)
            return []

    def add(self, script: CaseScript, at: Optional[datetime] = None) -> CaseSummary:
        entry   = CaseSummary(id=script.id, summary=summarize_case(script), created_at=at or utc_now())
        history = (self.entries() + [entry])[-self.cap :] if self.cap > 0 else []
        self.store.put(HISTORY, _HISTORY_KEY, [e.model_dump(mode="json") for e in history])
        logger.debug("Case %s added to history (%d kept).", script.id, len(history))
        return entry

    def clear(self) -> None:
        self.store.delete(HISTORY, _HISTORY_KEY)

    def avoidance_prompt(self, window: int = GAME_CONFIG.avoidance_window) -> str:
        history = self.entries()
        if not history:
            return "Create a fresh, original noir mystery."

        recent = "\n\n".join(e.summary for e in history[-window:])
        return (
            "PREVIOUS CASES - You must create something COMPLETELY DIFFERENT from these "
            f"recent mysteries:\n\n{recent}\n\n"
            "REQUIREMENTS FOR VARIETY:\n"
            "- Use a DIFFERENT type of location (avoid repeating clubs, offices, hotels, etc.)\n"
            "- Use a DIFFERENT murder method (vary between shooting, stabbing, poisoning, "
            "strangulation, etc.)\n"
            "- Use DIFFERENT character archetypes and professions\n"
            "- Use DIFFERENT names and backgrounds\n"
            "- Use DIFFERENT motives (avoid repeating blackmail, affair, money, etc.)\n"
            "- Create UNIQUE atmosphere and story themes\n"
            "- Vary the time of day, weather, and season\n\n"
            "Be creative and ensure this case feels fresh and distinct from all previous ones!"
        )
