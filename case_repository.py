"""
case_repository.py
==================
Where new sessions get their CaseScript.

Two repositories implement the same one-method contract:

  CatalogCaseRepository     — picks an authored case from case_data.py (or a
                              JSON catalog file) and converts it.
  GenerativeCaseRepository  — asks the case-writer agent for a brand-new case,
                              steering it away from recent cases.

Both guarantee the CaseScript invariant (exactly one guilty suspect, named in
the solution) because CaseScript validates it on construction. Any failure to
produce a case surfaces as InitializationError.
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from agents import build_case_writer_agent
from case_data import MYSTERIES
from case_history import CaseHistory
from config import GAME_CONFIG
from errors import InitializationError, OracleError
from models import CaseScript, new_id
from oracle import agent_text, parse_case_script

logger = logging.getLogger("murder_mystery.case_repository")


class CaseRepository(Protocol):
    def select_case(self, difficulty: str) -> CaseScript: ...


def check_difficulty(difficulty: str) -> str:
    level = (difficulty or "").strip().lower()
    if level not in GAME_CONFIG.difficulties:
        raise InitializationError(
            f"Unknown difficulty {difficulty!r}; expected one of {list(GAME_CONFIG.difficulties)}"
        )
    return level


# ---------------------------------------------------------------------------
# Catalog conversion
# ---------------------------------------------------------------------------

_REQUIRED_KEYS = (
    "id", "title", "location", "time_of_death", "cause_of_death", "introduction",
    "victim", "evidence", "killer", "murder_weapon", "motive", "suspects",
)


def convert_catalog_entry(entry: Dict[str, Any]) -> CaseScript:
    """
    Expand a compact catalog entry into a full CaseScript.

    Red-herring flags come from the entry's authored ``red_herrings`` list, so
    the same entry always converts to the same case.

    Raises:
        ValueError: The entry is missing keys, flags evidence it does not
                    list, or breaks the CaseScript invariant (pydantic's
                    ValidationError is a ValueError).
    """
    missing = [key for key in _REQUIRED_KEYS if key not in entry]
    if missing:
        raise ValueError(f"Catalog entry {entry.get('id')!r} is missing {missing}")

    evidence = list(entry["evidence"])
    herrings = set(entry.get("red_herrings", []))
    killer   = entry["killer"]
    victim   = entry["victim"]
    location = entry["location"]
    died_at  = entry["time_of_death"]

    unknown = herrings.difference(evidence)
    if unknown:
        raise ValueError(f"Catalog entry {entry.get('id')!r} flags unknown evidence {sorted(unknown)}")

    key_evidence = entry.get("key_evidence") or [e for e in evidence if e not in herrings][:3]

    return CaseScript.model_validate({
        "id": entry["id"],
        "title": entry["title"],
        "setting": {
            "time":       died_at,
            "location":   location,
            "atmosphere": entry["introduction"],
        },
        "crime": {
            "victim": {
                "name":        victim["name"],
                "age":         victim.get("age"),
                "occupation":  victim.get("occupation", ""),
                "personality": victim.get("background", ""),
                "background":  victim.get("background", ""),
            },
            "timeOfDeath":  died_at,
            "causeOfDeath": entry["cause_of_death"],
            "crimeScene": {
                "location":    location,
                "description": "The scene of the crime awaits your investigation.",
                "evidence": [
                    {
                        "item":         item,
                        "description":  item,
                        "significance": "Misleading" if item in herrings else "Important evidence",
                        "isRedHerring": item in herrings,
                    }
                    for item in evidence
                ],
            },
        },
        "solution": {
            "murderer":    killer,
            "method":      entry["murder_weapon"],
            "motive":      entry["motive"],
            "opportunity": entry.get("solution", ""),
            "keyEvidence": key_evidence,
        },
        "suspects": [
            {
                "name":         s["name"],
                "occupation":   s.get("occupation", ""),
                "relationship": "Connected to victim",
                "alibi":        s.get("alibi", ""),
                "secretOrLie":  s.get("motive") or "",
                "motive":       s.get("motive"),
                "isGuilty":     s["name"] == killer,
            }
            for s in entry["suspects"]
        ],
        "redHerrings": [
            {"description": item, "whyMisleading": "Not connected to the killing."}
            for item in evidence if item in herrings
        ],
        "timeline": [{"time": died_at, "event": "Crime occurred", "isRelevant": True}],
        "locations": [
            {
                "name":              location,
                "description":       entry.get("description", ""),
                "availableEvidence": evidence,
            }
        ],
    })


def load_catalog(path: str | Path) -> List[Dict[str, Any]]:
    """Read a ``{"mysteries": [...]}`` JSON catalog file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    mysteries = data.get("mysteries") if isinstance(data, dict) else None
    if not isinstance(mysteries, list) or not mysteries:
        raise ValueError(f"{path} holds no 'mysteries' list")
    return mysteries


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------

class CatalogCaseRepository:
    """
    Serve authored cases, chosen at random.

    Difficulty is validated but does not filter the catalog: authored cases
    are written for a single, medium pacing.

    Attributes:
        entries: Compact catalog entries (defaults to case_data.MYSTERIES).
        rng:     Random source; inject a seeded Random for reproducible picks.
    """

    def __init__(
        self,
        entries: Optional[List[Dict[str, Any]]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.entries = list(MYSTERIES if entries is None else entries)
        self.rng     = rng or random.Random()

    @classmethod
    def from_file(cls, path: str | Path, rng: Optional[random.Random] = None) -> "CatalogCaseRepository":
        return cls(load_catalog(path), rng=rng)

    def select_case(self, difficulty: str) -> CaseScript:
        check_difficulty(difficulty)
        if not self.entries:
            raise InitializationError("The case catalog is empty.")

        entry = self.rng.choice(self.entries)
        try:
            script = convert_catalog_entry(entry)
        except (KeyError, TypeError, ValueError) as exc:
            raise InitializationError(f"Catalog case {entry.get('id')!r} is invalid: {exc}") from exc

        logger.info("Catalog case selected — case_id=%s", script.id)
        return script


class GenerativeCaseRepository:
    """
    Ask the case-writer agent for a fresh case.

    The prompt carries the difficulty and, when a CaseHistory is supplied,
    an avoidance block quoting recent cases. Generation failures are fatal
    for the new game: there is no fallback case.
    """

    def __init__(
        self,
        agent: Any = None,
        history: Optional[CaseHistory] = None,
        api_key: Optional[str] = None,
    ) -> None:
        self.agent   = agent if agent is not None else build_case_writer_agent(api_key)
        self.history = history

    def build_prompt(self, difficulty: str) -> str:
        avoidance = (
            self.history.avoidance_prompt()
            if self.history is not None
            else "Create a fresh, original noir mystery."
        )
        return (
            f"Create a film noir murder mystery for a detective game.\n"
            f"Make it a {difficulty} difficulty case with 4 suspects, one being the murderer.\n\n"
            f"{avoidance}"
        )

    def select_case(self, difficulty: str) -> CaseScript:
        level = check_difficulty(difficulty)
        logger.info("Generating a new %s case.", level)

        try:
            raw = agent_text(self.agent.run(self.build_prompt(level)))
        except Exception as exc:
            raise InitializationError(f"Case writer call failed: {exc}") from exc

        try:
            script = parse_case_script(raw)
        except OracleError as exc:
            logger.error(
                "Case writer output unusable: %s. Raw response (first 300 chars): %r",
                exc,
                raw[:300],
            )
            raise InitializationError(str(exc)) from exc

        # Model-written ids repeat across generations; the history keys on them.
        script = script.model_copy(update={"id": new_id()})
        logger.info("Generated case ready — case_id=%s, title=%r", script.id, script.title)
        return script
