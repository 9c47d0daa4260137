"""
models.py
=========
Shared data models for the Noir Mystery engine.

Contains:
  - CaseScript         : Immutable Pydantic description of one mystery.
  - ConversationEntry  : One immutable line of the investigation transcript.
  - GameSession        : Mutable, persisted record of one investigation.
  - OracleTurn         : Validated schema for the game master's structured reply.
  - GameRules          : Process-local hint / question counters for a session.
  - TurnResult         : What process_player_input() hands back to the caller.

Pydantic models use the camelCase JSON keys the oracle is prompted with
(``isRedHerring``, ``timeOfDeath``, ...) through an alias generator, while
Python code uses snake_case attributes. Dumps for storage and prompts always
use ``by_alias=True`` so there is exactly one wire format.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Timezone-aware 'now'; the default clock everywhere in the engine."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Case model
# ---------------------------------------------------------------------------

class _CaseModel(BaseModel):
    """Base for every case component: camelCase on the wire, frozen in memory."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Setting(_CaseModel):
    time:       str
    location:   str
    atmosphere: str


class Victim(_CaseModel):
    name:        str
    age:         Optional[int] = None
    occupation:  str = ""
    personality: str = ""
    background:  str = ""


class Evidence(_CaseModel):
    item:           str
    description:    str = ""
    significance:   str = ""
    is_red_herring: bool = False


class CrimeScene(_CaseModel):
    location:    str
    description: str = ""
    evidence:    List[Evidence] = Field(default_factory=list)


class Crime(_CaseModel):
    victim:         Victim
    time_of_death:  str
    cause_of_death: str
    crime_scene:    CrimeScene


class Solution(_CaseModel):
    murderer:     str
    method:       str
    motive:       str
    opportunity:  str = ""
    key_evidence: List[str] = Field(default_factory=list)


class Suspect(_CaseModel):
    name:          str
    age:           Optional[int] = None
    occupation:    str = ""
    relationship:  str = ""
    personality:   str = ""
    alibi:         str = ""
    secret_or_lie: str = ""
    motive:        Optional[str] = None
    is_guilty:     bool = False


class Witness(_CaseModel):
    name:        str
    role:        str = ""
    information: str = ""
    reliability: Literal["reliable", "unreliable", "partially reliable"] = "reliable"


class RedHerring(_CaseModel):
    description:    str
    why_misleading: str = ""


class TimelineEvent(_CaseModel):
    time:        str
    event:       str
    is_relevant: bool = True


class Location(_CaseModel):
    name:               str
    description:        str = ""
    available_evidence: List[str] = Field(default_factory=list)


class KeyRevelation(_CaseModel):
    trigger:    str
    revelation: str
    importance: Literal["critical", "important", "minor"] = "important"


class CaseScript(_CaseModel):
    """
    Immutable description of one mystery.

    Created once per session by a CaseRepository and never mutated. The
    ``solution`` block and the suspects' ``is_guilty`` flags are ground truth:
    they are handed to the oracle but must not reach the player before the
    session completes (see ``briefing()``).

    Invariant (enforced on construction):
        exactly one suspect is named ``solution.murderer``; that suspect has
        ``is_guilty=True`` and every other suspect has ``is_guilty=False``.
    """

    id:              str
    title:           str
    setting:         Setting
    crime:           Crime
    solution:        Solution
    suspects:        List[Suspect] = Field(min_length=1)
    witnesses:       List[Witness] = Field(default_factory=list)
    red_herrings:    List[RedHerring] = Field(default_factory=list)
    timeline:        List[TimelineEvent] = Field(default_factory=list)
    locations:       List[Location] = Field(default_factory=list)
    key_revelations: List[KeyRevelation] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Catalog files number their cases.
        return str(value) if isinstance(value, int) else value

    @model_validator(mode="after")
    def _exactly_one_culprit(self) -> "CaseScript":
        murderer = self.solution.murderer
        named    = [s for s in self.suspects if s.name == murderer]
        guilty   = [s for s in self.suspects if s.is_guilty]
        if len(named) != 1:
            raise ValueError(
                f"solution.murderer {murderer!r} must match exactly one suspect "
                f"(matched {len(named)})"
            )
        if len(guilty) != 1 or guilty[0].name != murderer:
            raise ValueError(
                "exactly one suspect must be flagged is_guilty and it must be "
                "the solution's murderer"
            )
        return self

    @property
    def culprit(self) -> Suspect:
        return next(s for s in self.suspects if s.is_guilty)

    def briefing(self) -> Dict[str, Any]:
        """
        Player-safe view of the case: setting, victim, and suspect roster.

        Excludes the solution, guilt flags, secrets, red-herring flags, and all
        oracle-only reference data.
        """
        victim = self.crime.victim
        return {
            "id":             self.id,
            "title":          self.title,
            "time":           self.setting.time,
            "location":       self.setting.location,
            "victim":         victim.name,
            "victim_occupation": victim.occupation,
            "time_of_death":  self.crime.time_of_death,
            "cause_of_death": self.crime.cause_of_death,
            "suspects":       [s.name for s in self.suspects],
        }

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------

EntryType = Literal["player", "narrator", "character"]


class ConversationEntry(BaseModel):
    """
    One line of the investigation transcript.

    Entries are frozen: once appended to a session they are never edited,
    removed, or reordered. ``speaker`` is required for ``character`` entries
    and must be absent for every other type.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id:           str = Field(default_factory=new_id)
    type:         EntryType
    speaker:      Optional[str] = None
    message:      str
    timestamp:    datetime = Field(default_factory=utc_now)
    reveals_clue: Optional[str] = None

    @model_validator(mode="after")
    def _speaker_iff_character(self) -> "ConversationEntry":
        if self.type == "character" and not self.speaker:
            raise ValueError("character entries require a speaker")
        if self.type != "character" and self.speaker is not None:
            raise ValueError(f"{self.type} entries must not carry a speaker")
        return self

    @classmethod
    def player(cls, message: str, at: Optional[datetime] = None) -> "ConversationEntry":
        return cls(type="player", message=message, timestamp=at or utc_now())

    @classmethod
    def narrator(cls, message: str, at: Optional[datetime] = None) -> "ConversationEntry":
        return cls(type="narrator", message=message, timestamp=at or utc_now())

    @property
    def label(self) -> str:
        """Transcript label: 'Player', the character's name, or 'Narrator'."""
        if self.type == "player":
            return "Player"
        return self.speaker or "Narrator"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class GameSession(BaseModel):
    """
    Mutable record of one in-progress or completed investigation.

    Owned by MysteryGameEngine and mutated only through it. The session is
    logically terminal the moment ``completed_at`` is set.

    The tracking lists (clues, interviews, locations, notes) only ever grow and
    never hold duplicates; use the ``record_*`` / ``add_note`` helpers rather
    than appending directly.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id:                     str = Field(default_factory=new_id)
    case_id:                str
    script:                 CaseScript
    case_image_url:         Optional[str] = None
    started_at:             datetime = Field(default_factory=utc_now)
    completed_at:           Optional[datetime] = None
    conversation:           List[ConversationEntry] = Field(default_factory=list)
    discovered_clues:       List[str] = Field(default_factory=list)
    interviewed_characters: List[str] = Field(default_factory=list)
    visited_locations:      List[str] = Field(default_factory=list)
    player_notes:           List[str] = Field(default_factory=list)
    is_solved:              bool = False
    attempts:               int = 0

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    @property
    def last_entry(self) -> Optional[ConversationEntry]:
        return self.conversation[-1] if self.conversation else None

    def append(self, entry: ConversationEntry) -> ConversationEntry:
        self.conversation.append(entry)
        return entry

    # ------------------------------------------------------------------
    # Deduplicated tracking helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _add_unique(items: List[str], value: Optional[str]) -> bool:
        if not value or value in items:
            return False
        items.append(value)
        return True

    def record_clue(self, clue_id: Optional[str]) -> bool:
        return self._add_unique(self.discovered_clues, clue_id)

    def record_interview(self, name: Optional[str]) -> bool:
        return self._add_unique(self.interviewed_characters, name)

    def record_location(self, name: Optional[str]) -> bool:
        return self._add_unique(self.visited_locations, name)

    def add_note(self, note: str) -> bool:
        return self._add_unique(self.player_notes, note.strip())

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# ---------------------------------------------------------------------------
# Oracle verdict schema
# ---------------------------------------------------------------------------

class OracleTurn(BaseModel):
    """
    Validated output schema for the game master oracle.

    Fields:
        response:            Narrative text for the player.
        type:                "narrator" or "character".
        speaker:             Character name; required iff type is "character".
                             A speaker sent with a narrator turn is dropped.
        is_solved:           True if the player's input was an accusation,
                             right or wrong. Required.
        is_correct_solution: True if the accused is the true murderer. Only
                             meaningful when is_solved; required in that case.
        reveals_clue:        Optional clue id surfaced by this turn.
        location:            Optional location the player investigated.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    response:            str = Field(min_length=1)
    type:                Literal["narrator", "character"]
    speaker:             Optional[str] = None
    is_solved:           bool
    is_correct_solution: Optional[bool] = None
    reveals_clue:        Optional[str] = None
    location:            Optional[str] = None

    @field_validator("speaker", "reveals_clue", "location", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="before")
    @classmethod
    def _drop_narrator_speaker(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("type") == "narrator" and "speaker" in data:
            data = {k: v for k, v in data.items() if k != "speaker"}
        return data

    @model_validator(mode="after")
    def _check_consistency(self) -> "OracleTurn":
        if self.type == "character" and not self.speaker:
            raise ValueError("character turns require a speaker")
        if self.is_solved and self.is_correct_solution is None:
            raise ValueError("isCorrectSolution is required when isSolved is true")
        return self

    @property
    def accused_correctly(self) -> bool:
        return bool(self.is_solved and self.is_correct_solution)

    @classmethod
    def raw_text_fallback(cls, text: str) -> "OracleTurn":
        """Treat unstructured oracle output as a plain, non-accusation narrator turn."""
        return cls(response=text.strip(), type="narrator", is_solved=False, is_correct_solution=False)


# ---------------------------------------------------------------------------
# Game rules (process-local counters)
# ---------------------------------------------------------------------------

@dataclass
class GameRules:
    """
    Hint and question counters for one session.

    Lives beside the GameSession rather than inside it: the persisted session
    is the story record, this is scoring bookkeeping. It is reset exactly when
    a new session begins.

    Attributes:
        max_hints:       Hints available this session (GameConfig.max_hints).
        hints_used:      Hints handed out so far.
        questions_asked: Player turns processed so far, accusations included.
        start_time:      Scoring clock origin.
    """

    max_hints:       int = 2
    hints_used:      int = 0
    questions_asked: int = 0
    start_time:      datetime = field(default_factory=utc_now)

    @property
    def hints_remaining(self) -> int:
        return max(0, self.max_hints - self.hints_used)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["start_time"] = self.start_time.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameRules":
        return cls(
            max_hints=int(data["max_hints"]),
            hints_used=int(data["hints_used"]),
            questions_asked=int(data["questions_asked"]),
            start_time=datetime.fromisoformat(data["start_time"]),
        )


# ---------------------------------------------------------------------------
# Turn result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TurnResult:
    """
    Outcome of one processed player turn.

    Attributes:
        entry:        The last conversation entry appended this turn.
        is_game_over: True once an accusation has been made.
        is_solved:    True only for a correct accusation.
        score:        Final score; None unless is_game_over.
    """

    entry:        ConversationEntry
    is_game_over: bool
    is_solved:    bool
    score:        Optional[int] = None
